"""Chat text formatting for product search results."""

from .models import PriceInfo, ProductCard, SearchResponse


MAX_LISTED_PRODUCTS = 5


def format_money(amount: float, currency: str = "USD") -> str:
    if currency == "USD":
        return f"${amount:.2f}"
    return f"{currency} {amount:.2f}"


def format_price(price: PriceInfo) -> str:
    """Current price, struck-through original price and discount"""
    text = format_money(price.current, price.currency)

    if price.original and price.original != price.current:
        text += f" ~~{format_money(price.original, price.currency)}~~"

    if price.discount:
        text += f" ({price.discount} off)"

    return text


def format_product_entry(index: int, product: ProductCard) -> str:
    lines = [
        f"**{index}. {product.title}**",
        f"💰 {format_price(product.price)}",
        f"⭐ {product.seller.rating:.1f} rating • {product.seller.orders} orders",
        f"🔗 [View Product]({product.affiliate_url})",
    ]
    return "\n".join(lines) + "\n\n"


def format_products_for_chat(response: SearchResponse, query: str) -> str:
    """
    Format search results as a markdown chat message.

    Lists at most five products. Depends only on its arguments.

    Args:
        response: Search results
        query: The user's original query

    Returns:
        Markdown text for the chat window
    """
    if not response.products:
        return f"I couldn't find any products matching \"{query}\". Try different keywords or check the spelling."

    output = [f"Found {len(response.products)} products for \"{query}\":\n\n"]

    for index, product in enumerate(response.products[:MAX_LISTED_PRODUCTS], start=1):
        output.append(format_product_entry(index, product))

    hidden = len(response.products) - MAX_LISTED_PRODUCTS
    if hidden > 0:
        output.append(f"... and {hidden} more products available.\n")

    output.append(f"\n*Search completed in {response.search_time}ms*")
    if response.cached:
        output.append(" *(cached result)*")

    return "".join(output)
