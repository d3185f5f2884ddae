"""
Demo product set used when no real AliExpress credentials are configured,
and as the fallback when a live search fails.
"""

import time
from typing import List, Optional, Sequence

from .models import PriceInfo, ProductCard, SearchResponse, SellerInfo


DEMO_PRODUCTS: List[ProductCard] = [
    ProductCard(
        id="demo-1",
        title="Wireless Bluetooth Earbuds with Charging Case",
        image="https://via.placeholder.com/300x300/007bff/ffffff?text=Earbuds",
        price=PriceInfo(current=15.99, original=29.99, currency="USD", discount="47%"),
        seller=SellerInfo(name="TechStore Official", rating=4.5, orders=1250),
        affiliate_url="https://s.click.aliexpress.com/demo-affiliate-link-1",
        original_url="https://www.aliexpress.com/item/demo-product-1.html",
        relevance_score=0.95,
    ),
    ProductCard(
        id="demo-2",
        title="True Wireless Earphones with Noise Cancellation",
        image="https://via.placeholder.com/300x300/28a745/ffffff?text=Wireless",
        price=PriceInfo(current=18.50, original=35.00, currency="USD", discount="47%"),
        seller=SellerInfo(name="AudioTech Store", rating=4.3, orders=890),
        affiliate_url="https://s.click.aliexpress.com/demo-affiliate-link-2",
        original_url="https://www.aliexpress.com/item/demo-product-2.html",
        relevance_score=0.88,
    ),
    ProductCard(
        id="demo-3",
        title="Mini Bluetooth 5.0 Earbuds Sports Headphones",
        image="https://via.placeholder.com/300x300/dc3545/ffffff?text=Sports",
        price=PriceInfo(current=12.99, currency="USD"),
        seller=SellerInfo(name="SportsTech", rating=4.1, orders=567),
        affiliate_url="https://s.click.aliexpress.com/demo-affiliate-link-3",
        original_url="https://www.aliexpress.com/item/demo-product-3.html",
        relevance_score=0.82,
    ),
    ProductCard(
        id="demo-4",
        title="Portable Bluetooth Speaker Waterproof Outdoor",
        image="https://via.placeholder.com/300x300/6f42c1/ffffff?text=Speaker",
        price=PriceInfo(current=24.99, original=39.99, currency="USD", discount="38%"),
        seller=SellerInfo(name="SoundWave Store", rating=4.6, orders=2310),
        affiliate_url="https://s.click.aliexpress.com/demo-affiliate-link-4",
        original_url="https://www.aliexpress.com/item/demo-product-4.html",
        relevance_score=0.9,
    ),
    ProductCard(
        id="demo-5",
        title="Non Slip Yoga Mat with Carrying Strap",
        image="https://via.placeholder.com/300x300/fd7e14/ffffff?text=Yoga",
        price=PriceInfo(current=19.99, currency="USD"),
        seller=SellerInfo(name="FitLife Official", rating=4.4, orders=760),
        affiliate_url="https://s.click.aliexpress.com/demo-affiliate-link-5",
        original_url="https://www.aliexpress.com/item/demo-product-5.html",
        relevance_score=0.85,
    ),
    ProductCard(
        id="demo-6",
        title="Smart Watch Fitness Tracker with Heart Rate Monitor",
        image="https://via.placeholder.com/300x300/20c997/ffffff?text=Watch",
        price=PriceInfo(current=29.99, original=59.99, currency="USD", discount="50%"),
        seller=SellerInfo(name="Wearables Hub", rating=4.2, orders=1840),
        affiliate_url="https://s.click.aliexpress.com/demo-affiliate-link-6",
        original_url="https://www.aliexpress.com/item/demo-product-6.html",
        relevance_score=0.8,
    ),
]


def filter_demo_products(query: str, keywords: Optional[Sequence[str]] = None) -> List[ProductCard]:
    """
    Demo products whose title contains the query or any of its keywords.

    Args:
        query: Search string
        keywords: Individual keywords; defaults to the words of the query

    Returns:
        Copies of the matching demo products in catalogue order
    """
    query = query.lower().strip()
    terms = [term.lower() for term in (keywords if keywords is not None else query.split()) if len(term) > 2]

    matches = []
    for product in DEMO_PRODUCTS:
        title = product.title.lower()
        if (query and query in title) or any(term in title for term in terms):
            matches.append(product.model_copy(deep=True))
    return matches


def generate_demo_search_response(query: str, keywords: Optional[Sequence[str]] = None) -> SearchResponse:
    """Build a single-page search response from the demo products"""
    start_time = time.perf_counter()

    products = filter_demo_products(query, keywords)

    return SearchResponse(
        products=products,
        total_results=len(products),
        current_page=1,
        total_pages=1,
        search_time=int((time.perf_counter() - start_time) * 1000),
        cached=False,
    )
