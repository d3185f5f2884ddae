"""
AliExpress search service - turns chat messages into ranked, affiliate-linked
product results.

Parses intent, checks rate limits and the cache, calls the API client on a
miss, enriches products with affiliate links and ranks them. Falls back to
demo data when credentials are missing or a live search fails.
"""

import asyncio
import logging
import math
import time
from typing import Any, Dict, List, Optional

from .cache import ResultCache
from .client import AliExpressClient, RateLimitExceeded
from .config import AliExpressConfig
from .demo_data import generate_demo_search_response
from .formatting import format_products_for_chat
from .intent import ProductIntentParser, get_category_id
from .intent.intent_parser import INTENT_THRESHOLD
from .models import (
    AffiliateLink,
    LinkResult,
    LinkSource,
    PriceInfo,
    ProductCard,
    ProductSearchRequest,
    RawProduct,
    SearchIntent,
    SearchOutcome,
    SearchResponse,
    SellerInfo,
)
from .rate_limiting import RateLimiter
from .rate_limiting.rate_limiter import APP_IDENTIFIER


logger = logging.getLogger(__name__)

GENERIC_ERROR = "Sorry, I encountered an error while searching for products. Please try again."
DEFAULT_PAGE_SIZE = 10
MAX_SERVICE_PAGE_SIZE = 20


def calculate_relevance_score(product: RawProduct, position: int) -> float:
    """
    Advisory relevance score in [0, 1].

    Starts at 1.0, loses 0.05 per position in the API's ordering and gains
    small bonuses for well-rated sellers, popular products and products
    that carry commission info.
    """
    score = 1.0 - position * 0.05

    if product.evaluate_score > 4.5:
        score += 0.1
    elif product.evaluate_score > 4.0:
        score += 0.05

    if product.volume > 1000:
        score += 0.1
    elif product.volume > 100:
        score += 0.05

    if product.commission is not None:
        score += 0.05

    return max(0.0, min(1.0, round(score, 4)))


class AliExpressService:
    """Orchestrate the complete product search workflow"""

    def __init__(
        self,
        config: AliExpressConfig,
        cache: ResultCache,
        client: Optional[AliExpressClient] = None,
        intent_parser: Optional[ProductIntentParser] = None,
        rate_limiter: Optional[RateLimiter] = None
    ):
        self.config = config
        self.cache = cache
        self.client = client or AliExpressClient(config)
        self.intent_parser = intent_parser or ProductIntentParser()
        self.rate_limiter = rate_limiter or RateLimiter(cache, config.rate_limits)

    async def close(self):
        await self.client.close()

    async def process_message(self, message: str, user_id: Optional[str] = None) -> SearchOutcome:
        """
        Process a chat message and return product search results.

        Never raises: failures end in demo results or an error string.

        Args:
            message: Raw user message
            user_id: Caller identifier for rate limiting

        Returns:
            SearchOutcome with either suggestions, a response or an error
        """
        try:
            intent = self.intent_parser.parse_intent(message)

            if intent.confidence <= INTENT_THRESHOLD:
                return SearchOutcome(
                    is_product_search=False,
                    suggestions=self.intent_parser.generate_suggestions(message),
                )

            if not self.config.has_real_credentials:
                logger.info(f"[DEMO MODE] Serving demo products for '{intent.query}'")
                return SearchOutcome(is_product_search=True, response=self._demo_response(intent))

            rate_limit = await self.rate_limiter.check_per_second("search", user_id or "anonymous")
            if not rate_limit.allowed:
                raise RateLimitExceeded("search", rate_limit.retry_after_seconds())

            response = await self.search_products(intent)

            try:
                await self.cache.track_search_term(intent.query)
            except Exception as e:
                logger.warning(f"Failed to track search term: {e}")

            return SearchOutcome(is_product_search=True, response=response)

        except RateLimitExceeded as e:
            return SearchOutcome(is_product_search=True, error=str(e))

        except Exception as e:
            logger.exception(f"AliExpress service error: {e}")

            try:
                if self.intent_parser.is_product_search_intent(message):
                    intent = self.intent_parser.parse_intent(message)
                    logger.info(f"[DEMO FALLBACK] Serving demo products for '{intent.query}'")
                    return SearchOutcome(is_product_search=True, response=self._demo_response(intent))
            except Exception as fallback_error:
                logger.error(f"Demo fallback failed: {fallback_error}")

            return SearchOutcome(is_product_search=True, error=GENERIC_ERROR)

    def build_search_request(
        self,
        intent: SearchIntent,
        page_no: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE
    ) -> ProductSearchRequest:
        price_range = intent.price_range
        return ProductSearchRequest(
            keywords=intent.query,
            category_id=get_category_id(intent.category),
            min_price=price_range.min if price_range else None,
            max_price=price_range.max if price_range else None,
            page_no=page_no,
            page_size=min(page_size, MAX_SERVICE_PAGE_SIZE),
            sort="SALE_PRICE_ASC",
            target_currency="USD",
            target_language="EN",
        )

    async def search_products(
        self,
        intent: SearchIntent,
        page_no: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE
    ) -> SearchResponse:
        """
        Search products for a parsed intent, using the cache when possible.

        The daily upstream quota is only charged on a cache miss.

        Raises:
            RateLimitExceeded: When the daily quota is exhausted
            ApiFailure: When the live search fails
        """
        start_time = time.perf_counter()

        request = self.build_search_request(intent, page_no, page_size)
        filters = request.cache_filters()

        cached = await self.cache.get_cached_search_results(request.keywords, filters)
        if cached is not None:
            logger.info(f"[CACHE HIT] Search '{request.keywords}' page {request.page_no}")
            return cached

        daily = await self.rate_limiter.check_daily("search")
        if not daily.allowed:
            raise RateLimitExceeded("search", daily.retry_after_seconds())

        products = (await self.client.search_products(request))[:request.page_size]
        product_cards = await self._convert_to_product_cards(products)

        response = SearchResponse(
            products=product_cards,
            total_results=len(products),
            current_page=request.page_no,
            total_pages=math.ceil(len(products) / request.page_size),
            search_time=int((time.perf_counter() - start_time) * 1000),
            cached=False,
        )

        try:
            await self.cache.cache_search_results(request.keywords, filters, response)
        except Exception as e:
            logger.warning(f"Failed to cache search results: {e}")

        return response

    async def _convert_to_product_cards(self, products: List[RawProduct]) -> List[ProductCard]:
        """Attach affiliate links and relevance scores, keeping API order"""
        if not products:
            return []

        product_urls = list(dict.fromkeys(p.product_url for p in products if p.product_url))

        affiliate_links: Dict[str, AffiliateLink] = await self.cache.get_cached_affiliate_links(product_urls)

        urls_to_process = [url for url in product_urls if url not in affiliate_links]
        for result in await self._generate_affiliate_links(urls_to_process):
            affiliate_links[result.link.original_url] = result.link

        logger.info(
            f"[AFFILIATE] {len(product_urls) - len(urls_to_process)} cached, "
            f"{len(urls_to_process)} requested"
        )

        return [
            self._build_product_card(product, index, affiliate_links.get(product.product_url))
            for index, product in enumerate(products)
        ]

    async def _generate_affiliate_links(self, urls: List[str]) -> List[LinkResult]:
        """
        One link generation call for every uncached URL.

        Only generated links are cached; pass-through links are retried on
        the next search that needs them.
        """
        if not urls:
            return []

        rate_limit = await self.rate_limiter.check("affiliate", APP_IDENTIFIER)
        if not rate_limit.allowed:
            logger.info(f"[AFFILIATE] Rate limited, using original URLs for {len(urls)} products")
            return [
                LinkResult(link=self.client.pass_through_link(url), source=LinkSource.PASS_THROUGH)
                for url in urls
            ]

        results = await self.client.resolve_affiliate_links(urls)

        generated = [result.link for result in results if result.generated]
        if generated:
            try:
                await self.cache.cache_affiliate_links(generated)
            except Exception as e:
                logger.warning(f"Failed to cache affiliate links: {e}")

        return results

    def _build_product_card(
        self,
        product: RawProduct,
        position: int,
        affiliate_link: Optional[AffiliateLink]
    ) -> ProductCard:
        original_price = None
        if product.original_price and product.original_price != product.sale_price:
            original_price = product.original_price

        return ProductCard(
            id=product.product_id,
            title=product.title,
            image=product.image_url,
            price=PriceInfo(
                current=product.sale_price,
                original=original_price,
                currency=product.currency,
                discount=product.discount,
            ),
            seller=SellerInfo(
                name=product.seller_name or "AliExpress Seller",
                rating=product.evaluate_score,
                orders=product.volume,
            ),
            affiliate_url=affiliate_link.affiliate_url if affiliate_link else product.product_url,
            original_url=product.product_url,
            relevance_score=calculate_relevance_score(product, position),
        )

    def _demo_response(self, intent: SearchIntent) -> SearchResponse:
        return generate_demo_search_response(intent.query, intent.keywords)

    def format_products_for_chat(self, response: SearchResponse, query: str) -> str:
        return format_products_for_chat(response, query)

    async def get_stats(self) -> Dict[str, Any]:
        """Cache key counts and the ten most popular search terms"""
        cache_stats, popular_searches = await asyncio.gather(
            self.cache.get_cache_stats(),
            self.cache.get_popular_search_terms(10),
        )
        return {
            "cache_stats": cache_stats,
            "popular_searches": popular_searches,
        }
