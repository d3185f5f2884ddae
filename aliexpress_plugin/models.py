"""
Data models for the AliExpress search plugin.

Parsed intents and outgoing requests are frozen dataclasses. Everything that
is cached in Redis or handed back to the chat layer is a pydantic model so it
can be dumped to and restored from JSON.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import math
import time

from pydantic import BaseModel


MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = 20

SORT_ORDERS = ("SALE_PRICE_ASC", "SALE_PRICE_DESC", "LAST_VOLUME_ASC", "LAST_VOLUME_DESC")


@dataclass(frozen=True)
class PriceRange:
    """Price bounds extracted from a message. Either side may be open."""
    min: Optional[float] = None
    max: Optional[float] = None


@dataclass(frozen=True)
class SearchIntent:
    """Structured search parameters parsed from a chat message.

    Attributes:
        keywords: Remaining words after stop-word removal, in message order
        category: Detected category name, if any
        price_range: Extracted price bounds, if any
        confidence: Heuristic score in [0, 1]
    """
    keywords: Tuple[str, ...]
    category: Optional[str] = None
    price_range: Optional[PriceRange] = None
    confidence: float = 0.0

    @property
    def query(self) -> str:
        """Keywords joined back into a search string."""
        return " ".join(self.keywords)


@dataclass(frozen=True)
class ProductSearchRequest:
    """Normalized query parameters for the product query API."""
    keywords: str
    category_id: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    page_no: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort: str = "SALE_PRICE_ASC"
    target_currency: str = "USD"
    target_language: str = "EN"

    def to_api_params(self) -> Dict[str, Any]:
        """Convert the request to API parameters.

        Returns:
            Dictionary of API parameters with unset values dropped
        """
        params = {
            "keywords": self.keywords,
            "category_ids": self.category_id,
            "min_sale_price": self.min_price,
            "max_sale_price": self.max_price,
            "page_no": self.page_no or 1,
            "page_size": min(self.page_size or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE),
            "sort": self.sort or "SALE_PRICE_ASC",
            "target_currency": self.target_currency or "USD",
            "target_language": self.target_language or "EN",
        }
        return {key: value for key, value in params.items() if value is not None}

    def cache_filters(self) -> Dict[str, Any]:
        """Filter object that, together with keywords, identifies a cached page."""
        filters = {
            "categoryId": self.category_id,
            "minPrice": self.min_price,
            "maxPrice": self.max_price,
            "pageNo": self.page_no,
        }
        return {key: value for key, value in filters.items() if value is not None}


class Commission(BaseModel):
    """Affiliate commission attached to a product"""
    commission_rate: str
    commission: Optional[str] = None


class RawProduct(BaseModel):
    """Product as returned by the product query API"""
    product_id: str
    title: str
    product_url: str
    image_url: str = ""
    original_price: float = 0.0
    sale_price: float = 0.0
    discount: Optional[str] = None
    currency: str = "USD"
    category_id: str = ""
    category_name: str = ""
    seller_id: str = ""
    seller_name: str = ""
    volume: int = 0
    evaluate_score: float = 0.0
    commission: Optional[Commission] = None


class AffiliateLink(BaseModel):
    """Tracked link for a product URL"""
    original_url: str
    affiliate_url: str
    short_url: Optional[str] = None
    tracking_id: str

    @property
    def is_pass_through(self) -> bool:
        return self.affiliate_url == self.original_url


class LinkSource(str, Enum):
    """Where an affiliate link came from"""
    GENERATED = "generated"
    PASS_THROUGH = "pass_through"


@dataclass(frozen=True)
class LinkResult:
    """Affiliate link tagged with how it was obtained."""
    link: AffiliateLink
    source: LinkSource

    @property
    def generated(self) -> bool:
        return self.source is LinkSource.GENERATED


class PriceInfo(BaseModel):
    """Price block of a product card"""
    current: float
    original: Optional[float] = None
    currency: str = "USD"
    discount: Optional[str] = None


class SellerInfo(BaseModel):
    """Seller block of a product card"""
    name: str
    rating: float = 0.0
    orders: int = 0


class ProductCard(BaseModel):
    """Chat-displayable product with its affiliate link"""
    id: str
    title: str
    image: str
    price: PriceInfo
    seller: SellerInfo
    affiliate_url: str
    original_url: str
    relevance_score: float


class SearchResponse(BaseModel):
    """Search results with metadata"""
    products: List[ProductCard]
    total_results: int
    current_page: int = 1
    total_pages: int = 0
    search_time: int = 0
    cached: bool = False
    cached_at: Optional[str] = None


class SearchOutcome(BaseModel):
    """Result of processing one chat message"""
    is_product_search: bool
    response: Optional[SearchResponse] = None
    suggestions: Optional[List[str]] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class RateLimitStatus:
    """Outcome of a fixed-window rate limit check.

    Attributes:
        allowed: Whether the call may proceed
        remaining: Calls left in the current window
        reset_at: Epoch seconds when the window expires
    """
    allowed: bool
    remaining: int
    reset_at: float

    def retry_after_seconds(self, now: Optional[float] = None) -> int:
        """Whole seconds until the window resets, rounded up."""
        now = time.time() if now is None else now
        return max(0, math.ceil(self.reset_at - now))


class CacheStats(BaseModel):
    """Number of cached keys by category"""
    search_cache_size: int = 0
    affiliate_cache_size: int = 0
    popular_searches: int = 0
    rate_limit_entries: int = 0


class PopularSearch(BaseModel):
    """Search term with its cumulative hit count"""
    term: str
    count: int
