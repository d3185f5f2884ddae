"""
AliExpress Open API Client - product search and affiliate link generation
against the affiliate "sync" endpoint. Every request is a signed form POST
dispatched by its 'method' parameter.
"""

import asyncio
import logging
import re
import time
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from ..config import AliExpressConfig
from ..models import (
    AffiliateLink,
    Commission,
    LinkResult,
    LinkSource,
    ProductSearchRequest,
    RawProduct,
)
from ..signing import sign, stringify_param
from .errors import ApiFailure


logger = logging.getLogger(__name__)

PRODUCT_QUERY_METHOD = "aliexpress.affiliate.product.query"
LINK_GENERATE_METHOD = "aliexpress.affiliate.link.generate"
CATEGORY_GET_METHOD = "aliexpress.affiliate.category.get"

# Normal (non-hot) promotion link
PROMOTION_LINK_TYPE = 0

_NUMBER_PREFIX = re.compile(r"\s*[-+]?(\d+\.?\d*|\.\d+)")


def parse_number(value: Any) -> float:
    """
    Parse a numeric API field leniently.

    The API sends numbers as strings, sometimes with a suffix ("97.5%").
    The leading numeric part is used; anything unparseable is 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    match = _NUMBER_PREFIX.match(str(value))
    if not match:
        return 0.0
    return float(match.group(0))


def _dig(data: Any, *path: str) -> Any:
    """Follow a chain of keys through nested dicts, None if any link is missing"""
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _as_list(value: Any, inner_key: str) -> List[Dict[str, Any]]:
    """Unwrap list fields that the API sometimes nests as {inner_key: [...]}"""
    if isinstance(value, dict):
        value = value.get(inner_key)
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    return []


class AliExpressClient:
    """
    AliExpress affiliate API client.

    The client does not retry: a failed search raises ApiFailure for the
    caller to handle, while link generation degrades to pass-through links.
    """

    def __init__(self, config: AliExpressConfig, session: Optional[aiohttp.ClientSession] = None):
        self.config = config
        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=config.timeout_seconds)

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the session if this client created it"""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def _ensure_session(self):
        """Ensure we have an open session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Content-Type": "application/x-www-form-urlencoded"}
            )
            self._owns_session = True

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/sync"

    def _create_base_params(self, method: str) -> Dict[str, Any]:
        """Parameters shared by every API method"""
        return {
            "method": method,
            "app_key": self.config.app_key,
            "timestamp": str(int(time.time() * 1000)),
            "format": "json",
            "v": "2.0",
            "sign_method": "md5",
        }

    def _signed(self, params: Dict[str, Any]) -> Dict[str, str]:
        """Drop unset values, stringify the rest and attach the signature"""
        form = {
            key: stringify_param(value)
            for key, value in params.items()
            if value is not None
        }
        form["sign"] = sign(form, self.config.app_secret)
        return form

    async def _post(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Sign and send one API call.

        Returns:
            Decoded JSON envelope, or an empty dict when the body is not a
            JSON object

        Raises:
            ApiFailure: On transport errors, timeouts and non-2xx responses
        """
        method = params.get("method", "unknown")
        form = self._signed(params)

        await self._ensure_session()

        try:
            async with self._session.post(self.endpoint, data=form, timeout=self._timeout) as response:
                if not 200 <= response.status < 300:
                    error_text = await response.text()
                    raise ApiFailure(method, error_text, status=response.status)

                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    logger.warning(f"[ALIEXPRESS] {method} returned a non-JSON body: {e}")
                    return {}
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ApiFailure(method, str(e) or type(e).__name__) from e

        if not isinstance(data, dict):
            return {}

        if "error_response" in data:
            logger.warning(f"[ALIEXPRESS] {method} error response: {data['error_response']}")

        return data

    async def search_products(self, request: ProductSearchRequest) -> List[RawProduct]:
        """
        Search products with the product query API.

        Args:
            request: Normalized search parameters

        Returns:
            Parsed products in API order; empty when the envelope has none

        Raises:
            ApiFailure: When the upstream call fails
        """
        params = {
            **self._create_base_params(PRODUCT_QUERY_METHOD),
            **request.to_api_params(),
        }

        logger.info(f"[ALIEXPRESS SEARCH] Keywords: '{request.keywords}', page {request.page_no}")

        data = await self._post(params)

        products = _as_list(
            _dig(data, "aliexpress_affiliate_product_query_response", "resp_result", "result", "products"),
            "product",
        )

        logger.info(f"[ALIEXPRESS SEARCH] Raw results: {len(products)} items")

        return [self._parse_product(product) for product in products]

    async def resolve_affiliate_links(self, product_urls: Sequence[str]) -> List[LinkResult]:
        """
        Generate affiliate links, tagging each with how it was obtained.

        Never raises. Unmatched URLs, and every URL when the call fails,
        get a pass-through link pointing at the original URL.

        Args:
            product_urls: Product detail URLs

        Returns:
            One LinkResult per input URL, in input order
        """
        urls = list(product_urls)
        if not urls:
            return []

        params = {
            **self._create_base_params(LINK_GENERATE_METHOD),
            "source_values": ",".join(urls),
            "promotion_link_type": PROMOTION_LINK_TYPE,
            "tracking_id": self.config.pid,
        }

        generated: Dict[str, AffiliateLink] = {}
        try:
            data = await self._post(params)
            promotion_links = _as_list(
                _dig(data, "aliexpress_affiliate_link_generate_response", "resp_result", "result", "promotion_links"),
                "promotion_link",
            )
            for entry in promotion_links:
                source_value = entry.get("source_value")
                promotion_link = entry.get("promotion_link")
                if not source_value or not promotion_link:
                    continue
                generated[source_value] = AffiliateLink(
                    original_url=source_value,
                    affiliate_url=promotion_link,
                    short_url=entry.get("short_promotion_link") or None,
                    tracking_id=self.config.pid,
                )
        except Exception as e:
            logger.warning(f"[ALIEXPRESS LINKS] Generation failed, using original URLs: {e}")

        results = []
        for url in urls:
            link = generated.get(url)
            if link is not None:
                results.append(LinkResult(link=link, source=LinkSource.GENERATED))
            else:
                results.append(LinkResult(link=self.pass_through_link(url), source=LinkSource.PASS_THROUGH))

        pass_through_count = sum(1 for result in results if not result.generated)
        if pass_through_count:
            logger.info(f"[ALIEXPRESS LINKS] {pass_through_count} of {len(urls)} links are pass-through")

        return results

    async def generate_affiliate_links(self, product_urls: Sequence[str]) -> List[AffiliateLink]:
        """Generate affiliate links; same length and order as the input, never raises"""
        results = await self.resolve_affiliate_links(product_urls)
        return [result.link for result in results]

    async def get_categories(self) -> List[Dict[str, Any]]:
        """Fetch the affiliate category tree, empty on any failure"""
        params = self._create_base_params(CATEGORY_GET_METHOD)

        try:
            data = await self._post(params)
        except Exception as e:
            logger.warning(f"[ALIEXPRESS] Category fetch failed: {e}")
            return []

        return _as_list(
            _dig(data, "aliexpress_affiliate_category_get_response", "resp_result", "result", "categories"),
            "category",
        )

    def pass_through_link(self, url: str) -> AffiliateLink:
        """Affiliate link that simply points at the original URL"""
        return AffiliateLink(original_url=url, affiliate_url=url, tracking_id=self.config.pid)

    def _parse_product(self, data: Dict[str, Any]) -> RawProduct:
        """Parse API product data into RawProduct"""
        commission = None
        if data.get("commission_rate"):
            commission = Commission(
                commission_rate=str(data["commission_rate"]),
                commission=str(data["commission"]) if data.get("commission") is not None else None,
            )

        return RawProduct(
            product_id=str(data.get("product_id") or ""),
            title=data.get("product_title") or "",
            product_url=data.get("product_detail_url") or "",
            image_url=data.get("product_main_image_url") or "",
            original_price=parse_number(data.get("original_price") or data.get("target_original_price")),
            sale_price=parse_number(data.get("target_sale_price") or data.get("sale_price")),
            discount=data.get("discount") or None,
            currency=data.get("target_sale_price_currency") or "USD",
            category_id=str(data.get("category_id") or data.get("first_level_category_id") or ""),
            category_name=data.get("category_name") or data.get("first_level_category_name") or "",
            seller_id=str(data.get("shop_id") or ""),
            seller_name=data.get("shop_name") or data.get("shop_url") or "",
            volume=int(parse_number(data.get("volume"))),
            evaluate_score=parse_number(data.get("evaluate_score")),
            commission=commission,
        )
