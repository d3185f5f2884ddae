"""
Redis-backed cache for search results, affiliate links, rate-limit counters
and popular search terms.
"""

import hashlib
import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

import redis.asyncio as redis
from pydantic import ValidationError

from ..models import AffiliateLink, CacheStats, PopularSearch, RateLimitStatus, SearchResponse


logger = logging.getLogger(__name__)


def md5_hex(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()


class ResultCache:
    """
    Cache layer over an injected Redis client.

    The client must be created with decode_responses=True.
    """

    KEY_PREFIX = "aliexpress:"
    SEARCH_TTL = 3600  # 1 hour
    AFFILIATE_TTL = 86400  # 24 hours
    POPULAR_SEARCHES_LIMIT = 1000

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    def _search_key(self, keywords: str, filters: Mapping[str, Any]) -> str:
        filter_string = json.dumps(dict(filters), separators=(",", ":"))
        return f"{self.KEY_PREFIX}search:{md5_hex(keywords + filter_string)}"

    def _affiliate_key(self, original_url: str) -> str:
        return f"{self.KEY_PREFIX}affiliate:{md5_hex(original_url)}"

    def _rate_limit_key(self, service: str, identifier: str) -> str:
        return f"{self.KEY_PREFIX}ratelimit:{service}:{identifier}"

    @property
    def _popular_key(self) -> str:
        return f"{self.KEY_PREFIX}popular_searches"

    async def cache_search_results(
        self,
        keywords: str,
        filters: Mapping[str, Any],
        response: SearchResponse
    ) -> None:
        """
        Cache a search response for one hour.

        The stored copy is stamped cached=True so a later hit reports itself
        as cached.
        """
        data = response.model_copy(update={
            "cached": True,
            "cached_at": datetime.now(timezone.utc).isoformat(),
        })
        await self.redis.setex(
            self._search_key(keywords, filters),
            self.SEARCH_TTL,
            data.model_dump_json()
        )

    async def get_cached_search_results(
        self,
        keywords: str,
        filters: Mapping[str, Any]
    ) -> Optional[SearchResponse]:
        """Get a cached search response, None on a miss"""
        key = self._search_key(keywords, filters)
        cached = await self.redis.get(key)
        if not cached:
            return None

        try:
            return SearchResponse.model_validate_json(cached)
        except ValidationError as e:
            logger.warning(f"[CACHE] Discarding unreadable search entry {key}: {e}")
            return None

    async def clear_search_cache(self, keywords: str, filters: Mapping[str, Any]) -> None:
        await self.redis.delete(self._search_key(keywords, filters))

    async def cache_affiliate_links(self, links: Iterable[AffiliateLink]) -> None:
        """Cache affiliate links for 24 hours in one round trip"""
        links = list(links)
        if not links:
            return

        async with self.redis.pipeline(transaction=False) as pipe:
            for link in links:
                pipe.setex(self._affiliate_key(link.original_url), self.AFFILIATE_TTL, link.model_dump_json())
            await pipe.execute()

    def _parse_affiliate_link(self, original_url: str, data: Optional[str]) -> Optional[AffiliateLink]:
        if not data:
            return None

        try:
            return AffiliateLink.model_validate_json(data)
        except ValidationError as e:
            logger.warning(f"[CACHE] Discarding unreadable affiliate entry for {original_url}: {e}")
            return None

    async def get_cached_affiliate_link(self, original_url: str) -> Optional[AffiliateLink]:
        cached = await self.redis.get(self._affiliate_key(original_url))
        return self._parse_affiliate_link(original_url, cached)

    async def get_cached_affiliate_links(self, original_urls: List[str]) -> Dict[str, AffiliateLink]:
        """
        Bulk-read cached affiliate links.

        Returns:
            Mapping of original URL to its cached link, only for readable hits
        """
        if not original_urls:
            return {}

        values = await self.redis.mget([self._affiliate_key(url) for url in original_urls])

        results = {}
        for url, data in zip(original_urls, values):
            link = self._parse_affiliate_link(url, data)
            if link is not None:
                results[url] = link
        return results

    async def check_rate_limit(
        self,
        service: str,
        identifier: str,
        limit: int,
        window_seconds: int
    ) -> RateLimitStatus:
        """
        Fixed-window rate limit check.

        The first call opens the window with SET NX EX; later calls INCR.
        A call that pushes the counter past the limit is undone with DECR,
        so denied calls never raise the stored count.

        Args:
            service: Rate limited service, e.g. 'search'
            identifier: Caller identifier, e.g. a user id
            limit: Calls allowed per window
            window_seconds: Window length

        Returns:
            RateLimitStatus for this call
        """
        key = self._rate_limit_key(service, identifier)
        now = time.time()

        if limit <= 0:
            return RateLimitStatus(allowed=False, remaining=0, reset_at=now + window_seconds)

        if await self.redis.set(key, 1, ex=window_seconds, nx=True):
            return RateLimitStatus(allowed=True, remaining=limit - 1, reset_at=now + window_seconds)

        count = await self.redis.incr(key)
        ttl = await self.redis.ttl(key)
        if ttl < 0:
            # Window expired between SET NX and INCR; INCR created a key without expiry
            await self.redis.expire(key, window_seconds)
            ttl = window_seconds

        if count > limit:
            if await self.redis.decr(key) < 0:
                # Window expired before DECR; drop the orphaned counter
                await self.redis.delete(key)
            return RateLimitStatus(allowed=False, remaining=0, reset_at=now + ttl)

        return RateLimitStatus(allowed=True, remaining=limit - count, reset_at=now + ttl)

    async def track_search_term(self, term: str) -> None:
        """Count a search term, keeping only the top terms"""
        await self.redis.zincrby(self._popular_key, 1, term.lower())
        await self.redis.zremrangebyrank(self._popular_key, 0, -(self.POPULAR_SEARCHES_LIMIT + 1))

    async def get_popular_search_terms(self, limit: int = 10) -> List[PopularSearch]:
        results = await self.redis.zrevrange(self._popular_key, 0, limit - 1, withscores=True)
        return [PopularSearch(term=term, count=int(score)) for term, score in results]

    async def _keys(self, pattern: str) -> List[str]:
        return [key async for key in self.redis.scan_iter(match=pattern)]

    async def clear_all_cache(self) -> int:
        """Delete every plugin key, returning how many were removed"""
        keys = await self._keys(f"{self.KEY_PREFIX}*")
        if keys:
            await self.redis.delete(*keys)
        logger.info(f"[CACHE] Cleared {len(keys)} keys")
        return len(keys)

    async def get_cache_stats(self) -> CacheStats:
        return CacheStats(
            search_cache_size=len(await self._keys(f"{self.KEY_PREFIX}search:*")),
            affiliate_cache_size=len(await self._keys(f"{self.KEY_PREFIX}affiliate:*")),
            popular_searches=await self.redis.zcard(self._popular_key),
            rate_limit_entries=len(await self._keys(f"{self.KEY_PREFIX}ratelimit:*")),
        )
