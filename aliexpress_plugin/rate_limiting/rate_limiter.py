"""
Rate limiter for the AliExpress APIs.

Applies the configured per-second limit per caller and the daily quota per
app, both as fixed windows stored in the shared cache. The daily quota is
charged only for calls that go upstream.
"""

import logging
import time

from ..cache import ResultCache
from ..config import RateLimitConfig
from ..models import RateLimitStatus


logger = logging.getLogger(__name__)

# Identifier for quotas that belong to the app key rather than a caller
APP_IDENTIFIER = "global"


class RateLimiter:
    """
    Fixed-window rate limiter backed by the result cache.

    Attributes:
        cache: Cache holding the window counters
        limits: Per-service quotas
        enforce_daily: Whether the daily quota is checked as well
    """

    SECOND_WINDOW = 1
    DAY_WINDOW = 86400

    def __init__(
        self,
        cache: ResultCache,
        limits: RateLimitConfig,
        enforce_daily: bool = True
    ):
        self.cache = cache
        self.limits = limits
        self.enforce_daily = enforce_daily

    async def check_per_second(self, service: str, identifier: str = "anonymous") -> RateLimitStatus:
        """Count one call against the caller's per-second window"""
        quota = self.limits.for_service(service)

        status = await self.cache.check_rate_limit(
            service, identifier, quota.requests_per_second, self.SECOND_WINDOW
        )
        if not status.allowed:
            logger.info(f"[RATE LIMIT] {service} per-second limit reached for '{identifier}'")
        return status

    async def check_daily(self, service: str) -> RateLimitStatus:
        """
        Count one upstream call against the app's daily quota.

        Always allowed when the daily quota is not enforced.
        """
        quota = self.limits.for_service(service)

        if not self.enforce_daily:
            return RateLimitStatus(
                allowed=True,
                remaining=quota.requests_per_day,
                reset_at=time.time() + self.DAY_WINDOW,
            )

        status = await self.cache.check_rate_limit(
            f"{service}_daily", APP_IDENTIFIER, quota.requests_per_day, self.DAY_WINDOW
        )
        if not status.allowed:
            logger.warning(f"[RATE LIMIT] {service} daily quota of {quota.requests_per_day} exhausted")
        return status

    async def check(self, service: str, identifier: str = "anonymous") -> RateLimitStatus:
        """
        Count one upstream call against both windows.

        The daily window is only touched once the per-second check passes.

        Args:
            service: 'search' or 'affiliate'
            identifier: Caller identifier for the per-second window

        Returns:
            The denying status, or the per-second status when allowed
        """
        per_second = await self.check_per_second(service, identifier)
        if not per_second.allowed:
            return per_second

        daily = await self.check_daily(service)
        if not daily.allowed:
            return daily

        return RateLimitStatus(
            allowed=True,
            remaining=min(per_second.remaining, daily.remaining),
            reset_at=per_second.reset_at,
        )
