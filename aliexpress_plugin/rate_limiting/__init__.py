"""Rate limiting module for the AliExpress search plugin."""

from .rate_limiter import RateLimiter

__all__ = ['RateLimiter']
