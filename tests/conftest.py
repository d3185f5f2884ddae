"""Shared fixtures."""

import pytest

from aliexpress_plugin.cache import ResultCache
from aliexpress_plugin.config import AliExpressConfig, RateLimitConfig, ServiceRateLimit
from fake_redis import FakeClock, FakeRedis


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_redis(clock):
    return FakeRedis(clock)


@pytest.fixture
def cache(fake_redis):
    return ResultCache(fake_redis)


@pytest.fixture
def demo_config():
    return AliExpressConfig()


@pytest.fixture
def live_config():
    return AliExpressConfig(
        app_key="12345",
        app_secret="real-secret",
        pid="mm_123_456_789",
        rate_limits=RateLimitConfig(
            search_api=ServiceRateLimit(requests_per_second=10, requests_per_day=10000),
            affiliate_api=ServiceRateLimit(requests_per_second=5, requests_per_day=5000),
        ),
    )
