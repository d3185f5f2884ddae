"""Tests for configuration module."""

import logging

import pytest

from aliexpress_plugin.config import (
    ALIEXPRESS_CONFIG,
    AliExpressConfig,
    RateLimitConfig,
    ServiceRateLimit,
    get_aliexpress_config,
    validate_aliexpress_config,
)


def test_aliexpress_config_exists():
    """Test that ALIEXPRESS_CONFIG dictionary is properly defined."""
    assert isinstance(ALIEXPRESS_CONFIG, dict)
    for key in ("app_key", "app_secret", "pid", "base_url", "timeout_seconds", "redis_url", "rate_limits"):
        assert key in ALIEXPRESS_CONFIG
    assert "search_api" in ALIEXPRESS_CONFIG["rate_limits"]
    assert "affiliate_api" in ALIEXPRESS_CONFIG["rate_limits"]


def test_defaults():
    """Test that AliExpressConfig has correct default values."""
    config = AliExpressConfig()

    assert config.app_key == "520934"
    assert config.base_url == "https://api-sg.aliexpress.com"
    assert config.timeout_seconds == 10.0
    assert config.redis_url == "redis://localhost:6379"
    assert config.rate_limits.search_api == ServiceRateLimit(10, 10000)
    assert config.rate_limits.affiliate_api == ServiceRateLimit(5, 5000)


def test_get_aliexpress_config():
    """Test that get_aliexpress_config returns proper AliExpressConfig object."""
    config = get_aliexpress_config()

    assert isinstance(config, AliExpressConfig)
    assert isinstance(config.rate_limits, RateLimitConfig)
    assert config.app_key == ALIEXPRESS_CONFIG["app_key"]
    assert config.rate_limits.search_api.requests_per_second == \
        ALIEXPRESS_CONFIG["rate_limits"]["search_api"]["requests_per_second"]


def test_demo_credentials_are_detected():
    assert not AliExpressConfig().has_real_credentials
    assert not AliExpressConfig(app_secret="real-secret").has_real_credentials
    assert not AliExpressConfig(pid="mm_1_2_3").has_real_credentials
    assert not AliExpressConfig(app_secret="", pid="mm_1_2_3").has_real_credentials
    assert AliExpressConfig(app_secret="real-secret", pid="mm_1_2_3").has_real_credentials


def test_rate_limits_by_service():
    limits = RateLimitConfig()

    assert limits.for_service("search").requests_per_second == 10
    assert limits.for_service("affiliate").requests_per_day == 5000
    with pytest.raises(ValueError):
        limits.for_service("orders")


def test_validate_reports_missing_variables(monkeypatch, caplog):
    monkeypatch.delenv("ALIEXPRESS_APP_KEY", raising=False)
    monkeypatch.setenv("ALIEXPRESS_APP_SECRET", "real-secret")
    monkeypatch.delenv("ALIEXPRESS_PID", raising=False)

    with caplog.at_level(logging.WARNING):
        missing = validate_aliexpress_config()

    assert missing == ["ALIEXPRESS_APP_KEY", "ALIEXPRESS_PID"]
    assert "ALIEXPRESS_APP_KEY" in caplog.text


def test_validate_is_quiet_when_configured(monkeypatch):
    for name in ("ALIEXPRESS_APP_KEY", "ALIEXPRESS_APP_SECRET", "ALIEXPRESS_PID"):
        monkeypatch.setenv(name, "value")

    assert validate_aliexpress_config() == []
