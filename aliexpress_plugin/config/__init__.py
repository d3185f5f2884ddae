"""Configuration module for the AliExpress search plugin."""

from .aliexpress_config import (
    ALIEXPRESS_CONFIG,
    AliExpressConfig,
    RateLimitConfig,
    ServiceRateLimit,
    get_aliexpress_config,
    validate_aliexpress_config,
)

__all__ = [
    'ALIEXPRESS_CONFIG',
    'AliExpressConfig',
    'RateLimitConfig',
    'ServiceRateLimit',
    'get_aliexpress_config',
    'validate_aliexpress_config',
]
