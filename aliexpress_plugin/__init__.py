"""AliExpress product search plugin for chat backends."""

from .cache import ResultCache
from .client import AliExpressClient, AliExpressError, ApiFailure, RateLimitExceeded
from .config import AliExpressConfig, get_aliexpress_config
from .formatting import format_products_for_chat
from .intent import ProductIntentParser
from .plugin import AliExpressPlugin
from .service import AliExpressService
from .signing import sign

__all__ = [
    "AliExpressClient",
    "AliExpressConfig",
    "AliExpressError",
    "AliExpressPlugin",
    "AliExpressService",
    "ApiFailure",
    "ProductIntentParser",
    "RateLimitExceeded",
    "ResultCache",
    "format_products_for_chat",
    "get_aliexpress_config",
    "sign",
]
