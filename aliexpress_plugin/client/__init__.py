"""AliExpress Open API client"""

from .aliexpress_client import AliExpressClient
from .errors import AliExpressError, ApiFailure, RateLimitExceeded

__all__ = ["AliExpressClient", "AliExpressError", "ApiFailure", "RateLimitExceeded"]
