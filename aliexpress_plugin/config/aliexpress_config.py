"""AliExpress API configuration settings."""

from dataclasses import dataclass
from typing import List
import logging
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# Values shipped as defaults; any of these means "no real credentials"
DEMO_APP_SECRET = "demo-secret"
DEMO_PID = "demo-pid"

REQUIRED_ENV_VARS = ("ALIEXPRESS_APP_KEY", "ALIEXPRESS_APP_SECRET", "ALIEXPRESS_PID")


@dataclass
class ServiceRateLimit:
    """Request quota for one upstream API family."""
    requests_per_second: int = 10
    requests_per_day: int = 10000


@dataclass
class RateLimitConfig:
    """Rate limits for the search and affiliate APIs."""
    search_api: ServiceRateLimit = None
    affiliate_api: ServiceRateLimit = None

    def __post_init__(self):
        """Initialize nested limits if not provided."""
        if self.search_api is None:
            self.search_api = ServiceRateLimit(requests_per_second=10, requests_per_day=10000)
        if self.affiliate_api is None:
            self.affiliate_api = ServiceRateLimit(requests_per_second=5, requests_per_day=5000)

    def for_service(self, service: str) -> ServiceRateLimit:
        """Get the quota for 'search' or 'affiliate'."""
        if service == "search":
            return self.search_api
        if service == "affiliate":
            return self.affiliate_api
        raise ValueError(f"Unknown rate limited service: {service}")


@dataclass
class AliExpressConfig:
    """Main AliExpress Open API configuration."""
    app_key: str = "520934"
    app_secret: str = DEMO_APP_SECRET
    pid: str = DEMO_PID
    base_url: str = "https://api-sg.aliexpress.com"
    timeout_seconds: float = 10.0
    redis_url: str = "redis://localhost:6379"
    rate_limits: RateLimitConfig = None

    def __post_init__(self):
        if self.rate_limits is None:
            self.rate_limits = RateLimitConfig()

    @property
    def has_real_credentials(self) -> bool:
        """True when both the secret and the tracking id are real values."""
        return (
            bool(self.app_secret)
            and bool(self.pid)
            and self.app_secret != DEMO_APP_SECRET
            and self.pid != DEMO_PID
        )


# Default configuration
ALIEXPRESS_CONFIG = {
    "app_key": os.getenv("ALIEXPRESS_APP_KEY", "520934"),
    "app_secret": os.getenv("ALIEXPRESS_APP_SECRET", DEMO_APP_SECRET),
    "pid": os.getenv("ALIEXPRESS_PID", DEMO_PID),
    "base_url": os.getenv("ALIEXPRESS_BASE_URL", "https://api-sg.aliexpress.com"),
    "timeout_seconds": float(os.getenv("ALIEXPRESS_TIMEOUT_SECONDS", "10")),
    "redis_url": os.getenv("REDIS_URL", "redis://localhost:6379"),
    "rate_limits": {
        "search_api": {
            "requests_per_second": int(os.getenv("ALIEXPRESS_SEARCH_RPS", "10")),
            "requests_per_day": int(os.getenv("ALIEXPRESS_SEARCH_RPD", "10000")),
        },
        "affiliate_api": {
            "requests_per_second": int(os.getenv("ALIEXPRESS_AFFILIATE_RPS", "5")),
            "requests_per_day": int(os.getenv("ALIEXPRESS_AFFILIATE_RPD", "5000")),
        },
    },
}


def get_aliexpress_config() -> AliExpressConfig:
    """Get AliExpress settings from configuration."""
    limits = ALIEXPRESS_CONFIG["rate_limits"]
    return AliExpressConfig(
        app_key=ALIEXPRESS_CONFIG["app_key"],
        app_secret=ALIEXPRESS_CONFIG["app_secret"],
        pid=ALIEXPRESS_CONFIG["pid"],
        base_url=ALIEXPRESS_CONFIG["base_url"],
        timeout_seconds=ALIEXPRESS_CONFIG["timeout_seconds"],
        redis_url=ALIEXPRESS_CONFIG["redis_url"],
        rate_limits=RateLimitConfig(
            search_api=ServiceRateLimit(**limits["search_api"]),
            affiliate_api=ServiceRateLimit(**limits["affiliate_api"]),
        ),
    )


def validate_aliexpress_config() -> List[str]:
    """
    Report missing AliExpress credentials.

    Missing credentials are not an error: the service falls back to demo
    data. A warning is logged so the operator knows why results are fake.

    Returns:
        Names of the required environment variables that are not set
    """
    missing = [name for name in REQUIRED_ENV_VARS if not os.getenv(name)]

    if missing:
        logger.warning(f"Missing AliExpress environment variables: {', '.join(missing)}")
        logger.warning("Using demo values for testing. Configure real credentials for production.")

    return missing
