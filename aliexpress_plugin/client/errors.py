"""Exceptions raised by the AliExpress API client."""

from typing import Optional


class AliExpressError(Exception):
    """Base class for AliExpress plugin errors"""


class ApiFailure(AliExpressError):
    """
    An upstream call failed at the transport or HTTP level.

    Attributes:
        method: API method name that was called
        status: HTTP status code, or None when no response was received
        detail: Upstream error text
    """

    def __init__(self, method: str, detail: str, status: Optional[int] = None):
        self.method = method
        self.status = status
        self.detail = detail
        status_text = f" ({status})" if status is not None else ""
        super().__init__(f"{method} failed{status_text}: {detail}")


class RateLimitExceeded(AliExpressError):
    """
    A rate limit window denied the call.

    Attributes:
        retry_after: Whole seconds until the window resets, at least 1
    """

    def __init__(self, service: str, retry_after: int):
        self.service = service
        self.retry_after = max(1, retry_after)
        super().__init__(f"Rate limit exceeded. Please try again in {self.retry_after} seconds.")
