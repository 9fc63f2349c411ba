"""
Export errors raised by the fetch pipeline.

Every failure that aborts an export derives from OrderExportError and carries a
message that can be shown to the operator as-is. None of these are retried
automatically; the caller decides whether to try again.
"""

from typing import Optional


class OrderExportError(Exception):
    """Base class for all export failures."""


class FetchTimeout(OrderExportError):
    """A page request exceeded the configured timeout."""

    def __init__(self, timeout: float, page: int):
        self.timeout = timeout
        self.page = page
        super().__init__(
            f"Shopify did not respond within {timeout}s while fetching page {page}. "
            "Try a narrower date range."
        )


class RateLimited(OrderExportError):
    """Shopify answered HTTP 429."""

    def __init__(self, retry_after: Optional[str] = None):
        self.retry_after = retry_after
        message = "Shopify rate limit reached (HTTP 429). Wait and try again later"
        if retry_after:
            message += f" (Retry-After: {retry_after}s)"
        super().__init__(message + ".")


class AuthFailure(OrderExportError):
    """Shopify rejected the access token (HTTP 401)."""

    def __init__(self, body: str = ""):
        self.body = body
        super().__init__(
            "Shopify rejected the access token (HTTP 401). "
            "Check SHOPIFY_ADMIN_ACCESS_TOKEN."
        )


class UpstreamError(OrderExportError):
    """Any other non-success answer from Shopify, or no answer at all."""

    def __init__(self, status_code: Optional[int], body: str):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            super().__init__(f"Shopify request failed: {body}")
        else:
            super().__init__(f"Shopify API error: {status_code} {body}")


class EmptyResultSet(OrderExportError):
    """The query succeeded but produced nothing to export."""

    def __init__(self, message: str = "No orders found"):
        super().__init__(message)
