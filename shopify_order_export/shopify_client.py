"""
Shopify API Client — Handles authenticated calls to the Shopify Admin REST API.

This module is responsible for all HTTP communication with the store. It
knows how to request one page of orders.json and how to turn a non-success
answer into one of the typed export errors; it knows nothing about how many
pages an export needs (see order_fetcher).

Authentication:
    Every request carries the Admin API token in the X-Shopify-Access-Token
    header. The token is set once on a requests.Session, which also pools the
    underlying connection across page requests.

Pagination:
    orders.json uses cursor pagination. The response carries a Link header:

        Link: <https://shop.myshopify.com/admin/api/2023-10/orders.json?limit=250&page_info=eyJsYXN0X2lkIjo0>; rel="next"

    The opaque page_info value is the cursor for the next request. A page that
    is not followed by another has no rel="next" entry.

Error mapping:
    requests.Timeout        -> FetchTimeout
    HTTP 429                -> RateLimited
    HTTP 401                -> AuthFailure
    other non-2xx / no body -> UpstreamError
"""

import re
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

import requests

from .config import ExportConfig
from .exceptions import AuthFailure, FetchTimeout, RateLimited, UpstreamError

_LINK_NEXT_PATTERN = re.compile(r'<([^>]+)>\s*;\s*rel="?next"?', re.IGNORECASE)


def extract_next_cursor(link_header: Optional[str]) -> Optional[str]:
    """Return the page_info cursor of the rel="next" Link entry, if any.

    Args:
        link_header: Raw value of the Link response header (may hold both a
                     "previous" and a "next" entry, comma separated).

    Returns:
        The cursor string, or None when there is no next page.
    """
    if not link_header:
        return None
    for entry in link_header.split(","):
        match = _LINK_NEXT_PATTERN.search(entry)
        if not match:
            continue
        values = parse_qs(urlparse(match.group(1)).query).get("page_info")
        if values:
            return values[0]
    return None


class ShopifyClient:
    """Client for the Shopify Admin REST API.

    Attributes:
        base_url: https://{shop}/admin/api/{version}
        timeout: Per-request timeout in seconds.
        debug: If True, print each request.
    """

    def __init__(self, config: ExportConfig, session: Optional[requests.Session] = None):
        self.base_url = config.api_base_url
        self.timeout = config.request_timeout
        self.debug = config.debug
        self._session = session or requests.Session()
        self._session.headers.update({
            "X-Shopify-Access-Token": config.access_token,
            "Content-Type": "application/json",
        })

    def get_orders_page(self, params: Dict[str, Any], page: int = 1) -> Tuple[List[Dict], Optional[str]]:
        """Fetch one page of orders.

        GET /admin/api/{version}/orders.json

        Args:
            params: Query parameters; either the full filter set (first page)
                    or just limit + page_info (every later page).
            page: Page number, used only in messages.

        Returns:
            (orders, next_cursor) where next_cursor is None on the last page.

        Raises:
            FetchTimeout, RateLimited, AuthFailure, UpstreamError
        """
        response = self._get("orders.json", params, page)
        data = self._decode(response)
        orders = data.get("orders") if isinstance(data, dict) else None
        if not isinstance(orders, list):
            raise UpstreamError(response.status_code, "Response did not contain an 'orders' list")
        return orders, extract_next_cursor(response.headers.get("Link"))

    def get_shop(self) -> Dict[str, Any]:
        """Get the shop profile; used to check credentials.

        GET /admin/api/{version}/shop.json
        """
        response = self._get("shop.json", None, 1)
        data = self._decode(response)
        return data.get("shop", {}) if isinstance(data, dict) else {}

    def _get(self, endpoint: str, params: Optional[Dict[str, Any]], page: int) -> requests.Response:
        url = f"{self.base_url}/{endpoint}"

        if self.debug:
            print(f"  GET {endpoint} page={page} params={params}")

        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.Timeout as e:
            raise FetchTimeout(self.timeout, page) from e
        except requests.RequestException as e:
            raise UpstreamError(None, str(e)) from e

        self._raise_for_status(response)
        return response

    @staticmethod
    def _raise_for_status(response: requests.Response):
        status = response.status_code
        if 200 <= status < 300:
            return
        if status == 429:
            raise RateLimited(response.headers.get("Retry-After"))
        if status == 401:
            raise AuthFailure(response.text)
        raise UpstreamError(status, response.text)

    @staticmethod
    def _decode(response: requests.Response) -> Any:
        # Decimal keeps numeric amounts exact if the API ever sends them unquoted
        try:
            return response.json(parse_float=Decimal)
        except ValueError as e:
            raise UpstreamError(response.status_code, f"Invalid JSON in response: {e}") from e
