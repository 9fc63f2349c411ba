"""
Order Fetcher — Retrieves every order matching a query, one page at a time.

The size of the result set is unknown up front, so the fetcher walks the
cursor chain that Shopify returns until one of these happens:

  - the response has no rel="next" Link entry,
  - a page holds fewer orders than were asked for (short page = end of data,
    even if a cursor is present),
  - the page ceiling (max_pages) is reached; a warning is printed and the
    orders collected so far are returned.

Protocol rules:
  - Page 1 is requested with the full query (status, created_at bounds, limit).
  - Every later page is requested with limit + page_info ONLY. Shopify rejects
    a page_info request that also carries filter parameters.
  - Pages are fetched strictly one after another; a cursor is only valid for
    the request that immediately follows the response that produced it.
  - A fixed pause separates consecutive requests to stay under the Admin API
    rate limit. There is no pause after the last page.

Any error from the client aborts the whole fetch; nothing partial is returned
and nothing is retried.
"""

import time
from typing import Callable, List, Optional

from .models import OrderQuery, RawOrder
from .settings import DEFAULT_SETTINGS
from .shopify_client import ShopifyClient


class OrderFetcher:
    """Accumulates all pages of orders.json for one query.

    Attributes:
        page_size: Orders requested per page.
        max_pages: Hard ceiling on requests per fetch.
        page_delay: Seconds to sleep between requests.
        pages_fetched: Pages requested by the last fetch_orders() call.
        hit_page_ceiling: True if the last fetch stopped at max_pages.
    """

    def __init__(
        self,
        client: ShopifyClient,
        page_size: int = DEFAULT_SETTINGS["PAGE_SIZE"],
        max_pages: int = DEFAULT_SETTINGS["MAX_PAGES"],
        page_delay: float = DEFAULT_SETTINGS["PAGE_DELAY_SECONDS"],
        debug: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.page_size = page_size
        self.max_pages = max_pages
        self.page_delay = page_delay
        self.debug = debug
        self._sleep = sleep
        self.pages_fetched = 0
        self.hit_page_ceiling = False

    @classmethod
    def from_config(cls, client: ShopifyClient, config) -> "OrderFetcher":
        return cls(
            client,
            page_size=config.page_size,
            max_pages=config.max_pages,
            page_delay=config.page_delay,
            debug=config.debug,
        )

    def fetch_orders(self, query: OrderQuery) -> List[RawOrder]:
        """Return every order matching the query, in server order.

        Raises:
            FetchTimeout, RateLimited, AuthFailure, UpstreamError
        """
        self.pages_fetched = 0
        self.hit_page_ceiling = False

        orders: List[RawOrder] = []
        seen_ids = set()
        params = query.to_params(self.page_size)
        cursor: Optional[str] = None

        while True:
            page = self.pages_fetched + 1
            batch, cursor = self.client.get_orders_page(params, page=page)
            self.pages_fetched = page

            for raw in batch:
                order = RawOrder.from_dict(raw)
                if order.id is not None:
                    if order.id in seen_ids:
                        if self.debug:
                            print(f"  Skipping duplicate order {order.id} on page {page}")
                        continue
                    seen_ids.add(order.id)
                orders.append(order)

            if self.debug:
                print(f"  Page {page}: {len(batch)} orders (total: {len(orders)})")

            if not cursor or len(batch) < self.page_size:
                break

            if self.pages_fetched >= self.max_pages:
                self.hit_page_ceiling = True
                print(
                    f"  WARNING: Stopped after {self.max_pages} pages; "
                    f"export holds the first {len(orders)} orders only"
                )
                break

            params = {"limit": self.page_size, "page_info": cursor}
            self._sleep(self.page_delay)

        return orders
