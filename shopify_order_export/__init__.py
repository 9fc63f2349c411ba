"""
shopify-order-export — Export Shopify orders as line-item CSV rows.

This package provides the building blocks used by run.py:

  config.py             ExportConfig, loaded once from .env / environment.
  shopify_client.py     Admin REST API session, page requests, error mapping.
  order_fetcher.py      Cursor pagination over orders.json with page ceiling
                        and inter-page delay.
  models.py             OrderQuery and typed views of orders and line items.
  order_normalizer.py   The 39-column export row and its fallback rules.
  csv_export.py         CSV writing/reading with a UTF-8 byte-order mark.
  output_manager.py     Per-query export folders and retention pruning.
  orchestrator.py       Fetch -> normalize -> save pipeline.

Install with: pip install -e .
"""

from .config import ExportConfig
from .exceptions import (
    AuthFailure,
    EmptyResultSet,
    FetchTimeout,
    OrderExportError,
    RateLimited,
    UpstreamError,
)
from .models import Address, LineItem, OrderQuery, RawOrder
from .order_fetcher import OrderFetcher
from .order_normalizer import EXPORT_COLUMNS, normalize_line_item, normalize_orders
from .orchestrator import ExportOrchestrator
from .shopify_client import ShopifyClient
