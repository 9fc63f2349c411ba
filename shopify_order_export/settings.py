"""
Settings — Default configuration values for the Shopify order exporter.

This module provides the DEFAULT_SETTINGS dict that ExportConfig uses as
fallback values when environment variables are not set. The actual
configuration is loaded from .env at runtime; these defaults ensure the
exporter works out of the box for common use cases.

Configuration precedence (highest to lowest):
  1. CLI flags (--debug, --output-dir)
  2. Environment variables (from .env file)
  3. DEFAULT_SETTINGS (this file)

Settings reference:
  SHOPIFY_API_VERSION     Admin REST API version segment (e.g., "2023-10")
  PAGE_SIZE               Orders per page; 250 is the Admin API maximum
  MAX_PAGES               Hard ceiling on pages fetched in one export
  PAGE_DELAY_SECONDS      Pause between successive page requests
  REQUEST_TIMEOUT_SECONDS Per-request timeout; exceeding it aborts the export
  EXPORT_UTC_OFFSET       Fixed offset used to render every date column
  OUTPUT_DIR              Where to write export folders (default: ./output)
  OUTPUT_RETENTION_DAYS   How many days to keep old export folders (0 = keep forever)
  EXPORT_FILENAME         CSV filename inside each export folder
  DEBUG                   Whether to print verbose output (default: False)
"""

EXPORT_LABEL = "Shopify_Orders"

MAX_PAGE_SIZE = 250

DEFAULT_SETTINGS = {
    "SHOPIFY_API_VERSION": "2023-10",
    "PAGE_SIZE": MAX_PAGE_SIZE,
    "MAX_PAGES": 100,
    "PAGE_DELAY_SECONDS": 0.5,
    "REQUEST_TIMEOUT_SECONDS": 30,
    "EXPORT_UTC_OFFSET": "+00:00",
    "OUTPUT_DIR": "./output",
    "OUTPUT_RETENTION_DAYS": 30,
    "EXPORT_FILENAME": "orders_export.csv",
    "DEBUG": False,
}

# Values accepted by the orders.json "status" filter, with display labels.
ORDER_STATUSES = [
    {"value": "any", "label": "Any Status"},
    {"value": "open", "label": "Open"},
    {"value": "closed", "label": "Closed"},
    {"value": "cancelled", "label": "Cancelled"},
    {"value": "archived", "label": "Archived"},
]

PROXY_ENV_VARS = [
    "HTTP_PROXY", "HTTPS_PROXY", "http_proxy", "https_proxy",
    "NO_PROXY", "no_proxy",
]
