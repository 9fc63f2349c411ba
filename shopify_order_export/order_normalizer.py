"""
Order Normalizer — Flattens Shopify orders into one export row per line item.

Each row is a dict keyed by EXPORT_COLUMNS, in that order, with every value a
string. Order-level columns repeat on every row of the same order; item-level
columns (SKU, Item #, Item Name, Quantity, Item Cost, Discount Amount) vary.

Fallback rules, applied per column:
  - Shipping columns fall back to the billing address, then to "".
    Email (Shipping) and Phone (Shipping) finally fall back to the order's own
    email / phone, as does Phone (Billing).
  - Dates render as "YYYY-MM-DD HH:MM" in one fixed UTC offset; a missing or
    unreadable timestamp renders as "".
  - Money columns default to "0" and are copied verbatim, never re-computed.
  - Phone and postcode columns have all whitespace removed.
  - Coupon codes are stripped and joined with ", ".
  - Quantity defaults to 1 when missing or not a positive integer.
  - Payment Method Title defaults to "Unknown"; Shipping Method Title to
    "Standard"; Order Status to "pending".

Nothing here raises: every column has a terminal default.
"""

import re
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from .models import Address, LineItem, RawOrder

EXPORT_COLUMNS = (
    "Order Number",
    "Order Status",
    "Order Date",
    "Customer Note",
    "First Name (Billing)",
    "Last Name (Billing)",
    "Company (Billing)",
    "Address 1&2 (Billing)",
    "City (Billing)",
    "State Code (Billing)",
    "Postcode (Billing)",
    "Country Code (Billing)",
    "Email (Shipping)",
    "Paid Date",
    "Phone (Shipping)",
    "Phone (Billing)",
    "First Name (Shipping)",
    "Last Name (Shipping)",
    "Address 1&2 (Shipping)",
    "City (Shipping)",
    "State Code (Shipping)",
    "Postcode (Shipping)",
    "Country Code (Shipping)",
    "Payment Method Title",
    "Cart Discount Amount",
    "Order Subtotal Amount",
    "Shipping Method Title",
    "Order Shipping Amount",
    "Order Refund Amount",
    "Order Total Amount",
    "Order Total Tax Amount",
    "SKU",
    "Item #",
    "Item Name",
    "Quantity (- Refund)",
    "Item Cost",
    "Coupon Code",
    "Discount Amount",
    "Discount Amount Tax",
)

ITEM_COLUMNS = (
    "SKU",
    "Item #",
    "Item Name",
    "Quantity (- Refund)",
    "Item Cost",
    "Discount Amount",
)

DATE_FORMAT = "%Y-%m-%d %H:%M"
DEFAULT_PAYMENT_METHOD = "Unknown"
DEFAULT_SHIPPING_METHOD = "Standard"
DEFAULT_ORDER_STATUS = "pending"
COUPON_SEPARATOR = ", "

_WHITESPACE = re.compile(r"\s+")


def _first(*values: Optional[str]) -> str:
    """First non-empty value, or ""."""
    for value in values:
        if value:
            return value
    return ""


def _money(value: Optional[str]) -> str:
    if value is None:
        return "0"
    value = str(value).strip()
    return value or "0"


def _compact(value: str) -> str:
    return _WHITESPACE.sub("", value)


def _address_field(address: Optional[Address], name: str) -> Optional[str]:
    if address is None:
        return None
    return getattr(address, name)


def _street(address: Optional[Address]) -> str:
    line1 = _first(_address_field(address, "address1"))
    line2 = _first(_address_field(address, "address2"))
    return f"{line1} {line2}".strip()


def format_timestamp(value: Optional[str], tz: timezone = timezone.utc) -> str:
    """Render an ISO-8601 timestamp at minute precision in the given offset.

    Naive timestamps are taken to be UTC. Returns "" for missing or
    unparseable values.
    """
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return ""
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(tz).strftime(DATE_FORMAT)
    except (OverflowError, ValueError):
        return ""


def normalize_quantity(value: Any) -> str:
    """Quantity as a positive whole number; "2", 2 and Decimal("2.0") all give "2"."""
    try:
        quantity = Decimal(str(value).strip())
    except (InvalidOperation, TypeError, ValueError):
        return "1"
    if not quantity.is_finite() or quantity != quantity.to_integral_value() or quantity <= 0:
        return "1"
    return str(int(quantity))


def join_coupon_codes(codes: Iterable[str]) -> str:
    stripped = (code.strip() for code in codes if code)
    return COUPON_SEPARATOR.join(code for code in stripped if code)


def normalize_line_item(order: RawOrder, line_item: LineItem, tz: timezone = timezone.utc) -> Dict[str, str]:
    """Map one (order, line item) pair to one export row.

    Args:
        order: The parsed order.
        line_item: One of order.line_items.
        tz: Fixed offset used for Order Date and Paid Date.

    Returns:
        A dict with exactly the keys of EXPORT_COLUMNS, in order.
    """
    billing = order.billing_address
    shipping = order.shipping_address

    def billing_field(name):
        return _first(_address_field(billing, name))

    def shipping_field(name):
        return _first(_address_field(shipping, name), _address_field(billing, name))

    row = {
        "Order Number": _first(order.name, order.id),
        "Order Status": _first(order.financial_status, DEFAULT_ORDER_STATUS),
        "Order Date": format_timestamp(order.created_at, tz),
        "Customer Note": _first(order.note),
        "First Name (Billing)": billing_field("first_name"),
        "Last Name (Billing)": billing_field("last_name"),
        "Company (Billing)": billing_field("company"),
        "Address 1&2 (Billing)": _street(billing),
        "City (Billing)": billing_field("city"),
        "State Code (Billing)": billing_field("province_code"),
        "Postcode (Billing)": _compact(billing_field("zip")),
        "Country Code (Billing)": billing_field("country_code"),
        "Email (Shipping)": _first(
            _address_field(shipping, "email"), _address_field(billing, "email"), order.email
        ),
        "Paid Date": format_timestamp(order.processed_at, tz),
        "Phone (Shipping)": _compact(_first(
            _address_field(shipping, "phone"), _address_field(billing, "phone"), order.phone
        )),
        "Phone (Billing)": _compact(_first(_address_field(billing, "phone"), order.phone)),
        "First Name (Shipping)": shipping_field("first_name"),
        "Last Name (Shipping)": shipping_field("last_name"),
        # Whole-street fallback: shipping address1 is never paired with billing address2.
        "Address 1&2 (Shipping)": _street(shipping) or _street(billing),
        "City (Shipping)": shipping_field("city"),
        "State Code (Shipping)": shipping_field("province_code"),
        "Postcode (Shipping)": _compact(shipping_field("zip")),
        "Country Code (Shipping)": shipping_field("country_code"),
        "Payment Method Title": _first(*order.payment_gateway_names, DEFAULT_PAYMENT_METHOD),
        "Cart Discount Amount": _money(order.total_discounts),
        "Order Subtotal Amount": _money(order.subtotal_price),
        "Shipping Method Title": _first(*order.shipping_line_titles[:1], DEFAULT_SHIPPING_METHOD),
        "Order Shipping Amount": _money(order.total_shipping_price),
        "Order Refund Amount": "0",
        "Order Total Amount": _money(order.total_price),
        "Order Total Tax Amount": _money(order.total_tax),
        "SKU": _first(line_item.sku),
        "Item #": _first(line_item.id),
        "Item Name": _first(line_item.name, line_item.title),
        "Quantity (- Refund)": normalize_quantity(line_item.quantity),
        "Item Cost": _money(line_item.price),
        "Coupon Code": join_coupon_codes(order.discount_codes),
        "Discount Amount": _money(line_item.total_discount),
        "Discount Amount Tax": "0",
    }
    return row


def normalize_orders(orders: Iterable[RawOrder], tz: timezone = timezone.utc) -> List[Dict[str, str]]:
    """Expand orders into rows, preserving order and line-item sequence.

    Orders without line items contribute no rows.
    """
    rows = []
    for order in orders:
        for line_item in order.line_items:
            rows.append(normalize_line_item(order, line_item, tz))
    return rows
