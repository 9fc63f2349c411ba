"""Tests for shopify_order_export.order_normalizer."""

from datetime import timedelta, timezone
from decimal import Decimal

import pytest

from shopify_order_export.models import LineItem, RawOrder
from shopify_order_export.order_normalizer import (
    EXPORT_COLUMNS,
    ITEM_COLUMNS,
    format_timestamp,
    join_coupon_codes,
    normalize_line_item,
    normalize_orders,
    normalize_quantity,
)

SHIPPING_TO_BILLING = {
    "First Name (Shipping)": "First Name (Billing)",
    "Last Name (Shipping)": "Last Name (Billing)",
    "Address 1&2 (Shipping)": "Address 1&2 (Billing)",
    "City (Shipping)": "City (Billing)",
    "State Code (Shipping)": "State Code (Billing)",
    "Postcode (Shipping)": "Postcode (Billing)",
    "Country Code (Shipping)": "Country Code (Billing)",
    "Phone (Shipping)": "Phone (Billing)",
}


@pytest.fixture
def rows(orders):
    return normalize_orders(orders)


def test_export_columns_are_stable():
    assert len(EXPORT_COLUMNS) == 39
    assert len(set(EXPORT_COLUMNS)) == 39
    assert EXPORT_COLUMNS[0] == "Order Number"
    assert EXPORT_COLUMNS[-1] == "Discount Amount Tax"


def test_one_row_per_line_item(orders, rows):
    # 3 items + 1 item + 0 items
    assert len(rows) == 4
    assert [r["Order Number"] for r in rows] == ["#1001", "#1001", "#1001", "#1002"]


def test_rows_have_every_column_as_string(rows):
    for row in rows:
        assert list(row.keys()) == list(EXPORT_COLUMNS)
        for value in row.values():
            assert isinstance(value, str)


def test_multi_item_order_shares_order_fields(orders):
    order = orders[0]
    rows = [normalize_line_item(order, item) for item in order.line_items]
    assert len(rows) == 3

    order_columns = [c for c in EXPORT_COLUMNS if c not in ITEM_COLUMNS]
    for column in order_columns:
        assert len({row[column] for row in rows}) == 1, column

    for column in ("SKU", "Item Name", "Quantity (- Refund)", "Item Cost"):
        assert len({row[column] for row in rows}) == 3, column


def test_order_without_line_items_yields_nothing(orders):
    assert normalize_orders([orders[2]]) == []


def test_full_order_values(rows):
    row = rows[0]
    assert row["Order Number"] == "#1001"
    assert row["Order Status"] == "paid"
    assert row["Order Date"] == "2024-03-01 15:15"
    assert row["Paid Date"] == "2024-03-01 15:16"
    assert row["Customer Note"] == "Leave at door"
    assert row["Address 1&2 (Billing)"] == "1 Main St Apt 4"
    assert row["Address 1&2 (Shipping)"] == "9 Side Rd"
    assert row["City (Shipping)"] == "Toronto"
    assert row["First Name (Shipping)"] == "Sam"
    assert row["Company (Billing)"] == "Lee Co"
    assert row["Email (Shipping)"] == "ann@example.com"
    assert row["Payment Method Title"] == "shopify_payments"
    assert row["Shipping Method Title"] == "Express"
    assert row["Order Shipping Amount"] == "10.00"
    assert row["Order Subtotal Amount"] == "180.00"
    assert row["Cart Discount Amount"] == "18.00"
    assert row["Order Total Amount"] == "194.10"
    assert row["Order Total Tax Amount"] == "22.10"
    assert row["Order Refund Amount"] == "0"
    assert row["SKU"] == "TEE-S"
    assert row["Item #"] == "1"
    assert row["Item Name"] == "Tee - S"
    assert row["Quantity (- Refund)"] == "2"
    assert row["Item Cost"] == "30.00"
    assert row["Discount Amount"] == "6.00"
    assert row["Discount Amount Tax"] == "0"


def test_phone_and_postcode_whitespace_removed(rows):
    row = rows[0]
    assert row["Postcode (Billing)"] == "K2P1L4"
    assert row["Postcode (Shipping)"] == "M5V2T6"
    assert row["Phone (Billing)"] == "+16135550100"
    assert row["Phone (Shipping)"] == "+14165550199"


def test_city_keeps_inner_whitespace():
    order = RawOrder.from_dict({
        "billing_address": {"city": "New York"},
        "line_items": [{"sku": "A"}],
    })
    row = normalize_line_item(order, order.line_items[0])
    assert row["City (Billing)"] == "New York"
    assert row["City (Shipping)"] == "New York"


def test_coupon_codes_stripped_and_joined(rows):
    assert rows[0]["Coupon Code"] == "SPRING10, VIP"
    assert rows[3]["Coupon Code"] == ""


def test_missing_shipping_address_uses_billing(rows):
    row = rows[3]
    for shipping_column, billing_column in SHIPPING_TO_BILLING.items():
        assert row[shipping_column] == row[billing_column], shipping_column
    assert row["City (Shipping)"] == "London"
    assert row["Postcode (Shipping)"] == "SW1A1AA"


def test_phone_falls_back_to_order_phone(rows):
    assert rows[3]["Phone (Billing)"] == "+442079460000"
    assert rows[3]["Phone (Shipping)"] == "+442079460000"


def test_email_falls_back_to_order_email(rows):
    assert rows[3]["Email (Shipping)"] == "bo@example.com"


def test_shipping_email_prefers_address_email():
    order = RawOrder.from_dict({
        "email": "order@example.com",
        "billing_address": {"email": "billing@example.com"},
        "shipping_address": {"email": "ship@example.com", "city": "Oslo"},
        "line_items": [{}],
    })
    assert normalize_line_item(order, order.line_items[0])["Email (Shipping)"] == "ship@example.com"

    order.shipping_address.email = None
    assert normalize_line_item(order, order.line_items[0])["Email (Shipping)"] == "billing@example.com"


def test_payment_and_shipping_defaults(rows):
    row = rows[3]
    assert row["Payment Method Title"] == "Unknown"
    assert row["Shipping Method Title"] == "Standard"


def test_unpaid_order_has_empty_paid_date(rows):
    assert rows[3]["Paid Date"] == ""


def test_money_defaults_to_zero(rows):
    row = rows[3]
    assert row["Order Total Tax Amount"] == "0"
    assert row["Order Shipping Amount"] == "0"
    assert row["Discount Amount"] == "0"
    assert row["Cart Discount Amount"] == "0.00"


def test_item_fallbacks(rows):
    row = rows[3]
    assert row["SKU"] == ""
    assert row["Item Name"] == "Gift Card"
    assert row["Quantity (- Refund)"] == "1"


def test_dates_use_fixed_offset(orders):
    plus_two = timezone(timedelta(hours=2))
    row = normalize_line_item(orders[1], orders[1].line_items[0], plus_two)
    assert row["Order Date"] == "2024-03-03 01:50"


def test_empty_order_never_fails():
    order = RawOrder.from_dict({})
    row = normalize_line_item(order, LineItem())
    assert list(row.keys()) == list(EXPORT_COLUMNS)
    assert row["Order Number"] == ""
    assert row["Order Status"] == "pending"
    assert row["Order Date"] == ""
    assert row["Quantity (- Refund)"] == "1"
    assert row["Item Cost"] == "0"
    assert row["Address 1&2 (Shipping)"] == ""


def test_malformed_values_never_fail():
    order = RawOrder.from_dict({
        "id": 77,
        "created_at": "not a date",
        "billing_address": "oops",
        "shipping_lines": [None, {"price": "1.00"}],
        "discount_codes": ["  FREE  ", {"amount": "1"}, None],
        "line_items": [{"quantity": "many", "price": None}],
    })
    row = normalize_line_item(order, order.line_items[0])
    assert row["Order Number"] == "77"
    assert row["Order Date"] == ""
    assert row["First Name (Billing)"] == ""
    assert row["Shipping Method Title"] == "Standard"
    assert row["Coupon Code"] == "FREE"
    assert row["Quantity (- Refund)"] == "1"


def test_format_timestamp():
    assert format_timestamp("2024-01-05T09:07:59+00:00") == "2024-01-05 09:07"
    assert format_timestamp("2024-01-05T09:07:59Z") == "2024-01-05 09:07"
    assert format_timestamp("2024-01-05T09:07:59") == "2024-01-05 09:07"
    assert format_timestamp(None) == ""
    assert format_timestamp("") == ""
    assert format_timestamp("yesterday") == ""


def test_normalize_quantity():
    assert normalize_quantity(4) == "4"
    assert normalize_quantity("3") == "3"
    assert normalize_quantity(None) == "1"
    assert normalize_quantity(0) == "1"
    assert normalize_quantity(-2) == "1"
    assert normalize_quantity("abc") == "1"


def test_normalize_quantity_integral_decimals():
    assert normalize_quantity(Decimal("2.0")) == "2"
    assert normalize_quantity("3.00") == "3"
    assert normalize_quantity(Decimal("2.5")) == "1"
    assert normalize_quantity(Decimal("NaN")) == "1"
    assert normalize_quantity("Infinity") == "1"


def test_join_coupon_codes():
    assert join_coupon_codes([" A ", "B"]) == "A, B"
    assert join_coupon_codes(["", "  ", "C"]) == "C"
    assert join_coupon_codes([]) == ""
