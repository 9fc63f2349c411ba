"""
Models — Typed views over the Shopify order payload and the export query.

Shopify order JSON is loosely typed: addresses may be missing entirely, most
keys may be null, and line items carry only what the merchant filled in. The
dataclasses here give every field a name and an Optional type so that all
default resolution can happen in one place (order_normalizer) instead of being
scattered across call sites.

Monetary values are stored exactly as received, as strings. Response bodies
are parsed with parse_float=Decimal, so a numeric amount arrives here as a
Decimal and is converted with str(), never through float.

Shape of the relevant parts of an orders.json entry:

    {
        "id": 450789469,
        "name": "#1001",
        "email": "bob@example.com",
        "created_at": "2024-03-01T10:15:00-05:00",
        "processed_at": "2024-03-01T10:15:02-05:00",
        "financial_status": "paid",
        "billing_address": {"first_name": "Bob", "zip": "K2P 1L4", ...},
        "shipping_address": {...} | null,
        "subtotal_price": "199.00",
        "total_shipping_price_set": {"shop_money": {"amount": "10.00", ...}},
        "payment_gateway_names": ["shopify_payments"],
        "discount_codes": [{"code": "SPRING10", ...}],
        "shipping_lines": [{"title": "Express", ...}],
        "line_items": [{"id": 1, "sku": "IPOD-1", "quantity": 1, ...}]
    }
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Union

from .settings import ORDER_STATUSES

VALID_STATUSES = tuple(s["value"] for s in ORDER_STATUSES)

DateInput = Union[date, datetime, str, None]


def _text(value: Any) -> Optional[str]:
    """Return value as a string, or None for null / missing values."""
    if value is None:
        return None
    return str(value)


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _sequence(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _coerce_datetime(value: DateInput, end_of_day: bool = False) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    elif not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if end_of_day:
        value = datetime.combine(value.date(), time(23, 59, 59), tzinfo=value.tzinfo)
    return value


@dataclass
class OrderQuery:
    """What to export: an optional inclusive date range and a status filter.

    The end date always covers its whole calendar day, so passing
    end_date="2024-03-31" includes orders created at 23:59 that day.

    Raises:
        ValueError: If status is not one of VALID_STATUSES, a date string
            cannot be parsed, or the range ends before it starts.
    """

    start_date: DateInput = None
    end_date: DateInput = None
    status: str = "any"

    def __post_init__(self):
        self.status = (self.status or "any").strip().lower()
        if self.status not in VALID_STATUSES:
            raise ValueError(
                f"Unknown order status '{self.status}'. "
                f"Expected one of: {', '.join(VALID_STATUSES)}"
            )
        self.start_date = _coerce_datetime(self.start_date)
        self.end_date = _coerce_datetime(self.end_date, end_of_day=True)
        if self.start_date and self.end_date:
            start, end = self.start_date, self.end_date
            if (start.tzinfo is None) != (end.tzinfo is None):
                start, end = start.replace(tzinfo=None), end.replace(tzinfo=None)
            if end < start:
                raise ValueError("end_date is earlier than start_date")

    def to_params(self, page_size: int) -> Dict[str, Any]:
        """Query parameters for the first orders.json page."""
        params = {"limit": page_size, "status": self.status}
        if self.start_date:
            params["created_at_min"] = self.start_date.isoformat(timespec="seconds")
        if self.end_date:
            params["created_at_max"] = self.end_date.isoformat(timespec="seconds")
        return params

    def describe(self) -> Dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "status": self.status,
        }


@dataclass
class Address:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    province_code: Optional[str] = None
    zip: Optional[str] = None
    country_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Address"]:
        """Build an Address, or None when the order has no such address."""
        if not isinstance(data, dict) or not data:
            return None
        return cls(
            first_name=_text(data.get("first_name")),
            last_name=_text(data.get("last_name")),
            company=_text(data.get("company")),
            address1=_text(data.get("address1")),
            address2=_text(data.get("address2")),
            city=_text(data.get("city")),
            province_code=_text(data.get("province_code")),
            zip=_text(data.get("zip")),
            country_code=_text(data.get("country_code")),
            phone=_text(data.get("phone")),
            email=_text(data.get("email")),
        )


@dataclass
class LineItem:
    id: Optional[str] = None
    sku: Optional[str] = None
    name: Optional[str] = None
    title: Optional[str] = None
    quantity: Any = None
    price: Optional[str] = None
    total_discount: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "LineItem":
        data = _mapping(data)
        return cls(
            id=_text(data.get("id")),
            sku=_text(data.get("sku")),
            name=_text(data.get("name")),
            title=_text(data.get("title")),
            quantity=data.get("quantity"),
            price=_text(data.get("price")),
            total_discount=_text(data.get("total_discount")),
        )


@dataclass
class RawOrder:
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    note: Optional[str] = None
    financial_status: Optional[str] = None
    created_at: Optional[str] = None
    processed_at: Optional[str] = None
    billing_address: Optional[Address] = None
    shipping_address: Optional[Address] = None
    subtotal_price: Optional[str] = None
    total_discounts: Optional[str] = None
    total_shipping_price: Optional[str] = None
    total_tax: Optional[str] = None
    total_price: Optional[str] = None
    payment_gateway_names: List[str] = field(default_factory=list)
    discount_codes: List[str] = field(default_factory=list)
    shipping_line_titles: List[str] = field(default_factory=list)
    line_items: List[LineItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "RawOrder":
        """Build a RawOrder from one entry of the orders.json "orders" array."""
        data = _mapping(data)

        shop_money = _mapping(_mapping(data.get("total_shipping_price_set")).get("shop_money"))
        shipping_amount = shop_money.get("amount")
        if shipping_amount is None:
            shipping_amount = data.get("total_shipping_price")

        discount_codes = []
        for entry in _sequence(data.get("discount_codes")):
            code = entry.get("code") if isinstance(entry, dict) else entry
            if code is not None:
                discount_codes.append(str(code))

        return cls(
            id=_text(data.get("id")),
            name=_text(data.get("name")),
            email=_text(data.get("email")),
            phone=_text(data.get("phone")),
            note=_text(data.get("note")),
            financial_status=_text(data.get("financial_status")),
            created_at=_text(data.get("created_at")),
            processed_at=_text(data.get("processed_at")),
            billing_address=Address.from_dict(data.get("billing_address")),
            shipping_address=Address.from_dict(data.get("shipping_address")),
            subtotal_price=_text(data.get("subtotal_price")),
            total_discounts=_text(data.get("total_discounts")),
            total_shipping_price=_text(shipping_amount),
            total_tax=_text(data.get("total_tax")),
            total_price=_text(data.get("total_price")),
            payment_gateway_names=[
                str(g) for g in _sequence(data.get("payment_gateway_names")) if g is not None
            ],
            discount_codes=discount_codes,
            shipping_line_titles=[
                str(line.get("title"))
                for line in _sequence(data.get("shipping_lines"))
                if isinstance(line, dict) and line.get("title") is not None
            ],
            line_items=[LineItem.from_dict(item) for item in _sequence(data.get("line_items"))],
        )
