"""Tests for shopify_order_export.shopify_client.ShopifyClient.

All tests use a MagicMock session so no real HTTP calls are made.
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import requests

from shopify_order_export.exceptions import AuthFailure, FetchTimeout, RateLimited, UpstreamError
from shopify_order_export.shopify_client import ShopifyClient, extract_next_cursor

NEXT_LINK = (
    '<https://my-shop.myshopify.com/admin/api/2023-10/orders.json?limit=250&page_info=abc123>; rel="next"'
)
BOTH_LINKS = (
    '<https://my-shop.myshopify.com/admin/api/2023-10/orders.json?limit=250&page_info=prev999>; rel="previous", '
    '<https://my-shop.myshopify.com/admin/api/2023-10/orders.json?limit=250&page_info=next456>; rel="next"'
)


def _mock_response(status_code=200, body=None, headers=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.headers = headers or {}
    resp.json.return_value = body if body is not None else {"orders": []}
    resp.text = text
    return resp


def _make_client(config, response=None):
    session = MagicMock()
    if response is not None:
        session.get.return_value = response
    return ShopifyClient(config, session=session), session


# ---------------------------------------------------------------------------
# Link header parsing
# ---------------------------------------------------------------------------

def test_extract_next_cursor():
    assert extract_next_cursor(NEXT_LINK) == "abc123"


def test_extract_next_cursor_ignores_previous():
    assert extract_next_cursor(BOTH_LINKS) == "next456"
    previous_only = BOTH_LINKS.split(", ")[0]
    assert extract_next_cursor(previous_only) is None


def test_extract_next_cursor_missing():
    assert extract_next_cursor(None) is None
    assert extract_next_cursor("") is None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

def test_session_carries_access_token(config):
    client, session = _make_client(config)
    session.headers.update.assert_called_once()
    headers = session.headers.update.call_args[0][0]
    assert headers["X-Shopify-Access-Token"] == "shpat_test"


def test_get_orders_page(config):
    resp = _mock_response(body={"orders": [{"id": 1}, {"id": 2}]}, headers={"Link": NEXT_LINK})
    client, session = _make_client(config, resp)

    orders, cursor = client.get_orders_page({"limit": 250, "status": "any"})

    assert orders == [{"id": 1}, {"id": 2}]
    assert cursor == "abc123"
    args, kwargs = session.get.call_args
    assert args[0] == "https://my-shop.myshopify.com/admin/api/2023-10/orders.json"
    assert kwargs["params"] == {"limit": 250, "status": "any"}
    assert kwargs["timeout"] == 30


def test_get_orders_page_last_page(config):
    client, _ = _make_client(config, _mock_response(body={"orders": [{"id": 1}]}))
    orders, cursor = client.get_orders_page({"limit": 250})
    assert cursor is None


def test_amounts_parsed_as_decimal(config):
    resp = _mock_response()
    client, _ = _make_client(config, resp)
    client.get_orders_page({})
    resp.json.assert_called_once_with(parse_float=Decimal)


def test_shop_name_with_scheme(config):
    config.shop_name = "https://my-shop.myshopify.com/"
    client, _ = _make_client(config)
    assert client.base_url == "https://my-shop.myshopify.com/admin/api/2023-10"


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

def test_timeout_raises_fetch_timeout(config):
    client, session = _make_client(config)
    session.get.side_effect = requests.Timeout("read timed out")
    with pytest.raises(FetchTimeout) as exc:
        client.get_orders_page({}, page=3)
    assert exc.value.page == 3
    assert "narrower" in str(exc.value)


def test_connection_error_raises_upstream_error(config):
    client, session = _make_client(config)
    session.get.side_effect = requests.ConnectionError("refused")
    with pytest.raises(UpstreamError) as exc:
        client.get_orders_page({})
    assert exc.value.status_code is None


def test_429_raises_rate_limited(config):
    resp = _mock_response(status_code=429, headers={"Retry-After": "2.0"})
    client, _ = _make_client(config, resp)
    with pytest.raises(RateLimited) as exc:
        client.get_orders_page({})
    assert exc.value.retry_after == "2.0"


def test_401_raises_auth_failure(config):
    resp = _mock_response(status_code=401, text='{"errors":"[API] Invalid API key or access token"}')
    client, _ = _make_client(config, resp)
    with pytest.raises(AuthFailure):
        client.get_orders_page({})


def test_other_status_raises_upstream_error_with_body(config):
    resp = _mock_response(status_code=400, text='{"errors":{"page_info":"Invalid value."}}')
    client, _ = _make_client(config, resp)
    with pytest.raises(UpstreamError) as exc:
        client.get_orders_page({})
    assert exc.value.status_code == 400
    assert "page_info" in exc.value.body
    assert "page_info" in str(exc.value)


def test_invalid_json_raises_upstream_error(config):
    resp = _mock_response()
    resp.json.side_effect = ValueError("Expecting value")
    client, _ = _make_client(config, resp)
    with pytest.raises(UpstreamError):
        client.get_orders_page({})


def test_missing_orders_key_raises_upstream_error(config):
    client, _ = _make_client(config, _mock_response(body={"errors": "Not Found"}))
    with pytest.raises(UpstreamError):
        client.get_orders_page({})


def test_get_shop(config):
    client, session = _make_client(config, _mock_response(body={"shop": {"name": "My Shop"}}))
    assert client.get_shop() == {"name": "My Shop"}
    assert session.get.call_args[0][0].endswith("/shop.json")
