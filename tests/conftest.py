"""Shared fixtures for the exporter tests."""

import json
import os

import pytest

from shopify_order_export.config import ExportConfig
from shopify_order_export.models import RawOrder

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")


def load_orders_fixture():
    with open(os.path.join(FIXTURES_DIR, "orders_page.json")) as f:
        return json.load(f)["orders"]


@pytest.fixture
def raw_orders():
    return load_orders_fixture()


@pytest.fixture
def orders(raw_orders):
    return [RawOrder.from_dict(o) for o in raw_orders]


@pytest.fixture
def config(tmp_path):
    return ExportConfig(
        shop_name="my-shop.myshopify.com",
        access_token="shpat_test",
        page_delay=0,
        output_dir=str(tmp_path / "output"),
    )
