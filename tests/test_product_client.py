from decimal import Decimal

import pytest
import requests

from storefront.domain.errors import StoreUnavailable
from storefront.domain.pricing import PricingConfig, compute_breakdown
from storefront.services.product_client import ProductClient


class StubResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class StubSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def test_get_product_parses_catalog_payload():
    session = StubSession(StubResponse(200, {
        "id": 2,
        "name": "Merino Crew Sweater",
        "price": 8900,
        "category": "clothing",
        "discount_percentage": 20,
        "in_stock": True,
    }))
    client = ProductClient(base_url="http://catalog/", session=session)

    product = client.get_product(2)

    assert session.urls == ["http://catalog/products/2"]
    assert product.price == 8900
    assert product.discount_percentage == 20
    assert product.in_stock


def test_missing_product_is_none_without_retry():
    session = StubSession(StubResponse(404))
    client = ProductClient(base_url="http://catalog", session=session)

    assert client.get_product(9) is None
    assert len(session.urls) == 1


def test_transient_error_is_retried():
    session = StubSession(
        requests.ConnectionError("reset"),
        StubResponse(200, {"id": 1, "name": "Shirt", "price": 5900}),
    )
    client = ProductClient(base_url="http://catalog", session=session)

    product = client.get_product(1)

    assert product.name == "Shirt"
    assert product.discount_percentage is None
    assert product.in_stock
    assert len(session.urls) == 2


def test_catalog_down_is_store_unavailable():
    session = StubSession(*[requests.ConnectionError("refused")] * 3)
    client = ProductClient(base_url="http://catalog", session=session)

    with pytest.raises(StoreUnavailable):
        client.get_product(1)
    assert len(session.urls) == 3


def test_server_error_is_retried():
    session = StubSession(
        StubResponse(503),
        StubResponse(200, {"id": 1, "name": "Shirt", "price": 5900}),
    )
    client = ProductClient(base_url="http://catalog", session=session)

    assert client.get_product(1).name == "Shirt"
    assert len(session.urls) == 2


def test_client_error_is_not_retried():
    session = StubSession(StubResponse(400), StubResponse(200, {"id": 1, "name": "Shirt", "price": 5900}))
    client = ProductClient(base_url="http://catalog", session=session)

    with pytest.raises(StoreUnavailable):
        client.get_product(1)
    assert len(session.urls) == 1


def test_fractional_discount_from_catalog_is_priced():
    session = StubSession(StubResponse(200, {
        "id": 4,
        "name": "Linen Shirt",
        "price": 1000,
        "discount_percentage": 12.5,
    }))
    product = ProductClient(base_url="http://catalog", session=session).get_product(4)

    class Line:
        id = 1
        product_id = 4
        quantity = 2

    breakdown = compute_breakdown([Line()], {4: product}, PricingConfig(7500, 599, Decimal("0.08"), 1500))

    assert breakdown.lines[0].effective_unit_price == 875
    assert breakdown.subtotal == 1750
