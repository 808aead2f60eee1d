import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

import storefront.data.models  # noqa: F401
from storefront.data.database import Base, make_engine
from storefront.domain.catalog import Product, StaticCatalog
from storefront.domain.pricing import PricingConfig
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService

USER = 1
OTHER_USER = 2

SHIRT = 1      # 2000, bez rabatu
SOCKS = 2      # 1000, -10%
JACKET = 3     # brak na stanie
SWEATER = 4    # 1000, -20%


class RecordingCleanup:
    def __init__(self):
        self.calls = []

    def schedule_purge(self, user_id, ordered):
        self.calls.append((user_id, dict(ordered)))


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    yield session
    session.close()


@pytest.fixture
def pricing():
    return PricingConfig(
        free_shipping_threshold=7500,
        flat_shipping_fee=599,
        tax_rate=Decimal("0.08"),
        express_shipping_fee=1500,
    )


@pytest.fixture
def catalog():
    return StaticCatalog([
        Product(id=SHIRT, name="Oxford Shirt", price=2000, category="clothing"),
        Product(id=SOCKS, name="Wool Socks", price=1000, category="clothing", discount_percentage=10),
        Product(id=JACKET, name="Field Jacket", price=15000, category="outerwear", in_stock=False),
        Product(id=SWEATER, name="Cotton Sweater", price=1000, category="clothing", discount_percentage=20),
    ])


@pytest.fixture
def cleanup():
    return RecordingCleanup()


@pytest.fixture
def cart_service(db, catalog, pricing):
    return CartService(db, catalog, pricing)


@pytest.fixture
def order_service(db, catalog, pricing, cleanup):
    return OrderService(db, catalog, pricing, cleanup=cleanup)
