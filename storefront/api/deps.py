# storefront/api/deps.py
from fastapi import Depends
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.catalog import CatalogLookup
from storefront.domain.pricing import PricingConfig
from storefront.services.cart_service import CartService
from storefront.services.lock_service import LockService
from storefront.services.order_service import OrderService
from storefront.services.product_client import ProductClient


def get_catalog() -> CatalogLookup:
    return ProductClient()


def get_pricing() -> PricingConfig:
    return PricingConfig.from_settings()


def get_lock_service() -> LockService | None:
    return LockService()


def get_cart_service(
    db: Session = Depends(get_db),
    catalog: CatalogLookup = Depends(get_catalog),
    pricing: PricingConfig = Depends(get_pricing),
) -> CartService:
    return CartService(db=db, catalog=catalog, pricing=pricing)


def get_order_service(
    db: Session = Depends(get_db),
    catalog: CatalogLookup = Depends(get_catalog),
    pricing: PricingConfig = Depends(get_pricing),
    lock_service: LockService | None = Depends(get_lock_service),
) -> OrderService:
    return OrderService(db=db, catalog=catalog, pricing=pricing, lock_service=lock_service)
