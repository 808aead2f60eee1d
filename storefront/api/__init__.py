# storefront/api/__init__.py
from fastapi import FastAPI

from storefront.api.errors import store_unavailable_handler
from storefront.api.routers import carts, health, orders
from storefront.domain.errors import StoreUnavailable


def create_app(lifespan=None) -> FastAPI:
    app = FastAPI(title="Storefront Cart & Orders", version="1.0.0", lifespan=lifespan)

    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    app.add_exception_handler(StoreUnavailable, store_unavailable_handler)

    return app
