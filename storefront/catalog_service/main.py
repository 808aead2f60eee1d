# catalog_service/main.py
from fastapi import FastAPI, HTTPException

from storefront.domain.catalog import Product, StaticCatalog

app = FastAPI(title="Catalog Service (dev mock)")

# ceny w centach
catalog = StaticCatalog([
    Product(id=1, name="Linen Button-Down Shirt", price=5900, category="clothing"),
    Product(id=2, name="Merino Crew Sweater", price=8900, category="clothing", discount_percentage=20),
    Product(id=3, name="Canvas Weekender Bag", price=12900, category="accessories", discount_percentage=15),
    Product(id=4, name="Leather Card Wallet", price=3500, category="accessories"),
    Product(id=5, name="Everyday Crew Socks (3 pack)", price=1800, category="clothing", discount_percentage=10),
    Product(id=6, name="Waxed Field Jacket", price=19900, category="outerwear", in_stock=False),
])


def _as_json(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "price": product.price,
        "category": product.category,
        "discount_percentage": product.discount_percentage,
        "in_stock": product.in_stock,
    }


@app.get("/products")
def list_products():
    return [_as_json(p) for p in catalog.all()]


@app.get("/products/{product_id}")
def get_product(product_id: int):
    product = catalog.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return _as_json(product)
