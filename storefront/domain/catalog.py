# storefront/domain/catalog.py
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Protocol


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    price: int  # centy
    category: str
    discount_percentage: Optional[float] = None
    in_stock: bool = True


class CatalogLookup(Protocol):
    """Zrodlo aktualnych danych produktu. Kazde wywolanie moze zwrocic inne dane."""

    def get_product(self, product_id: int) -> Optional[Product]:
        ...


class StaticCatalog:
    """Katalog w pamieci: serwis katalogu w trybie dev i testy."""

    def __init__(self, products: Iterable[Product] = ()):
        self._products: Dict[int, Product] = {p.id: p for p in products}

    def get_product(self, product_id: int) -> Optional[Product]:
        return self._products.get(product_id)

    def put(self, product: Product) -> None:
        self._products[product.id] = product

    def delete(self, product_id: int) -> None:
        self._products.pop(product_id, None)

    def all(self):
        return sorted(self._products.values(), key=lambda p: p.id)


def snapshot(catalog: CatalogLookup, product_ids: Iterable[int]) -> Dict[int, Optional[Product]]:
    # jedno zapytanie na produkt, wynik traktujemy jako migawke na czas obliczen
    return {pid: catalog.get_product(pid) for pid in dict.fromkeys(product_ids)}
