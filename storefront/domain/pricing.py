# storefront/domain/pricing.py
"""
Kalkulator cen koszyka.

Czyste funkcje: dostaja linie koszyka i migawke katalogu, zwracaja
``PriceBreakdown``. Wszystkie kwoty sa w centach (int), zaokraglenia
"half away from zero" liczone przez Decimal.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterable, Mapping, Optional, Tuple

from storefront.domain.catalog import Product
from storefront.utils import settings


class ShippingMethod(str, Enum):
    STANDARD = "standard"
    EXPRESS = "express"


@dataclass(frozen=True)
class PricingConfig:
    free_shipping_threshold: int
    flat_shipping_fee: int
    tax_rate: Decimal
    express_shipping_fee: Optional[int] = None

    @classmethod
    def from_settings(cls) -> "PricingConfig":
        return cls(
            free_shipping_threshold=settings.FREE_SHIPPING_THRESHOLD,
            flat_shipping_fee=settings.FLAT_SHIPPING_FEE,
            tax_rate=settings.TAX_RATE,
            express_shipping_fee=settings.EXPRESS_SHIPPING_FEE,
        )

    def fee_for(self, method: ShippingMethod) -> int:
        if method == ShippingMethod.EXPRESS and self.express_shipping_fee is not None:
            return self.express_shipping_fee
        return self.flat_shipping_fee


@dataclass(frozen=True)
class PricedLine:
    line_id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: int
    discount_percentage: Optional[float]
    effective_unit_price: int
    line_total: int
    blocks_checkout: bool


@dataclass(frozen=True)
class UnavailableLine:
    line_id: int
    product_id: int
    quantity: int


@dataclass(frozen=True)
class PriceBreakdown:
    lines: Tuple[PricedLine, ...]
    unavailable: Tuple[UnavailableLine, ...]
    shipping_method: ShippingMethod
    subtotal: int
    shipping: int
    tax: int
    total: int
    amount_to_free_shipping: int

    @property
    def is_empty(self) -> bool:
        return not self.lines and not self.unavailable

    @property
    def blocks_checkout(self) -> bool:
        return any(line.blocks_checkout for line in self.lines)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)


def round_half_away(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def effective_unit_price(price: int, discount_percentage: Optional[float]) -> int:
    # rabat liczony raz na sztuke, nie na cala linie
    if not discount_percentage:
        return price
    # str(): rabat z JSON bywa floatem (12.5), Decimal z floata niesie blad binarny
    discount = min(max(Decimal(str(discount_percentage)), Decimal(0)), Decimal(100))
    return round_half_away(Decimal(price) * (100 - discount) / 100)


def shipping_fee(subtotal: int, config: PricingConfig, method: ShippingMethod = ShippingMethod.STANDARD) -> int:
    if subtotal >= config.free_shipping_threshold:
        return 0
    return config.fee_for(method)


def tax_for(subtotal: int, config: PricingConfig) -> int:
    return round_half_away(Decimal(subtotal) * Decimal(config.tax_rate))


def price_line(line, product: Product) -> PricedLine:
    unit = effective_unit_price(product.price, product.discount_percentage)
    return PricedLine(
        line_id=line.id,
        product_id=line.product_id,
        product_name=product.name,
        quantity=line.quantity,
        unit_price=product.price,
        discount_percentage=product.discount_percentage,
        effective_unit_price=unit,
        line_total=unit * line.quantity,
        blocks_checkout=not product.in_stock,
    )


def compute_breakdown(
    lines: Iterable,
    products: Mapping[int, Optional[Product]],
    config: PricingConfig,
    shipping_method: ShippingMethod = ShippingMethod.STANDARD,
) -> PriceBreakdown:
    """
    ``lines`` to obiekty z atrybutami ``id``, ``product_id``, ``quantity``
    (np. ``CartLineModel``). Linie, ktorych produktu nie ma w ``products``,
    trafiaja do ``unavailable`` i nie wchodza do sum.
    """
    priced = []
    unavailable = []
    for line in lines:
        product = products.get(line.product_id)
        if product is None:
            unavailable.append(UnavailableLine(line.id, line.product_id, line.quantity))
            continue
        priced.append(price_line(line, product))

    subtotal = sum(p.line_total for p in priced)
    # nie naliczamy wysylki za pusty koszyk
    shipping = shipping_fee(subtotal, config, shipping_method) if priced else 0
    tax = tax_for(subtotal, config)

    return PriceBreakdown(
        lines=tuple(priced),
        unavailable=tuple(unavailable),
        shipping_method=shipping_method,
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        total=subtotal + shipping + tax,
        amount_to_free_shipping=max(config.free_shipping_threshold - subtotal, 0),
    )
