from sqlalchemy.orm import Session

from storefront.data.models.cart_line import CartLineModel
from storefront.domain.catalog import CatalogLookup, snapshot
from storefront.domain.errors import BusinessError, ErrorKind, invalid_quantity, not_found, forbidden
from storefront.domain.pricing import PricingConfig, PriceBreakdown, ShippingMethod, compute_breakdown
from storefront.repos.cart_repo import CartRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Reguly biznesowe koszyka, jedyne miejsce ktore wola mutatory CartRepo.
    commands (add, update, remove, clear) modyfikuja stan
    query (get_priced_cart) tylko odczyt, ceny zawsze liczone na zywo z katalogu
    """

    def __init__(
        self,
        db: Session,
        catalog: CatalogLookup,
        pricing: PricingConfig | None = None,
    ):
        self.repo = CartRepo(db)
        self.catalog = catalog
        self.pricing = pricing or PricingConfig.from_settings()

    #query - odczyt
    def get_priced_cart(
        self,
        user_id: int,
        shipping_method: ShippingMethod = ShippingMethod.STANDARD,
    ) -> PriceBreakdown:
        lines = self.repo.get_lines(user_id)
        products = snapshot(self.catalog, (line.product_id for line in lines))
        return compute_breakdown(lines, products, self.pricing, shipping_method)

    #commands
    def add_to_cart(self, user_id: int, product_id: int, quantity: int = 1) -> CartLineModel | BusinessError:
        if quantity < 1:
            return invalid_quantity(quantity)

        product = self.catalog.get_product(product_id)
        if product is None:
            return BusinessError(
                ErrorKind.PRODUCT_UNAVAILABLE,
                f"Product {product_id} no longer exists",
                {"product_id": product_id},
            )
        if not product.in_stock:
            return BusinessError(
                ErrorKind.PRODUCT_UNAVAILABLE,
                f"{product.name} is out of stock",
                {"product_id": product_id},
            )

        line = self.repo.upsert_line(user_id, product_id, quantity)
        if isinstance(line, BusinessError):
            return line

        logger.info(f"Produkt {product_id} w koszyku uzytkownika {user_id}, ilosc {line.quantity}")
        return line

    def update_quantity(self, user_id: int, line_id: int, new_quantity: int) -> CartLineModel | BusinessError:
        # zejscie ponizej 1 to blad, nie usuniecie - do tego jest remove_item
        if new_quantity < 1:
            return invalid_quantity(new_quantity)

        line = self.repo.get_line_by_id(line_id)
        if line is None:
            return not_found("Cart line", line_id)
        if line.user_id != user_id:
            return forbidden("Cart line", line_id)

        updated = self.repo.set_quantity(user_id, line_id, new_quantity)
        if not isinstance(updated, BusinessError):
            logger.info(f"Linia {line_id} uzytkownika {user_id}: ilosc {new_quantity}")
        return updated

    def remove_item(self, user_id: int, line_id: int) -> BusinessError | None:
        line = self.repo.get_line_by_id(line_id)
        if line is not None and line.user_id != user_id:
            return forbidden("Cart line", line_id)

        self.repo.remove_line(line_id)
        logger.info(f"Usunieto linie {line_id} z koszyka uzytkownika {user_id}")
        return None

    def clear_cart(self, user_id: int) -> int:
        removed = self.repo.clear(user_id)
        logger.info(f"Wyczyszczono koszyk uzytkownika {user_id} ({removed} linii)")
        return removed
