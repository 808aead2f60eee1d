# storefront/services/order_service.py
from datetime import datetime, timezone
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_line import OrderLineModel
from storefront.domain.catalog import CatalogLookup
from storefront.domain.errors import BusinessError, ErrorKind, StoreUnavailable, not_found, forbidden
from storefront.domain.order_status import OrderStatus, START_STATUSES, can_transition
from storefront.domain.pricing import PricingConfig, PriceBreakdown
from storefront.domain.schemas import ShippingInfo
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.cart_service import CartService
from storefront.services.cleanup_service import CartCleanupService
from storefront.services.lock_service import LockService
from storefront.utils.settings import CHECKOUT_LOCK_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.
    Zamienia wyceniony koszyk w zamrozone zamowienie i prowadzi historie zamowien.
    """

    def __init__(
        self,
        db: Session,
        catalog: CatalogLookup,
        pricing: PricingConfig | None = None,
        lock_service: LockService | None = None,
        cleanup: CartCleanupService | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.carts = CartService(db, catalog, pricing)
        self.lock_service = lock_service
        self.cleanup = cleanup or CartCleanupService()

    def materialize(
        self,
        user_id: int,
        shipping_info: ShippingInfo,
        payment_method: str,
        notes: str | None = None,
        status: OrderStatus = OrderStatus.PENDING,
    ) -> OrderModel | BusinessError:
        """
        Use Case: Tworzenie zamowienia z koszyka.

        1. Przelicza koszyk z aktualnych danych katalogu (nigdy nie ufamy sumie od klienta)
        2. Odrzuca pusty koszyk, produkty bez stanu i produkty usuniete
        3. Tworzy zamowienie i linie z cenami z tej chwili
        4. Zdejmuje zamowione sztuki z koszyka w tej samej transakcji
        """
        status = OrderStatus(status)
        if status not in START_STATUSES:
            return BusinessError(
                ErrorKind.INVALID_STATUS,
                f"Order cannot start as {status.value}",
                {"status": status.value},
            )

        token = None
        if self.lock_service is not None:
            token = self.lock_service.acquire_checkout_lock(user_id, ttl=CHECKOUT_LOCK_TTL_SECONDS)
            if token is None:
                return BusinessError(
                    ErrorKind.CHECKOUT_IN_PROGRESS,
                    "Another checkout for this cart is in progress",
                    {"user_id": user_id},
                )

        try:
            priced_at = datetime.now(timezone.utc)
            breakdown = self.carts.get_priced_cart(user_id, shipping_info.method)

            rejected = self._check_checkout(breakdown)
            if rejected is not None:
                logger.info(f"Checkout uzytkownika {user_id} odrzucony: {rejected.kind.value}")
                return rejected

            return self._write_order(user_id, breakdown, priced_at, shipping_info, payment_method, notes, status)
        finally:
            if token is not None:
                self.lock_service.release_checkout_lock(user_id, token)

    def _check_checkout(self, breakdown: PriceBreakdown) -> BusinessError | None:
        if breakdown.is_empty:
            return BusinessError(ErrorKind.EMPTY_CART, "Your cart is empty")

        if breakdown.blocks_checkout:
            blocked = [line.product_id for line in breakdown.lines if line.blocks_checkout]
            return BusinessError(
                ErrorKind.CHECKOUT_BLOCKED,
                "Remove out-of-stock items before checking out",
                {"product_ids": blocked},
            )

        if breakdown.unavailable:
            return BusinessError(
                ErrorKind.UNAVAILABLE_ITEMS,
                "Some items are no longer available, remove them before checking out",
                {"line_ids": [line.line_id for line in breakdown.unavailable]},
            )

        return None

    def _write_order(
        self,
        user_id: int,
        breakdown: PriceBreakdown,
        priced_at: datetime,
        shipping_info: ShippingInfo,
        payment_method: str,
        notes: str | None,
        status: OrderStatus,
    ) -> OrderModel:
        order = OrderModel(
            user_id=user_id,
            subtotal=breakdown.subtotal,
            shipping=breakdown.shipping,
            tax=breakdown.tax,
            total=breakdown.total,
            shipping_address=shipping_info.address,
            shipping_method=breakdown.shipping_method.value,
            payment_method=payment_method,
            status=status.value,
            notes=notes,
            priced_at=priced_at,
            lines=[
                OrderLineModel(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    unit_price=line.effective_unit_price,
                )
                for line in breakdown.lines
            ],
        )
        # linia -> zamowiona ilosc, sztuki dodane po wycenie zostaja w koszyku
        ordered = {line.line_id: line.quantity for line in breakdown.lines}

        try:
            self.repo.add_order(order)
        except SQLAlchemyError as e:
            # zamowienie nie powstalo, koszyk zostaje nietkniety
            self.db.rollback()
            logger.error(f"Order creation for user {user_id} failed: {e}")
            raise StoreUnavailable("Order store unavailable") from e

        cart_cleared = True
        try:
            with self.db.begin_nested():
                self.cart_repo.release_lines(user_id, ordered)
        except SQLAlchemyError as e:
            # lepiej zostawic stare linie w koszyku niz zgubic zamowienie
            cart_cleared = False
            logger.warning(f"Cart clear for user {user_id} failed, order kept: {e}")

        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Order commit for user {user_id} failed: {e}")
            raise StoreUnavailable("Order store unavailable") from e

        logger.info(f"Order {order.id} created for user {user_id}, total {order.total}")

        if not cart_cleared:
            logger.warning(f"Stale cart for user {user_id}: lines {list(ordered)}")
            self.cleanup.schedule_purge(user_id, ordered)

        return order

    def get_order(self, user_id: int, order_id: int) -> OrderModel | BusinessError:
        """
        Use Case: Pobranie zamowienia (Query). Ceny z linii zamowienia, bez przeliczania.
        """
        order = self.repo.get_order(order_id)

        if not order:
            return not_found("Order", order_id)

        if order.user_id != user_id:
            return forbidden("Order", order_id)

        return order

    def list_orders(self, user_id: int) -> List[OrderModel]:
        return self.repo.list_orders(user_id)

    def update_status(self, order_id: int, new_status: OrderStatus) -> OrderModel | BusinessError:
        order = self.repo.get_order(order_id)
        if not order:
            return not_found("Order", order_id)

        current = OrderStatus(order.status)
        new_status = OrderStatus(new_status)
        if not can_transition(current, new_status):
            return BusinessError(
                ErrorKind.INVALID_STATUS,
                f"Cannot move order from {current.value} to {new_status.value}",
                {"from": current.value, "to": new_status.value},
            )

        updated = self.repo.update_order_status(order, new_status.value)
        logger.info(f"Order {order_id}: {current.value} -> {new_status.value}")
        return updated
