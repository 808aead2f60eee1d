# storefront/repos/cart_repo.py
from datetime import datetime, timezone
from typing import Iterable, List, Mapping

from sqlalchemy import select, update, delete, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.cart_line import CartLineModel
from storefront.data.models.order import OrderModel
from storefront.domain.errors import BusinessError, StoreUnavailable, invalid_quantity, not_found
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# ile razy ponawiamy UPDATE po przegranym wyscigu na INSERT
UPSERT_ATTEMPTS = 3


class CartRepo:
    """
    Magazyn linii koszyka: (user, product) -> CartLineModel.
    Jedna linia na pare (user, product), pilnuje tego upsert_line + UNIQUE.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_lines(self, user_id: int) -> List[CartLineModel]:
        return list(
            self.db.execute(
                select(CartLineModel)
                .where(CartLineModel.user_id == user_id)
                .order_by(CartLineModel.id)
            ).scalars()
        )

    def get_line(self, user_id: int, product_id: int) -> CartLineModel | None:
        return self.db.execute(
            select(CartLineModel).where(
                CartLineModel.user_id == user_id,
                CartLineModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def get_line_by_id(self, line_id: int) -> CartLineModel | None:
        return self.db.get(CartLineModel, line_id)

    def upsert_line(self, user_id: int, product_id: int, quantity_delta: int) -> CartLineModel | BusinessError:
        if quantity_delta < 1:
            return invalid_quantity(quantity_delta)

        for attempt in range(1, UPSERT_ATTEMPTS + 1):
            try:
                # atomowy read-modify-write po stronie bazy
                # UPDATE cart_lines SET quantity = quantity + :delta WHERE user_id = .. AND product_id = ..
                result = self.db.execute(
                    update(CartLineModel)
                    .where(
                        CartLineModel.user_id == user_id,
                        CartLineModel.product_id == product_id,
                    )
                    .values(
                        quantity=CartLineModel.quantity + quantity_delta,
                        updated_at=datetime.now(timezone.utc),
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount:
                    self.db.commit()
                    line = self.get_line(user_id, product_id)
                    self.db.refresh(line)
                    return line

                line = CartLineModel(user_id=user_id, product_id=product_id, quantity=quantity_delta)
                self.db.add(line)
                self.db.commit()
                return line

            except IntegrityError:
                # ktos inny wstawil linie dla tej pary w miedzyczasie, kolejna proba zrobi UPDATE
                self.db.rollback()
                logger.info(
                    f"Concurrent insert for user {user_id} product {product_id}, retry {attempt}/{UPSERT_ATTEMPTS}"
                )
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Cart upsert failed: {e}")
                raise StoreUnavailable("Cart store unavailable") from e

        raise StoreUnavailable(f"Could not upsert cart line for product {product_id}")

    def set_quantity(self, user_id: int, line_id: int, quantity: int) -> CartLineModel | BusinessError:
        if quantity < 1:
            return invalid_quantity(quantity)

        line = self.get_line_by_id(line_id)
        if not line or line.user_id != user_id:
            return not_found("Cart line", line_id)

        line.quantity = quantity
        self._commit()
        self.db.refresh(line)
        return line

    def remove_line(self, line_id: int) -> None:
        self.db.execute(delete(CartLineModel).where(CartLineModel.id == line_id))
        self._commit()

    def clear(self, user_id: int) -> int:
        result = self.db.execute(delete(CartLineModel).where(CartLineModel.user_id == user_id))
        self._commit()
        return result.rowcount

    def delete_lines(self, user_id: int, line_ids: Iterable[int]) -> int:
        """Usuwa wskazane linie uzytkownika, bez commita (robi to wywolujacy)."""
        ids = list(line_ids)
        if not ids:
            return 0
        result = self.db.execute(
            delete(CartLineModel)
            .where(CartLineModel.user_id == user_id, CartLineModel.id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def release_lines(self, user_id: int, ordered: Mapping[int, int]) -> int:
        """
        Zdejmuje z koszyka zamowione sztuki, bez commita (robi to wywolujacy).
        Linia z iloscia rowna zamowionej znika, a sztuki dodane po wycenie zostaja.
        Zwraca liczbe zmienionych linii.
        """
        touched = 0
        for line_id, quantity in ordered.items():
            owned = (CartLineModel.id == line_id, CartLineModel.user_id == user_id)
            result = self.db.execute(
                delete(CartLineModel)
                .where(*owned, CartLineModel.quantity <= quantity)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount:
                touched += result.rowcount
                continue

            result = self.db.execute(
                update(CartLineModel)
                .where(*owned, CartLineModel.quantity > quantity)
                .values(quantity=CartLineModel.quantity - quantity, updated_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session="fetch")
            )
            touched += result.rowcount
        return touched

    def stale_lines(self) -> List[CartLineModel]:
        """
        Linie, ktore nie byly zmieniane od wyceny ostatniego zamowienia uzytkownika,
        czyli zostaly po nieudanym czyszczeniu koszyka. Linia ruszona po wycenie zostaje.
        """
        last_order = (
            select(OrderModel.user_id, func.max(OrderModel.priced_at).label("priced_at"))
            .group_by(OrderModel.user_id)
            .subquery()
        )
        return list(
            self.db.execute(
                select(CartLineModel)
                .join(last_order, last_order.c.user_id == CartLineModel.user_id)
                .where(CartLineModel.updated_at < last_order.c.priced_at)
                .order_by(CartLineModel.id)
            ).scalars()
        )

    def commit(self):
        self._commit()

    def rollback(self):
        self.db.rollback()

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Cart store commit failed: {e}")
            raise StoreUnavailable("Cart store unavailable") from e
