# storefront/domain/errors.py
"""
Bledy domenowe.

Bledy biznesowe (zla ilosc, pusty koszyk itd.) sa zwracane jako wartosc
``BusinessError`` a nie rzucane, zeby warstwa API mogla pokazac konkretny
komunikat. Bledy infrastruktury (baza, katalog, redis) sa rzucane jako
``StoreUnavailable`` i mozna je ponowic.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class ErrorKind(str, Enum):
    INVALID_QUANTITY = "invalid_quantity"
    PRODUCT_UNAVAILABLE = "product_unavailable"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    EMPTY_CART = "empty_cart"
    CHECKOUT_BLOCKED = "checkout_blocked"
    UNAVAILABLE_ITEMS = "unavailable_items"
    INVALID_STATUS = "invalid_status"
    CHECKOUT_IN_PROGRESS = "checkout_in_progress"


@dataclass(frozen=True)
class BusinessError:
    kind: ErrorKind
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, "details": self.details}


class StoreUnavailable(Exception):
    """Persistence, catalog or lock backend failed; safe to retry."""


def invalid_quantity(quantity: int) -> BusinessError:
    return BusinessError(
        ErrorKind.INVALID_QUANTITY,
        "Quantity must be at least 1",
        {"quantity": quantity},
    )


def not_found(what: str, ident: int) -> BusinessError:
    return BusinessError(ErrorKind.NOT_FOUND, f"{what} {ident} not found", {"id": ident})


def forbidden(what: str, ident: int) -> BusinessError:
    return BusinessError(ErrorKind.FORBIDDEN, f"{what} {ident} belongs to another user", {"id": ident})
