# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_order_service
from storefront.api.errors import raise_for_error
from storefront.domain.schemas import OrderCreate, OrderOut, OrderDetailOut, ShippingInfo, StatusUpdateIn
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderDetailOut, status_code=201)
def create_order(
    payload: OrderCreate,
    svc: OrderService = Depends(get_order_service),
):
    """
    Tworzy zamówienie z aktualnego koszyka użytkownika.
    Sumy są liczone po stronie serwera, koszyk jest czyszczony.
    """
    return raise_for_error(
        svc.materialize(
            user_id=payload.user_id,
            shipping_info=ShippingInfo(address=payload.shipping_address, method=payload.shipping_method),
            payment_method=payload.payment_method,
            notes=payload.notes,
            status=payload.status,
        )
    )


@router.get("", response_model=List[OrderOut])
def list_orders(
    user_id: int = Query(..., gt=0),
    svc: OrderService = Depends(get_order_service),
):
    return svc.list_orders(user_id)


@router.get("/{order_id}", response_model=OrderDetailOut)
def get_order(
    order_id: int,
    user_id: int = Query(..., gt=0),
    svc: OrderService = Depends(get_order_service),
):
    """
    Pobiera szczegóły zamówienia z cenami z chwili zakupu.
    """
    return raise_for_error(svc.get_order(user_id, order_id))


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_status(
    order_id: int,
    payload: StatusUpdateIn,
    svc: OrderService = Depends(get_order_service),
):
    return raise_for_error(svc.update_status(order_id, payload.status))
