#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, Query, Response

from storefront.api.deps import get_cart_service
from storefront.api.errors import raise_for_error
from storefront.domain.pricing import ShippingMethod
from storefront.domain.schemas import CartOut, ItemIn, QuantityIn
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def _priced(svc: CartService, user_id: int, shipping_method: ShippingMethod) -> CartOut:
    return CartOut.from_breakdown(user_id, svc.get_priced_cart(user_id, shipping_method))


@router.get("", response_model=CartOut)
def get_cart(
    user_id: int = Query(..., gt=0),
    shipping_method: ShippingMethod = Query(ShippingMethod.STANDARD),
    svc: CartService = Depends(get_cart_service),
):
    return _priced(svc, user_id, shipping_method)


@router.post("/items", response_model=CartOut, status_code=201)
def add_item(
    payload: ItemIn,
    user_id: int = Query(..., gt=0),
    shipping_method: ShippingMethod = Query(ShippingMethod.STANDARD),
    svc: CartService = Depends(get_cart_service),
):
    raise_for_error(svc.add_to_cart(user_id, payload.product_id, payload.quantity))
    return _priced(svc, user_id, shipping_method)


@router.patch("/items/{line_id}", response_model=CartOut)
def update_item(
    line_id: int,
    payload: QuantityIn,
    user_id: int = Query(..., gt=0),
    shipping_method: ShippingMethod = Query(ShippingMethod.STANDARD),
    svc: CartService = Depends(get_cart_service),
):
    raise_for_error(svc.update_quantity(user_id, line_id, payload.quantity))
    return _priced(svc, user_id, shipping_method)


@router.delete("/items/{line_id}", response_model=CartOut)
def remove_item(
    line_id: int,
    user_id: int = Query(..., gt=0),
    shipping_method: ShippingMethod = Query(ShippingMethod.STANDARD),
    svc: CartService = Depends(get_cart_service),
):
    raise_for_error(svc.remove_item(user_id, line_id))
    return _priced(svc, user_id, shipping_method)


@router.delete("", status_code=204)
def clear_cart(
    user_id: int = Query(..., gt=0),
    svc: CartService = Depends(get_cart_service),
):
    svc.clear_cart(user_id)
    return Response(status_code=204)
