# storefront/api/errors.py
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from storefront.domain.errors import BusinessError, ErrorKind, StoreUnavailable
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

STATUS_CODES = {
    ErrorKind.INVALID_QUANTITY: 400,
    ErrorKind.EMPTY_CART: 400,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PRODUCT_UNAVAILABLE: 409,
    ErrorKind.CHECKOUT_BLOCKED: 409,
    ErrorKind.UNAVAILABLE_ITEMS: 409,
    ErrorKind.INVALID_STATUS: 409,
    ErrorKind.CHECKOUT_IN_PROGRESS: 409,
}


def raise_for_error(result):
    """Tlumaczy BusinessError na HTTPException, inne wartosci przepuszcza."""
    if isinstance(result, BusinessError):
        raise HTTPException(status_code=STATUS_CODES.get(result.kind, 400), detail=result.as_dict())
    return result


async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": {"kind": "store_unavailable", "message": "Service temporarily unavailable, try again"}},
    )
