"""
Shared Dependencies for Routers

Resolves the cart owner, the shopper and the backend for each request.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException

from storefront.cart.service import CartManager, get_cart_manager
from storefront.errors import (
    ERROR_CART_ID_REQUIRED,
    ERROR_UNAUTHORIZED,
    CatalogError,
    CheckoutError,
    CheckoutValidationError,
    OrderCreationError,
    StorefrontError,
)
from storefront.logging import get_logger
from storefront.services.database import Database, get_database
from storefront.services.models import AuthUser

logger = get_logger(__name__)


def get_db() -> Database:
    return get_database()


def get_cart_id(x_cart_id: Optional[str] = Header(None, alias="X-Cart-Id")) -> str:
    if not x_cart_id or not x_cart_id.strip():
        raise HTTPException(status_code=400, detail=ERROR_CART_ID_REQUIRED)
    return x_cart_id.strip()


def get_cart(cart_id: str = Depends(get_cart_id)) -> CartManager:
    """Cart for the X-Cart-Id owner, freshly loaded from storage."""
    return get_cart_manager(cart_id)


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    db: Database = Depends(get_db),
) -> AuthUser:
    """Resolve `Authorization: Bearer <access token>` to the shopper."""
    token = None
    if authorization:
        parts = authorization.split(" ")
        if len(parts) == 2 and parts[0].lower() == "bearer":
            token = parts[1]

    if not token:
        raise HTTPException(status_code=401, detail=ERROR_UNAUTHORIZED)

    user = await db.get_current_user(token)
    if user is None:
        logger.debug("Rejected request with an unknown access token")
        raise HTTPException(status_code=401, detail=ERROR_UNAUTHORIZED)
    return user


def http_error(error: StorefrontError) -> HTTPException:
    """Map a storefront error to the HTTP status the frontend expects."""
    if isinstance(error, CheckoutValidationError):
        return HTTPException(status_code=422, detail={"message": error.message, "fields": error.fields})
    if isinstance(error, CheckoutError):
        return HTTPException(status_code=400, detail=error.message)
    if isinstance(error, (OrderCreationError, CatalogError)):
        return HTTPException(status_code=502, detail=error.message)
    return HTTPException(status_code=500, detail=error.message)
