"""
Cart Router

Shopping cart endpoints. The cart owner is identified by the X-Cart-Id
header; no login is needed until checkout.
"""
from fastapi import APIRouter, Depends, HTTPException

from storefront.cart.service import CartManager
from storefront.errors import (
    ERROR_CART_ITEM_NOT_FOUND,
    ERROR_CATALOG_LOAD_FAILED,
    ERROR_PRODUCT_NOT_FOUND,
    ERROR_PRODUCT_UNAVAILABLE,
    SUCCESS_CART_ADDED,
    SUCCESS_CART_REMOVED,
    CatalogError,
)
from storefront.logging import clip, get_logger, mask_id
from storefront.services.database import Database
from .deps import get_cart, get_db, http_error
from .models import AddToCartRequest, UpdateCartItemRequest

logger = get_logger(__name__)

router = APIRouter(tags=["cart"])


@router.get("/cart")
async def get_cart_contents(cart: CartManager = Depends(get_cart)):
    """Current cart with derived count and subtotal."""
    return cart.summary()


@router.post("/cart/items")
async def add_to_cart(
    request: AddToCartRequest,
    cart: CartManager = Depends(get_cart),
    db: Database = Depends(get_db),
):
    """Add a catalog product to the cart, capturing its current price."""
    try:
        product = await db.get_product_by_id(request.product_id)
    except Exception as e:
        logger.error(f"Failed to load product {mask_id(request.product_id)}: {clip(e)}", exc_info=True)
        raise http_error(CatalogError(ERROR_CATALOG_LOAD_FAILED))

    if product is None:
        raise HTTPException(status_code=404, detail=ERROR_PRODUCT_NOT_FOUND)
    if not product.active:
        raise HTTPException(status_code=400, detail=ERROR_PRODUCT_UNAVAILABLE)

    cart.add_item(product, request.quantity)
    return {"message": SUCCESS_CART_ADDED, **cart.summary()}


@router.patch("/cart/items/{index}")
async def update_cart_item(
    index: int,
    request: UpdateCartItemRequest,
    cart: CartManager = Depends(get_cart),
):
    """Change a line's quantity by `delta` or set it to `quantity` (0 removes)."""
    if (request.delta is None) == (request.quantity is None):
        raise HTTPException(status_code=422, detail="Provide exactly one of 'delta' or 'quantity'")

    if request.delta is not None:
        updated = cart.update_quantity(index, request.delta)
    else:
        updated = cart.set_quantity(index, request.quantity)

    if not updated:
        raise HTTPException(status_code=404, detail=ERROR_CART_ITEM_NOT_FOUND)
    return cart.summary()


@router.delete("/cart/items/{index}")
async def remove_cart_item(index: int, cart: CartManager = Depends(get_cart)):
    """Remove a line from the cart."""
    removed = cart.remove_item(index)
    if removed is None:
        raise HTTPException(status_code=404, detail=ERROR_CART_ITEM_NOT_FOUND)
    return {"message": f"{removed.name} {SUCCESS_CART_REMOVED}", **cart.summary()}


@router.delete("/cart")
async def clear_cart(cart: CartManager = Depends(get_cart)):
    """Empty the cart."""
    cart.clear()
    return cart.summary()
