"""
Checkout Router

Step endpoints for the checkout flow. Sessions are transient and kept
in-process, keyed by cart id and owned by the shopper who opened them.
They are discarded on close, after a placed order, or once idle past
TTL.CHECKOUT_SESSION.
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException

from storefront.cart.service import CartManager
from storefront.checkout.models import SHIPPING_OPTIONS
from storefront.checkout.service import CheckoutSession, ensure_can_checkout
from storefront.db import TTL
from storefront.errors import (
    ERROR_ADDRESS_INCOMPLETE,
    ERROR_CHECKOUT_NOT_OPEN,
    ERROR_INVALID_STEP,
    ERROR_UNKNOWN_SHIPPING,
    SUCCESS_ORDER_CREATED,
    StorefrontError,
)
from storefront.logging import get_logger, mask_id
from storefront.services.database import Database
from storefront.services.models import AuthUser
from .deps import get_cart, get_cart_id, get_current_user, get_db, http_error
from .models import AddressRequest, PaymentRequest, ShippingRequest

logger = get_logger(__name__)

router = APIRouter(tags=["checkout"])

_checkout_sessions: Dict[str, CheckoutSession] = {}


def evict_idle_sessions() -> int:
    """Drop sessions idle longer than the TTL. Returns how many were dropped."""
    cutoff = datetime.now(timezone.utc) - timedelta(seconds=TTL.CHECKOUT_SESSION)
    idle = [cart_id for cart_id, session in _checkout_sessions.items() if session.is_idle_since(cutoff)]
    for cart_id in idle:
        _checkout_sessions.pop(cart_id).close()
    if idle:
        logger.info(f"Evicted {len(idle)} idle checkout session(s)")
    return len(idle)


def _owned_session(cart_id: str, user: AuthUser) -> Optional[CheckoutSession]:
    session = _checkout_sessions.get(cart_id)
    if session is None or session.user_id != user.id:
        return None
    return session


def get_checkout_session(
    cart_id: str = Depends(get_cart_id),
    cart: CartManager = Depends(get_cart),
    user: AuthUser = Depends(get_current_user),
) -> CheckoutSession:
    """The caller's open session for this cart, bound to the freshly loaded cart."""
    evict_idle_sessions()
    session = _owned_session(cart_id, user)
    if session is None:
        raise HTTPException(status_code=404, detail=ERROR_CHECKOUT_NOT_OPEN)
    session.cart = cart
    session.touch()
    return session


@router.get("/checkout/shipping-options")
async def list_shipping_options():
    return [option.to_response() for option in SHIPPING_OPTIONS.values()]


@router.post("/checkout")
async def open_checkout(
    cart_id: str = Depends(get_cart_id),
    cart: CartManager = Depends(get_cart),
    user: AuthUser = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """Start checkout for a non-empty cart."""
    try:
        ensure_can_checkout(cart, user)
    except StorefrontError as e:
        raise http_error(e)

    evict_idle_sessions()
    session = CheckoutSession.open(cart, db.orders, user_id=user.id)
    _checkout_sessions[cart_id] = session
    return session.to_dict()


@router.get("/checkout")
async def get_checkout(session: CheckoutSession = Depends(get_checkout_session)):
    return session.to_dict()


@router.post("/checkout/address")
async def submit_address(
    request: AddressRequest,
    session: CheckoutSession = Depends(get_checkout_session),
):
    """Save the address and move on to payment."""
    if not session.go_to_payment(request):
        missing = session.address.missing_fields()
        if not missing:
            raise HTTPException(status_code=400, detail=ERROR_INVALID_STEP)
        raise HTTPException(status_code=422, detail={"message": ERROR_ADDRESS_INCOMPLETE, "fields": missing})
    return session.to_dict()


@router.post("/checkout/back")
async def back_to_address(session: CheckoutSession = Depends(get_checkout_session)):
    if not session.go_to_address():
        raise HTTPException(status_code=400, detail=ERROR_INVALID_STEP)
    return session.to_dict()


@router.post("/checkout/shipping")
async def select_shipping(
    request: ShippingRequest,
    session: CheckoutSession = Depends(get_checkout_session),
):
    if not session.select_shipping(request.type):
        raise HTTPException(status_code=400, detail=ERROR_UNKNOWN_SHIPPING)
    return session.to_dict()


@router.post("/checkout/payment")
async def select_payment(
    request: PaymentRequest,
    session: CheckoutSession = Depends(get_checkout_session),
):
    """Choose the payment method and, for cards, capture the card data."""
    try:
        session.update_payment(request.method, request.installments, request.card)
    except StorefrontError as e:
        raise http_error(e)
    return session.to_dict()


@router.post("/checkout/submit")
async def submit_order(
    cart_id: str = Depends(get_cart_id),
    session: CheckoutSession = Depends(get_checkout_session),
    user: AuthUser = Depends(get_current_user),
):
    """Place the order. The cart is cleared only when the backend accepts it."""
    try:
        confirmation = await session.submit_order(user)
    except StorefrontError as e:
        raise http_error(e)

    # The confirmation travels in this response; the session is done
    if _checkout_sessions.get(cart_id) is session:
        del _checkout_sessions[cart_id]
    logger.debug(f"Checkout for cart {mask_id(cart_id)} completed")

    return {"message": SUCCESS_ORDER_CREATED, **session.to_dict(), "confirmation": confirmation.to_dict()}


@router.delete("/checkout")
async def close_checkout(
    cart_id: str = Depends(get_cart_id),
    user: AuthUser = Depends(get_current_user),
):
    """Discard the caller's checkout session."""
    session = _owned_session(cart_id, user)
    if session is not None:
        del _checkout_sessions[cart_id]
        session.close()
    return {"closed": session is not None}
