"""
Checkout flow

Drives the three step checkout (address -> payment -> confirmation) for one
cart. Selections live on the session; totals are always derived from the
cart snapshot and the selected shipping option.
"""
import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Union

from storefront.cart.service import CartManager
from storefront.constants import CARD_PAYMENT_METHODS, PaymentMethod, Validation
from storefront.db import ORDER_CREATE_TIMEOUT
from storefront.errors import (
    ERROR_CARD_INCOMPLETE,
    ERROR_CARD_NOT_ACCEPTED,
    ERROR_CART_EMPTY,
    ERROR_INVALID_INSTALLMENTS,
    ERROR_INVALID_STEP,
    ERROR_LOGIN_REQUIRED,
    ERROR_ORDER_CREATE_FAILED,
    ERROR_ORDER_IN_PROGRESS,
    ERROR_UNKNOWN_PAYMENT,
    CheckoutError,
    CheckoutValidationError,
    OrderCreationError,
)
from storefront.logging import clip, get_logger, mask_cart_key, mask_id
from storefront.orders.serializer import OrderConfirmation, build_confirmation, build_order_payload
from storefront.orders.totals import OrderTotals, compute_totals, effective_price
from storefront.services.models import AuthUser, Order
from storefront.services.money import to_float
from .models import (
    DEFAULT_SHIPPING,
    AddressForm,
    CardDetails,
    CheckoutStep,
    PaymentSelection,
    ShippingOption,
    get_shipping_option,
)

logger = get_logger(__name__)


class OrderBackend(Protocol):
    """Creates orders; satisfied by OrderRepository."""

    async def create(self, payload: Dict[str, Any]) -> Order:
        ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_can_checkout(cart: CartManager, user: Optional[AuthUser]) -> None:
    """Guards owned by the caller before opening checkout."""
    if user is None:
        raise CheckoutError(ERROR_LOGIN_REQUIRED)
    if cart.is_empty():
        raise CheckoutError(ERROR_CART_EMPTY)


class CheckoutSession:
    """In-progress purchase for one cart."""

    def __init__(
        self,
        cart: CartManager,
        order_backend: OrderBackend,
        timeout: Optional[float] = ORDER_CREATE_TIMEOUT,
        clock: Callable[[], datetime] = _utcnow,
        user_id: Optional[str] = None,
    ):
        self.cart = cart
        self.order_backend = order_backend
        self.timeout = timeout
        self.user_id = user_id
        self._clock = clock
        self._submitting = False
        self.last_active = clock()
        self._reset()

    @classmethod
    def open(cls, cart: CartManager, order_backend: OrderBackend, **kwargs) -> "CheckoutSession":
        """Start at the address step with normal shipping and credit card."""
        session = cls(cart, order_backend, **kwargs)
        logger.debug(f"Checkout opened for cart {mask_cart_key(cart.storage.key)}")
        return session

    def _reset(self) -> None:
        self.step = CheckoutStep.ADDRESS
        self.address = AddressForm()
        self.shipping: ShippingOption = DEFAULT_SHIPPING
        self.payment = PaymentSelection()
        self.confirmation: Optional[OrderConfirmation] = None

    def close(self) -> None:
        """Discard the session. An order already dispatched is not recalled."""
        self._reset()

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    def touch(self) -> None:
        self.last_active = self._clock()

    def is_idle_since(self, cutoff: datetime) -> bool:
        """True when untouched since `cutoff` and no order is in flight."""
        return not self._submitting and self.last_active < cutoff

    # ==================== STEP 1: ADDRESS ====================

    def set_address(self, address: Union[AddressForm, Mapping[str, Any]]) -> None:
        if not isinstance(address, AddressForm):
            address = AddressForm(**dict(address))
        self.address = address

    def go_to_payment(self, address: Union[AddressForm, Mapping[str, Any], None] = None) -> bool:
        """Advance to payment if every required address field is filled."""
        if self.step == CheckoutStep.CONFIRMATION:
            return False

        if address is not None:
            self.set_address(address)

        missing = self.address.missing_fields()
        if missing:
            logger.debug(f"Address incomplete, missing: {', '.join(missing)}")
            return False

        self.step = CheckoutStep.PAYMENT
        return True

    def go_to_address(self) -> bool:
        """Back from payment to address. Other steps stay where they are."""
        if self.step != CheckoutStep.PAYMENT:
            return False
        self.step = CheckoutStep.ADDRESS
        return True

    # ==================== SELECTIONS ====================

    def select_shipping(self, shipping_type: str) -> bool:
        option = get_shipping_option(shipping_type)
        if option is None:
            return False
        self.shipping = option
        return True

    def select_payment_method(self, method: Union[PaymentMethod, str]) -> bool:
        try:
            method = PaymentMethod(method)
        except ValueError:
            return False

        self.payment.method = method
        if not self.payment.requires_card:
            self.payment.card = CardDetails()
            self.payment.installments = 1
        elif method != PaymentMethod.CREDIT:
            self.payment.installments = 1
        return True

    @property
    def requires_card_details(self) -> bool:
        return self.payment.requires_card

    def set_card_details(self, card: Union[CardDetails, Mapping[str, Any]]) -> bool:
        """Capture card data; ignored for pix/boleto."""
        if not self.requires_card_details:
            return False
        if not isinstance(card, CardDetails):
            card = CardDetails(**dict(card))
        self.payment.card = card
        return True

    def set_installments(self, installments: int) -> bool:
        """Installments apply to credit only."""
        if self.payment.method != PaymentMethod.CREDIT:
            return False
        if not 1 <= installments <= Validation.MAX_INSTALLMENTS:
            return False
        self.payment.installments = installments
        return True

    def update_payment(
        self,
        method: Union[PaymentMethod, str],
        installments: Optional[int] = None,
        card: Union[CardDetails, Mapping[str, Any], None] = None,
    ) -> None:
        """
        Apply a whole payment step submission, or nothing.

        Raises:
            CheckoutError: unknown method, installments outside 1..12 or for a
                method other than credit, card data for pix/boleto
        """
        try:
            method = PaymentMethod(method)
        except ValueError:
            raise CheckoutError(ERROR_UNKNOWN_PAYMENT) from None

        if installments is not None and (
            method != PaymentMethod.CREDIT or not 1 <= installments <= Validation.MAX_INSTALLMENTS
        ):
            raise CheckoutError(ERROR_INVALID_INSTALLMENTS)
        if card is not None and method.value not in CARD_PAYMENT_METHODS:
            raise CheckoutError(ERROR_CARD_NOT_ACCEPTED)

        self.select_payment_method(method)
        if installments is not None:
            self.set_installments(installments)
        if card is not None:
            self.set_card_details(card)

    def validate_payment(self) -> bool:
        return not self.payment.missing_fields()

    # ==================== SUMMARY ====================

    def summary(self) -> OrderTotals:
        return compute_totals(self.cart.get_items(), self.shipping.price)

    def summary_lines(self) -> List[dict]:
        """One entry per line item: quantity, name, line total."""
        return [
            {
                "quantity": item.quantity,
                "name": item.name,
                "total": to_float(effective_price(item) * item.quantity),
            }
            for item in self.cart.get_items()
        ]

    # ==================== SUBMISSION ====================

    async def submit_order(self, user: Optional[AuthUser]) -> OrderConfirmation:
        """
        Place the order with the backend.

        On success the cart is cleared and the session moves to confirmation.
        On failure the session stays at payment and the cart is untouched.

        Raises:
            CheckoutError: wrong step, no user, empty cart or already submitting
            CheckoutValidationError: card data missing for credit/debit
            OrderCreationError: backend failed or timed out
        """
        if self._submitting:
            raise CheckoutError(ERROR_ORDER_IN_PROGRESS)
        if self.step != CheckoutStep.PAYMENT:
            raise CheckoutError(ERROR_INVALID_STEP)
        if user is None:
            raise CheckoutError(ERROR_LOGIN_REQUIRED)
        if self.cart.is_empty():
            raise CheckoutError(ERROR_CART_EMPTY)

        missing = self.payment.missing_fields()
        if missing:
            raise CheckoutValidationError(ERROR_CARD_INCOMPLETE, missing)

        payload = build_order_payload(
            user=user,
            items=self.cart.get_items(),
            address=self.address.to_payload(),
            shipping=self.shipping.to_dict(),
            payment=self.payment.to_payload(),
        )
        submitted_at = self._clock()

        self._submitting = True
        try:
            if self.timeout:
                order = await asyncio.wait_for(self.order_backend.create(payload), timeout=self.timeout)
            else:
                order = await self.order_backend.create(payload)
        except asyncio.TimeoutError as e:
            logger.error(f"Order creation timed out after {self.timeout}s for user {mask_id(user.id)}")
            raise OrderCreationError(ERROR_ORDER_CREATE_FAILED) from e
        except Exception as e:
            logger.error(f"Error creating order for user {mask_id(user.id)}: {clip(e)}", exc_info=True)
            raise OrderCreationError(ERROR_ORDER_CREATE_FAILED) from e
        finally:
            self._submitting = False

        self.cart.clear()
        self.confirmation = build_confirmation(order, submitted_at)
        self.step = CheckoutStep.CONFIRMATION
        logger.info(f"Order {mask_id(order.id)} placed, total {order.total}")
        return self.confirmation

    def to_dict(self) -> dict:
        """Session state for API responses (card data excluded)."""
        return {
            "step": int(self.step),
            "address": self.address.to_payload(),
            "shipping": self.shipping.to_response(),
            "payment": {
                **self.payment.to_payload(),
                "label": self.payment.label,
                "requires_card": self.requires_card_details,
            },
            "items": self.summary_lines(),
            "totals": self.summary().to_dict(),
            "confirmation": self.confirmation.to_dict() if self.confirmation else None,
        }
