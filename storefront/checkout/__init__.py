"""Checkout package: form models and the step-by-step session."""
from .models import (
    SHIPPING_OPTIONS,
    AddressForm,
    CardDetails,
    CheckoutStep,
    PaymentSelection,
    ShippingOption,
    get_shipping_option,
)
from .service import CheckoutSession, OrderBackend, ensure_can_checkout

__all__ = [
    "SHIPPING_OPTIONS",
    "AddressForm",
    "CardDetails",
    "CheckoutStep",
    "PaymentSelection",
    "ShippingOption",
    "get_shipping_option",
    "CheckoutSession",
    "OrderBackend",
    "ensure_can_checkout",
]
