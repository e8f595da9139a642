"""
API request models

Shared models for cart, checkout and order endpoints.
"""
from typing import Optional
from pydantic import BaseModel, Field

from storefront.checkout.models import AddressForm, CardDetails


# ==================== CART MODELS ====================

class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class UpdateCartItemRequest(BaseModel):
    delta: Optional[int] = None  # +1 / -1 from the quantity buttons
    quantity: Optional[int] = None  # absolute value; 0 removes


# ==================== CHECKOUT MODELS ====================

class AddressRequest(AddressForm):
    pass


class ShippingRequest(BaseModel):
    type: str


class PaymentRequest(BaseModel):
    method: str
    installments: Optional[int] = None
    card: Optional[CardDetails] = None
