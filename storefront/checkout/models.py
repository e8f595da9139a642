"""Checkout form models, shipping options and steps."""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import IntEnum
from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator

from storefront.constants import (
    CARD_PAYMENT_METHODS,
    PAYMENT_METHOD_LABELS,
    SHIPPING_TABLE,
    PaymentMethod,
    ShippingType,
)
from storefront.services.money import to_float


class CheckoutStep(IntEnum):
    """Linear checkout flow."""
    ADDRESS = 1
    PAYMENT = 2
    CONFIRMATION = 3


REQUIRED_ADDRESS_FIELDS = (
    "name",
    "phone",
    "cep",
    "street",
    "number",
    "neighborhood",
    "city",
    "state",
)

REQUIRED_CARD_FIELDS = ("number", "holder", "expiry", "cvv")


def _blank_to_str(v) -> str:
    return "" if v is None else str(v)


class AddressForm(BaseModel):
    """Delivery address captured in step 1."""
    name: str = ""
    phone: str = ""
    cep: str = ""
    street: str = ""
    number: str = ""
    complement: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""

    class Config:
        extra = "ignore"

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_str(cls, v):
        return _blank_to_str(v)

    def missing_fields(self) -> List[str]:
        """Required fields left empty (whitespace counts as empty)."""
        return [name for name in REQUIRED_ADDRESS_FIELDS if not getattr(self, name).strip()]

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()

    def one_line(self) -> str:
        return f"{self.street}, {self.number} - {self.neighborhood}, {self.city}/{self.state}"

    def to_payload(self) -> Dict[str, str]:
        return self.model_dump()


class CardDetails(BaseModel):
    """Card data for credit/debit. Never leaves the checkout session."""
    number: str = ""
    holder: str = ""
    expiry: str = ""
    cvv: str = ""

    class Config:
        extra = "ignore"

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_str(cls, v):
        return _blank_to_str(v)

    def missing_fields(self) -> List[str]:
        return [name for name in REQUIRED_CARD_FIELDS if not getattr(self, name).strip()]


@dataclass(frozen=True)
class ShippingOption:
    """One entry of the fixed shipping table."""
    type: str
    price: Decimal
    label: str
    estimated_time: str

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "price": self.price,
            "label": self.label,
            "time": self.estimated_time,
        }

    def to_response(self) -> dict:
        return {**self.to_dict(), "price": to_float(self.price)}


SHIPPING_OPTIONS: Dict[str, ShippingOption] = {
    type_: ShippingOption(type=type_, price=price, label=label, estimated_time=time)
    for type_, price, label, time in SHIPPING_TABLE
}

DEFAULT_SHIPPING = SHIPPING_OPTIONS[ShippingType.NORMAL.value]


def get_shipping_option(shipping_type: Optional[str]) -> Optional[ShippingOption]:
    return SHIPPING_OPTIONS.get(shipping_type or "")


@dataclass
class PaymentSelection:
    """Payment method chosen in step 2."""
    method: PaymentMethod = PaymentMethod.CREDIT
    installments: int = 1
    card: CardDetails = field(default_factory=CardDetails)

    @property
    def requires_card(self) -> bool:
        return self.method.value in CARD_PAYMENT_METHODS

    @property
    def label(self) -> str:
        return PAYMENT_METHOD_LABELS[self.method.value]

    def missing_fields(self) -> List[str]:
        if not self.requires_card:
            return []
        return self.card.missing_fields()

    def to_payload(self) -> dict:
        """Method and installments only; card data is not sent anywhere."""
        return {
            "method": self.method.value,
            "installments": self.installments if self.method == PaymentMethod.CREDIT else 1,
        }
