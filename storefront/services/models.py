"""Backend Models - Pydantic models for catalog, orders and identity."""
from decimal import Decimal
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

from storefront.constants import ORDER_STATUS_LABELS, OrderStatus
from storefront.services.money import to_decimal as _to_decimal


class AuthUser(BaseModel):
    """Authenticated shopper as resolved by the identity provider."""
    id: str
    email: Optional[str] = None


class Product(BaseModel):
    """Catalog product.

    Columns are stored with Portuguese names (nome, preco, ...); both those
    and the English field names are accepted.
    """
    id: str
    name: str = Field("", alias="nome")
    description: Optional[str] = Field(None, alias="descricao")
    price: Decimal = Field(Decimal("0"), alias="preco")
    promotional_price: Optional[Decimal] = Field(None, alias="precoPromocional")
    image: Optional[str] = Field(None, alias="imagem")
    category: Optional[str] = Field(None, alias="categoria")
    stock: int = Field(0, alias="estoque")
    active: bool = Field(True, alias="ativo")
    created_at: Optional[datetime] = None

    class Config:
        extra = "ignore"  # Ignore unknown columns from DB
        populate_by_name = True

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)

    @field_validator("promotional_price", mode="before")
    @classmethod
    def convert_promo_to_decimal(cls, v):
        return _to_decimal(v) if v not in (None, "") else None

    @field_validator("stock", mode="before")
    @classmethod
    def default_stock(cls, v):
        return 0 if v is None else v

    @field_validator("active", mode="before")
    @classmethod
    def default_active(cls, v):
        # Only an explicit False hides a product
        return v is not False

    @property
    def discount_percent(self) -> int:
        """Discount shown on the product badge."""
        from storefront.utils.formatters import calculate_discount
        return calculate_discount(self.price, self.promotional_price)


class OrderItem(BaseModel):
    """Line of a placed order, priced at the effective unit price."""
    product_id: str
    name: str = ""
    price: Decimal = Decimal("0")
    quantity: int = 1

    class Config:
        extra = "ignore"

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return _to_decimal(v)


class Order(BaseModel):
    """Order record as returned by the backend."""
    id: str
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    items: list[OrderItem] = []
    address: dict[str, Any] = {}
    shipping: dict[str, Any] = {}
    payment: dict[str, Any] = {}
    subtotal: Decimal = Decimal("0")
    shipping_cost: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    status: str = OrderStatus.PENDING.value
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        extra = "ignore"

    @field_validator("subtotal", "shipping_cost", "total", mode="before")
    @classmethod
    def convert_amount_to_decimal(cls, v):
        return _to_decimal(v)

    @property
    def status_label(self) -> str:
        return ORDER_STATUS_LABELS.get(self.status, self.status)

    @property
    def items_count(self) -> int:
        return sum(item.quantity for item in self.items)
