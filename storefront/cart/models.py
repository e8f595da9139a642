"""Cart line item with Decimal-based pricing."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from storefront.orders.totals import effective_price, field_value
from storefront.services.money import to_decimal, to_float


@dataclass
class CartLineItem:
    """One distinct product in the cart, priced at add time."""
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int = 1
    promotional_price: Optional[Decimal] = None
    image: Optional[str] = None

    def __post_init__(self):
        self.unit_price = to_decimal(self.unit_price)
        if self.promotional_price is not None:
            self.promotional_price = to_decimal(self.promotional_price)
        self.quantity = int(self.quantity)

    @classmethod
    def from_product(cls, product: Any, quantity: int = 1) -> Optional["CartLineItem"]:
        """Snapshot a catalog product. Returns None when it has no id."""
        if product is None:
            return None
        product_id = field_value(product, "id", "product_id")
        if not product_id:
            return None

        promo = field_value(product, "promotional_price", "precoPromocional")
        return cls(
            product_id=str(product_id),
            name=field_value(product, "name", "nome") or "",
            unit_price=to_decimal(field_value(product, "price", "preco")),
            promotional_price=to_decimal(promo) if promo not in (None, "") else None,
            image=field_value(product, "image", "imagem"),
            quantity=quantity,
        )

    def to_dict(self) -> dict:
        """Persisted shape."""
        return {
            "id": self.product_id,
            "name": self.name,
            "unitPrice": str(self.unit_price),
            "promotionalPrice": str(self.promotional_price) if self.promotional_price is not None else None,
            "imageRef": self.image,
            "quantity": self.quantity,
        }

    def to_response(self) -> dict:
        """JSON-friendly shape for API responses."""
        price = effective_price(self)
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": to_float(self.unit_price),
            "promotional_price": to_float(self.promotional_price) if self.promotional_price is not None else None,
            "effective_price": to_float(price),
            "image": self.image,
            "quantity": self.quantity,
            "total_price": to_float(price * self.quantity),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLineItem":
        """Create from the persisted shape. Also reads the legacy nome/preco keys."""
        product_id = data.get("id") or data.get("productId")
        if not product_id:
            raise KeyError("id")

        quantity = int(data["quantity"])
        if quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {quantity}")

        promo = data.get("promotionalPrice", data.get("precoPromocional"))
        return cls(
            product_id=str(product_id),
            name=data.get("name", data.get("nome")) or "",
            unit_price=to_decimal(data.get("unitPrice", data.get("preco"))),
            promotional_price=to_decimal(promo) if promo not in (None, "") else None,
            image=data.get("imageRef", data.get("imagem")),
            quantity=quantity,
        )
