"""Order total calculation.

The effective price rule lives only here; cart, checkout summary and order
payload all go through `effective_price`.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Mapping

from storefront.services.money import add, multiply, round_money, to_decimal, to_float


def field_value(item: Any, *names: str) -> Any:
    """First present field of a model, dataclass or mapping."""
    for name in names:
        if isinstance(item, Mapping):
            if name in item:
                return item[name]
        elif hasattr(item, name):
            return getattr(item, name)
    return None


def effective_price(item: Any) -> Decimal:
    """Promotional price when set and non-zero, otherwise the regular price."""
    promo = to_decimal(field_value(item, "promotional_price", "promotionalPrice", "precoPromocional"))
    if promo:
        return promo
    return to_decimal(field_value(item, "unit_price", "price", "unitPrice", "preco"))


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    shipping_cost: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "subtotal": to_float(self.subtotal),
            "shipping_cost": to_float(self.shipping_cost),
            "total": to_float(self.total),
        }


def compute_totals(items: Iterable[Any], shipping_cost: Any = Decimal("0")) -> OrderTotals:
    """Subtotal of effective price x quantity, plus shipping."""
    subtotal = Decimal("0")
    for item in items:
        quantity = field_value(item, "quantity") or 0
        subtotal = add(subtotal, multiply(effective_price(item), quantity))

    subtotal = round_money(subtotal)
    shipping = round_money(shipping_cost)
    return OrderTotals(subtotal=subtotal, shipping_cost=shipping, total=round_money(subtotal + shipping))
