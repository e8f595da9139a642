"""Order payload assembly and confirmation formatting."""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Optional

from storefront.constants import DEFAULT_DELIVERY_DAYS, DELIVERY_DAYS, PAYMENT_METHOD_LABELS
from storefront.services.models import AuthUser, Order
from storefront.services.money import to_float
from storefront.utils.formatters import format_currency, format_date, generate_order_number
from .totals import compute_totals, effective_price


def calculate_delivery_date(shipping_type: Optional[str], now: Optional[datetime] = None) -> date:
    """Estimated delivery: same day +0, express +3, normal or unknown +8 days."""
    now = now or datetime.now(timezone.utc)
    days = DELIVERY_DAYS.get(shipping_type or "", DEFAULT_DELIVERY_DAYS)
    return (now + timedelta(days=days)).date()


def format_address_line(address: Mapping[str, Any]) -> str:
    """street, number - neighborhood, city/state"""
    return (
        f"{address.get('street', '')}, {address.get('number', '')} - "
        f"{address.get('neighborhood', '')}, {address.get('city', '')}/{address.get('state', '')}"
    )


def build_order_payload(
    user: AuthUser,
    items: Iterable[Any],
    address: Dict[str, Any],
    shipping: Dict[str, Any],
    payment: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Build the JSON-safe payload handed to the order backend.

    Args:
        user: Authenticated shopper
        items: Cart line items (snapshot)
        address: Delivery address fields
        shipping: Selected shipping option (type, price, label, time)
        payment: Payment method and installments; never card data

    Returns:
        Payload dict with amounts as floats
    """
    items = list(items)
    totals = compute_totals(items, shipping.get("price", Decimal("0")))

    return {
        "user_id": user.id,
        "user_email": user.email,
        "items": [
            {
                "product_id": item.product_id,
                "name": item.name,
                "price": to_float(effective_price(item)),
                "quantity": item.quantity,
            }
            for item in items
        ],
        "address": dict(address),
        "shipping": {
            **shipping,
            "price": to_float(shipping.get("price")),
        },
        "payment": {
            "method": payment.get("method"),
            "installments": int(payment.get("installments") or 1),
        },
        "subtotal": to_float(totals.subtotal),
        "shipping_cost": to_float(totals.shipping_cost),
        "total": to_float(totals.total),
    }


@dataclass(frozen=True)
class OrderConfirmation:
    """What the confirmation step shows after a successful submission."""
    order_id: str
    order_number: str
    payment_method: str
    payment_label: str
    delivery_date: date
    address_line: str
    total: Decimal

    @property
    def delivery_date_display(self) -> str:
        return format_date(self.delivery_date)

    @property
    def total_display(self) -> str:
        return format_currency(self.total)

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "order_number": f"#{self.order_number}",
            "payment_method": self.payment_method,
            "payment_label": self.payment_label,
            "delivery_date": self.delivery_date.isoformat(),
            "delivery_date_display": self.delivery_date_display,
            "address": self.address_line,
            "total": to_float(self.total),
            "total_display": self.total_display,
        }


def build_confirmation(order: Order, now: Optional[datetime] = None) -> OrderConfirmation:
    """Derive confirmation data from the order the backend returned."""
    method = order.payment.get("method", "")
    return OrderConfirmation(
        order_id=order.id,
        order_number=generate_order_number(order.id),
        payment_method=method,
        payment_label=PAYMENT_METHOD_LABELS.get(method, method),
        delivery_date=calculate_delivery_date(order.shipping.get("type"), now),
        address_line=format_address_line(order.address),
        total=order.total,
    )
