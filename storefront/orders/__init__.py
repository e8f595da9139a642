"""Order totals and payload assembly."""
from .totals import OrderTotals, compute_totals, effective_price
from .serializer import build_confirmation, build_order_payload, calculate_delivery_date

__all__ = [
    "OrderTotals",
    "compute_totals",
    "effective_price",
    "build_confirmation",
    "build_order_payload",
    "calculate_delivery_date",
]
