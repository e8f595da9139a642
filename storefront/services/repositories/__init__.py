"""
Repository Pattern for backend operations

- ProductRepository: product catalog (read-only)
- OrderRepository: order creation and lookup
"""
from .product_repo import ProductRepository
from .order_repo import OrderRepository

__all__ = [
    "ProductRepository",
    "OrderRepository",
]
