"""Cart package: line item model, storage, and manager."""
from .models import CartLineItem
from .storage import CartStorage, MemoryKVClient
from .service import CartManager, get_cart_manager

__all__ = [
    "CartLineItem",
    "CartStorage",
    "MemoryKVClient",
    "CartManager",
    "get_cart_manager",
]
