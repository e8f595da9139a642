"""Cart manager: single source of truth for one shopper's cart."""
from decimal import Decimal
from typing import Any, Callable, List, Optional

from storefront.logging import clip, get_logger, mask_cart_key, mask_id
from storefront.orders.totals import compute_totals
from storefront.services.money import to_float
from .models import CartLineItem
from .storage import CartStorage

logger = get_logger(__name__)

CartListener = Callable[[List[CartLineItem]], None]


class CartManager:
    """
    Manages the in-memory cart and keeps its storage in sync.

    - Every mutation writes through to storage, then notifies subscribers
    - At most one line per product id; repeated adds bump the quantity
    - Prices are captured when the product is added
    """

    def __init__(self, storage: CartStorage):
        self.storage = storage
        self._items: List[CartLineItem] = []
        self._listeners: List[CartListener] = []

    # ==================== SUBSCRIPTIONS ====================

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register a change callback. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.get_items()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Cart listener failed: {clip(e)}", exc_info=True)

    def _save(self) -> None:
        self.storage.set([item.to_dict() for item in self._items])
        self._notify()

    def _in_range(self, index: int) -> bool:
        return 0 <= index < len(self._items)

    # ==================== LIFECYCLE ====================

    def load(self) -> None:
        """Load the persisted cart. Unreadable data yields an empty cart."""
        data = self.storage.get([])
        items: List[CartLineItem] = []

        if not isinstance(data, list):
            logger.warning(f"Ignoring persisted cart with unexpected shape at {mask_cart_key(self.storage.key)}")
            data = []

        for entry in data:
            try:
                item = CartLineItem.from_dict(entry)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Dropping unreadable cart entry at {mask_cart_key(self.storage.key)}: {clip(e)}")
                continue
            existing = self.get_item(item.product_id, items)
            if existing:
                existing.quantity += item.quantity
            else:
                items.append(item)

        self._items = items
        self._notify()

    # ==================== MUTATIONS ====================

    def add_item(self, product: Any, quantity: int = 1) -> bool:
        """Add a product snapshot, or bump the quantity of its existing line."""
        new_item = CartLineItem.from_product(product, quantity)
        if new_item is None:
            return False

        existing = self.get_item(new_item.product_id)
        if existing:
            existing.quantity += quantity
            if existing.quantity <= 0:
                self._items.remove(existing)
        elif quantity > 0:
            self._items.append(new_item)

        logger.debug(f"Added {quantity}x {mask_id(new_item.product_id)} to cart")
        self._save()
        return True

    def remove_item(self, index: int) -> Optional[CartLineItem]:
        """Remove the line at index. Returns the removed item or None."""
        if not self._in_range(index):
            return None

        removed = self._items.pop(index)
        self._save()
        return removed

    def update_quantity(self, index: int, delta: int) -> bool:
        """Change a line's quantity by delta; reaching zero removes it."""
        if not self._in_range(index):
            return False

        item = self._items[index]
        item.quantity += delta
        if item.quantity <= 0:
            self._items.pop(index)

        self._save()
        return True

    def set_quantity(self, index: int, quantity: int) -> bool:
        """Overwrite a line's quantity; zero or less removes it."""
        if not self._in_range(index):
            return False

        if quantity <= 0:
            self._items.pop(index)
        else:
            self._items[index].quantity = quantity

        self._save()
        return True

    def clear(self) -> None:
        """Empty the cart."""
        self._items = []
        self._save()

    # ==================== QUERIES ====================

    def get_items(self) -> List[CartLineItem]:
        """Copy of the line items in add order."""
        return list(self._items)

    def get_item(self, product_id: str, items: Optional[List[CartLineItem]] = None) -> Optional[CartLineItem]:
        source = self._items if items is None else items
        return next((item for item in source if item.product_id == product_id), None)

    def is_in_cart(self, product_id: str) -> bool:
        return self.get_item(product_id) is not None

    def get_product_quantity(self, product_id: str) -> int:
        item = self.get_item(product_id)
        return item.quantity if item else 0

    def get_count(self) -> int:
        """Total number of units in cart."""
        return sum(item.quantity for item in self._items)

    def get_subtotal(self) -> Decimal:
        return compute_totals(self._items).subtotal

    def is_empty(self) -> bool:
        return len(self._items) == 0

    def summary(self) -> dict:
        """Cart snapshot for API responses."""
        return {
            "is_empty": self.is_empty(),
            "count": self.get_count(),
            "items": [item.to_response() for item in self._items],
            "subtotal": to_float(self.get_subtotal()),
        }


def get_cart_manager(cart_id: Optional[str] = None) -> CartManager:
    """Build a cart manager for one cart owner and load it from Redis."""
    manager = CartManager(CartStorage.for_cart(cart_id))
    manager.load()
    return manager
