"""Order Repository - Order operations."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from storefront.constants import OrderStatus, Tables
from storefront.logging import get_logger, mask_id
from storefront.services.models import Order
from .base import BaseRepository

logger = get_logger(__name__)


class OrderRepository(BaseRepository):
    """Order database operations."""

    async def create(self, payload: Dict[str, Any]) -> Order:
        """Create a pending order from an assembled checkout payload.

        The payload must already be JSON-safe (see orders.serializer).
        """
        data = {
            **payload,
            "status": OrderStatus.PENDING.value,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        result = await self.client.table(Tables.ORDERS).insert(data).execute()
        if not result.data:
            raise ValueError("Order insert returned no rows")

        order = Order(**result.data[0])
        logger.info(f"Order {mask_id(order.id)} created with status {order.status}")
        return order

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        """Get order by ID."""
        result = await self.client.table(Tables.ORDERS).select("*").eq("id", order_id).execute()
        return Order(**result.data[0]) if result.data else None

    async def get_by_user(self, user_id: str, limit: int = 50) -> List[Order]:
        """Get user's orders, newest first."""
        result = await self.client.table(Tables.ORDERS).select("*").eq(
            "user_id", user_id
        ).order("created_at", desc=True).limit(limit).execute()
        return [Order(**o) for o in result.data or []]
