"""
Supabase Database Service

Facade over the repositories and the identity collaborator.

Usage:
    from storefront.services.database import get_database

    # At FastAPI startup (lifespan):
    await init_database()

    db = get_database()
    product = await db.get_product_by_id("p1")
"""

from typing import Any, Dict, List, Optional

from supabase._async.client import AsyncClient

from storefront.db import get_supabase
from storefront.logging import get_logger
from storefront.services.identity import Identity
from storefront.services.models import AuthUser, Order, Product
from storefront.services.repositories import OrderRepository, ProductRepository

logger = get_logger(__name__)


class Database:
    """
    Supabase-backed collaborators used by the cart and checkout.

    Must be created via `Database.create()` or `init_database()`.
    """

    def __init__(self, client: AsyncClient):
        self.client = client
        self.products = ProductRepository(client)
        self.orders = OrderRepository(client)
        self.identity = Identity(client)

    @classmethod
    async def create(cls) -> "Database":
        """Async factory: builds the async Supabase client and repositories."""
        client = await get_supabase()
        return cls(client)

    # ==================== CATALOG ====================

    async def get_products(self, active_only: bool = False) -> List[Product]:
        return await self.products.get_all(active_only)

    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        return await self.products.get_by_id(product_id)

    # ==================== ORDERS ====================

    async def create_order(self, payload: Dict[str, Any]) -> Order:
        return await self.orders.create(payload)

    async def get_order_by_id(self, order_id: str) -> Optional[Order]:
        return await self.orders.get_by_id(order_id)

    async def get_orders_by_user(self, user_id: str) -> List[Order]:
        return await self.orders.get_by_user(user_id)

    # ==================== IDENTITY ====================

    async def get_current_user(self, access_token: Optional[str]) -> Optional[AuthUser]:
        return await self.identity.current_user(access_token)


_db: Optional[Database] = None


async def init_database() -> Database:
    """Create the database singleton (call once at startup)."""
    global _db
    if _db is None:
        _db = await Database.create()
        logger.info("Database initialized")
    return _db


def get_database() -> Database:
    """Get database instance.

    Raises:
        RuntimeError: If init_database() has not been awaited yet
    """
    if _db is None:
        raise RuntimeError("Database not initialized. Call 'await init_database()' at startup.")
    return _db
