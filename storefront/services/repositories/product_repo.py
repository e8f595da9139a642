"""Product Repository - read-only catalog operations."""
from typing import Optional, List

from storefront.constants import Tables
from storefront.services.models import Product
from .base import BaseRepository


class ProductRepository(BaseRepository):
    """Catalog database operations."""

    async def get_all(self, active_only: bool = False) -> List[Product]:
        """Get products, newest first. Inactive ones are skipped when active_only."""
        result = await self.client.table(Tables.PRODUCTS).select("*").order(
            "created_at", desc=True
        ).execute()

        products = [Product(**p) for p in result.data or []]
        if active_only:
            products = [p for p in products if p.active]
        return products

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        """Get product by ID."""
        result = await self.client.table(Tables.PRODUCTS).select("*").eq("id", product_id).execute()
        return Product(**result.data[0]) if result.data else None
