"""
Backend clients - Supabase and Redis

Provides singleton instances of:
- Async Supabase client (orders, catalog, identity)
- Sync Upstash Redis client (persisted carts)
"""

import os
from typing import Optional

from supabase._async.client import AsyncClient, create_client as acreate_client
from upstash_redis import Redis

from storefront.constants import CART_STORAGE_KEY


SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY") or os.environ.get("SUPABASE_ANON_KEY", "")

UPSTASH_REDIS_REST_URL = os.environ.get("UPSTASH_REDIS_REST_URL", "")
UPSTASH_REDIS_REST_TOKEN = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")

# Upper bound for the order creation round trip (seconds)
ORDER_CREATE_TIMEOUT = float(os.environ.get("ORDER_CREATE_TIMEOUT", "30"))


_async_supabase_client: Optional[AsyncClient] = None
_sync_redis_client: Optional[Redis] = None


async def get_supabase() -> AsyncClient:
    """
    Get async Supabase client (singleton).
    Used for orders, catalog and identity lookups.
    """
    global _async_supabase_client

    if _async_supabase_client is None:
        if not SUPABASE_URL or not SUPABASE_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY) must be set")
        _async_supabase_client = await acreate_client(SUPABASE_URL, SUPABASE_KEY)

    return _async_supabase_client


def get_redis_sync() -> Redis:
    """
    Get sync Upstash Redis client (singleton).

    Cart persistence is write-through and synchronous from the caller's
    point of view, so carts use the sync client.
    """
    global _sync_redis_client

    if _sync_redis_client is None:
        if not UPSTASH_REDIS_REST_URL or not UPSTASH_REDIS_REST_TOKEN:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _sync_redis_client = Redis(url=UPSTASH_REDIS_REST_URL, token=UPSTASH_REDIS_REST_TOKEN)

    return _sync_redis_client


class RedisKeys:
    """Redis key prefixes for different data types."""

    CART = CART_STORAGE_KEY  # mlb_cart:{cart_id}

    @staticmethod
    def cart_key(cart_id: Optional[str] = None) -> str:
        if not cart_id:
            return RedisKeys.CART
        return f"{RedisKeys.CART}:{cart_id}"


class TTL:
    """Time-to-live constants (seconds)."""

    CART = int(os.environ.get("CART_TTL_SECONDS", str(30 * 86400)))
    # Idle checkout sessions are dropped from the in-process registry
    CHECKOUT_SESSION = int(os.environ.get("CHECKOUT_SESSION_TTL_SECONDS", str(30 * 60)))
