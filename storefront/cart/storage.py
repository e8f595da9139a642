"""Persistent key-value storage for carts.

Wraps a Redis-compatible client (Upstash sync `Redis` in production) with
JSON (de)serialization. Reads and writes never raise: failures are logged
and reads fall back to the caller's default.
"""
import json
from typing import Any, Optional

from storefront.db import RedisKeys, TTL, get_redis_sync
from storefront.logging import clip, get_logger, mask_cart_key

logger = get_logger(__name__)

_PROBE_KEY = "__storage_test__"


class MemoryKVClient:
    """Process-local client with the get/set/delete subset of the Redis API."""

    def __init__(self):
        self.data: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        self.data[key] = value
        return True

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed


class CartStorage:
    """JSON value stored under one key."""

    def __init__(self, client: Any, key: str = RedisKeys.CART, ttl: Optional[int] = TTL.CART):
        self.client = client
        self.key = key
        self.ttl = ttl

    @classmethod
    def for_cart(cls, cart_id: Optional[str] = None) -> "CartStorage":
        """Storage for one cart owner on the shared Redis client."""
        return cls(get_redis_sync(), RedisKeys.cart_key(cart_id))

    def get(self, default: Any = None) -> Any:
        """Read and decode the stored value, or `default` if absent/unreadable."""
        try:
            raw = self.client.get(self.key)
        except Exception as e:
            logger.error(f"Error reading from storage: {mask_cart_key(self.key)}: {clip(e)}")
            return default

        if not raw:
            return default

        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Corrupted data in storage: {mask_cart_key(self.key)}: {clip(e)}")
            return default

    def set(self, value: Any) -> bool:
        """Encode and write the value. Returns False if the write failed."""
        try:
            payload = json.dumps(value, ensure_ascii=False)
            if self.ttl:
                self.client.set(self.key, payload, ex=self.ttl)
            else:
                self.client.set(self.key, payload)
            return True
        except Exception as e:
            logger.error(f"Error writing to storage: {mask_cart_key(self.key)}: {clip(e)}")
            return False

    def delete(self) -> bool:
        try:
            self.client.delete(self.key)
            return True
        except Exception as e:
            logger.error(f"Error removing from storage: {mask_cart_key(self.key)}: {clip(e)}")
            return False

    def is_available(self) -> bool:
        """Probe the backend with a write and a delete."""
        try:
            self.client.set(_PROBE_KEY, _PROBE_KEY)
            self.client.delete(_PROBE_KEY)
            return True
        except Exception:
            return False
