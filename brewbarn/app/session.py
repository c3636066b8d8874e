#!/usr/bin/env python3
"""
Guest cart storage for the storefront.

Guests have no rows in the database; their cart lives under a guest id in
Redis, or in process memory when Redis is not reachable.
"""

import json
import uuid
import redis
from typing import Dict, List, Any, Optional
from datetime import datetime
from .config import Config
from ..utils.logger import get_logger

logger = get_logger()


class GuestCartStore:
    """Manages guest carts keyed by the guest id sent by the client."""

    def __init__(self, redis_client: Optional[redis.Redis] = None):
        """Initialize the store with a Redis connection or fall back to in-memory."""
        self.use_redis = False
        self.memory_carts: Dict[str, Dict[str, Any]] = {}
        self.redis_client = None

        if redis_client is not None:
            self.redis_client = redis_client
            self.use_redis = True
            return
        if not Config.USE_REDIS:
            logger.info("Redis disabled, using in-memory guest cart storage")
            return
        try:
            client = redis.Redis(
                host=Config.REDIS_HOST,
                port=Config.REDIS_PORT,
                db=Config.REDIS_DB,
                decode_responses=True,
                socket_connect_timeout=1,
            )
            # Test Redis connection
            client.ping()
            self.redis_client = client
            self.use_redis = True
            logger.info("Using Redis for guest cart storage")
        except redis.RedisError as e:
            logger.warning(f"Redis not available ({e}), using in-memory guest cart storage")

    def _get_cart_key(self, guest_id: str) -> str:
        return f"guest_cart:{guest_id}"

    def _load(self, guest_id: str) -> Dict[str, Any]:
        if self.use_redis:
            raw = self.redis_client.get(self._get_cart_key(guest_id))
            if raw:
                return json.loads(raw)
        elif guest_id in self.memory_carts:
            return self.memory_carts[guest_id]
        return {"items": [], "created_at": datetime.now().isoformat()}

    def _save(self, guest_id: str, cart: Dict[str, Any]):
        cart["last_updated"] = datetime.now().isoformat()
        if self.use_redis:
            self.redis_client.set(self._get_cart_key(guest_id), json.dumps(cart),
                                  ex=Config.GUEST_CART_TTL_SECONDS)
        else:
            self.memory_carts[guest_id] = cart

    def get_items(self, guest_id: str) -> List[Dict[str, Any]]:
        return list(self._load(guest_id)["items"])

    def add_item(self, guest_id: str, product_name: str, price: float, quantity: int,
                 size: Optional[str] = None) -> Dict[str, Any]:
        """Add an item; the same product and size are merged into one line."""
        cart = self._load(guest_id)
        for item in cart["items"]:
            if item["product_name"] == product_name and item.get("size") == size:
                item["quantity"] += quantity
                self._save(guest_id, cart)
                return item
        item = {
            "id": str(uuid.uuid4()),
            "product_name": product_name,
            "price": price,
            "quantity": quantity,
            "size": size,
        }
        cart["items"].append(item)
        self._save(guest_id, cart)
        return item

    def update_quantity(self, guest_id: str, item_id: str, quantity: int) -> bool:
        cart = self._load(guest_id)
        for item in cart["items"]:
            if item["id"] == item_id:
                item["quantity"] = max(1, quantity)
                self._save(guest_id, cart)
                return True
        return False

    def remove_item(self, guest_id: str, item_id: str) -> bool:
        cart = self._load(guest_id)
        remaining = [i for i in cart["items"] if i["id"] != item_id]
        if len(remaining) == len(cart["items"]):
            return False
        cart["items"] = remaining
        self._save(guest_id, cart)
        return True

    def clear(self, guest_id: str) -> bool:
        if self.use_redis:
            return bool(self.redis_client.delete(self._get_cart_key(guest_id)))
        return self.memory_carts.pop(guest_id, None) is not None
