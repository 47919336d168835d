"""Keys used in the shared order cache.

Order views and customer order lists live in one LRU cache; the key's
first element says which kind of entry it is.
"""

from __future__ import annotations

from typing import Tuple

CacheKey = Tuple[str, str]


def order_key(order_id: str) -> CacheKey:
    return ("order", order_id)


def customer_orders_key(customer_id: str) -> CacheKey:
    return ("customer-orders", customer_id)
