"""Application services: order read path (queries).

Both queries go through the order cache before the store of record.
Ownership is checked on every read, cached or not.
"""

from __future__ import annotations

import structlog

from storefront.application.cache_keys import customer_orders_key, order_key
from storefront.application.dto import (
    OrderDTO,
    OrderSummaryDTO,
    StatusChangeDTO,
    order_to_dto,
    order_to_summary,
)
from storefront.domain.exceptions import NotFoundError, PermissionDeniedError
from storefront.domain.model.customer import Identity
from storefront.domain.repository.order_repository import OrderRepository
from storefront.shared.lru_cache import LRUCache

logger = structlog.get_logger(__name__)


def _assert_access(identity: Identity, customer_id: str) -> None:
    if not identity.can_access(customer_id):
        raise PermissionDeniedError("You do not have permission to view this order")


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository, cache: LRUCache) -> None:
        self._order_repo = order_repo
        self._cache = cache

    def handle(self, order_id: str, identity: Identity) -> OrderDTO:
        key = order_key(order_id)
        cached = self._cache.get(key)
        if cached is not None:
            _assert_access(identity, cached.customer_id)
            logger.debug("order_cache.hit", order_id=order_id)
            return cached

        generation = self._cache.generation(key)
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        _assert_access(identity, order.customer_id)

        dto = order_to_dto(order)
        if not self._cache.put_if_generation(key, dto, generation):
            logger.debug("order_cache.stale_load_dropped", order_id=order_id)
        return dto


class ListCustomerOrdersHandler:

    def __init__(self, order_repo: OrderRepository, cache: LRUCache) -> None:
        self._order_repo = order_repo
        self._cache = cache

    def handle(self, customer_id: str, identity: Identity) -> list[OrderSummaryDTO]:
        """Return the customer's orders, newest first."""
        _assert_access(identity, customer_id)

        key = customer_orders_key(customer_id)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("order_cache.hit", customer_id=customer_id)
            return list(cached)

        generation = self._cache.generation(key)
        summaries = tuple(
            order_to_summary(order)
            for order in self._order_repo.list_for_customer(customer_id)
        )
        if not self._cache.put_if_generation(key, summaries, generation):
            logger.debug("order_cache.stale_load_dropped", customer_id=customer_id)
        return list(summaries)


class ShowStatusHistoryHandler:
    """The chronological status history of one order."""

    def __init__(self, order_repo: OrderRepository, cache: LRUCache) -> None:
        self._show_order = ShowOrderHandler(order_repo, cache)

    def handle(self, order_id: str, identity: Identity) -> list[StatusChangeDTO]:
        return list(self._show_order.handle(order_id, identity).history)
