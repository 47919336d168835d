"""Side effects that run after a checkout has committed.

The checkout handler invokes the registered handlers in order, once per
committed order.  A handler failure is logged and the remaining handlers
still run: the order already exists and nothing here may undo it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import structlog

from storefront.application.cache_keys import customer_orders_key
from storefront.application.notifications import (
    NotificationKind,
    NotificationQueue,
    NotificationTask,
)
from storefront.domain.model.order import Order
from storefront.domain.repository.customer_repository import CustomerRepository
from storefront.domain.service.availability_index import AvailabilityIndex
from storefront.shared.lru_cache import LRUCache

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OrderPlaced:
    """The committed order handed to every post-checkout handler."""

    order: Order


class PostCheckoutHandler(ABC):

    name: str = "post_checkout"

    @abstractmethod
    def handle(self, event: OrderPlaced) -> None:
        """React to a committed order."""


def run_post_checkout(handlers: list[PostCheckoutHandler], event: OrderPlaced) -> None:
    for handler in handlers:
        try:
            handler.handle(event)
        except Exception:
            logger.exception(
                "post_checkout.handler_failed",
                handler=handler.name,
                order_id=event.order.id,
            )


class DecrementStock(PostCheckoutHandler):
    """Subtract each line's quantity from the availability index.

    A refused decrement means the index drifted from the store since the
    stock check.  The order stands; the next index rebuild corrects the
    count.
    """

    name = "decrement_stock"

    def __init__(self, index: AvailabilityIndex) -> None:
        self._index = index

    def handle(self, event: OrderPlaced) -> None:
        for item in event.order.items:
            if not self._index.decrement(item.product_id, item.quantity.value):
                logger.warning(
                    "index_inconsistency",
                    order_id=event.order.id,
                    product_id=item.product_id,
                    quantity=item.quantity.value,
                )


class EnqueueConfirmation(PostCheckoutHandler):
    """Queue the order-confirmation notification for background delivery."""

    name = "enqueue_confirmation"

    def __init__(self, queue: NotificationQueue, customer_repo: CustomerRepository) -> None:
        self._queue = queue
        self._customer_repo = customer_repo

    def handle(self, event: OrderPlaced) -> None:
        order = event.order
        customer = self._customer_repo.get_by_id(order.customer_id)
        if customer is None:
            logger.warning(
                "notification.no_contact",
                order_id=order.id,
                customer_id=order.customer_id,
            )
            return
        self._queue.push(
            NotificationTask(
                kind=NotificationKind.ORDER_CONFIRMATION,
                order_id=order.id,
                customer_id=order.customer_id,
                contact_email=customer.email,
                total=order.total.amount,
                status=order.status.value,
            )
        )
        logger.info("notification.queued", order_id=order.id, pending=self._queue.size())


class InvalidateCustomerOrders(PostCheckoutHandler):
    """Drop the customer's cached order list so the new order shows up."""

    name = "invalidate_customer_orders"

    def __init__(self, cache: LRUCache) -> None:
        self._cache = cache

    def handle(self, event: OrderPlaced) -> None:
        self._cache.invalidate(customer_orders_key(event.order.customer_id))
