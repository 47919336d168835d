"""Application service: Update Order Status use case.

Loads the order, lets the aggregate validate the transition, persists
the new status together with its history entry, then drops every cached
view of the order and queues a status notification.
"""

from __future__ import annotations

import structlog

from storefront.application.cache_keys import customer_orders_key, order_key
from storefront.application.dto import OrderDTO, order_to_dto
from storefront.application.notifications import (
    NotificationKind,
    NotificationQueue,
    NotificationTask,
)
from storefront.domain.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from storefront.domain.model.customer import Identity
from storefront.domain.model.order import Order, OrderStatus
from storefront.domain.repository.customer_repository import CustomerRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.shared.lru_cache import LRUCache

logger = structlog.get_logger(__name__)


def parse_status(raw: OrderStatus | str) -> OrderStatus:
    if isinstance(raw, OrderStatus):
        return raw
    try:
        return OrderStatus(str(raw).strip().lower())
    except ValueError as exc:
        valid = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(
            f"Unknown order status {raw!r} (expected one of: {valid})"
        ) from exc


class UpdateOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        customer_repo: CustomerRepository,
        cache: LRUCache,
        queue: NotificationQueue,
    ) -> None:
        self._order_repo = order_repo
        self._customer_repo = customer_repo
        self._cache = cache
        self._queue = queue

    def handle(
        self,
        order_id: str,
        new_status: OrderStatus | str,
        identity: Identity,
    ) -> OrderDTO:
        if not identity.is_admin:
            raise PermissionDeniedError("Only administrators can change order status")

        target = parse_status(new_status)

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")

        previous = order.status
        change = order.transition_to(target, actor=identity.id)
        self._order_repo.record_transition(order, change, previous)

        self._cache.invalidate(order_key(order.id))
        self._cache.invalidate(customer_orders_key(order.customer_id))

        logger.info(
            "order.status_changed",
            order_id=order.id,
            previous=previous.value,
            status=target.value,
            actor=identity.id,
        )
        try:
            self._enqueue_notification(order)
        except Exception:
            # Already committed; the notification is best effort.
            logger.exception("notification.enqueue_failed", order_id=order.id)
        return order_to_dto(order)

    def _enqueue_notification(self, order: Order) -> None:
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
                kind=NotificationKind.STATUS_CHANGED,
                order_id=order.id,
                customer_id=order.customer_id,
                contact_email=customer.email,
                total=order.total.amount,
                status=order.status.value,
            )
        )
