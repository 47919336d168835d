"""Order service facade, the surface exposed to the HTTP adapter.

Every operation returns a ``Result`` envelope instead of raising, so an
adapter only has to map ``error_kind`` to its own status codes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Generic, TypeVar

import structlog

from storefront.application.checkout import CheckoutHandler
from storefront.application.dto import (
    CartItemSpec,
    CheckoutResultDTO,
    OrderDTO,
    OrderStatsDTO,
    OrderSummaryDTO,
    StatusChangeDTO,
)
from storefront.application.order_reports import ListAllOrdersHandler, OrderStatsHandler
from storefront.application.show_order import (
    ListCustomerOrdersHandler,
    ShowOrderHandler,
    ShowStatusHistoryHandler,
)
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.domain.exceptions import DomainException
from storefront.domain.model.customer import Identity
from storefront.domain.model.order import OrderStatus, ShippingMode

logger = structlog.get_logger(__name__)

T = TypeVar("T")

INTERNAL_ERROR = "internal"


@dataclass(frozen=True)
class Result(Generic[T]):
    ok: bool
    value: T | None = None
    error_kind: str | None = None
    message: str | None = None

    @staticmethod
    def success(value: T) -> Result[T]:
        return Result(ok=True, value=value)

    @staticmethod
    def failure(kind: str, message: str) -> Result[Any]:
        return Result(ok=False, error_kind=kind, message=message)


class OrderService:

    def __init__(
        self,
        checkout_handler: CheckoutHandler,
        show_order: ShowOrderHandler,
        list_orders: ListCustomerOrdersHandler,
        update_status_handler: UpdateOrderStatusHandler,
        status_history: ShowStatusHistoryHandler,
        all_orders: ListAllOrdersHandler,
        order_stats: OrderStatsHandler,
    ) -> None:
        self._checkout = checkout_handler
        self._show_order = show_order
        self._list_orders = list_orders
        self._update_status = update_status_handler
        self._status_history = status_history
        self._all_orders = all_orders
        self._order_stats = order_stats

    def checkout(
        self,
        identity: Identity,
        items: list[CartItemSpec],
        shipping_mode: ShippingMode | str,
        shipping_address: str,
    ) -> Result[CheckoutResultDTO]:
        return self._run(
            "checkout",
            lambda: self._checkout.handle(identity.id, items, shipping_mode, shipping_address),
        )

    def get_order(self, order_id: str, identity: Identity) -> Result[OrderDTO]:
        return self._run("get_order", lambda: self._show_order.handle(order_id, identity))

    def list_orders_for_customer(
        self, customer_id: str, identity: Identity
    ) -> Result[list[OrderSummaryDTO]]:
        return self._run(
            "list_orders_for_customer",
            lambda: self._list_orders.handle(customer_id, identity),
        )

    def update_status(
        self,
        order_id: str,
        new_status: OrderStatus | str,
        identity: Identity,
    ) -> Result[OrderDTO]:
        return self._run(
            "update_status",
            lambda: self._update_status.handle(order_id, new_status, identity),
        )

    def get_status_history(
        self, order_id: str, identity: Identity
    ) -> Result[list[StatusChangeDTO]]:
        return self._run(
            "get_status_history",
            lambda: self._status_history.handle(order_id, identity),
        )

    def list_all_orders(
        self,
        identity: Identity,
        status: OrderStatus | str | None = None,
        shipping_mode: ShippingMode | str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> Result[list[OrderSummaryDTO]]:
        return self._run(
            "list_all_orders",
            lambda: self._all_orders.handle(
                identity, status, shipping_mode, created_from, created_to
            ),
        )

    def get_stats(self, identity: Identity) -> Result[OrderStatsDTO]:
        return self._run("get_stats", lambda: self._order_stats.handle(identity))

    @staticmethod
    def _run(operation: str, call: Callable[[], T]) -> Result[T]:
        try:
            return Result.success(call())
        except DomainException as exc:
            logger.info("order_service.rejected", operation=operation, kind=exc.kind, error=str(exc))
            return Result.failure(exc.kind, str(exc))
        except Exception:
            logger.exception("order_service.failed", operation=operation)
            return Result.failure(INTERNAL_ERROR, f"Unexpected error during {operation}")
