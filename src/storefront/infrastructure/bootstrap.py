"""Composition root: builds the application from Settings.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable

from storefront.application.add_product import AddProductHandler
from storefront.application.checkout import CheckoutHandler
from storefront.application.delete_product import DeleteProductHandler
from storefront.application.notification_dispatcher import NotificationDispatcher
from storefront.application.notifications import NotificationChannel, NotificationQueue
from storefront.application.order_reports import ListAllOrdersHandler, OrderStatsHandler
from storefront.application.order_service import OrderService
from storefront.application.post_checkout import (
    DecrementStock,
    EnqueueConfirmation,
    InvalidateCustomerOrders,
)
from storefront.application.rebuild_index import RebuildIndexHandler
from storefront.application.show_order import (
    ListCustomerOrdersHandler,
    ShowOrderHandler,
    ShowStatusHistoryHandler,
)
from storefront.application.update_order_status import UpdateOrderStatusHandler
from storefront.application.update_product import UpdateProductHandler
from storefront.domain.service.availability_index import AvailabilityIndex
from storefront.domain.service.discount_engine import DiscountEngine
from storefront.infrastructure.config import Settings
from storefront.infrastructure.notifications.logging_channel import (
    LoggingNotificationChannel,
)
from storefront.infrastructure.persistence.sqlite_customer_repository import (
    SqliteCustomerRepository,
)
from storefront.infrastructure.persistence.sqlite_order_repository import (
    SqliteOrderRepository,
)
from storefront.infrastructure.persistence.sqlite_product_repository import (
    SqliteProductRepository,
)
from storefront.infrastructure.persistence.sqlite_store import SqliteStore
from storefront.shared.lru_cache import LRUCache
from storefront.shared.work_queue import WorkQueue


@dataclass
class App:
    settings: Settings
    store: SqliteStore
    product_repo: SqliteProductRepository
    order_repo: SqliteOrderRepository
    customer_repo: SqliteCustomerRepository
    index: AvailabilityIndex
    cache: LRUCache
    queue: NotificationQueue
    dispatcher: NotificationDispatcher
    checkout: CheckoutHandler
    show_order: ShowOrderHandler
    list_orders: ListCustomerOrdersHandler
    status_history: ShowStatusHistoryHandler
    update_status: UpdateOrderStatusHandler
    all_orders: ListAllOrdersHandler
    order_stats: OrderStatsHandler
    add_product: AddProductHandler
    update_product: UpdateProductHandler
    delete_product: DeleteProductHandler
    rebuild_index: RebuildIndexHandler
    service: OrderService

    def close(self) -> None:
        self.dispatcher.stop(drain=True)
        self.store.close()


def build_app(
    settings: Settings | None = None,
    channel: NotificationChannel | None = None,
    today: Callable[[], date] = date.today,
) -> App:
    """Open the store, load the availability index and wire every handler.

    The dispatcher is built but not started; long-running hosts call
    ``app.dispatcher.start()``.
    """
    settings = settings or Settings.from_env()

    store = SqliteStore(settings.db_path)
    store.create_schema()

    product_repo = SqliteProductRepository(store)
    order_repo = SqliteOrderRepository(store)
    customer_repo = SqliteCustomerRepository(store)

    index = AvailabilityIndex(product_repo)
    index.rebuild()

    cache = LRUCache(settings.order_cache_capacity)
    queue: NotificationQueue = WorkQueue()
    dispatcher = NotificationDispatcher(
        queue,
        channel or LoggingNotificationChannel(),
        interval=settings.notification_interval,
    )

    checkout = CheckoutHandler(
        order_repo=order_repo,
        index=index,
        discount_engine=DiscountEngine(order_repo, today=today),
    )
    checkout.register(DecrementStock(index))
    checkout.register(EnqueueConfirmation(queue, customer_repo))
    checkout.register(InvalidateCustomerOrders(cache))

    show_order = ShowOrderHandler(order_repo, cache)
    list_orders = ListCustomerOrdersHandler(order_repo, cache)
    status_history = ShowStatusHistoryHandler(order_repo, cache)
    update_status = UpdateOrderStatusHandler(order_repo, customer_repo, cache, queue)
    all_orders = ListAllOrdersHandler(order_repo)
    order_stats = OrderStatsHandler(order_repo)

    return App(
        settings=settings,
        store=store,
        product_repo=product_repo,
        order_repo=order_repo,
        customer_repo=customer_repo,
        index=index,
        cache=cache,
        queue=queue,
        dispatcher=dispatcher,
        checkout=checkout,
        show_order=show_order,
        list_orders=list_orders,
        status_history=status_history,
        update_status=update_status,
        all_orders=all_orders,
        order_stats=order_stats,
        add_product=AddProductHandler(product_repo, index),
        update_product=UpdateProductHandler(product_repo, index),
        delete_product=DeleteProductHandler(product_repo, index),
        rebuild_index=RebuildIndexHandler(index),
        service=OrderService(
            checkout_handler=checkout,
            show_order=show_order,
            list_orders=list_orders,
            update_status_handler=update_status,
            status_history=status_history,
            all_orders=all_orders,
            order_stats=order_stats,
        ),
    )
