"""Integration tests for the Checkout use case."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from structlog.testing import capture_logs

from storefront.application.cache_keys import customer_orders_key
from storefront.application.checkout import CheckoutHandler
from storefront.application.dto import CartItemSpec
from storefront.application.notifications import NotificationKind
from storefront.application.post_checkout import (
    DecrementStock,
    EnqueueConfirmation,
    InvalidateCustomerOrders,
    OrderPlaced,
    PostCheckoutHandler,
)
from storefront.domain.exceptions import (
    ConfigurationError,
    InsufficientStockError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from storefront.domain.model.customer import Customer
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.service.availability_index import AvailabilityIndex
from storefront.domain.service.discount_engine import DiscountEngine
from storefront.shared.lru_cache import LRUCache
from storefront.shared.work_queue import WorkQueue
from tests.fakes import FakeCustomerRepository, FakeOrderRepository, FakeProductRepository

TUESDAY = date(2024, 1, 2)
ADDRESS = "Carrera 7 # 71-21, Bogota"


def _setup(stock: int = 10, customers: list[Customer] | None = None):
    product_repo = FakeProductRepository(
        [
            Product(id="p-1", name="Keyboard", price=Money.of("100000"), stock=stock),
            Product(id="p-2", name="Mouse", price=Money.of("40000"), stock=5),
        ]
    )
    order_repo = FakeOrderRepository(product_repo)
    if customers is None:
        customers = [Customer(id="c-1", name="Ana", email="ana@example.com")]
    customer_repo = FakeCustomerRepository(customers)
    index = AvailabilityIndex(product_repo)
    index.rebuild()
    cache = LRUCache(10)
    queue = WorkQueue()
    handler = CheckoutHandler(
        order_repo=order_repo,
        index=index,
        discount_engine=DiscountEngine(order_repo, today=lambda: TUESDAY),
    )
    handler.register(DecrementStock(index))
    handler.register(EnqueueConfirmation(queue, customer_repo))
    handler.register(InvalidateCustomerOrders(cache))
    return SimpleNamespace(
        handler=handler,
        product_repo=product_repo,
        order_repo=order_repo,
        customer_repo=customer_repo,
        index=index,
        cache=cache,
        queue=queue,
    )


class TestCheckoutHappyPath:

    def test_first_purchase_with_standard_shipping(self):
        env = _setup()

        result = env.handler.handle("c-1", [CartItemSpec("p-1", 2)], "standard", ADDRESS)

        assert result.subtotal == Decimal("200000.00")
        assert [d.name for d in result.discounts] == ["First purchase"]
        assert result.discount_total == Decimal("20000.00")
        assert result.shipping_cost == Decimal("5000")
        assert result.total == Decimal("185000.00")
        assert result.status == "processing"

        # Stock is decremented in both the index and the store
        assert env.index.lookup("p-1").stock == 8
        assert env.product_repo.get_by_id("p-1").stock == 8

    def test_order_is_persisted_with_history(self):
        env = _setup()
        result = env.handler.handle("c-1", [CartItemSpec("p-1", 1)], "pickup", ADDRESS)

        order = env.order_repo.get_by_id(result.order_id)
        assert order is not None
        assert order.customer_id == "c-1"
        assert len(order.history) == 1
        assert order.history[0].status.value == "processing"

    def test_confirmation_is_queued(self):
        env = _setup()
        result = env.handler.handle("c-1", [CartItemSpec("p-1", 1)], "express", ADDRESS)

        task = env.queue.pop()
        assert task.kind == NotificationKind.ORDER_CONFIRMATION
        assert task.order_id == result.order_id
        assert task.contact_email == "ana@example.com"
        assert env.queue.is_empty()

    def test_customer_order_list_is_invalidated(self):
        env = _setup()
        env.cache.put(customer_orders_key("c-1"), ())

        env.handler.handle("c-1", [CartItemSpec("p-1", 1)], "standard", ADDRESS)

        assert customer_orders_key("c-1") not in env.cache

    def test_repeated_lines_are_merged(self):
        env = _setup()
        result = env.handler.handle(
            "c-1", [CartItemSpec("p-1", 1), CartItemSpec("p-1", 1)], "standard", ADDRESS
        )
        order = env.order_repo.get_by_id(result.order_id)
        assert len(order.items) == 1
        assert order.items[0].quantity.value == 2

    def test_price_is_captured_at_checkout(self):
        env = _setup()
        result = env.handler.handle("c-1", [CartItemSpec("p-1", 1)], "standard", ADDRESS)

        repriced = env.index.lookup("p-1").with_price(Money.of("150000"))
        env.index.apply_external_update("p-1", repriced)

        order = env.order_repo.get_by_id(result.order_id)
        assert order.items[0].unit_price == Money.of("100000")

    def test_second_order_has_no_first_purchase_discount(self):
        env = _setup()
        env.handler.handle("c-1", [CartItemSpec("p-2", 1)], "standard", ADDRESS)
        result = env.handler.handle("c-1", [CartItemSpec("p-2", 1)], "standard", ADDRESS)
        assert result.discounts == ()
        assert result.total == Decimal("45000.00")


class TestCheckoutRejections:

    def test_insufficient_stock_has_no_side_effects(self):
        env = _setup(stock=3)

        with pytest.raises(InsufficientStockError) as excinfo:
            env.handler.handle("c-1", [CartItemSpec("p-1", 5)], "standard", ADDRESS)

        assert excinfo.value.requested == 5
        assert excinfo.value.available == 3
        assert env.index.lookup("p-1").stock == 3
        assert env.product_repo.get_by_id("p-1").stock == 3
        assert len(env.order_repo) == 0
        assert env.queue.is_empty()

    def test_unknown_product(self):
        env = _setup()
        with pytest.raises(NotFoundError, match="p-404"):
            env.handler.handle("c-1", [CartItemSpec("p-404", 1)], "standard", ADDRESS)
        assert len(env.order_repo) == 0

    def test_one_bad_line_fails_the_whole_cart(self):
        env = _setup()
        with pytest.raises(InsufficientStockError):
            env.handler.handle(
                "c-1",
                [CartItemSpec("p-1", 1), CartItemSpec("p-2", 6)],
                "standard",
                ADDRESS,
            )
        assert env.index.lookup("p-1").stock == 10

    def test_unknown_shipping_mode(self):
        env = _setup()
        with pytest.raises(ConfigurationError):
            env.handler.handle("c-1", [CartItemSpec("p-1", 1)], "drone", ADDRESS)
        assert len(env.order_repo) == 0

    @pytest.mark.parametrize(
        "customer_id, items, address",
        [
            ("", [CartItemSpec("p-1", 1)], ADDRESS),
            ("c-1", [], ADDRESS),
            ("c-1", [CartItemSpec("p-1", 0)], ADDRESS),
            ("c-1", [CartItemSpec("p-1", 1)], "   "),
        ],
    )
    def test_invalid_input(self, customer_id, items, address):
        env = _setup()
        with pytest.raises(ValidationError):
            env.handler.handle(customer_id, items, "standard", address)

    def test_persistence_failure_leaves_everything_untouched(self):
        env = _setup()
        env.order_repo.fail_writes = True

        with pytest.raises(PersistenceError):
            env.handler.handle("c-1", [CartItemSpec("p-1", 2)], "standard", ADDRESS)

        assert env.index.lookup("p-1").stock == 10
        assert env.queue.is_empty()
        assert len(env.order_repo) == 0


class _Exploding(PostCheckoutHandler):
    name = "exploding"

    def handle(self, event: OrderPlaced) -> None:
        raise RuntimeError("mail server down")


class TestPostCheckoutIsolation:

    def test_failing_handler_does_not_stop_the_rest(self):
        env = _setup()
        handler = CheckoutHandler(
            order_repo=env.order_repo,
            index=env.index,
            discount_engine=DiscountEngine(env.order_repo, today=lambda: TUESDAY),
            post_checkout=[_Exploding(), EnqueueConfirmation(env.queue, env.customer_repo)],
        )

        with capture_logs() as logs:
            result = handler.handle("c-1", [CartItemSpec("p-1", 1)], "standard", ADDRESS)

        assert env.order_repo.get_by_id(result.order_id) is not None
        assert env.queue.size() == 1
        assert any(
            log["event"] == "post_checkout.handler_failed" and log["handler"] == "exploding"
            for log in logs
        )

    def test_missing_customer_record_skips_notification(self):
        env = _setup(customers=[])
        result = env.handler.handle("c-1", [CartItemSpec("p-1", 1)], "standard", ADDRESS)
        assert env.order_repo.get_by_id(result.order_id) is not None
        assert env.queue.is_empty()

    def test_refused_decrement_is_logged_not_raised(self):
        env = _setup(stock=1)
        result = env.handler.handle("c-1", [CartItemSpec("p-1", 1)], "standard", ADDRESS)
        order = env.order_repo.get_by_id(result.order_id)

        # Replaying the decrement finds the index already at zero
        with capture_logs() as logs:
            DecrementStock(env.index).handle(OrderPlaced(order=order))

        assert env.index.lookup("p-1").stock == 0
        assert [log["event"] for log in logs] == ["index_inconsistency"]
