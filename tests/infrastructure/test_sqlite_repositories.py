"""Tests for the SQLite repositories against a throwaway database file."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.domain.exceptions import (
    ConflictError,
    InvalidTransitionError,
    PersistenceError,
)
from storefront.domain.model.customer import Customer, Role
from storefront.domain.model.order import Order, OrderLineItem, OrderStatus, ShippingMode
from storefront.domain.model.order_report import OrderFilter, TopProduct
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money, Quantity
from storefront.infrastructure.persistence.sqlite_customer_repository import (
    SqliteCustomerRepository,
)
from storefront.infrastructure.persistence.sqlite_order_repository import SqliteOrderRepository
from storefront.infrastructure.persistence.sqlite_product_repository import (
    SqliteProductRepository,
)
from storefront.infrastructure.persistence.sqlite_store import SqliteStore


@pytest.fixture
def store(tmp_path):
    store = SqliteStore(tmp_path / "storefront.db")
    store.create_schema()
    yield store
    store.close()


def _seed(store: SqliteStore, stock: int = 10):
    products = SqliteProductRepository(store)
    products.save(Product(id="p-1", name="Keyboard", price=Money.of("100000"), stock=stock))
    return products, SqliteOrderRepository(store)


def _order(
    qty: int = 2,
    now: datetime | None = None,
    customer_id: str = "c-1",
    shipping_mode: ShippingMode = ShippingMode.STANDARD,
) -> Order:
    return Order.create(
        customer_id=customer_id,
        items=[
            OrderLineItem(
                product_id="p-1",
                product_name="Keyboard",
                quantity=Quantity(qty),
                unit_price=Money.of("100000"),
            )
        ],
        discount_total=Money.of("20000.00"),
        shipping_cost=Money.of("5000"),
        shipping_mode=shipping_mode,
        shipping_address="Calle 10 # 5-51",
        now=now,
    )


class TestProductRepository:

    def test_round_trip(self, store):
        products, _ = _seed(store)
        product = products.get_by_id("p-1")
        assert product.price == Money.of("100000")
        assert product.price.amount == Decimal("100000")
        assert product.stock == 10

    def test_save_updates_existing(self, store):
        products, _ = _seed(store)
        products.save(products.get_by_id("p-1").with_stock(4))
        assert products.get_by_id("p-1").stock == 4
        assert len(products.list_all()) == 1

    def test_missing(self, store):
        products, _ = _seed(store)
        assert products.get_by_id("nope") is None

    def test_price_update_keeps_stock_sold_since_read(self, store):
        products, orders = _seed(store)
        before_checkout = products.get_by_id("p-1")
        orders.add(_order(qty=2))

        updated = products.update(before_checkout.id, new_price=Money.of("95000"))

        assert updated.price == Money.of("95000")
        assert updated.stock == 8
        assert products.get_by_id("p-1") == updated

    def test_stock_update_keeps_price(self, store):
        products, _ = _seed(store)
        updated = products.update("p-1", new_stock=3)
        assert updated.stock == 3
        assert updated.price == Money.of("100000")

    def test_update_missing(self, store):
        products, _ = _seed(store)
        assert products.update("nope", new_stock=1) is None

    def test_delete_unreferenced(self, store):
        products, _ = _seed(store)
        assert products.delete("p-1") is True
        assert products.delete("p-1") is False
        assert products.get_by_id("p-1") is None

    def test_delete_referenced_is_conflict(self, store):
        products, orders = _seed(store)
        orders.add(_order(qty=1))
        with pytest.raises(ConflictError):
            products.delete("p-1")
        assert products.get_by_id("p-1").stock == 9


class TestOrderRepository:

    def test_add_persists_aggregate_and_decrements_stock(self, store):
        products, orders = _seed(store)
        order = _order(qty=2)

        orders.add(order)

        loaded = orders.get_by_id(order.id)
        assert loaded.total == Money.of("185000.00")
        assert loaded.items[0].unit_price == Money.of("100000")
        assert loaded.items[0].quantity.value == 2
        assert loaded.status == OrderStatus.PROCESSING
        assert len(loaded.history) == 1
        assert products.get_by_id("p-1").stock == 8

    def test_oversell_rolls_back_everything(self, store):
        products, orders = _seed(store, stock=1)
        order = _order(qty=2)

        with pytest.raises(PersistenceError):
            orders.add(order)

        assert orders.get_by_id(order.id) is None
        assert orders.count_for_customer("c-1") == 0
        assert products.get_by_id("p-1").stock == 1

    def test_unknown_product_rolls_back(self, store):
        _, orders = _seed(store)
        order = _order()
        order.items[0] = OrderLineItem(
            product_id="ghost",
            product_name="Ghost",
            quantity=Quantity(1),
            unit_price=Money.of("100000"),
        )
        with pytest.raises(PersistenceError):
            orders.add(order)
        assert orders.get_by_id(order.id) is None

    def test_record_transition_appends_history(self, store):
        _, orders = _seed(store)
        order = _order(qty=1)
        orders.add(order)

        change = order.transition_to(OrderStatus.SHIPPED, actor="admin-1")
        orders.record_transition(order, change, OrderStatus.PROCESSING)

        loaded = orders.get_by_id(order.id)
        assert loaded.status == OrderStatus.SHIPPED
        assert [h.status for h in loaded.history] == [OrderStatus.PROCESSING, OrderStatus.SHIPPED]
        assert loaded.history[-1].actor == "admin-1"

    def test_stale_transition_is_rejected(self, store):
        _, orders = _seed(store)
        order = _order(qty=1)
        orders.add(order)
        first = orders.get_by_id(order.id)
        second = orders.get_by_id(order.id)

        shipped = first.transition_to(OrderStatus.SHIPPED, actor="admin-1")
        orders.record_transition(first, shipped, OrderStatus.PROCESSING)

        cancelled = second.transition_to(OrderStatus.CANCELLED, actor="admin-2")
        with pytest.raises(InvalidTransitionError):
            orders.record_transition(second, cancelled, OrderStatus.PROCESSING)

        loaded = orders.get_by_id(order.id)
        assert loaded.status == OrderStatus.SHIPPED
        assert [h.status for h in loaded.history] == [OrderStatus.PROCESSING, OrderStatus.SHIPPED]

    def test_list_newest_first_and_count(self, store):
        _, orders = _seed(store)
        base = datetime(2024, 3, 1, tzinfo=timezone.utc)
        older = _order(qty=1, now=base)
        newer = _order(qty=1, now=base + timedelta(hours=1))
        other = _order(qty=1, now=base, customer_id="c-2")
        for order in (older, newer, other):
            orders.add(order)

        assert [o.id for o in orders.list_for_customer("c-1")] == [newer.id, older.id]
        assert orders.count_for_customer("c-1") == 2
        assert orders.count_for_customer("c-3") == 0

    def test_list_all_filters(self, store):
        products, orders = _seed(store)
        products.save(Product(id="p-2", name="Mouse", price=Money.of("40000"), stock=10))
        base = datetime(2024, 3, 1, tzinfo=timezone.utc)
        march = _order(qty=1, now=base)
        april = _order(qty=1, now=base + timedelta(days=31), customer_id="c-2")
        pickup = _order(qty=1, now=base + timedelta(days=40), shipping_mode=ShippingMode.PICKUP)
        for order in (march, april, pickup):
            orders.add(order)
        orders.record_transition(
            april, april.transition_to(OrderStatus.CANCELLED), OrderStatus.PROCESSING
        )

        assert [o.id for o in orders.list_all()] == [pickup.id, april.id, march.id]
        assert [o.id for o in orders.list_all(OrderFilter(status=OrderStatus.CANCELLED))] == [
            april.id
        ]
        assert [
            o.id for o in orders.list_all(OrderFilter(shipping_mode=ShippingMode.PICKUP))
        ] == [pickup.id]
        in_march = OrderFilter(
            created_from=base,
            created_to=datetime(2024, 3, 31, 23, 59, 59, tzinfo=timezone.utc),
        )
        assert [o.id for o in orders.list_all(in_march)] == [march.id]

    def test_stats(self, store):
        products, orders = _seed(store)
        products.save(Product(id="p-2", name="Mouse", price=Money.of("40000"), stock=10))
        kept = _order(qty=2)
        cancelled = _order(qty=1)
        mouse = Order.create(
            customer_id="c-2",
            items=[
                OrderLineItem(
                    product_id="p-2",
                    product_name="Mouse",
                    quantity=Quantity(1),
                    unit_price=Money.of("40000"),
                )
            ],
            discount_total=Money.zero(),
            shipping_cost=Money.zero(),
            shipping_mode=ShippingMode.PICKUP,
            shipping_address="Store",
        )
        for order in (kept, cancelled, mouse):
            orders.add(order)
        orders.record_transition(
            cancelled, cancelled.transition_to(OrderStatus.CANCELLED), OrderStatus.PROCESSING
        )

        stats = orders.stats()

        assert stats.total_orders == 3
        assert stats.total_sales == Money.of("225000")
        assert stats.by_status == {
            OrderStatus.PROCESSING: 2,
            OrderStatus.SHIPPED: 0,
            OrderStatus.COMPLETED: 0,
            OrderStatus.CANCELLED: 1,
        }
        assert stats.top_product == TopProduct("p-1", "Keyboard", 3)

    def test_stats_when_empty(self, store):
        _, orders = _seed(store)
        stats = orders.stats()
        assert stats.total_orders == 0
        assert stats.total_sales.is_zero
        assert set(stats.by_status.values()) == {0}
        assert stats.top_product is None


class TestCustomerRepository:

    def test_round_trip(self, store):
        customers = SqliteCustomerRepository(store)
        customers.save(Customer(id="admin-1", name="Ops", email="ops@example.com", role=Role.ADMIN))
        assert customers.get_by_id("admin-1").role == Role.ADMIN
        assert customers.get_by_id("nobody") is None


class TestStore:

    def test_schema_is_idempotent(self, store):
        store.create_schema()
        assert store.execute("SELECT COUNT(*) AS n FROM products")[0]["n"] == 0

    def test_bad_query_is_persistence_error(self, store):
        with pytest.raises(PersistenceError):
            store.execute("SELECT * FROM nowhere")
