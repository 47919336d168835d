"""SQLite-backed implementation of OrderRepository.

An order spans three tables (orders, order_items, order_status_history).
Every write touches them inside one ``SqliteStore.transaction()``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from storefront.domain.exceptions import InvalidTransitionError, PersistenceError
from storefront.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    ShippingMode,
    StatusChange,
)
from storefront.domain.model.order_report import OrderFilter, OrderStats, TopProduct
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.order_repository import OrderRepository
from storefront.infrastructure.persistence.sqlite_store import SqliteStore


class SqliteOrderRepository(OrderRepository):

    def __init__(self, store: SqliteStore) -> None:
        self._store = store

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: str) -> Order | None:
        rows = self._store.execute("SELECT * FROM orders WHERE id = ?", (order_id,))
        return self._load(rows[0]) if rows else None

    def list_for_customer(self, customer_id: str) -> list[Order]:
        rows = self._store.execute(
            "SELECT * FROM orders WHERE customer_id = ? "
            "ORDER BY created_at DESC, rowid DESC",
            (customer_id,),
        )
        return [self._load(row) for row in rows]

    def count_for_customer(self, customer_id: str) -> int:
        rows = self._store.execute(
            "SELECT COUNT(*) AS n FROM orders WHERE customer_id = ?", (customer_id,)
        )
        return rows[0]["n"]

    def add(self, order: Order) -> None:
        with self._store.transaction() as cur:
            cur.execute(
                """
                INSERT INTO orders (
                    id, customer_id, subtotal, discount_total, shipping_cost,
                    total, currency, shipping_mode, shipping_address, status,
                    created_at
                ) VALUES (
                    :id, :customer_id, :subtotal, :discount_total, :shipping_cost,
                    :total, :currency, :shipping_mode, :shipping_address, :status,
                    :created_at
                )
                """,
                self._to_raw(order),
            )
            cur.executemany(
                """
                INSERT INTO order_items (
                    order_id, position, product_id, product_name, quantity, unit_price
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        order.id,
                        position,
                        item.product_id,
                        item.product_name,
                        item.quantity.value,
                        str(item.unit_price.amount),
                    )
                    for position, item in enumerate(order.items)
                ],
            )
            for position, change in enumerate(order.history):
                self._insert_history(cur, order.id, position, change)

            # Stock comes off the store in the same transaction; the
            # CHECK (stock >= 0) constraint rolls everything back on oversell.
            for item in order.items:
                cur.execute(
                    "UPDATE products SET stock = stock - ? WHERE id = ?",
                    (item.quantity.value, item.product_id),
                )
                if cur.rowcount != 1:
                    raise PersistenceError(
                        f"Product '{item.product_id}' is missing from the store"
                    )

    def record_transition(
        self, order: Order, change: StatusChange, previous: OrderStatus
    ) -> None:
        with self._store.transaction() as cur:
            cur.execute(
                "UPDATE orders SET status = ? WHERE id = ? AND status = ?",
                (change.status.value, order.id, previous.value),
            )
            if cur.rowcount != 1:
                cur.execute("SELECT status FROM orders WHERE id = ?", (order.id,))
                row = cur.fetchone()
                if row is None:
                    raise PersistenceError(f"Order {order.id} is missing from the store")
                raise InvalidTransitionError(
                    f"Order {order.id} is now {row[0]}, not {previous.value}; "
                    "it was changed concurrently"
                )
            cur.execute(
                "SELECT COUNT(*) FROM order_status_history WHERE order_id = ?",
                (order.id,),
            )
            position = cur.fetchone()[0]
            self._insert_history(cur, order.id, position, change)

    def list_all(self, criteria: OrderFilter | None = None) -> list[Order]:
        criteria = criteria or OrderFilter()
        clauses, params = [], []
        if criteria.status is not None:
            clauses.append("status = ?")
            params.append(criteria.status.value)
        if criteria.shipping_mode is not None:
            clauses.append("shipping_mode = ?")
            params.append(criteria.shipping_mode.value)
        where = f"WHERE {' AND '.join(clauses)} " if clauses else ""
        rows = self._store.execute(
            f"SELECT * FROM orders {where}ORDER BY created_at DESC, rowid DESC",
            tuple(params),
        )
        # Stored timestamps may carry any offset, so date bounds are
        # compared as datetimes rather than as text.
        orders = (self._load(row) for row in rows)
        return [order for order in orders if criteria.matches(order)]

    def stats(self) -> OrderStats:
        by_status = {status: 0 for status in OrderStatus}
        total_sales = Money.zero()
        rows = self._store.execute("SELECT status, total, currency FROM orders")
        for row in rows:
            status = OrderStatus(row["status"])
            by_status[status] += 1
            if status != OrderStatus.CANCELLED:
                total_sales = total_sales + Money(Decimal(row["total"]), row["currency"])

        top = self._store.execute(
            """
            SELECT product_id, MAX(product_name) AS product_name, SUM(quantity) AS units
            FROM order_items
            GROUP BY product_id
            ORDER BY units DESC, product_id
            LIMIT 1
            """
        )
        return OrderStats(
            total_orders=len(rows),
            total_sales=total_sales,
            by_status=by_status,
            top_product=TopProduct(**top[0]) if top else None,
        )

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _insert_history(cur, order_id: str, position: int, change: StatusChange) -> None:
        cur.execute(
            """
            INSERT INTO order_status_history (order_id, position, status, changed_at, actor)
            VALUES (?, ?, ?, ?, ?)
            """,
            (order_id, position, change.status.value, change.changed_at.isoformat(), change.actor),
        )

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "customer_id": order.customer_id,
            "subtotal": str(order.subtotal.amount),
            "discount_total": str(order.discount_total.amount),
            "shipping_cost": str(order.shipping_cost.amount),
            "total": str(order.total.amount),
            "currency": order.total.currency,
            "shipping_mode": order.shipping_mode.value,
            "shipping_address": order.shipping_address,
            "status": order.status.value,
            "created_at": order.created_at.isoformat(),
        }

    def _load(self, raw: dict) -> Order:
        currency = raw["currency"]
        items = [
            OrderLineItem(
                product_id=row["product_id"],
                product_name=row["product_name"],
                quantity=Quantity(row["quantity"]),
                unit_price=Money(Decimal(row["unit_price"]), currency),
            )
            for row in self._store.execute(
                "SELECT * FROM order_items WHERE order_id = ? ORDER BY position",
                (raw["id"],),
            )
        ]
        history = [
            StatusChange(
                status=OrderStatus(row["status"]),
                changed_at=datetime.fromisoformat(row["changed_at"]),
                actor=row["actor"],
            )
            for row in self._store.execute(
                "SELECT * FROM order_status_history WHERE order_id = ? ORDER BY position",
                (raw["id"],),
            )
        ]
        return Order(
            id=raw["id"],
            customer_id=raw["customer_id"],
            items=items,
            subtotal=Money(Decimal(raw["subtotal"]), currency),
            discount_total=Money(Decimal(raw["discount_total"]), currency),
            shipping_cost=Money(Decimal(raw["shipping_cost"]), currency),
            total=Money(Decimal(raw["total"]), currency),
            shipping_mode=ShippingMode(raw["shipping_mode"]),
            shipping_address=raw["shipping_address"],
            status=OrderStatus(raw["status"]),
            created_at=datetime.fromisoformat(raw["created_at"]),
            history=history,
        )
