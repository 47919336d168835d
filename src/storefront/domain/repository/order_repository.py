"""Abstract repository for the Order aggregate.

Writes are all-or-nothing: an implementation either stores the whole
change (order row, line items, history entry) or raises PersistenceError
and stores nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.order import Order, OrderStatus, StatusChange
from storefront.domain.model.order_report import OrderFilter, OrderStats


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order with its items and history, or None."""

    @abstractmethod
    def list_for_customer(self, customer_id: str) -> list[Order]:
        """Return a customer's orders, newest first."""

    @abstractmethod
    def count_for_customer(self, customer_id: str) -> int:
        """Return how many orders the customer has placed."""

    @abstractmethod
    def add(self, order: Order) -> None:
        """Insert a new order aggregate in a single transaction.

        The same transaction takes each line's quantity off the product's
        stock in the store; a row that would go negative fails the whole
        write.
        """

    @abstractmethod
    def record_transition(
        self, order: Order, change: StatusChange, previous: OrderStatus
    ) -> None:
        """Persist a status change and its history entry in a single transaction.

        The write only applies while the stored status is still ``previous``;
        otherwise another writer got there first and InvalidTransitionError
        is raised with nothing written.
        """

    @abstractmethod
    def list_all(self, criteria: OrderFilter | None = None) -> list[Order]:
        """Return every order matching ``criteria``, newest first."""

    @abstractmethod
    def stats(self) -> OrderStats:
        """Return store-wide order totals (see OrderStats)."""
