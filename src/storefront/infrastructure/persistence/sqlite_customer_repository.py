"""SQLite-backed implementation of CustomerRepository."""

from __future__ import annotations

from storefront.domain.model.customer import Customer, Role
from storefront.domain.repository.customer_repository import CustomerRepository
from storefront.infrastructure.persistence.sqlite_store import SqliteStore


class SqliteCustomerRepository(CustomerRepository):

    def __init__(self, store: SqliteStore) -> None:
        self._store = store

    def get_by_id(self, customer_id: str) -> Customer | None:
        rows = self._store.execute("SELECT * FROM customers WHERE id = ?", (customer_id,))
        if not rows:
            return None
        raw = rows[0]
        return Customer(
            id=raw["id"],
            name=raw["name"],
            email=raw["email"],
            role=Role(raw["role"]),
        )

    def save(self, customer: Customer) -> None:
        with self._store.transaction() as cur:
            cur.execute(
                """
                INSERT INTO customers (id, name, email, role) VALUES (?, ?, ?, ?)
                ON CONFLICT (id) DO UPDATE SET
                    name = excluded.name,
                    email = excluded.email,
                    role = excluded.role
                """,
                (customer.id, customer.name, customer.email, customer.role.value),
            )
