"""SQLite-backed implementation of ProductRepository."""

from __future__ import annotations

from decimal import Decimal

from storefront.domain.exceptions import ConflictError
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository
from storefront.infrastructure.persistence.sqlite_store import SqliteStore


class SqliteProductRepository(ProductRepository):

    def __init__(self, store: SqliteStore) -> None:
        self._store = store

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        rows = self._store.execute("SELECT * FROM products WHERE id = ?", (product_id,))
        return self._to_domain(rows[0]) if rows else None

    def list_all(self) -> list[Product]:
        rows = self._store.execute("SELECT * FROM products ORDER BY name, id")
        return [self._to_domain(row) for row in rows]

    def save(self, product: Product) -> None:
        raw = self._to_raw(product)
        with self._store.transaction() as cur:
            cur.execute(
                """
                INSERT INTO products (id, name, price, currency, stock)
                VALUES (:id, :name, :price, :currency, :stock)
                ON CONFLICT (id) DO UPDATE SET
                    name = excluded.name,
                    price = excluded.price,
                    currency = excluded.currency,
                    stock = excluded.stock
                """,
                raw,
            )

    def update(
        self,
        product_id: str,
        new_price: Money | None = None,
        new_stock: int | None = None,
    ) -> Product | None:
        with self._store.transaction() as cur:
            if new_price is not None:
                cur.execute(
                    "UPDATE products SET price = ?, currency = ? WHERE id = ?",
                    (str(new_price.amount), new_price.currency, product_id),
                )
            if new_stock is not None:
                cur.execute(
                    "UPDATE products SET stock = ? WHERE id = ?",
                    (new_stock, product_id),
                )
            cur.execute("SELECT * FROM products WHERE id = ?", (product_id,))
            row = cur.fetchone()
        return self._to_domain(dict(row)) if row is not None else None

    def delete(self, product_id: str) -> bool:
        with self._store.transaction() as cur:
            cur.execute(
                "SELECT COUNT(*) FROM order_items WHERE product_id = ?", (product_id,)
            )
            references = cur.fetchone()[0]
            if references:
                raise ConflictError(
                    f"Product '{product_id}' appears on {references} order line(s) "
                    "and cannot be deleted"
                )
            cur.execute("DELETE FROM products WHERE id = ?", (product_id,))
            return cur.rowcount == 1

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "price": str(product.price.amount),
            "currency": product.price.currency,
            "stock": product.stock,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            price=Money(Decimal(raw["price"]), raw["currency"]),
            stock=raw["stock"],
        )
