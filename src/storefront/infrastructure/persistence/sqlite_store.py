"""SQLite connection shared by the repositories.

One connection per store, guarded by a re-entrant lock so repositories
can be called from request threads and the notification dispatcher.
Every write goes through ``transaction()``: commit on success, rollback
and ``PersistenceError`` on any database error.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Any, Iterator

import structlog

from storefront.domain.exceptions import PersistenceError

logger = structlog.get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS customers (
    id      TEXT PRIMARY KEY,
    name    TEXT NOT NULL,
    email   TEXT NOT NULL,
    role    TEXT NOT NULL DEFAULT 'customer'
);

CREATE TABLE IF NOT EXISTS products (
    id        TEXT PRIMARY KEY,
    name      TEXT NOT NULL,
    price     TEXT NOT NULL,
    currency  TEXT NOT NULL,
    stock     INTEGER NOT NULL CHECK (stock >= 0)
);

CREATE TABLE IF NOT EXISTS orders (
    id                TEXT PRIMARY KEY,
    customer_id       TEXT NOT NULL,
    subtotal          TEXT NOT NULL,
    discount_total    TEXT NOT NULL,
    shipping_cost     TEXT NOT NULL,
    total             TEXT NOT NULL,
    currency          TEXT NOT NULL,
    shipping_mode     TEXT NOT NULL,
    shipping_address  TEXT NOT NULL,
    status            TEXT NOT NULL,
    created_at        TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_orders_customer ON orders (customer_id, created_at);

CREATE TABLE IF NOT EXISTS order_items (
    order_id      TEXT NOT NULL REFERENCES orders (id),
    position      INTEGER NOT NULL,
    product_id    TEXT NOT NULL REFERENCES products (id),
    product_name  TEXT NOT NULL,
    quantity      INTEGER NOT NULL CHECK (quantity > 0),
    unit_price    TEXT NOT NULL,
    PRIMARY KEY (order_id, position)
);

CREATE INDEX IF NOT EXISTS idx_order_items_product ON order_items (product_id);

CREATE TABLE IF NOT EXISTS order_status_history (
    order_id    TEXT NOT NULL REFERENCES orders (id),
    position    INTEGER NOT NULL,
    status      TEXT NOT NULL,
    changed_at  TEXT NOT NULL,
    actor       TEXT,
    PRIMARY KEY (order_id, position)
);
"""


class SqliteStore:

    def __init__(self, path: str | Path) -> None:
        self._path = str(path)
        if self._path != ":memory:":
            Path(self._path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = RLock()
        try:
            self._conn = sqlite3.connect(self._path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not open database at {self._path}") from exc
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")

    @property
    def path(self) -> str:
        return self._path

    def create_schema(self) -> None:
        with self._lock:
            try:
                self._conn.executescript(SCHEMA)
            except sqlite3.Error as exc:
                raise PersistenceError("Could not create the database schema") from exc
        logger.info("store.schema_ready", path=self._path)

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Cursor]:
        """Yield a cursor; commit when the block exits, roll back on error."""
        with self._lock:
            cursor = self._conn.cursor()
            try:
                yield cursor
                self._conn.commit()
            except sqlite3.Error as exc:
                self._conn.rollback()
                logger.error("store.transaction_failed", error=str(exc))
                raise PersistenceError("The database rejected the write") from exc
            except BaseException:
                self._conn.rollback()
                raise
            finally:
                cursor.close()

    def execute(self, query: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        """Run a read query and return its rows as dicts."""
        with self._lock:
            try:
                rows = self._conn.execute(query, params).fetchall()
            except sqlite3.Error as exc:
                raise PersistenceError("The database query failed") from exc
        return [dict(row) for row in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
