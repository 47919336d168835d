"""Domain service: Availability Index.

An in-memory mirror of every product's price and stock, rebuilt from the
store of record at startup.  It is the only thing checkout consults to
decide whether a stock request is satisfiable; the store is not
re-queried on the checkout path.

Records are frozen ``Product`` instances, so mutations swap the record
under the lock and any record a caller already holds stays a consistent
snapshot.
"""

from __future__ import annotations

from datetime import datetime, timezone
from threading import RLock

import structlog

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.product import Product
from storefront.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


class AvailabilityIndex:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo
        self._records: dict[str, Product] = {}
        self._lock = RLock()
        self._last_rebuilt_at: datetime | None = None

    # --- Bulk load ------------------------------------------------------------

    def rebuild(self) -> int:
        """Clear and repopulate the index from the store of record.

        Errors from the repository propagate: an index that cannot be
        loaded at startup is fatal.  The lock is held across the read so
        that an edit applied while the store is being read lands after the
        swap, not under it.
        """
        with self._lock:
            products = self._product_repo.list_all()
            self._records = {product.id: product for product in products}
            self._last_rebuilt_at = datetime.now(timezone.utc)
            count = len(self._records)
        logger.info("availability_index.rebuilt", products=count)
        return count

    @property
    def last_rebuilt_at(self) -> datetime | None:
        return self._last_rebuilt_at

    # --- Reads ----------------------------------------------------------------

    def lookup(self, product_id: str) -> Product | None:
        with self._lock:
            return self._records.get(product_id)

    def has_stock(self, product_id: str, quantity: int) -> bool:
        with self._lock:
            record = self._records.get(product_id)
            return record is not None and record.has_stock(quantity)

    def snapshot(self) -> list[Product]:
        with self._lock:
            return list(self._records.values())

    # --- Mutations ------------------------------------------------------------

    def decrement(self, product_id: str, quantity: int) -> bool:
        """Atomically check and subtract ``quantity`` units.

        Returns False, leaving the record untouched, when the product is
        unknown or has fewer than ``quantity`` units.
        """
        if quantity <= 0:
            raise ValidationError("Decrement quantity must be positive")
        with self._lock:
            record = self._records.get(product_id)
            if record is None or not record.has_stock(quantity):
                return False
            self._records[product_id] = record.with_stock(record.stock - quantity)
            return True

    def apply_external_update(self, product_id: str, record: Product) -> None:
        """Replace a record after an administrative edit (price or stock)."""
        if record.id != product_id:
            raise ValidationError(
                f"Record ID '{record.id}' does not match product ID '{product_id}'"
            )
        with self._lock:
            self._records[product_id] = record
        logger.info(
            "availability_index.updated",
            product_id=product_id,
            stock=record.stock,
            price=str(record.price.amount),
        )

    def remove(self, product_id: str) -> bool:
        with self._lock:
            removed = self._records.pop(product_id, None) is not None
        if removed:
            logger.info("availability_index.removed", product_id=product_id)
        return removed

    def __contains__(self, product_id: object) -> bool:
        with self._lock:
            return product_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
