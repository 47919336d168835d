"""Abstract repository for the Product catalog.

Defined in the domain layer so the domain never depends on
infrastructure.  Concrete implementations live in the infrastructure
layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new or updated product."""

    @abstractmethod
    def update(
        self,
        product_id: str,
        new_price: Money | None = None,
        new_stock: int | None = None,
    ) -> Product | None:
        """Overwrite only the given columns and return the row as committed.

        Columns that are not given keep whatever the store holds at write
        time, so a concurrent checkout's stock decrement is never undone by
        a price edit.  Returns None if the product does not exist.
        """

    @abstractmethod
    def delete(self, product_id: str) -> bool:
        """Remove a product; False if it did not exist.

        Raises ConflictError while any order line still references it.
        """
