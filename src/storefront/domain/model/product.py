"""Product availability record.

Products live independently of orders.  The catalog entry carries the
current unit price and the stock count the availability index mirrors.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money


@dataclass(frozen=True)
class Product:
    """A product in the catalog.

    Frozen so that a record handed out by the availability index is a
    stable snapshot: stock and price changes produce a new record instead
    of mutating one a checkout may still be reading.
    """

    id: str
    name: str
    price: Money
    stock: int = 0

    def __post_init__(self) -> None:
        if not self.id:
            raise ValidationError("Product ID is required")
        if isinstance(self.stock, bool) or not isinstance(self.stock, int):
            raise ValidationError("Product stock must be an integer")
        if self.stock < 0:
            raise ValidationError(
                f"Stock for product '{self.id}' cannot be negative, got {self.stock}"
            )

    def with_price(self, new_price: Money) -> Product:
        """Return a copy with a new price.

        Existing orders are unaffected: they captured a price snapshot
        at checkout time.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        return replace(self, price=new_price)

    def with_stock(self, stock: int) -> Product:
        return replace(self, stock=stock)

    def has_stock(self, quantity: int) -> bool:
        return self.stock >= quantity
