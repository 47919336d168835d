"""Application service: Update Product use case.

Administrative edits change price and/or stock outside the checkout
path.  Only the edited columns are written, so a checkout that takes
stock off the same row at the same time keeps its decrement.  The row
as committed is what the availability index picks up.
"""

from __future__ import annotations

from storefront.domain.exceptions import NotFoundError, ValidationError
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.availability_index import AvailabilityIndex


class UpdateProductHandler:

    def __init__(self, product_repo: ProductRepository, index: AvailabilityIndex) -> None:
        self._product_repo = product_repo
        self._index = index

    def handle(
        self,
        product_id: str,
        new_price: str | None = None,
        new_stock: int | None = None,
    ) -> Product:
        """Update a product's price and/or stock.

        This does NOT affect any existing orders: they captured a
        price snapshot at checkout time.
        """
        if new_price is None and new_stock is None:
            raise ValidationError("Nothing to update: give a price or a stock level")

        price = None
        if new_price is not None:
            price = Money.of(new_price)
            if price.is_zero:
                raise ValidationError("Product price must be greater than zero")
        if new_stock is not None:
            if isinstance(new_stock, bool) or not isinstance(new_stock, int):
                raise ValidationError("Product stock must be an integer")
            if new_stock < 0:
                raise ValidationError(f"Stock cannot be negative, got {new_stock}")

        product = self._product_repo.update(product_id, new_price=price, new_stock=new_stock)
        if product is None:
            raise NotFoundError(f"Product with ID '{product_id}' not found")

        self._index.apply_external_update(product.id, product)
        return product
