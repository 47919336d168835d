"""Application service: Add Product use case."""

from __future__ import annotations

from uuid import uuid4

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.availability_index import AvailabilityIndex


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository, index: AvailabilityIndex) -> None:
        self._product_repo = product_repo
        self._index = index

    def handle(
        self,
        name: str,
        price: str,
        stock: int = 0,
        product_id: str | None = None,
    ) -> Product:
        """Add a new product to the catalog and make it visible to checkout."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")

        product_id = product_id or uuid4().hex
        if self._product_repo.get_by_id(product_id) is not None:
            raise ValidationError(f"Product '{product_id}' already exists")

        product = Product(id=product_id, name=name.strip(), price=Money.of(price), stock=stock)
        if product.price.is_zero:
            raise ValidationError("Product price must be greater than zero")

        self._product_repo.save(product)
        self._index.apply_external_update(product.id, product)
        return product
