"""Application service: Delete Product use case.

A product that any order line refers to stays in the catalog; order
history keeps pointing at it.  Restock it to zero instead.
"""

from __future__ import annotations

import structlog

from storefront.domain.exceptions import NotFoundError
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.availability_index import AvailabilityIndex

logger = structlog.get_logger(__name__)


class DeleteProductHandler:

    def __init__(self, product_repo: ProductRepository, index: AvailabilityIndex) -> None:
        self._product_repo = product_repo
        self._index = index

    def handle(self, product_id: str) -> None:
        # ConflictError from the repository propagates with the index untouched.
        if not self._product_repo.delete(product_id):
            raise NotFoundError(f"Product with ID '{product_id}' not found")
        self._index.remove(product_id)
        logger.info("product.deleted", product_id=product_id)
