"""Back-office views over all orders: filtered listings and sales totals."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.order import Order, OrderStatus, ShippingMode
from storefront.domain.model.value_objects import Money


@dataclass(frozen=True)
class OrderFilter:
    """Criteria for the admin order listing.  ``None`` means "any".

    The date bounds are inclusive and must be timezone-aware.
    """

    status: OrderStatus | None = None
    shipping_mode: ShippingMode | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None

    def __post_init__(self) -> None:
        for bound in (self.created_from, self.created_to):
            if bound is not None and bound.tzinfo is None:
                raise ValidationError("Date filters must carry a timezone")
        if (
            self.created_from is not None
            and self.created_to is not None
            and self.created_from > self.created_to
        ):
            raise ValidationError("The 'from' date must not be after the 'to' date")

    def matches(self, order: Order) -> bool:
        if self.status is not None and order.status != self.status:
            return False
        if self.shipping_mode is not None and order.shipping_mode != self.shipping_mode:
            return False
        if self.created_from is not None and order.created_at < self.created_from:
            return False
        if self.created_to is not None and order.created_at > self.created_to:
            return False
        return True


@dataclass(frozen=True)
class TopProduct:
    product_id: str
    product_name: str
    units: int


@dataclass(frozen=True)
class OrderStats:
    """Store-wide totals.

    ``total_sales`` sums order totals except cancelled ones.  ``by_status``
    has an entry for every status, zero included.  ``top_product`` counts
    units over all order lines regardless of status and is None when no
    order exists.
    """

    total_orders: int
    total_sales: Money
    by_status: dict[OrderStatus, int] = field(default_factory=dict)
    top_product: TopProduct | None = None
