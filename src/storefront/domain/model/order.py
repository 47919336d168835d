"""Order aggregate.

The Order is an aggregate root that owns its line items and its status
history.  All business invariants are enforced here.

State machine::

    processing -> shipped -> completed
         |           |
         +-----------+--> cancelled
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from storefront.domain.exceptions import InvalidTransitionError, ValidationError
from storefront.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PROCESSING = "processing"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ShippingMode(Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    PICKUP = "pickup"


_VALID_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),  # terminal
    OrderStatus.CANCELLED: frozenset(),  # terminal
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the price snapshot of a product at checkout time.

    The ``unit_price`` never changes, even if the product's catalog price
    does later (price lock).
    """

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at checkout time

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


@dataclass(frozen=True)
class StatusChange:
    """One entry of the append-only status history.

    ``actor`` is None for system-initiated transitions.
    """

    status: OrderStatus
    changed_at: datetime
    actor: str | None = None


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: str
    customer_id: str
    items: list[OrderLineItem]
    subtotal: Money
    discount_total: Money
    shipping_cost: Money
    total: Money
    shipping_mode: ShippingMode
    shipping_address: str
    status: OrderStatus = OrderStatus.PROCESSING
    created_at: datetime = field(default_factory=_utcnow)
    history: list[StatusChange] = field(default_factory=list)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer_id: str,
        items: list[OrderLineItem],
        discount_total: Money,
        shipping_cost: Money,
        shipping_mode: ShippingMode,
        shipping_address: str,
        now: datetime | None = None,
    ) -> Order:
        """Create a new order in ``processing``, enforcing all invariants."""
        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer ID is required")

        if not items:
            raise ValidationError("Order must contain at least one item")

        if not shipping_address or not shipping_address.strip():
            raise ValidationError("Shipping address is required")

        subtotal = _sum_lines(items).quantized()
        if discount_total > subtotal:
            raise ValidationError(
                f"Discounts {discount_total} exceed subtotal {subtotal}"
            )
        total = (subtotal - discount_total) + shipping_cost
        if total.is_zero:
            raise ValidationError("Order total must be greater than zero")

        created_at = now or _utcnow()
        return Order(
            id=uuid4().hex,
            customer_id=customer_id.strip(),
            items=list(items),
            subtotal=subtotal,
            discount_total=discount_total,
            shipping_cost=shipping_cost,
            total=total,
            shipping_mode=shipping_mode,
            shipping_address=shipping_address.strip(),
            status=OrderStatus.PROCESSING,
            created_at=created_at,
            history=[StatusChange(OrderStatus.PROCESSING, created_at, None)],
        )

    # --- State transitions ----------------------------------------------------

    def transition_to(
        self,
        new_status: OrderStatus,
        actor: str | None = None,
        now: datetime | None = None,
    ) -> StatusChange:
        """Move the order to ``new_status``.

        The history entry is appended before the status field changes, so
        the last history entry always names the current status.  Illegal
        requests leave both untouched.
        """
        if not self.can_transition_to(new_status):
            raise InvalidTransitionError(
                f"Cannot change order {self.id} from {self.status.value} "
                f"to {new_status.value}"
            )
        change = StatusChange(status=new_status, changed_at=now or _utcnow(), actor=actor)
        self.history.append(change)
        self.status = new_status
        return change

    def can_transition_to(self, new_status: OrderStatus) -> bool:
        return new_status in _VALID_TRANSITIONS[self.status]

    # --- Computed properties --------------------------------------------------

    @property
    def is_final(self) -> bool:
        return not _VALID_TRANSITIONS[self.status]

    @property
    def can_be_cancelled(self) -> bool:
        return self.can_transition_to(OrderStatus.CANCELLED)

    @property
    def total_items(self) -> int:
        return sum(item.quantity.value for item in self.items)

    @property
    def last_status_change(self) -> StatusChange | None:
        return self.history[-1] if self.history else None


def _sum_lines(items: list[OrderLineItem]) -> Money:
    result = Money.zero(items[0].unit_price.currency)
    for item in items:
        result = result + item.line_total
    return result
