"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the application layer and its callers (CLI,
HTTP adapter) without exposing domain internals.  They are frozen so a
view stored in the order cache cannot be altered by whoever read it.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from storefront.domain.model.discount import AppliedDiscount
from storefront.domain.model.order import Order, OrderLineItem, OrderStatus, StatusChange
from storefront.domain.model.order_report import OrderStats


@dataclass(frozen=True)
class CartItemSpec:
    """Input: what the customer asked for (product ID + quantity)."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class OrderLineItemDTO:
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class StatusChangeDTO:
    status: str
    changed_at: str
    actor: str | None


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order view, as cached and returned by lookups."""

    id: str
    customer_id: str
    status: str
    shipping_mode: str
    shipping_address: str
    items: tuple[OrderLineItemDTO, ...]
    subtotal: Decimal
    discount_total: Decimal
    shipping_cost: Decimal
    total: Decimal
    created_at: str
    history: tuple[StatusChangeDTO, ...]


@dataclass(frozen=True)
class OrderSummaryDTO:
    """Output: one row of an order list."""

    id: str
    customer_id: str
    status: str
    shipping_mode: str
    total: Decimal
    total_items: int
    created_at: str


@dataclass(frozen=True)
class AppliedDiscountDTO:
    name: str
    kind: str
    value: Decimal
    amount: Decimal


@dataclass(frozen=True)
class CheckoutResultDTO:
    """Output: the full price breakdown of a successful checkout."""

    order_id: str
    status: str
    subtotal: Decimal
    discounts: tuple[AppliedDiscountDTO, ...]
    discount_total: Decimal
    shipping_mode: str
    shipping_cost: Decimal
    total: Decimal
    created_at: str


@dataclass(frozen=True)
class TopProductDTO:
    product_id: str
    product_name: str
    units: int


@dataclass(frozen=True)
class OrderStatsDTO:
    """Output: store-wide totals.  ``by_status`` lists every status."""

    total_orders: int
    total_sales: Decimal
    by_status: dict[str, int]
    top_product: TopProductDTO | None

# --- Mapping ------------------------------------------------------------------


def _timestamp(value) -> str:
    return value.isoformat()


def line_item_to_dto(item: OrderLineItem) -> OrderLineItemDTO:
    return OrderLineItemDTO(
        product_id=item.product_id,
        product_name=item.product_name,
        quantity=item.quantity.value,
        unit_price=item.unit_price.amount,
        line_total=item.line_total.amount,
    )


def status_change_to_dto(change: StatusChange) -> StatusChangeDTO:
    return StatusChangeDTO(
        status=change.status.value,
        changed_at=_timestamp(change.changed_at),
        actor=change.actor,
    )


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,
        customer_id=order.customer_id,
        status=order.status.value,
        shipping_mode=order.shipping_mode.value,
        shipping_address=order.shipping_address,
        items=tuple(line_item_to_dto(item) for item in order.items),
        subtotal=order.subtotal.amount,
        discount_total=order.discount_total.amount,
        shipping_cost=order.shipping_cost.amount,
        total=order.total.amount,
        created_at=_timestamp(order.created_at),
        history=tuple(status_change_to_dto(change) for change in order.history),
    )


def order_to_summary(order: Order) -> OrderSummaryDTO:
    return OrderSummaryDTO(
        id=order.id,
        customer_id=order.customer_id,
        status=order.status.value,
        shipping_mode=order.shipping_mode.value,
        total=order.total.amount,
        total_items=order.total_items,
        created_at=_timestamp(order.created_at),
    )


def applied_discount_to_dto(applied: AppliedDiscount) -> AppliedDiscountDTO:
    return AppliedDiscountDTO(
        name=applied.name,
        kind=applied.discount.kind.value,
        value=applied.discount.value,
        amount=applied.amount.amount,
    )


def stats_to_dto(stats: OrderStats) -> OrderStatsDTO:
    top = stats.top_product
    return OrderStatsDTO(
        total_orders=stats.total_orders,
        total_sales=stats.total_sales.amount,
        by_status={status.value: stats.by_status.get(status, 0) for status in OrderStatus},
        top_product=(
            TopProductDTO(top.product_id, top.product_name, top.units) if top else None
        ),
    )
