"""Application service: Checkout use case.

Turns a cart into a committed order:

1. Validate the cart against the availability index (no side effects on
   failure).
2. Price it: subtotal from the unit prices captured now, automatic
   discounts, shipping.
3. Persist the order aggregate in one transaction.
4. Only after the commit, run the post-checkout handlers (stock
   decrement, notification, cache invalidation).

Retried calls are not deduplicated: a caller retrying after a timeout may
create a second order.
"""

from __future__ import annotations

from datetime import datetime

import structlog

from storefront.application.dto import (
    CartItemSpec,
    CheckoutResultDTO,
    applied_discount_to_dto,
)
from storefront.application.post_checkout import (
    OrderPlaced,
    PostCheckoutHandler,
    run_post_checkout,
)
from storefront.domain.exceptions import (
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from storefront.domain.model.cart import CartLine, merge_lines
from storefront.domain.model.order import Order, OrderLineItem, ShippingMode
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.service.availability_index import AvailabilityIndex
from storefront.domain.service.discount_engine import DiscountEngine
from storefront.domain.service.shipping import shipping_strategy_for

logger = structlog.get_logger(__name__)


class CheckoutHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        index: AvailabilityIndex,
        discount_engine: DiscountEngine,
        post_checkout: list[PostCheckoutHandler] | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._index = index
        self._discount_engine = discount_engine
        self._post_checkout = list(post_checkout or [])

    def register(self, handler: PostCheckoutHandler) -> None:
        """Append a post-checkout handler; handlers run in registration order."""
        self._post_checkout.append(handler)

    def handle(
        self,
        customer_id: str,
        item_specs: list[CartItemSpec],
        shipping_mode: ShippingMode | str,
        shipping_address: str,
    ) -> CheckoutResultDTO:
        log = logger.bind(customer_id=customer_id)

        if not customer_id or not customer_id.strip():
            raise ValidationError("Customer ID is required")
        if not item_specs:
            raise ValidationError("Cart must contain at least one item")
        if not shipping_address or not shipping_address.strip():
            raise ValidationError("Shipping address is required")

        lines = merge_lines(
            [CartLine.of(spec.product_id, spec.quantity) for spec in item_specs]
        )

        # Step 1: validate availability and capture prices in one pass
        line_items = self._capture_line_items(lines)

        # Step 2: subtotal from the captured prices
        subtotal = _subtotal(line_items)

        # Step 3: discounts
        discounts = self._discount_engine.applicable_discounts(customer_id, subtotal, lines)
        discounted, applied = DiscountEngine.fold_itemized(subtotal, discounts)

        # Step 4: shipping
        strategy = shipping_strategy_for(shipping_mode)
        shipping_cost = strategy.cost(lines)

        # Step 5: the aggregate computes and checks the total
        order = Order.create(
            customer_id=customer_id,
            items=line_items,
            discount_total=_discount_total(subtotal, discounted),
            shipping_cost=shipping_cost,
            shipping_mode=strategy.mode,
            shipping_address=shipping_address,
        )

        # Step 6: one transaction; PersistenceError propagates untouched
        self._order_repo.add(order)
        log.info(
            "checkout.committed",
            order_id=order.id,
            subtotal=str(order.subtotal.amount),
            discounts=len(applied),
            shipping=str(order.shipping_cost.amount),
            total=str(order.total.amount),
        )

        # Steps 7-9: post-commit side effects
        run_post_checkout(self._post_checkout, OrderPlaced(order=order))

        return CheckoutResultDTO(
            order_id=order.id,
            status=order.status.value,
            subtotal=order.subtotal.amount,
            discounts=tuple(applied_discount_to_dto(a) for a in applied),
            discount_total=order.discount_total.amount,
            shipping_mode=order.shipping_mode.value,
            shipping_cost=order.shipping_cost.amount,
            total=order.total.amount,
            created_at=_iso(order.created_at),
        )

    def _capture_line_items(self, lines: list[CartLine]) -> list[OrderLineItem]:
        line_items: list[OrderLineItem] = []
        for line in lines:
            product = self._index.lookup(line.product_id)
            if product is None:
                raise NotFoundError(f"Product not found: '{line.product_id}'")
            if not self._index.has_stock(product.id, line.quantity.value):
                raise InsufficientStockError(
                    product_id=product.id,
                    requested=line.quantity.value,
                    available=product.stock,
                )
            line_items.append(
                OrderLineItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=line.quantity,
                    unit_price=product.price,  # <-- price snapshot
                )
            )
        return line_items


def _subtotal(line_items: list[OrderLineItem]) -> Money:
    result = line_items[0].line_total
    for item in line_items[1:]:
        result = result + item.line_total
    return result.quantized()


def _discount_total(subtotal: Money, discounted: Money) -> Money:
    return subtotal.quantized() - discounted


def _iso(value: datetime) -> str:
    return value.isoformat()
