"""Domain service: Discount Engine.

Decides which automatic discounts a cart earns and folds them into a
final amount.  The rules are evaluated against the customer's order
history in the store of record; each one triggers independently and
they may all apply at once.

Order of application matters: a percentage discount reduces whatever is
left after the discounts before it, not the original subtotal.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Callable

from storefront.domain.model.cart import CartLine, total_units
from storefront.domain.model.discount import AppliedDiscount, Discount
from storefront.domain.model.value_objects import Money
from storefront.domain.repository.order_repository import OrderRepository

# ---------------------------------------------------------------------------
# Business rule constants
# ---------------------------------------------------------------------------
FIRST_PURCHASE_PERCENT = Decimal("10")
VOLUME_THRESHOLD = Money.of("500000")
VOLUME_PERCENT = Decimal("5")
PROMOTION_WEEKDAY = 0  # Monday, as returned by date.weekday()
PROMOTION_AMOUNT = Decimal("10000")
BULK_MIN_UNITS = 5
BULK_PERCENT = Decimal("3")
LOYALTY_MIN_ORDERS = 5
LOYALTY_PERCENT = Decimal("5")


class DiscountEngine:

    def __init__(
        self,
        order_repo: OrderRepository,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._order_repo = order_repo
        self._today = today

    def applicable_discounts(
        self,
        customer_id: str,
        subtotal: Money,
        lines: list[CartLine],
    ) -> list[Discount]:
        """Return the discounts this cart earns, in application order."""
        previous_orders = self._order_repo.count_for_customer(customer_id)
        discounts: list[Discount] = []

        if previous_orders == 0:
            discounts.append(Discount.percentage("First purchase", FIRST_PURCHASE_PERCENT))

        if subtotal > VOLUME_THRESHOLD:
            discounts.append(Discount.percentage("Large purchase", VOLUME_PERCENT))

        if self._today().weekday() == PROMOTION_WEEKDAY:
            discounts.append(Discount.fixed("Monday promotion", PROMOTION_AMOUNT))

        if total_units(lines) >= BULK_MIN_UNITS:
            discounts.append(
                Discount.percentage(f"Bulk purchase ({BULK_MIN_UNITS}+ items)", BULK_PERCENT)
            )

        if previous_orders >= LOYALTY_MIN_ORDERS:
            discounts.append(Discount.percentage("Loyal customer", LOYALTY_PERCENT))

        return discounts

    @staticmethod
    def fold(subtotal: Money, discounts: list[Discount]) -> Money:
        """Apply ``discounts`` left to right; the result never drops below zero."""
        final, _ = DiscountEngine.fold_itemized(subtotal, discounts)
        return final

    @staticmethod
    def fold_itemized(
        subtotal: Money,
        discounts: list[Discount],
    ) -> tuple[Money, list[AppliedDiscount]]:
        """Like ``fold`` but also report what each discount actually removed."""
        running = subtotal.quantized()
        applied: list[AppliedDiscount] = []
        for discount in discounts:
            reduction = discount.reduction_from(running)
            running = running.minus_clamped(reduction)
            applied.append(AppliedDiscount(discount=discount, amount=reduction))
        return running, applied
