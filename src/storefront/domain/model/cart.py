"""Cart lines, the transient input of a checkout call."""

from __future__ import annotations

from dataclasses import dataclass

from storefront.domain.model.value_objects import Quantity


@dataclass(frozen=True)
class CartLine:
    """A product reference and the number of units the customer wants."""

    product_id: str
    quantity: Quantity

    @staticmethod
    def of(product_id: str, quantity: int) -> CartLine:
        return CartLine(product_id=product_id, quantity=Quantity(quantity))


def merge_lines(lines: list[CartLine]) -> list[CartLine]:
    """Collapse repeated product lines, keeping first-seen order."""
    totals: dict[str, int] = {}
    for line in lines:
        totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity.value
    return [CartLine.of(product_id, qty) for product_id, qty in totals.items()]


def total_units(lines: list[CartLine]) -> int:
    return sum(line.quantity.value for line in lines)
