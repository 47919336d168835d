"""Discounts and the order they are applied in."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money


class DiscountKind(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class Discount:
    """A named adjustment.

    ``value`` is a percent (0-100) for PERCENTAGE discounts and an amount
    in the order currency for FIXED ones.
    """

    name: str
    kind: DiscountKind
    value: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            raise ValidationError("Discount value must be a Decimal")
        if self.value < 0:
            raise ValidationError(f"Discount '{self.name}' cannot be negative")
        if self.kind == DiscountKind.PERCENTAGE and self.value > 100:
            raise ValidationError(f"Discount '{self.name}' exceeds 100%")

    def reduction_from(self, running: Money) -> Money:
        """How much this discount takes off ``running``, never more than it."""
        if self.kind == DiscountKind.PERCENTAGE:
            reduction = running.percentage(self.value)
        else:
            reduction = Money(self.value, running.currency).quantized()
        if reduction > running:
            return running
        return reduction

    def __str__(self) -> str:
        if self.kind == DiscountKind.PERCENTAGE:
            return f"{self.name} ({self.value.normalize()}%)"
        return f"{self.name} (-{Money(self.value)})"

    @staticmethod
    def percentage(name: str, percent: str | int | Decimal) -> Discount:
        return Discount(name=name, kind=DiscountKind.PERCENTAGE, value=Decimal(str(percent)))

    @staticmethod
    def fixed(name: str, amount: str | int | Decimal) -> Discount:
        return Discount(name=name, kind=DiscountKind.FIXED, value=Decimal(str(amount)))


@dataclass(frozen=True)
class AppliedDiscount:
    """A discount together with the amount it removed at its fold position."""

    discount: Discount
    amount: Money

    @property
    def name(self) -> str:
        return self.discount.name
