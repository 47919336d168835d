"""Shipping cost strategies.

One strategy per shipping mode.  Every strategy is a pure function of the
cart lines; none of them touches state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from storefront.domain.exceptions import ConfigurationError, ValidationError
from storefront.domain.model.cart import CartLine
from storefront.domain.model.order import ShippingMode
from storefront.domain.model.value_objects import Money


class ShippingStrategy(ABC):

    mode: ShippingMode
    name: str
    description: str
    estimated_time: str

    def cost(self, lines: list[CartLine]) -> Money:
        """Shipping cost for ``lines``; an empty cart has no cost to quote."""
        if not lines:
            raise ValidationError("Cannot quote shipping for an empty cart")
        return self._cost(lines)

    @abstractmethod
    def _cost(self, lines: list[CartLine]) -> Money:
        """Compute the cost for a non-empty cart."""


class StandardShipping(ShippingStrategy):
    mode = ShippingMode.STANDARD
    name = "Standard shipping"
    description = "Nationwide delivery through a certified courier."
    estimated_time = "5-7 business days"

    FLAT_COST = Money.of("5000")

    def _cost(self, lines: list[CartLine]) -> Money:
        return self.FLAT_COST


class ExpressShipping(ShippingStrategy):
    mode = ShippingMode.EXPRESS
    name = "Express shipping"
    description = "Priority delivery with real-time tracking."
    estimated_time = "1-2 business days"

    FLAT_COST = Money.of("15000")

    def _cost(self, lines: list[CartLine]) -> Money:
        return self.FLAT_COST


class StorePickup(ShippingStrategy):
    mode = ShippingMode.PICKUP
    name = "Store pickup"
    description = "Collect the order at the store at no cost."
    estimated_time = "Same day (2-4 hours after purchase)"

    def _cost(self, lines: list[CartLine]) -> Money:
        return Money.zero()


_STRATEGIES: dict[ShippingMode, type[ShippingStrategy]] = {
    ShippingMode.STANDARD: StandardShipping,
    ShippingMode.EXPRESS: ExpressShipping,
    ShippingMode.PICKUP: StorePickup,
}


def parse_shipping_mode(mode: ShippingMode | str) -> ShippingMode:
    if isinstance(mode, ShippingMode):
        return mode
    try:
        return ShippingMode(str(mode).strip().lower())
    except ValueError as exc:
        valid = ", ".join(m.value for m in ShippingMode)
        raise ConfigurationError(
            f"Unknown shipping mode {mode!r} (expected one of: {valid})"
        ) from exc


def shipping_strategy_for(mode: ShippingMode | str) -> ShippingStrategy:
    """Resolve a shipping mode to its strategy.

    Raises ConfigurationError for modes with no registered strategy.
    """
    resolved = parse_shipping_mode(mode)
    strategy_cls = _STRATEGIES.get(resolved)
    if strategy_cls is None:
        raise ConfigurationError(f"No shipping strategy registered for {resolved.value}")
    return strategy_cls()


@dataclass(frozen=True)
class ShippingOption:
    mode: ShippingMode
    name: str
    description: str
    estimated_time: str
    base_cost: Money


def shipping_options() -> list[ShippingOption]:
    """Describe every available mode with the cost it quotes for one item."""
    sample = [CartLine.of("sample", 1)]
    options = []
    for mode in ShippingMode:
        strategy = shipping_strategy_for(mode)
        options.append(
            ShippingOption(
                mode=mode,
                name=strategy.name,
                description=strategy.description,
                estimated_time=strategy.estimated_time,
                base_cost=strategy.cost(sample),
            )
        )
    return options
