"""Unit tests for the Order aggregate and its status state machine."""

from datetime import datetime, timezone

import pytest

from storefront.domain.exceptions import InvalidTransitionError, ValidationError
from storefront.domain.model.order import (
    Order,
    OrderLineItem,
    OrderStatus,
    ShippingMode,
)
from storefront.domain.model.value_objects import Money, Quantity


def _make_item(name: str = "Keyboard", qty: int = 1, price: str = "100000") -> OrderLineItem:
    """Helper to build a valid line item."""
    return OrderLineItem(
        product_id=f"p-{name.lower()}",
        product_name=name,
        quantity=Quantity(qty),
        unit_price=Money.of(price),
    )


def _make_order(**overrides) -> Order:
    kwargs = dict(
        customer_id="c-1",
        items=[_make_item(qty=2)],
        discount_total=Money.of("20000"),
        shipping_cost=Money.of("5000"),
        shipping_mode=ShippingMode.STANDARD,
        shipping_address="Calle 1 # 2-3",
    )
    kwargs.update(overrides)
    return Order.create(**kwargs)


class TestOrderCreation:

    def test_totals(self):
        order = _make_order()
        assert order.subtotal == Money.of("200000")
        assert order.total == Money.of("185000")
        assert order.total_items == 2

    def test_starts_processing_with_one_history_entry(self):
        order = _make_order()
        assert order.status == OrderStatus.PROCESSING
        assert len(order.history) == 1
        assert order.history[0].status == OrderStatus.PROCESSING
        assert order.history[0].actor is None

    def test_ids_are_unique(self):
        assert _make_order().id != _make_order().id

    def test_empty_items_rejected(self):
        with pytest.raises(ValidationError):
            _make_order(items=[])

    def test_blank_address_rejected(self):
        with pytest.raises(ValidationError, match="address"):
            _make_order(shipping_address="  ")

    def test_discount_above_subtotal_rejected(self):
        with pytest.raises(ValidationError, match="exceed"):
            _make_order(discount_total=Money.of("200001"))

    def test_zero_total_rejected(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            _make_order(
                discount_total=Money.of("200000"),
                shipping_cost=Money.zero(),
                shipping_mode=ShippingMode.PICKUP,
            )


class TestLegalTransitions:

    @pytest.mark.parametrize(
        "path",
        [
            [OrderStatus.SHIPPED],
            [OrderStatus.CANCELLED],
            [OrderStatus.SHIPPED, OrderStatus.COMPLETED],
            [OrderStatus.SHIPPED, OrderStatus.CANCELLED],
        ],
    )
    def test_paths(self, path):
        order = _make_order()
        for status in path:
            order.transition_to(status, actor="admin-1")
        assert order.status == path[-1]
        assert len(order.history) == 1 + len(path)
        assert order.history[-1].status == order.status

    def test_history_records_actor_and_time(self):
        order = _make_order()
        when = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        change = order.transition_to(OrderStatus.SHIPPED, actor="admin-1", now=when)
        assert change.actor == "admin-1"
        assert change.changed_at == when
        assert order.last_status_change == change


class TestIllegalTransitions:

    @pytest.mark.parametrize(
        "setup, target",
        [
            ([], OrderStatus.COMPLETED),
            ([], OrderStatus.PROCESSING),
            ([OrderStatus.SHIPPED], OrderStatus.PROCESSING),
            ([OrderStatus.SHIPPED, OrderStatus.COMPLETED], OrderStatus.SHIPPED),
            ([OrderStatus.SHIPPED, OrderStatus.COMPLETED], OrderStatus.CANCELLED),
            ([OrderStatus.CANCELLED], OrderStatus.SHIPPED),
        ],
    )
    def test_rejected_and_state_unchanged(self, setup, target):
        order = _make_order()
        for status in setup:
            order.transition_to(status)
        status_before = order.status
        history_before = list(order.history)

        with pytest.raises(InvalidTransitionError):
            order.transition_to(target)

        assert order.status == status_before
        assert order.history == history_before

    def test_terminal_states_are_final(self):
        order = _make_order()
        order.transition_to(OrderStatus.CANCELLED)
        assert order.is_final
        assert not order.can_be_cancelled
