"""Application services: back-office order listing and sales stats.

Both are admin-only and read straight from the store of record; neither
goes through the order cache.
"""

from __future__ import annotations

from datetime import datetime

from storefront.application.dto import (
    OrderStatsDTO,
    OrderSummaryDTO,
    order_to_summary,
    stats_to_dto,
)
from storefront.domain.exceptions import PermissionDeniedError, ValidationError
from storefront.domain.model.customer import Identity
from storefront.domain.model.order import OrderStatus, ShippingMode
from storefront.domain.model.order_report import OrderFilter
from storefront.domain.repository.order_repository import OrderRepository


def _require_admin(identity: Identity) -> None:
    if not identity.is_admin:
        raise PermissionDeniedError("Only administrators can view every order")


def _parse_enum(enum_cls, raw, label: str):
    if raw is None or isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError as exc:
        valid = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"Unknown {label} {raw!r} (expected one of: {valid})") from exc


class ListAllOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        identity: Identity,
        status: OrderStatus | str | None = None,
        shipping_mode: ShippingMode | str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> list[OrderSummaryDTO]:
        """Every order matching the filters, newest first.

        Date bounds are inclusive and must be timezone-aware.
        """
        _require_admin(identity)
        criteria = OrderFilter(
            status=_parse_enum(OrderStatus, status, "order status"),
            shipping_mode=_parse_enum(ShippingMode, shipping_mode, "shipping mode"),
            created_from=created_from,
            created_to=created_to,
        )
        return [order_to_summary(order) for order in self._order_repo.list_all(criteria)]


class OrderStatsHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, identity: Identity) -> OrderStatsDTO:
        _require_admin(identity)
        return stats_to_dto(self._order_repo.stats())
