"""Notification tasks and the channel port that delivers them.

Tasks are queued by the checkout and status-change paths and delivered
later by the NotificationDispatcher.  Delivery itself is an external
concern; infrastructure provides concrete channels.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from storefront.shared.work_queue import WorkQueue


class NotificationKind(Enum):
    ORDER_CONFIRMATION = "order_confirmation"
    STATUS_CHANGED = "status_changed"


@dataclass(frozen=True)
class NotificationTask:
    kind: NotificationKind
    order_id: str
    customer_id: str
    contact_email: str
    total: Decimal
    status: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


NotificationQueue = WorkQueue[NotificationTask]


class NotificationChannel(ABC):

    @abstractmethod
    def send(self, task: NotificationTask) -> None:
        """Deliver one notification; raise on failure."""
