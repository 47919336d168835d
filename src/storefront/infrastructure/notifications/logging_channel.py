"""Notification channel that writes each message to the structured log.

Stands in for an e-mail gateway until one is wired in.
"""

from __future__ import annotations

import structlog

from storefront.application.notifications import (
    NotificationChannel,
    NotificationKind,
    NotificationTask,
)

logger = structlog.get_logger(__name__)


class LoggingNotificationChannel(NotificationChannel):

    def send(self, task: NotificationTask) -> None:
        logger.info(
            "notification.sent",
            to=task.contact_email,
            subject=render_subject(task),
            order_id=task.order_id,
            total=str(task.total),
        )


def render_subject(task: NotificationTask) -> str:
    if task.kind == NotificationKind.ORDER_CONFIRMATION:
        return f"Order {task.order_id} confirmed"
    return f"Order {task.order_id} is now {task.status}"
