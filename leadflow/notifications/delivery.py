"""
leadflow/notifications/delivery.py - Delivery bookkeeping shared by every alert channel.

Each attempt gets a notification_logs row that starts pending and ends up
sent or failed. Channel senders only supply the transport call.
"""

import logging
from typing import Callable

from sqlalchemy.orm import Session

from leadflow.db import repository
from leadflow.db.models import DeliveryStatus, NotificationChannel
from leadflow.notifications.events import LeadNotificationEvent

logger = logging.getLogger(__name__)


def deliver_logged(
    db: Session,
    event: LeadNotificationEvent,
    channel: NotificationChannel,
    recipient: str,
    transmit: Callable[[], None],
    failures: tuple[type[BaseException], ...],
) -> bool:
    """
    Run `transmit` inside a pending → sent/failed notification log entry.

    Only exceptions listed in `failures` are recorded as a failed delivery;
    anything else propagates to the dispatcher.

    Returns:
        True if the alert went out (or was simulated), False otherwise.
    """
    record = repository.log_notification(
        db=db,
        lead_id=event.lead_id,
        channel=channel,
        recipient=recipient,
        delivery_status=DeliveryStatus.PENDING,
    )

    try:
        transmit()
    except failures as exc:
        repository.update_notification_status(
            db, record.id, DeliveryStatus.FAILED, error_message=str(exc)
        )
        db.commit()
        logger.error(
            "%s alert for lead %s (org=%s) to %s failed: %s",
            channel.value, event.lead_id, event.organization_id, recipient, exc,
        )
        return False

    repository.update_notification_status(db, record.id, DeliveryStatus.SENT)
    db.commit()
    logger.info(
        "%s alert for %s lead %s (org=%s) delivered to %s.",
        channel.value, event.temperature, event.lead_id, event.organization_id, recipient,
    )
    return True
