"""
leadflow/notifications/dispatch.py - Fan a new-lead event out to email and SMS.

Runs after the lead is committed, usually as a FastAPI background task.
Delivery problems are logged and counted, never raised: the lead is already
durable and must not be affected by a flaky provider.
"""

import logging
from typing import Optional

from leadflow.config import settings
from leadflow.db import repository
from leadflow.db.session import get_session
from leadflow.notifications.events import DispatchResult, LeadNotificationEvent
from leadflow.notifications.mailer import GmailMailer
from leadflow.notifications.rate_limit import NotificationRateLimiter
from leadflow.notifications.sms import TwilioSMSSender
from leadflow.notifications.templates import render_lead_email, render_lead_sms

logger = logging.getLogger(__name__)

default_rate_limiter = NotificationRateLimiter(
    max_events=settings.notification_rate_limit_max,
    window_seconds=settings.notification_rate_limit_window_seconds,
)


def lead_dashboard_url(lead_id: str) -> str:
    return f"{settings.dashboard_base_url.rstrip('/')}/leads/{lead_id}"


def dispatch_lead_notification(
    event: LeadNotificationEvent,
    mailer: Optional[GmailMailer] = None,
    sms_sender: Optional[TwilioSMSSender] = None,
    rate_limiter: Optional[NotificationRateLimiter] = None,
) -> DispatchResult:
    """
    Send the new-lead alert to the organization's notification email and phone.

    Args:
        event:        Snapshot of the captured lead.
        mailer:       Email sender (defaults to GmailMailer()).
        sms_sender:   SMS sender (defaults to TwilioSMSSender()).
        rate_limiter: Per-organization throttle (defaults to the process-wide one).

    Returns:
        DispatchResult with per-channel sent/failed counts.
    """
    result = DispatchResult()
    limiter = rate_limiter or default_rate_limiter

    if not limiter.allow(event.organization_id):
        logger.warning("Rate limited lead alerts for organization %s.", event.organization_id)
        result.rate_limited = True
        return result

    mailer = mailer or GmailMailer()
    sms_sender = sms_sender or TwilioSMSSender()

    try:
        with get_session() as db:
            organization = repository.get_organization(db, event.organization_id)
            if organization is None:
                logger.warning(
                    "Organization %s vanished before alert for lead %s.",
                    event.organization_id, event.lead_id,
                )
                return result

            if organization.notification_email:
                email = render_lead_email(event, lead_dashboard_url(event.lead_id))
                if mailer.send(db, event, organization.notification_email, email):
                    result.email_sent += 1
                else:
                    result.email_failed += 1

            if organization.notification_phone:
                body = render_lead_sms(event)
                if sms_sender.send(db, event, organization.notification_phone, body):
                    result.sms_sent += 1
                else:
                    result.sms_failed += 1
    except Exception as exc:
        # Best effort: a delivery failure must never surface as an intake failure
        logger.error("Lead alert dispatch failed for lead %s: %s", event.lead_id, exc)

    logger.info(
        "Lead alert for %s: email %d/%d, sms %d/%d.",
        event.lead_id,
        result.email_sent, result.email_sent + result.email_failed,
        result.sms_sent, result.sms_sent + result.sms_failed,
    )
    return result
