"""
leadflow/notifications/mailer.py - New-lead alert emails over Gmail SMTP.

Dry-run mode (NOTIFICATIONS_DRY_RUN=true) prints the alert instead of
sending it; the attempt is logged either way.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from functools import partial
from typing import Optional

from sqlalchemy.orm import Session

from leadflow.config import settings
from leadflow.db.models import NotificationChannel
from leadflow.errors import ChannelNotConfigured
from leadflow.notifications.delivery import deliver_logged
from leadflow.notifications.events import LeadNotificationEvent
from leadflow.notifications.templates import RenderedEmail

logger = logging.getLogger(__name__)

GMAIL_SMTP_HOST = "smtp.gmail.com"
GMAIL_SMTP_PORT = 465  # SSL

SMTP_FAILURES = (smtplib.SMTPException, OSError, ChannelNotConfigured)


class GmailMailer:
    def __init__(self, dry_run: Optional[bool] = None):
        self.smtp_user = settings.gmail_user
        self.smtp_password = settings.gmail_app_password
        self.dry_run = dry_run if dry_run is not None else settings.notifications_dry_run

    def send(
        self,
        db: Session,
        event: LeadNotificationEvent,
        to_address: str,
        email: RenderedEmail,
    ) -> bool:
        """Email the practice about `event`; False if SMTP refused it."""
        if self.dry_run:
            transmit = partial(self._print_dry_run, event, to_address, email)
        else:
            transmit = partial(self._send_via_smtp, to_address, email)

        return deliver_logged(
            db, event, NotificationChannel.EMAIL, to_address, transmit, SMTP_FAILURES,
        )

    def _send_via_smtp(self, to_address: str, email: RenderedEmail) -> None:
        if not self.smtp_user or not self.smtp_password:
            raise ChannelNotConfigured("Gmail")

        msg = MIMEMultipart("alternative")
        msg["Subject"] = email.subject
        msg["From"] = self.smtp_user
        msg["To"] = to_address
        # plain first, HTML last: clients render the last part they support
        msg.attach(MIMEText(email.plain_body, "plain", "utf-8"))
        msg.attach(MIMEText(email.html_body, "html", "utf-8"))

        with smtplib.SMTP_SSL(GMAIL_SMTP_HOST, GMAIL_SMTP_PORT) as server:
            server.login(self.smtp_user, self.smtp_password)
            server.sendmail(self.smtp_user, to_address, msg.as_string())

    @staticmethod
    def _print_dry_run(event: LeadNotificationEvent, to_address: str, email: RenderedEmail) -> None:
        print(
            f"\n[DRY RUN EMAIL → {to_address}] {event.organization_name} / "
            f"{event.display_name} ({event.temperature}, score {event.score})\n"
            f"Subject: {email.subject}\n\n{email.plain_body}\n"
        )
        logger.info("DRY RUN: alert email for lead %s not sent.", event.lead_id)
