"""
leadflow/notifications/sms.py - Twilio SMS sender with dry-run support.

Talks to the Twilio REST API directly:
  Docs: https://www.twilio.com/docs/sms/api/message-resource
"""

import logging
from typing import Optional

import requests
from sqlalchemy.orm import Session
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from leadflow.config import settings
from leadflow.db.models import NotificationChannel
from leadflow.errors import ChannelNotConfigured
from leadflow.notifications.delivery import deliver_logged
from leadflow.notifications.events import LeadNotificationEvent

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


class TwilioSMSSender:
    def __init__(self, dry_run: Optional[bool] = None):
        self.account_sid = settings.twilio_account_sid
        self.auth_token = settings.twilio_auth_token
        self.from_number = settings.twilio_from_number
        self.dry_run = dry_run if dry_run is not None else settings.notifications_dry_run

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    def send(self, db: Session, event: LeadNotificationEvent, to_number: str, body: str) -> bool:
        """
        Send (or simulate) one SMS alert and log it to the DB.

        Returns:
            True on success (real send or dry-run), False on failure.
        """
        def transmit() -> None:
            if self.dry_run:
                print(f"\n[DRY RUN SMS → {to_number}]\n{body}\n")
                return
            if not self.configured:
                raise ChannelNotConfigured("Twilio")
            message_sid = self._post_message(to_number, body)
            logger.debug("Twilio accepted message %s for lead %s.", message_sid, event.lead_id)

        return deliver_logged(
            db, event, NotificationChannel.SMS, to_number, transmit,
            (requests.RequestException, ChannelNotConfigured),
        )

    @retry(
        retry=retry_if_exception_type(requests.ConnectionError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _post_message(self, to_number: str, body: str) -> str:
        """
        Internal: create a Message resource. Retries up to 3 times on
        connection errors only; an HTTP error response is final.
        """
        response = requests.post(
            TWILIO_MESSAGES_URL.format(sid=self.account_sid),
            auth=(self.account_sid, self.auth_token),
            data={"To": to_number, "From": self.from_number, "Body": body},
            timeout=15,
        )
        response.raise_for_status()
        return response.json().get("sid", "")
