"""
leadflow/notifications/events.py - Payloads handed to out-of-process delivery.
"""

from dataclasses import asdict, dataclass
from typing import Optional


@dataclass(frozen=True)
class LeadNotificationEvent:
    """Denormalized snapshot of a freshly captured lead, safe to use after the session closes."""

    lead_id: str
    organization_id: str
    organization_name: str
    first_name: Optional[str]
    last_name: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    source: str
    temperature: str
    score: int

    @property
    def display_name(self) -> str:
        if not self.first_name:
            return "New Lead"
        return f"{self.first_name} {self.last_name}" if self.last_name else self.first_name

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DispatchResult:
    email_sent: int = 0
    email_failed: int = 0
    sms_sent: int = 0
    sms_failed: int = 0
    rate_limited: bool = False
