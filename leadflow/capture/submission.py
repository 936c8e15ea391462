"""
leadflow/capture/submission.py - Cleans and standardizes inbound lead form submissions.

Landing pages post loosely-typed form data; this module turns it into a typed
Pydantic model the intake orchestrator can trust: contact strings are
stripped, blank strings become None, and email addresses are lower-cased.
UTM values are kept exactly as sent.
"""

import logging
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class LeadSubmission(BaseModel):
    """A single landing-page form submission, before validation against the DB."""

    organization_id: Optional[str] = None
    landing_page_id: Optional[str] = None

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    insurance: Optional[str] = None          # free text, e.g. "Yes", "Not sure"
    notes: Optional[str] = None

    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_content: Optional[str] = None

    custom_fields: dict[str, Any] = Field(default_factory=dict)

    @field_validator(
        "organization_id", "landing_page_id",
        "first_name", "last_name", "email", "phone", "insurance", "notes",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator(
        "utm_source", "utm_medium", "utm_campaign", "utm_content",
        mode="before",
    )
    @classmethod
    def _keep_utm_verbatim(cls, value: Any) -> Optional[str]:
        # attribution values are stored as sent; only blanks are dropped
        if value is None or not str(value).strip():
            return None
        return str(value)

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else value

    @field_validator("custom_fields", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def has_contact(self) -> bool:
        """True if at least one reachable contact channel was supplied."""
        return bool(self.email or self.phone)

    @property
    def has_name(self) -> bool:
        return bool(self.first_name or self.last_name)
