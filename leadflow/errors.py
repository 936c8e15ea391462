"""
leadflow/errors.py - Error taxonomy for lead intake and lifecycle operations.

Services raise these; the HTTP layer (api/) translates them into responses.
None of them is fatal to the process.
"""

from typing import Optional, Sequence


class LeadflowError(Exception):
    """Base class for every recoverable engine error."""


# ── Intake ───────────────────────────────────────────────────────────────────

class IntakeError(LeadflowError):
    """A lead submission was rejected before anything was written."""


class MissingField(IntakeError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing {field}")


class InsufficientContact(IntakeError):
    def __init__(self):
        super().__init__("Please provide either an email or phone number")


class OrganizationNotFound(IntakeError):
    def __init__(self, organization_id: str):
        self.organization_id = organization_id
        super().__init__(f"Organization {organization_id} not found or inactive")


class LandingPageNotFound(IntakeError):
    def __init__(self, landing_page_id: str):
        self.landing_page_id = landing_page_id
        super().__init__(f"Landing page {landing_page_id} not found")


# ── Lifecycle ────────────────────────────────────────────────────────────────

class LeadNotFound(LeadflowError):
    def __init__(self, lead_id: str):
        self.lead_id = lead_id
        super().__init__(f"Lead {lead_id} not found")


class InvalidTransition(LeadflowError):
    """
    A status change that is neither a legal edge nor a self-transition.

    Carries the current state, the requested state and the legal next
    states so callers can render a precise message.
    """

    def __init__(self, current, requested, allowed: Sequence):
        self.current = current
        self.requested = requested
        self.allowed = list(allowed)
        allowed_text = ", ".join(format_status(s) for s in self.allowed) or "none"
        super().__init__(
            f"Invalid status transition from '{format_status(current)}' to "
            f"'{format_status(requested)}'. Allowed transitions: {allowed_text}"
        )

    def to_dict(self) -> dict:
        return {
            "message": str(self),
            "current_status": _value(self.current),
            "requested_status": _value(self.requested),
            "allowed": [_value(s) for s in self.allowed],
        }


# ── Storage ──────────────────────────────────────────────────────────────────

class StorageFailure(LeadflowError):
    """Wraps any datastore failure during an atomic write."""

    def __init__(self, message: str, conflict: bool = False, cause: Optional[BaseException] = None):
        self.conflict = conflict
        self.cause = cause
        super().__init__(message)


# ── Notifications ────────────────────────────────────────────────────────────

class ChannelNotConfigured(LeadflowError):
    """An alert channel is missing the credentials it needs to send."""

    def __init__(self, channel: str):
        self.channel = channel
        super().__init__(f"{channel} is not configured")


def _value(status) -> str:
    return getattr(status, "value", status)


def format_status(status) -> str:
    """Display form of a status value, e.g. appointment_set -> "Appointment Set"."""
    return " ".join(word.capitalize() for word in str(_value(status)).split("_"))
