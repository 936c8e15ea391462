"""
leadflow/services/transitions.py - Legal lead status transitions.

NEW → CONTACTED → QUALIFIED → APPOINTMENT_SET → CONSULTATION_COMPLETED → CONVERTED,
with LOST reachable from every open stage. CONVERTED is terminal; a LOST lead
can be reopened to NEW.
"""

from leadflow.db.models import LeadStatus
from leadflow.errors import InvalidTransition, format_status  # noqa: F401  (re-exported)

INITIAL_STATUS = LeadStatus.NEW

ALLOWED_TRANSITIONS: dict[LeadStatus, tuple[LeadStatus, ...]] = {
    LeadStatus.NEW: (LeadStatus.CONTACTED, LeadStatus.LOST),
    LeadStatus.CONTACTED: (LeadStatus.QUALIFIED, LeadStatus.LOST),
    LeadStatus.QUALIFIED: (LeadStatus.APPOINTMENT_SET, LeadStatus.LOST),
    LeadStatus.APPOINTMENT_SET: (LeadStatus.CONSULTATION_COMPLETED, LeadStatus.LOST),
    LeadStatus.CONSULTATION_COMPLETED: (LeadStatus.CONVERTED, LeadStatus.LOST),
    LeadStatus.CONVERTED: (),
    LeadStatus.LOST: (LeadStatus.NEW,),
}


def allowed_next(status: LeadStatus) -> tuple[LeadStatus, ...]:
    """Legal destinations from `status`, in declared order."""
    return ALLOWED_TRANSITIONS[LeadStatus(status)]


def is_terminal(status: LeadStatus) -> bool:
    return not allowed_next(status)


def check_transition(current: LeadStatus, requested: LeadStatus) -> bool:
    """
    Validate a requested status change.

    Returns:
        False for a self-transition (a no-op the caller should skip),
        True for a legal edge.

    Raises:
        InvalidTransition: for anything else.
    """
    current = LeadStatus(current)
    requested = LeadStatus(requested)

    if current == requested:
        return False

    allowed = allowed_next(current)
    if requested not in allowed:
        raise InvalidTransition(current, requested, allowed)
    return True
