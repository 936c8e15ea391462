"""
leadflow/services/lifecycle.py - Status changes and notes on existing leads.

Every accepted change is written together with its LeadActivity row in one
commit. Concurrent changes to the same lead are serialized by the row lock
taken in get_lead_for_update, and the Lead.version_id check catches any
writer that slipped past it; the loser gets a StorageFailure(conflict=True)
rather than a silent retry.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from leadflow.db import repository
from leadflow.db.models import ActivityType, Lead, LeadActivity, LeadStatus, utcnow
from leadflow.errors import InvalidTransition, LeadNotFound, MissingField, StorageFailure
from leadflow.services.transitions import check_transition, format_status

logger = logging.getLogger(__name__)


def change_lead_status(
    db: Session,
    lead_id: str,
    new_status: LeadStatus,
    performed_by: Optional[str] = None,
) -> Lead:
    """
    Move a lead to `new_status` if the transition table allows it.

    Requesting the status the lead already has is a no-op: the lead is
    returned untouched and no activity is recorded.

    Raises:
        LeadNotFound:      no lead with this id.
        InvalidTransition: the edge is not in the transition table.
        StorageFailure:    the write failed or lost a concurrent race.
    """
    new_status = LeadStatus(new_status)

    lead = repository.get_lead_for_update(db, lead_id)
    if lead is None:
        raise LeadNotFound(lead_id)

    old_status = LeadStatus(lead.status)
    try:
        accepted = check_transition(old_status, new_status)
    except InvalidTransition:
        db.rollback()
        raise
    if not accepted:
        # nothing to write; end the transaction so the row lock is released
        db.commit()
        logger.debug("Lead %s already %s; nothing to do.", lead_id, new_status.value)
        return lead

    try:
        lead.status = new_status
        # converted_at is set iff the lead is converted
        lead.converted_at = utcnow() if new_status == LeadStatus.CONVERTED else None

        repository.add_activity(
            db,
            lead_id=lead.id,
            activity_type=ActivityType.STATUS_CHANGE,
            subject=f"Status changed from {format_status(old_status)} to {format_status(new_status)}",
            body=(
                f'Lead status was updated from "{format_status(old_status)}" '
                f'to "{format_status(new_status)}"'
            ),
            from_status=old_status,
            to_status=new_status,
            performed_by=performed_by,
        )
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        raise StorageFailure(
            f"Lead {lead_id} was modified concurrently; reload and try again.",
            conflict=True,
            cause=exc,
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageFailure(f"Failed to update status of lead {lead_id}", cause=exc) from exc

    logger.info(
        "Lead %s status %s → %s (by %s).",
        lead_id, old_status.value, new_status.value, performed_by or "system",
    )
    return lead


def add_lead_note(
    db: Session,
    lead_id: str,
    body: Optional[str],
    performed_by: Optional[str] = None,
) -> LeadActivity:
    """Append a free-text note to a lead's activity trail."""
    text = (body or "").strip()
    if not text:
        raise MissingField("body")

    lead = repository.get_lead(db, lead_id)
    if lead is None:
        raise LeadNotFound(lead_id)

    try:
        activity = repository.add_activity(
            db,
            lead_id=lead.id,
            activity_type=ActivityType.NOTE,
            body=text,
            performed_by=performed_by,
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageFailure(f"Failed to add note to lead {lead_id}", cause=exc) from exc

    logger.info("Note added to lead %s.", lead_id)
    return activity
