"""
leadflow/db/repository.py - All database read/write operations.

Business logic should never write raw SQL or ORM queries directly -
everything goes through this module. Functions here flush but never commit;
the caller owns the transaction boundary.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from leadflow.db.models import (
    ActivityType,
    DeliveryStatus,
    LandingPage,
    Lead,
    LeadActivity,
    LeadStatus,
    NotificationChannel,
    NotificationLog,
    Organization,
    OrganizationStatus,
)

logger = logging.getLogger(__name__)


# ── Organization ─────────────────────────────────────────────────────────────

def get_organization(db: Session, organization_id: str) -> Optional[Organization]:
    return db.query(Organization).filter(Organization.id == organization_id).first()


def get_active_organization(db: Session, organization_id: str) -> Optional[Organization]:
    """Return the organization only if it exists, is not soft-deleted, and is active."""
    return (
        db.query(Organization)
        .filter(
            Organization.id == organization_id,
            Organization.status == OrganizationStatus.ACTIVE,
            Organization.deleted_at.is_(None),
        )
        .first()
    )


# ── Landing Page ─────────────────────────────────────────────────────────────

def get_landing_page_for_organization(
    db: Session, landing_page_id: str, organization_id: str
) -> Optional[LandingPage]:
    """Return the landing page only if it belongs to the given organization."""
    return (
        db.query(LandingPage)
        .filter(
            LandingPage.id == landing_page_id,
            LandingPage.organization_id == organization_id,
        )
        .first()
    )


def increment_submission_count(db: Session, landing_page_id: str) -> Optional[LandingPage]:
    """
    Bump the submission counter and recompute the conversion rate.

    The increment is done in SQL so concurrent submissions don't lose counts.
    Returns None if the landing page no longer exists.
    """
    updated = (
        db.query(LandingPage)
        .filter(LandingPage.id == landing_page_id)
        .update(
            {LandingPage.submission_count: LandingPage.submission_count + 1},
            synchronize_session=False,
        )
    )
    if not updated:
        return None

    page = db.query(LandingPage).filter(LandingPage.id == landing_page_id).first()
    db.refresh(page)
    if page.view_count > 0:
        page.conversion_rate = page.submission_count / page.view_count * 100
    db.flush()
    return page


# ── Lead ─────────────────────────────────────────────────────────────────────

def create_lead(db: Session, **fields) -> Lead:
    """Create a Lead row from column values and flush to obtain its id."""
    lead = Lead(**fields)
    db.add(lead)
    db.flush()
    logger.debug("Lead row created: %s (org=%s)", lead.id, lead.organization_id)
    return lead


def get_lead(db: Session, lead_id: str) -> Optional[Lead]:
    return db.query(Lead).filter(Lead.id == lead_id).first()


def get_lead_for_update(db: Session, lead_id: str) -> Optional[Lead]:
    """
    Fetch a lead with a row-level lock held until the transaction ends.

    Always reloads the row, so a session holding an older copy of the lead
    decides against the committed state.
    """
    return (
        db.query(Lead)
        .filter(Lead.id == lead_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def list_leads(
    db: Session,
    organization_id: Optional[str] = None,
    status: Optional[LeadStatus] = None,
    limit: int = 50,
) -> list[Lead]:
    query = db.query(Lead)
    if organization_id:
        query = query.filter(Lead.organization_id == organization_id)
    if status:
        query = query.filter(Lead.status == status)
    return query.order_by(Lead.created_at.desc()).limit(limit).all()


def count_leads_by_status(db: Session, organization_id: Optional[str] = None) -> dict[str, int]:
    """Return {status_value: count} with zero entries for unused statuses."""
    query = db.query(Lead.status, func.count(Lead.id))
    if organization_id:
        query = query.filter(Lead.organization_id == organization_id)
    counts = {status.value: 0 for status in LeadStatus}
    for status, count in query.group_by(Lead.status).all():
        counts[LeadStatus(status).value] = count
    return counts


# ── Lead Activity ────────────────────────────────────────────────────────────

def add_activity(
    db: Session,
    lead_id: str,
    activity_type: ActivityType,
    subject: Optional[str] = None,
    body: Optional[str] = None,
    from_status: Optional[LeadStatus] = None,
    to_status: Optional[LeadStatus] = None,
    performed_by: Optional[str] = None,
) -> LeadActivity:
    """Append an activity row. Activities are never updated or deleted."""
    activity = LeadActivity(
        lead_id=lead_id,
        activity_type=activity_type,
        subject=subject,
        body=body,
        from_status=from_status,
        to_status=to_status,
        performed_by=performed_by,
    )
    db.add(activity)
    db.flush()
    return activity


def get_activities(db: Session, lead_id: str) -> list[LeadActivity]:
    return (
        db.query(LeadActivity)
        .filter(LeadActivity.lead_id == lead_id)
        .order_by(LeadActivity.created_at.asc())
        .all()
    )


# ── Notification Log ─────────────────────────────────────────────────────────

def log_notification(
    db: Session,
    lead_id: str,
    channel: NotificationChannel,
    recipient: str,
    delivery_status: DeliveryStatus = DeliveryStatus.PENDING,
    error_message: Optional[str] = None,
) -> NotificationLog:
    """Create a NotificationLog record (called before and after sending)."""
    entry = NotificationLog(
        lead_id=lead_id,
        channel=channel,
        recipient=recipient,
        delivery_status=delivery_status,
        error_message=error_message,
        sent_at=datetime.now(timezone.utc) if delivery_status == DeliveryStatus.SENT else None,
    )
    db.add(entry)
    db.flush()
    return entry


def update_notification_status(
    db: Session,
    log_id: int,
    status: DeliveryStatus,
    error_message: Optional[str] = None,
) -> None:
    """Update delivery status after a send attempt."""
    update_data: dict = {"delivery_status": status}
    if status == DeliveryStatus.SENT:
        update_data["sent_at"] = datetime.now(timezone.utc)
    if error_message:
        update_data["error_message"] = error_message
    db.query(NotificationLog).filter(NotificationLog.id == log_id).update(update_data)
