"""
leadflow/services/intake.py - Business logic for capturing a lead from a landing page.

This is the "glue" layer that coordinates:
  - Validating the submission and the organization / landing page it targets
  - Scoring the lead and attributing its source
  - Writing the Lead and its first LeadActivity in one commit
  - Scheduling the best-effort side effects (submission counter, alert)
"""

import json
import logging
from typing import Any, Callable, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from leadflow.capture.submission import LeadSubmission
from leadflow.db import repository
from leadflow.db.models import ActivityType, Lead
from leadflow.db.session import get_session
from leadflow.errors import (
    InsufficientContact,
    LandingPageNotFound,
    MissingField,
    OrganizationNotFound,
    StorageFailure,
)
from leadflow.notifications.dispatch import dispatch_lead_notification
from leadflow.notifications.events import LeadNotificationEvent
from leadflow.services.attribution import build_source_detail, classify_source, map_insurance_status
from leadflow.services.scoring import score_submission
from leadflow.services.transitions import INITIAL_STATUS

logger = logging.getLogger(__name__)


class TaskScheduler(Protocol):
    """Anything with FastAPI BackgroundTasks' add_task signature."""

    def add_task(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        ...


def intake_lead(
    db: Session,
    submission: LeadSubmission,
    background: Optional[TaskScheduler] = None,
) -> Lead:
    """
    Validate, score, and persist a landing-page submission as a new Lead.

    Checks run in a fixed order and stop at the first failure, so a
    submission missing both organization_id and contact details reports
    MissingField, not InsufficientContact.

    Args:
        db:         Active SQLAlchemy session; committed here on success.
        submission: Cleaned form submission.
        background: Scheduler for post-commit side effects. When None they
                    run inline, still after the commit and still best-effort.

    Returns:
        The committed Lead, in status NEW.

    Raises:
        MissingField, InsufficientContact, OrganizationNotFound,
        LandingPageNotFound, StorageFailure.
    """
    if not submission.organization_id:
        raise MissingField("organization_id")
    if not submission.landing_page_id:
        raise MissingField("landing_page_id")
    if not submission.has_contact:
        raise InsufficientContact()

    organization = repository.get_active_organization(db, submission.organization_id)
    if organization is None:
        raise OrganizationNotFound(submission.organization_id)

    landing_page = repository.get_landing_page_for_organization(
        db, submission.landing_page_id, submission.organization_id
    )
    if landing_page is None:
        raise LandingPageNotFound(submission.landing_page_id)

    scored = score_submission(submission)
    source = classify_source(submission.utm_source, submission.utm_medium)
    source_detail = build_source_detail(
        submission.utm_source,
        submission.utm_medium,
        submission.utm_campaign,
        landing_page.name,
    )

    try:
        lead = repository.create_lead(
            db,
            organization_id=organization.id,
            landing_page_id=landing_page.id,
            campaign_id=landing_page.campaign_id,
            territory_id=landing_page.territory_id,
            first_name=submission.first_name,
            last_name=submission.last_name,
            email=submission.email,
            phone=submission.phone,
            source=source,
            source_detail=source_detail,
            status=INITIAL_STATUS,
            temperature=scored.temperature,
            score=scored.score,
            insurance_status=map_insurance_status(submission.insurance),
            insurance_details=submission.insurance,
            notes=submission.notes,
            utm_source=submission.utm_source,
            utm_medium=submission.utm_medium,
            utm_campaign=submission.utm_campaign,
            utm_content=submission.utm_content,
        )
        repository.add_activity(
            db,
            lead_id=lead.id,
            activity_type=ActivityType.NOTE,
            subject="Lead captured from landing page",
            body=_capture_note(landing_page.name, scored.score, scored.temperature.value, submission),
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Lead write failed for landing page %s: %s", landing_page.id, exc)
        raise StorageFailure("Failed to save lead", cause=exc) from exc

    logger.info(
        "Lead captured: %s for %s (source=%s, score=%d, temperature=%s)",
        lead.id, organization.name, source.value, scored.score, scored.temperature.value,
    )

    event = LeadNotificationEvent(
        lead_id=lead.id,
        organization_id=organization.id,
        organization_name=organization.name,
        first_name=lead.first_name,
        last_name=lead.last_name,
        phone=lead.phone,
        email=lead.email,
        source=source.value,
        temperature=scored.temperature.value,
        score=scored.score,
    )
    _schedule(background, record_landing_page_submission, landing_page.id)
    _schedule(background, dispatch_lead_notification, event)

    return lead


# ── Side effects ─────────────────────────────────────────────────────────────

def record_landing_page_submission(landing_page_id: str) -> None:
    """Increment the landing page's submission counter. Failures are logged, not raised."""
    try:
        with get_session() as db:
            page = repository.increment_submission_count(db, landing_page_id)
        if page is None:
            logger.warning("Landing page %s disappeared before its counter was bumped.", landing_page_id)
    except Exception as exc:
        logger.error("Failed to increment submission count for %s: %s", landing_page_id, exc)


def _schedule(background: Optional[TaskScheduler], func: Callable[..., Any], *args: Any) -> None:
    if background is not None:
        background.add_task(func, *args)
        return
    try:
        func(*args)
    except Exception as exc:
        logger.error("Post-intake task %s failed: %s", getattr(func, "__name__", func), exc)


def _capture_note(page_name: str, score: int, temperature: str, submission: LeadSubmission) -> str:
    body = (
        f'Lead submitted form on landing page "{page_name}". '
        f"Initial score: {score}, Temperature: {temperature}."
    )
    if submission.custom_fields:
        body += f" Additional data: {json.dumps(submission.custom_fields, default=str)}"
    return body
