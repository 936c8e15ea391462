"""
tests/test_intake.py - Tests for the lead intake orchestrator.

Runs against the in-memory SQLite fixture from conftest.py. Notifications
run in dry-run mode (NOTIFICATIONS_DRY_RUN=true), so nothing leaves the
process.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from leadflow.capture.submission import LeadSubmission
from leadflow.db.models import (
    ActivityType,
    InsuranceStatus,
    Lead,
    LeadActivity,
    LeadSource,
    LeadStatus,
    LeadTemperature,
    NotificationLog,
    OrganizationStatus,
)
from leadflow.errors import (
    InsufficientContact,
    LandingPageNotFound,
    MissingField,
    OrganizationNotFound,
    StorageFailure,
)
from leadflow.notifications.events import LeadNotificationEvent
from leadflow.services import intake
from leadflow.services.intake import intake_lead, record_landing_page_submission


def make_submission(org, page, **overrides) -> LeadSubmission:
    fields = {
        "organization_id": org.id,
        "landing_page_id": page.id,
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "Jane@Example.com",
        "phone": "555-1234",
        "insurance": "Yes",
        "notes": "call me",
    }
    fields.update(overrides)
    return LeadSubmission(**fields)


# ── Validation ────────────────────────────────────────────────────────────────

class TestValidation:
    def test_missing_organization_reported_before_contact(self, db):
        with pytest.raises(MissingField) as exc_info:
            intake_lead(db, LeadSubmission(landing_page_id="lp-1"))
        assert exc_info.value.field == "organization_id"

    def test_missing_landing_page(self, db):
        with pytest.raises(MissingField) as exc_info:
            intake_lead(db, LeadSubmission(organization_id="org-1", email="a@b.com"))
        assert exc_info.value.field == "landing_page_id"

    def test_insufficient_contact(self, db, org, page):
        submission = make_submission(org, page, email=None, phone="  ")
        with pytest.raises(InsufficientContact):
            intake_lead(db, submission)

    def test_unknown_organization(self, db, page):
        submission = LeadSubmission(organization_id="nope", landing_page_id=page.id, email="a@b.com")
        with pytest.raises(OrganizationNotFound):
            intake_lead(db, submission)

    def test_inactive_organization(self, db, make_organization, make_landing_page):
        paused = make_organization(status=OrganizationStatus.PAUSED)
        page = make_landing_page(paused)
        with pytest.raises(OrganizationNotFound):
            intake_lead(db, make_submission(paused, page))

    def test_soft_deleted_organization(self, db, make_organization, make_landing_page):
        deleted = make_organization(deleted_at=datetime.now(timezone.utc))
        page = make_landing_page(deleted)
        with pytest.raises(OrganizationNotFound):
            intake_lead(db, make_submission(deleted, page))

    def test_landing_page_of_another_organization(self, db, org, make_organization, make_landing_page):
        other_page = make_landing_page(make_organization(name="Other Practice"))
        with pytest.raises(LandingPageNotFound):
            intake_lead(db, make_submission(org, other_page))

    def test_rejected_submission_writes_nothing(self, db, org, page):
        with pytest.raises(InsufficientContact):
            intake_lead(db, make_submission(org, page, email=None, phone=None))
        assert db.query(Lead).count() == 0


# ── Successful capture ────────────────────────────────────────────────────────

class TestCapture:
    def test_creates_scored_new_lead(self, db, org, page):
        lead = intake_lead(db, make_submission(org, page), background=MagicMock())

        assert lead.id is not None
        assert lead.status == LeadStatus.NEW
        assert lead.score == 90
        assert lead.temperature == LeadTemperature.HOT
        assert lead.email == "jane@example.com"
        assert lead.insurance_status == InsuranceStatus.HAS_INSURANCE
        assert lead.insurance_details == "Yes"
        assert lead.converted_at is None
        assert lead.created_at is not None

    def test_copies_campaign_and_territory_from_page(self, db, org, page):
        lead = intake_lead(db, make_submission(org, page), background=MagicMock())
        assert lead.campaign_id == "camp-1"
        assert lead.territory_id == "terr-1"
        assert lead.landing_page_id == page.id

    def test_source_from_utm(self, db, org, page):
        submission = make_submission(
            org, page, utm_source="FB", utm_medium="paid", utm_campaign="spring", utm_content="v2",
        )
        lead = intake_lead(db, submission, background=MagicMock())
        assert lead.source == LeadSource.FACEBOOK
        assert lead.source_detail == "source:FB, medium:paid, campaign:spring"
        assert lead.utm_content == "v2"

    def test_source_detail_falls_back_to_page_name(self, db, org, page):
        lead = intake_lead(db, make_submission(org, page), background=MagicMock())
        assert lead.source == LeadSource.WEBSITE
        assert lead.source_detail == "Landing page: Invisalign Spring Offer"

    def test_first_activity_is_written_with_lead(self, db, org, page):
        submission = make_submission(org, page, custom_fields={"procedure": "implants"})
        lead = intake_lead(db, submission, background=MagicMock())

        activities = db.query(LeadActivity).filter(LeadActivity.lead_id == lead.id).all()
        assert len(activities) == 1
        assert activities[0].activity_type == ActivityType.NOTE
        assert activities[0].subject == "Lead captured from landing page"
        assert "Initial score: 90" in activities[0].body
        assert '"procedure": "implants"' in activities[0].body

    def test_storage_failure_rolls_back(self, db, org, page):
        with patch.object(db, "commit", side_effect=SQLAlchemyError("disk full")):
            with pytest.raises(StorageFailure):
                intake_lead(db, make_submission(org, page), background=MagicMock())
        assert db.query(Lead).count() == 0
        assert db.query(LeadActivity).count() == 0


# ── Side effects ──────────────────────────────────────────────────────────────

class TestSideEffects:
    def test_schedules_counter_and_notification(self, db, org, page):
        background = MagicMock()
        lead = intake_lead(db, make_submission(org, page), background=background)

        calls = background.add_task.call_args_list
        assert len(calls) == 2
        assert calls[0].args == (intake.record_landing_page_submission, page.id)

        func, event = calls[1].args
        assert func is intake.dispatch_lead_notification
        assert isinstance(event, LeadNotificationEvent)
        assert event.lead_id == lead.id
        assert event.organization_name == "Bright Smiles Dental"
        assert event.temperature == "hot"
        assert event.source == "website"
        assert event.phone == "555-1234"

    def test_inline_side_effects_run_after_commit(self, db, org, make_landing_page):
        page = make_landing_page(org, view_count=4)
        intake_lead(db, make_submission(org, page))

        db.refresh(page)
        assert page.submission_count == 1
        assert page.conversion_rate == pytest.approx(25.0)
        # dry-run email + SMS were both logged
        assert db.query(NotificationLog).count() == 2

    def test_counter_failure_does_not_fail_intake(self, db, org, page):
        with patch(
            "leadflow.services.intake.repository.increment_submission_count",
            side_effect=SQLAlchemyError("locked"),
        ):
            lead = intake_lead(db, make_submission(org, page))
        assert db.query(Lead).filter(Lead.id == lead.id).count() == 1

    def test_notification_failure_does_not_fail_intake(self, db, org, page):
        with patch(
            "leadflow.services.intake.dispatch_lead_notification",
            side_effect=RuntimeError("provider down"),
        ):
            lead = intake_lead(db, make_submission(org, page))
        assert db.query(Lead).filter(Lead.id == lead.id).count() == 1

    def test_record_submission_for_missing_page_is_harmless(self, db):
        record_landing_page_submission("does-not-exist")
