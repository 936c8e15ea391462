"""
leadflow/db/models.py - SQLAlchemy ORM models for lead intake and lifecycle.

Tables:
  - Organization     → a client practice that owns landing pages and leads
  - LandingPage      → a funnel page belonging to an Organization
  - Lead             → a prospective patient captured from a LandingPage
  - LeadActivity     → append-only audit trail entry for a Lead
  - NotificationLog  → one email/SMS delivery attempt for a new-lead alert
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Base ─────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Enums ────────────────────────────────────────────────────────────────────

class OrganizationStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class LeadSource(str, enum.Enum):
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    GOOGLE = "google"
    REFERRAL = "referral"
    WEBSITE = "website"


class LeadStatus(str, enum.Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    APPOINTMENT_SET = "appointment_set"
    CONSULTATION_COMPLETED = "consultation_completed"
    CONVERTED = "converted"
    LOST = "lost"


class LeadTemperature(str, enum.Enum):
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"


class InsuranceStatus(str, enum.Enum):
    HAS_INSURANCE = "has_insurance"
    NO_INSURANCE = "no_insurance"
    UNKNOWN = "unknown"


class ActivityType(str, enum.Enum):
    NOTE = "note"
    STATUS_CHANGE = "status_change"


class NotificationChannel(str, enum.Enum):
    EMAIL = "email"
    SMS = "sms"


class DeliveryStatus(str, enum.Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


# ── Models ───────────────────────────────────────────────────────────────────

class Organization(Base):
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=True, unique=True)
    status = Column(Enum(OrganizationStatus), default=OrganizationStatus.ACTIVE, nullable=False)
    notification_email = Column(String(255), nullable=True)   # new-lead alert recipient
    notification_phone = Column(String(32), nullable=True)    # new-lead SMS recipient
    deleted_at = Column(DateTime(timezone=True), nullable=True)  # soft delete
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    landing_pages = relationship("LandingPage", back_populates="organization")
    leads = relationship("Lead", back_populates="organization")

    def __repr__(self) -> str:
        return f"<Organization id={self.id} name={self.name!r}>"


class LandingPage(Base):
    __tablename__ = "landing_pages"

    id = Column(String(36), primary_key=True, default=_new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    campaign_id = Column(String(36), nullable=True)
    territory_id = Column(String(36), nullable=True)
    name = Column(String(255), nullable=False)
    view_count = Column(Integer, default=0, nullable=False)
    submission_count = Column(Integer, default=0, nullable=False)
    conversion_rate = Column(Float, nullable=True)             # 0.0 – 100.0
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    organization = relationship("Organization", back_populates="landing_pages")

    def __repr__(self) -> str:
        return f"<LandingPage id={self.id} name={self.name!r}>"


class Lead(Base):
    __tablename__ = "leads"

    id = Column(String(36), primary_key=True, default=_new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    landing_page_id = Column(String(36), ForeignKey("landing_pages.id", ondelete="SET NULL"), nullable=True)
    campaign_id = Column(String(36), nullable=True)
    territory_id = Column(String(36), nullable=True)

    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)

    source = Column(Enum(LeadSource), default=LeadSource.WEBSITE, nullable=False)
    source_detail = Column(String(512), nullable=True)
    status = Column(Enum(LeadStatus), default=LeadStatus.NEW, nullable=False)
    temperature = Column(Enum(LeadTemperature), default=LeadTemperature.COLD, nullable=False)
    score = Column(Integer, default=0, nullable=False)        # 0 – 100

    insurance_status = Column(Enum(InsuranceStatus), nullable=True)
    insurance_details = Column(String(255), nullable=True)    # raw answer, e.g. "Not sure"
    notes = Column(Text, nullable=True)

    utm_source = Column(String(255), nullable=True)
    utm_medium = Column(String(255), nullable=True)
    utm_campaign = Column(String(255), nullable=True)
    utm_content = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    converted_at = Column(DateTime(timezone=True), nullable=True)  # set iff status == converted
    version_id = Column(Integer, nullable=False)

    # Relationships
    organization = relationship("Organization", back_populates="leads")
    landing_page = relationship("LandingPage")
    activities = relationship(
        "LeadActivity",
        back_populates="lead",
        cascade="all, delete-orphan",
        order_by="LeadActivity.created_at",
    )

    # Concurrent updates from a stale version raise StaleDataError on flush
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Lead id={self.id} status={self.status} score={self.score}>"


class LeadActivity(Base):
    __tablename__ = "lead_activities"

    id = Column(String(36), primary_key=True, default=_new_id)
    lead_id = Column(String(36), ForeignKey("leads.id", ondelete="CASCADE"), nullable=False)
    activity_type = Column(Enum(ActivityType), nullable=False)
    subject = Column(String(512), nullable=True)
    body = Column(Text, nullable=True)
    from_status = Column(Enum(LeadStatus), nullable=True)
    to_status = Column(Enum(LeadStatus), nullable=True)
    performed_by = Column(String(255), nullable=True)         # user id, or None for system
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Relationships
    lead = relationship("Lead", back_populates="activities")

    def __repr__(self) -> str:
        return f"<LeadActivity id={self.id} lead_id={self.lead_id} type={self.activity_type}>"


class NotificationLog(Base):
    __tablename__ = "notification_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    lead_id = Column(String(36), ForeignKey("leads.id", ondelete="CASCADE"), nullable=False)
    channel = Column(Enum(NotificationChannel), nullable=False)
    recipient = Column(String(255), nullable=False)
    delivery_status = Column(Enum(DeliveryStatus), default=DeliveryStatus.PENDING, nullable=False)
    error_message = Column(Text, nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<NotificationLog id={self.id} channel={self.channel} status={self.delivery_status}>"
