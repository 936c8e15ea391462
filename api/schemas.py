"""
api/schemas.py - Pydantic request/response models for all API endpoints.

These are the API contract - separate from DB ORM models so we can
control exactly what data is exposed over HTTP. The capture endpoint takes
leadflow.capture.submission.LeadSubmission as its request body directly.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from leadflow.db.models import (
    ActivityType,
    InsuranceStatus,
    LeadSource,
    LeadStatus,
    LeadTemperature,
)


# ── Capture ──────────────────────────────────────────────────────────────────

class LeadCaptureResponse(BaseModel):
    success: bool = True
    lead_id: str
    temperature: LeadTemperature
    score: int


# ── Lead ─────────────────────────────────────────────────────────────────────

class LeadOut(BaseModel):
    id: str
    organization_id: str
    landing_page_id: Optional[str] = None
    campaign_id: Optional[str] = None
    territory_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    source: LeadSource
    source_detail: Optional[str] = None
    status: LeadStatus
    temperature: LeadTemperature
    score: int
    insurance_status: Optional[InsuranceStatus] = None
    notes: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_content: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    converted_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LeadStatusUpdate(BaseModel):
    status: LeadStatus = Field(..., description="New lead status")
    performed_by: Optional[str] = Field(default=None, description="User making the change")


# ── Activity ─────────────────────────────────────────────────────────────────

class LeadNoteCreate(BaseModel):
    body: str = Field(..., description="Note text")
    performed_by: Optional[str] = None


class LeadActivityOut(BaseModel):
    id: str
    lead_id: str
    activity_type: ActivityType
    subject: Optional[str] = None
    body: Optional[str] = None
    from_status: Optional[LeadStatus] = None
    to_status: Optional[LeadStatus] = None
    performed_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
