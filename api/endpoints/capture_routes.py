"""
api/endpoints/capture_routes.py - Public lead capture endpoint for landing pages.

POST /leads/capture   - Submit a landing-page form
GET  /leads/capture   - Endpoint health check
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.orm import Session

from leadflow.capture.submission import LeadSubmission
from leadflow.db.session import get_db
from leadflow.errors import (
    InsufficientContact,
    LandingPageNotFound,
    MissingField,
    OrganizationNotFound,
    StorageFailure,
)
from leadflow.services.intake import intake_lead
from api.schemas import LeadCaptureResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/capture", response_model=LeadCaptureResponse, summary="Capture a lead")
def capture_lead(
    submission: LeadSubmission,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """
    Create a lead from a landing-page submission.

    The counter bump and the new-lead alert run after the response is sent.
    """
    try:
        lead = intake_lead(db, submission, background=background_tasks)
    except (MissingField, InsufficientContact) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except (OrganizationNotFound, LandingPageNotFound) as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except StorageFailure:
        raise HTTPException(status_code=500, detail="An error occurred while processing your request")

    return LeadCaptureResponse(lead_id=lead.id, temperature=lead.temperature, score=lead.score)


@router.get("/capture", summary="Capture endpoint health")
def capture_health():
    return {
        "status": "ok",
        "endpoint": "lead-capture",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
