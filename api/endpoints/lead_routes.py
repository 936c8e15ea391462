"""
api/endpoints/lead_routes.py - Lead lifecycle routes.

GET    /leads                   - List leads (filterable by organization, status)
GET    /leads/stats             - Aggregate counts by status
GET    /leads/{id}              - Get a single lead
GET    /leads/{id}/activities   - Activity trail for a lead
PATCH  /leads/{id}/status       - Move a lead along the pipeline
POST   /leads/{id}/notes        - Add a note to a lead
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from leadflow.db import repository
from leadflow.db.models import LeadStatus
from leadflow.db.session import get_db
from leadflow.errors import InvalidTransition, LeadNotFound, MissingField, StorageFailure
from leadflow.services.lifecycle import add_lead_note, change_lead_status
from api.schemas import LeadActivityOut, LeadNoteCreate, LeadOut, LeadStatusUpdate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=list[LeadOut], summary="List leads")
def list_leads(
    organization_id: Optional[str] = Query(default=None),
    status: Optional[LeadStatus] = Query(
        default=None,
        description="Filter by status. Omit to return all leads.",
    ),
    limit: int = Query(default=50, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """Return leads newest first, optionally filtered by organization and status."""
    return repository.list_leads(db, organization_id=organization_id, status=status, limit=limit)


@router.get("/stats", summary="Lead counts by status")
def lead_stats(
    organization_id: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    """Return aggregate lead counts grouped by status."""
    stats = repository.count_leads_by_status(db, organization_id=organization_id)
    stats["total"] = sum(stats.values())
    return stats


@router.get("/{lead_id}", response_model=LeadOut, summary="Get lead by ID")
def get_lead(lead_id: str, db: Session = Depends(get_db)):
    lead = repository.get_lead(db, lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail=f"Lead {lead_id} not found.")
    return lead


@router.get("/{lead_id}/activities", response_model=list[LeadActivityOut], summary="Lead activity trail")
def get_lead_activities(lead_id: str, db: Session = Depends(get_db)):
    if not repository.get_lead(db, lead_id):
        raise HTTPException(status_code=404, detail=f"Lead {lead_id} not found.")
    return repository.get_activities(db, lead_id)


@router.patch("/{lead_id}/status", response_model=LeadOut, summary="Update lead status")
def patch_lead_status(
    lead_id: str,
    payload: LeadStatusUpdate,
    db: Session = Depends(get_db),
):
    """
    Move a lead to a new status.

    Requesting the current status is a no-op. Illegal transitions return 400
    with the current status and the statuses that are allowed next.
    """
    try:
        lead = change_lead_status(db, lead_id, payload.status, performed_by=payload.performed_by)
    except LeadNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except InvalidTransition as exc:
        raise HTTPException(status_code=400, detail=exc.to_dict())
    except StorageFailure as exc:
        if exc.conflict:
            raise HTTPException(status_code=409, detail=str(exc))
        raise HTTPException(status_code=500, detail="Failed to update lead status")
    return lead


@router.post(
    "/{lead_id}/notes",
    response_model=LeadActivityOut,
    status_code=201,
    summary="Add a note to a lead",
)
def post_lead_note(
    lead_id: str,
    payload: LeadNoteCreate,
    db: Session = Depends(get_db),
):
    try:
        return add_lead_note(db, lead_id, payload.body, performed_by=payload.performed_by)
    except MissingField:
        raise HTTPException(status_code=400, detail="Note content is required")
    except LeadNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except StorageFailure:
        raise HTTPException(status_code=500, detail="Failed to add note")
