"""
Missing person case APIs.
"""
from datetime import date, time
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional

from database.models import CaseStatus
from auth.dependencies import TokenClaims, get_current_user, get_db_session
from services.case_service import (
    CaseService, CaseNumberExhaustedError, case_to_dict, status_update_to_dict
)
from core.logger import logger
import config


router = APIRouter(prefix="/api/missing-persons", tags=["missing-persons"])


# Request Models
class CaseCreate(BaseModel):
    """Create case request. Presence of required fields is checked by the service."""
    full_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    last_seen_location: Optional[str] = None
    last_seen_latitude: Optional[float] = None
    last_seen_longitude: Optional[float] = None
    last_seen_date: Optional[date] = None
    last_seen_time: Optional[time] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    hair_color: Optional[str] = None
    eye_color: Optional[str] = None
    skin_tone: Optional[str] = None
    distinctive_features: Optional[str] = None
    clothing_description: Optional[str] = None
    medical_conditions: Optional[str] = None
    photo_url: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    additional_info: Optional[str] = None
    priority: Optional[str] = None


class CaseUpdate(BaseModel):
    """Partial update; only fields present in the body are written."""
    full_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    last_seen_location: Optional[str] = None
    last_seen_date: Optional[date] = None
    last_seen_time: Optional[time] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    hair_color: Optional[str] = None
    eye_color: Optional[str] = None
    skin_tone: Optional[str] = None
    distinctive_features: Optional[str] = None
    clothing_description: Optional[str] = None
    medical_conditions: Optional[str] = None
    photo_url: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    additional_info: Optional[str] = None
    priority: Optional[str] = None


class StatusChange(BaseModel):
    """Status transition request."""
    status: Optional[str] = None  # missing | investigation | found | closed
    update_note: Optional[str] = None
    found_location: Optional[str] = None


def _get_case_or_404(db: Session, case_id: int):
    case = CaseService.get_case(db, case_id)
    if case is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Missing person not found"
        )
    return case


@router.get("")
async def list_missing_persons(
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(config.CASE_LIST_DEFAULT_LIMIT, ge=1, le=config.CASE_LIST_MAX_LIMIT),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db_session)
):
    """
    List, search and filter cases, most recently reported first.
    Public endpoint.
    """
    try:
        rows, total = CaseService.list_cases(
            db, status=status_filter, priority=priority, search=search, limit=limit, offset=offset
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return {
        "data": [case_to_dict(case) for case in rows],
        "pagination": {
            "total": total,
            "limit": limit,
            "offset": offset,
            "hasMore": offset + limit < total,
        },
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_missing_person(
    payload: CaseCreate,
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db_session)
):
    """Report a missing person."""
    try:
        case = CaseService.create_case(db, current_user.id, payload.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except CaseNumberExhaustedError as e:
        logger.error(f"Case creation failed for account {current_user.id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return {
        "message": "Missing person report created successfully",
        "data": case_to_dict(case),
    }


@router.get("/my-reports")
async def my_reports(
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db_session)
):
    """Cases reported by the caller."""
    cases = CaseService.list_for_reporter(db, current_user.id)
    return {"data": [case_to_dict(case, include_reporter=False) for case in cases]}


@router.get("/{case_id}")
async def get_missing_person(
    case_id: int,
    db: Session = Depends(get_db_session)
):
    """
    Get one case with reporter contact and days missing.
    Public endpoint.
    """
    case = _get_case_or_404(db, case_id)
    return {"data": case_to_dict(case)}


@router.put("/{case_id}")
async def update_missing_person(
    case_id: int,
    payload: CaseUpdate,
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db_session)
):
    """
    Update case fields.
    Reporter or admin only.
    """
    case = _get_case_or_404(db, case_id)
    if case.reporter_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only update your own reports"
        )

    try:
        case = CaseService.update_case(db, case, payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return {
        "message": "Missing person updated successfully",
        "data": case_to_dict(case),
    }


@router.delete("/{case_id}")
async def delete_missing_person(
    case_id: int,
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db_session)
):
    """
    Delete a case permanently.
    Admin only.
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can delete reports"
        )
    case = _get_case_or_404(db, case_id)
    CaseService.delete_case(db, case)
    return {"message": "Missing person deleted successfully"}


@router.put("/{case_id}/status")
async def update_status(
    case_id: int,
    payload: StatusChange,
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db_session)
):
    """
    Move a case to a new status, audit it and notify the reporter.
    Any authenticated user; any status may follow any other.
    """
    if not payload.status:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Status is required"
        )
    try:
        new_status = CaseStatus(payload.status.strip().lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid status"
        )

    case = _get_case_or_404(db, case_id)
    case = CaseService.transition_status(
        db,
        case,
        actor_id=current_user.id,
        new_status=new_status,
        update_note=payload.update_note,
        found_location=payload.found_location,
    )
    return {
        "message": "Status updated successfully",
        "data": case_to_dict(case),
    }


@router.get("/{case_id}/updates")
async def status_updates(
    case_id: int,
    db: Session = Depends(get_db_session)
):
    """
    Status change audit trail for a case, newest first.
    Public endpoint.
    """
    _get_case_or_404(db, case_id)
    return {"data": [status_update_to_dict(u) for u in CaseService.status_history(db, case_id)]}
