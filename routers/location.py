"""
Location tracking APIs: fix ingestion, history and the admin live map.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import Any, Optional

from database.models import User
from auth.dependencies import TokenClaims, get_current_user, require_admin, get_db_session
from services.location_service import LocationService
from core.validators import validate_coordinates
from core.logger import logger
import config


router = APIRouter(prefix="/api/location", tags=["location"])

MAX_FIX_TIMESTAMP = 2**63 - 1


class LocationUpdate(BaseModel):
    """A GPS fix. Coordinates are checked by the handler so bad input gets a single message."""
    latitude: Any = None
    longitude: Any = None
    accuracy: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    # capture time, epoch milliseconds; must fit a BIGINT column
    timestamp: Optional[int] = Field(None, ge=0, le=MAX_FIX_TIMESTAMP)


def _load_admin(db: Session, claims: TokenClaims) -> User:
    admin = db.query(User).filter(User.id == claims.id).first()
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return admin


@router.post("/update")
async def update_location(
    payload: LocationUpdate,
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db_session)
):
    """
    Store the caller's current location and append it to their history.
    An older fix never replaces a newer current location.
    """
    is_valid, error = validate_coordinates(payload.latitude, payload.longitude)
    if not is_valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    applied = LocationService.record_fix(
        db,
        user_id=current_user.id,
        latitude=float(payload.latitude),
        longitude=float(payload.longitude),
        accuracy=payload.accuracy,
        fix_timestamp=payload.timestamp,
    )
    return {"message": "Location updated successfully", "applied": applied}


@router.post("/deactivate")
async def deactivate_location(
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db_session)
):
    """Drop the caller off the live map until their next fix."""
    deactivated = LocationService.deactivate(db, current_user.id)
    return {"message": "Location tracking stopped", "deactivated": deactivated}


@router.get("/updates")
async def location_update_count(
    current_user: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db_session)
):
    """
    Unseen location updates from other accounts.
    Admin only.
    """
    admin = _load_admin(db, current_user)
    return {
        "unreadCount": LocationService.unread_update_count(db, admin),
        "since": admin.location_seen_at.isoformat() if admin.location_seen_at else None,
    }


@router.put("/updates")
async def mark_location_updates_seen(
    current_user: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db_session)
):
    """
    Reset the unseen location update count.
    Admin only.
    """
    admin = _load_admin(db, current_user)
    seen_at = LocationService.mark_updates_seen(db, admin)
    return {"message": "Location updates marked as seen", "since": seen_at.isoformat()}


@router.get("/history")
async def location_history(
    user_id: Optional[int] = Query(None, alias="userId"),
    limit: int = Query(config.LOCATION_HISTORY_DEFAULT_LIMIT, ge=1),
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db_session)
):
    """
    Location history, newest first.
    Own history, or any account's for admins.
    """
    target_id = user_id if user_id is not None else current_user.id
    if target_id != current_user.id and not current_user.is_admin:
        logger.warning(f"Account {current_user.id} denied history of account {target_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden"
        )

    entries = LocationService.history(db, target_id, limit)
    return {"history": [LocationService.history_to_dict(e) for e in entries]}


@router.get("/users")
async def active_users(
    current_user: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db_session)
):
    """
    Current location of every actively tracked account.
    Admin only.
    """
    rows = LocationService.active_locations(db)
    locations = [LocationService.active_location_to_dict(location, user) for location, user in rows]
    return {"locations": locations, "count": len(locations)}
