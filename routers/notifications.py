"""
Notification inbox endpoints.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel
from typing import Optional

from database.models import User
from auth.dependencies import TokenClaims, get_current_user, get_db_session
from services.notification_service import NotificationService
from services.location_service import LocationService


router = APIRouter(prefix="/api/notifications", tags=["notifications"])


class MarkReadRequest(BaseModel):
    notification_id: Optional[int] = None  # omitted: mark all


@router.get("")
async def list_notifications(
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db_session)
):
    """
    The caller's most recent notifications and unread count.
    Admins also get the number of unseen location updates.
    """
    notifications = NotificationService.list_for_user(db, current_user.id)
    response = {
        "data": [NotificationService.to_dict(n) for n in notifications],
        "unreadCount": NotificationService.unread_count(db, current_user.id),
    }

    if current_user.is_admin:
        admin = db.query(User).filter(User.id == current_user.id).first()
        if admin is not None:
            response["locationUpdates"] = LocationService.unread_update_count(db, admin)

    return response


@router.put("")
async def mark_notifications_read(
    payload: Optional[MarkReadRequest] = None,
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db_session)
):
    """Mark one notification, or all of the caller's notifications, as read."""
    notification_id = payload.notification_id if payload else None
    updated = NotificationService.mark_read(db, current_user.id, notification_id)

    message = "Notification marked as read" if notification_id is not None else "All notifications marked as read"
    return {"message": message, "updated": updated}
