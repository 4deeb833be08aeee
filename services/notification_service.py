"""
Notification service: inserts notifications as side effects of writes and
serves the per-account inbox.
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import func

from database.models import Notification, NotificationType
from core.logger import logger
import config


class NotificationService:
    """Service for per-account notifications."""

    @staticmethod
    def notify(
        db: Session,
        user_id: int,
        title: str,
        message: str,
        notification_type: NotificationType = NotificationType.GENERAL,
        missing_person_id: Optional[int] = None,
    ) -> Notification:
        """Insert an unread notification (flushed, committed by the caller's session)."""
        notification = Notification(
            user_id=user_id,
            missing_person_id=missing_person_id,
            title=title,
            message=message,
            type=notification_type,
            is_read=False,
        )
        db.add(notification)
        db.flush()
        logger.debug(f"Notification {notification.id} ({notification_type.value}) -> account {user_id}")
        return notification

    @staticmethod
    def list_for_user(db: Session, user_id: int, limit: Optional[int] = None) -> List[Notification]:
        """Most recent notifications for an account, newest first."""
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit or config.NOTIFICATION_LIST_LIMIT)
            .all()
        )

    @staticmethod
    def unread_count(db: Session, user_id: int) -> int:
        return db.query(func.count(Notification.id)).filter(
            Notification.user_id == user_id,
            Notification.is_read == False
        ).scalar() or 0

    @staticmethod
    def mark_read(db: Session, user_id: int, notification_id: Optional[int] = None) -> int:
        """
        Mark one notification (scoped to its owner) or all of the owner's notifications read.

        Returns:
            Number of rows updated
        """
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if notification_id is not None:
            query = query.filter(Notification.id == notification_id)
        updated = query.update({Notification.is_read: True}, synchronize_session=False)
        db.commit()
        return updated

    @staticmethod
    def to_dict(notification: Notification) -> dict:
        return {
            "id": notification.id,
            "user_id": notification.user_id,
            "missing_person_id": notification.missing_person_id,
            "title": notification.title,
            "message": notification.message,
            "type": notification.type.value,
            "is_read": bool(notification.is_read),
            "created_at": notification.created_at.isoformat() if notification.created_at else None,
        }
