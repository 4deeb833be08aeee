"""
Location service: current-location upsert, history log, live-tracking queries
and the admin unread location-update counter.
"""
import time
from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite

from database.models import User, UserLocation, LocationHistory
from core.logger import logger

# Dialects with INSERT ... ON CONFLICT DO UPDATE ... WHERE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def now_millis() -> int:
    return int(time.time() * 1000)


class LocationService:
    """Service for GPS fixes."""

    @staticmethod
    def upsert_current_location(
        db: Session,
        user_id: int,
        latitude: float,
        longitude: float,
        accuracy: Optional[float],
        fix_timestamp: int,
    ) -> bool:
        """
        Write the account's current location in one statement, last write wins.

        A fix older than the stored one leaves the row untouched, so fixes that
        arrive out of order never replace a newer position.

        Returns:
            True if the stored row now holds this fix
        """
        values = dict(
            user_id=user_id,
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy,
            fix_timestamp=fix_timestamp,
            timestamp=datetime.utcnow(),
            is_active=True,
        )
        insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)
        if insert is not None:
            stmt = insert(UserLocation).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id"],
                set_={key: stmt.excluded[key] for key in values if key != "user_id"},
                where=UserLocation.__table__.c.fix_timestamp <= stmt.excluded.fix_timestamp,
            )
            db.execute(stmt)
        else:
            LocationService._upsert_fallback(db, values)
        db.flush()

        stored = db.query(UserLocation.fix_timestamp).filter(UserLocation.user_id == user_id).scalar()
        applied = stored == fix_timestamp
        if not applied:
            logger.info(f"Stale fix for account {user_id} ignored ({fix_timestamp} < {stored})")
        return applied

    @staticmethod
    def _upsert_fallback(db: Session, values: dict) -> None:
        """Read-then-write upsert for dialects without ON CONFLICT support."""
        row = (
            db.query(UserLocation)
            .filter(UserLocation.user_id == values["user_id"])
            .with_for_update()
            .first()
        )
        if row is None:
            db.add(UserLocation(**values))
        elif row.fix_timestamp <= values["fix_timestamp"]:
            for key, value in values.items():
                setattr(row, key, value)

    @staticmethod
    def record_fix(
        db: Session,
        user_id: int,
        latitude: float,
        longitude: float,
        accuracy: Optional[float] = None,
        fix_timestamp: Optional[int] = None,
    ) -> bool:
        """
        Accept a fix: update the current location and append to history.

        A capture time ahead of the server clock is clamped to the server
        clock, so a device with a skewed clock cannot pin its current location.

        Returns:
            Whether the fix became the current location
        """
        server_now = now_millis()
        if fix_timestamp is None:
            fix_timestamp = server_now
        elif fix_timestamp > server_now:
            logger.warning(f"Fix from account {user_id} is {fix_timestamp - server_now} ms in the future; clamped")
            fix_timestamp = server_now
        applied = LocationService.upsert_current_location(
            db, user_id, latitude, longitude, accuracy, fix_timestamp
        )
        db.add(LocationHistory(
            user_id=user_id,
            latitude=latitude,
            longitude=longitude,
            accuracy=accuracy,
        ))
        db.commit()
        return applied

    @staticmethod
    def deactivate(db: Session, user_id: int) -> bool:
        """Hide the account from live tracking until its next fix."""
        updated = db.query(UserLocation).filter(UserLocation.user_id == user_id).update(
            {UserLocation.is_active: False}, synchronize_session=False
        )
        db.commit()
        return updated > 0

    @staticmethod
    def history(db: Session, user_id: int, limit: int) -> List[LocationHistory]:
        """An account's fixes, newest first."""
        return (
            db.query(LocationHistory)
            .filter(LocationHistory.user_id == user_id)
            .order_by(LocationHistory.created_at.desc(), LocationHistory.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def active_locations(db: Session) -> List[Tuple[UserLocation, User]]:
        """The current active fix of every tracked account, most recent first."""
        return (
            db.query(UserLocation, User)
            .join(User, UserLocation.user_id == User.id)
            .filter(UserLocation.is_active == True)
            .order_by(UserLocation.timestamp.desc())
            .all()
        )

    @staticmethod
    def unread_update_count(db: Session, admin: User) -> int:
        """Location updates from other accounts since the admin last looked."""
        query = db.query(func.count(LocationHistory.id)).filter(LocationHistory.user_id != admin.id)
        if admin.location_seen_at is not None:
            query = query.filter(LocationHistory.created_at > admin.location_seen_at)
        return query.scalar() or 0

    @staticmethod
    def mark_updates_seen(db: Session, admin: User) -> datetime:
        admin.location_seen_at = datetime.utcnow()
        db.commit()
        return admin.location_seen_at

    @staticmethod
    def history_to_dict(entry: LocationHistory) -> dict:
        return {
            "id": entry.id,
            "latitude": entry.latitude,
            "longitude": entry.longitude,
            "accuracy": entry.accuracy,
            "created_at": entry.created_at.isoformat() if entry.created_at else None,
        }

    @staticmethod
    def active_location_to_dict(location: UserLocation, user: User) -> dict:
        return {
            "id": location.id,
            "user_id": location.user_id,
            "full_name": user.full_name,
            "email": user.email,
            "phone": user.phone,
            "latitude": location.latitude,
            "longitude": location.longitude,
            "accuracy": location.accuracy or 0,
            "timestamp": location.timestamp.isoformat() if location.timestamp else None,
            "fix_timestamp": location.fix_timestamp,
            "is_active": bool(location.is_active),
        }
