"""
Database models for the missing person tracker.
"""
from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Float, Boolean, DateTime, Date, Time, Text,
    ForeignKey, BigInteger, Index, TypeDecorator
)
from sqlalchemy.orm import declarative_base, relationship
import enum

Base = declarative_base()


# ============================================================================
# Custom Type Decorator for Enum Values
# ============================================================================

class EnumValue(TypeDecorator):
    """Type decorator to ensure enum values (not names) are stored."""
    impl = String
    cache_ok = True

    def __init__(self, enum_class, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enum_class = enum_class

    def process_bind_param(self, value, dialect):
        """Convert enum to its value when writing to database."""
        if value is None:
            return None
        if isinstance(value, enum.Enum):
            return value.value
        return value

    def process_result_value(self, value, dialect):
        """Convert database value back to enum when reading."""
        if value is None:
            return None
        if isinstance(value, str):
            try:
                return self.enum_class(value)
            except ValueError:
                return value
        return value


# ============================================================================
# Enums - Must be defined before models that use them
# ============================================================================

class CaseStatus(str, enum.Enum):
    """Missing person case lifecycle status."""
    MISSING = "missing"
    INVESTIGATION = "investigation"
    FOUND = "found"
    CLOSED = "closed"


class CasePriority(str, enum.Enum):
    """Case priority."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class NotificationType(str, enum.Enum):
    """Notification type tags."""
    STATUS_UPDATE = "status_update"
    COMMENT = "comment"
    FOUND = "found"
    GENERAL = "general"


# ============================================================================
# Models
# ============================================================================

class User(Base):
    """Account model for authentication and authorization."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)
    # Admins only: location updates newer than this are counted as unread
    location_seen_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    reports = relationship(
        "MissingPerson", back_populates="reporter", foreign_keys="MissingPerson.reporter_id"
    )
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")
    current_location = relationship("UserLocation", back_populates="user", uselist=False)

    __table_args__ = (
        Index('idx_user_admin', 'is_admin'),
    )


class MissingPerson(Base):
    """Missing person report (case)."""
    __tablename__ = "missing_persons"

    id = Column(Integer, primary_key=True, index=True)
    reporter_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    case_number = Column(String(20), unique=True, nullable=False)

    # Subject
    full_name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=True)
    gender = Column(EnumValue(Gender, 10), nullable=False)
    height = Column(String(50), nullable=True)
    weight = Column(String(50), nullable=True)
    hair_color = Column(String(50), nullable=True)
    eye_color = Column(String(50), nullable=True)
    skin_tone = Column(String(50), nullable=True)
    distinctive_features = Column(Text, nullable=True)
    clothing_description = Column(Text, nullable=True)
    medical_conditions = Column(Text, nullable=True)
    photo_url = Column(String(512), nullable=True)

    # Last seen
    last_seen_location = Column(Text, nullable=False)
    last_seen_latitude = Column(Float, nullable=True)
    last_seen_longitude = Column(Float, nullable=True)
    last_seen_date = Column(Date, nullable=False)
    last_seen_time = Column(Time, nullable=True)

    # Contact for tips
    contact_name = Column(String(255), nullable=False)
    contact_phone = Column(String(50), nullable=False)
    contact_email = Column(String(255), nullable=True)
    additional_info = Column(Text, nullable=True)

    status = Column(EnumValue(CaseStatus, 20), default=CaseStatus.MISSING, nullable=False)
    priority = Column(EnumValue(CasePriority, 20), default=CasePriority.MEDIUM, nullable=False)

    # Resolution (set when status becomes found)
    found_date = Column(DateTime, nullable=True)
    found_location = Column(Text, nullable=True)
    found_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    reporter = relationship("User", back_populates="reports", foreign_keys=[reporter_id])
    status_updates = relationship("StatusUpdate", back_populates="missing_person", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="missing_person", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="missing_person", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_mp_status', 'status'),
        Index('idx_mp_priority', 'priority'),
        Index('idx_mp_reporter', 'reporter_id'),
        Index('idx_mp_created', 'created_at'),
    )


class StatusUpdate(Base):
    """Append-only audit entry for a case status transition."""
    __tablename__ = "status_updates"

    id = Column(Integer, primary_key=True, index=True)
    missing_person_id = Column(Integer, ForeignKey("missing_persons.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    old_status = Column(EnumValue(CaseStatus, 20), nullable=True)
    new_status = Column(EnumValue(CaseStatus, 20), nullable=False)
    update_note = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    missing_person = relationship("MissingPerson", back_populates="status_updates")

    __table_args__ = (
        Index('idx_status_update_case', 'missing_person_id'),
    )


class Comment(Base):
    """Tip or comment left on a case."""
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    missing_person_id = Column(Integer, ForeignKey("missing_persons.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    comment = Column(Text, nullable=False)
    is_anonymous = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    missing_person = relationship("MissingPerson", back_populates="comments")
    user = relationship("User")

    __table_args__ = (
        Index('idx_comment_case', 'missing_person_id'),
    )


class Notification(Base):
    """Per-account notification."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    missing_person_id = Column(Integer, ForeignKey("missing_persons.id", ondelete="CASCADE"), nullable=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(EnumValue(NotificationType, 20), default=NotificationType.GENERAL, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="notifications")
    missing_person = relationship("MissingPerson", back_populates="notifications")

    __table_args__ = (
        Index('idx_notification_user_read', 'user_id', 'is_read'),
    )


class UserLocation(Base):
    """Latest GPS fix per account (one row per user, written by upsert)."""
    __tablename__ = "user_locations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy = Column(Float, nullable=True)
    # Client capture time in epoch milliseconds; drives last-write-wins
    fix_timestamp = Column(BigInteger, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    user = relationship("User", back_populates="current_location")

    __table_args__ = (
        Index('idx_user_location_active', 'is_active'),
    )


class LocationHistory(Base):
    """Append-only log of every accepted fix."""
    __tablename__ = "location_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy = Column(Float, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('idx_location_history_user_created', 'user_id', 'created_at'),
        Index('idx_location_history_created', 'created_at'),
    )
