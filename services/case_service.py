"""
Missing person case service: case numbers, search, CRUD and status transitions.
"""
import random
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_

from database.models import (
    MissingPerson, StatusUpdate, CaseStatus, CasePriority, Gender, NotificationType
)
from services.notification_service import NotificationService
from core.validators import missing_fields, parse_enum, validate_coordinates
from core.logger import logger
import config


REQUIRED_CREATE_FIELDS = (
    "full_name", "gender", "last_seen_location", "last_seen_date", "contact_name", "contact_phone"
)

# Fields the reporter or an admin may overwrite via PUT
UPDATABLE_FIELDS = (
    "full_name", "age", "gender", "last_seen_location", "last_seen_date",
    "last_seen_time", "height", "weight", "hair_color", "eye_color",
    "skin_tone", "distinctive_features", "clothing_description",
    "medical_conditions", "photo_url", "contact_name", "contact_phone",
    "contact_email", "additional_info", "priority",
)

OPTIONAL_CREATE_FIELDS = (
    "age", "last_seen_latitude", "last_seen_longitude", "last_seen_time", "height", "weight",
    "hair_color", "eye_color", "skin_tone", "distinctive_features", "clothing_description",
    "medical_conditions", "photo_url", "contact_email", "additional_info",
)

NON_NULLABLE_FIELDS = set(REQUIRED_CREATE_FIELDS) | {"priority"}


class CaseNumberExhaustedError(RuntimeError):
    """No unused case number could be generated within the attempt budget."""


def generate_case_number(year: Optional[int] = None, rng: random.Random = None) -> str:
    """Generate MP<year><6-digit random suffix>, e.g. MP2026004211."""
    year = year or datetime.utcnow().year
    suffix = (rng or random).randint(0, 999999)
    return f"{config.CASE_NUMBER_PREFIX}{year}{suffix:06d}"


def allocate_case_number(db: Session, rng: random.Random = None) -> str:
    """
    Generate a case number not already present in the database.

    The unique constraint on missing_persons.case_number remains the final guard
    against two concurrent requests drawing the same number.
    """
    for attempt in range(1, config.CASE_NUMBER_MAX_ATTEMPTS + 1):
        candidate = generate_case_number(rng=rng)
        taken = db.query(MissingPerson.id).filter(MissingPerson.case_number == candidate).first()
        if not taken:
            return candidate
        logger.warning(f"Case number collision on {candidate} (attempt {attempt})")
    raise CaseNumberExhaustedError("Could not allocate a unique case number")


def days_missing(case: MissingPerson, today: Optional[date] = None) -> Optional[int]:
    """
    Days between last-seen date and today, derived at read time.

    For found cases the count stops at the found date.
    """
    if case.last_seen_date is None:
        return None
    if case.status == CaseStatus.FOUND and case.found_date is not None:
        end = case.found_date.date()
    else:
        end = today or date.today()
    return (end - case.last_seen_date).days


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def case_to_dict(case: MissingPerson, include_reporter: bool = True) -> Dict[str, Any]:
    """Serialize a case with derived fields."""
    data = {
        "id": case.id,
        "reporter_id": case.reporter_id,
        "case_number": case.case_number,
        "full_name": case.full_name,
        "age": case.age,
        "gender": case.gender.value if case.gender else None,
        "last_seen_location": case.last_seen_location,
        "last_seen_latitude": case.last_seen_latitude,
        "last_seen_longitude": case.last_seen_longitude,
        "last_seen_date": _iso(case.last_seen_date),
        "last_seen_time": _iso(case.last_seen_time),
        "height": case.height,
        "weight": case.weight,
        "hair_color": case.hair_color,
        "eye_color": case.eye_color,
        "skin_tone": case.skin_tone,
        "distinctive_features": case.distinctive_features,
        "clothing_description": case.clothing_description,
        "medical_conditions": case.medical_conditions,
        "photo_url": case.photo_url,
        "contact_name": case.contact_name,
        "contact_phone": case.contact_phone,
        "contact_email": case.contact_email,
        "additional_info": case.additional_info,
        "status": case.status.value,
        "priority": case.priority.value,
        "found_date": _iso(case.found_date),
        "found_location": case.found_location,
        "found_by": case.found_by,
        "created_at": _iso(case.created_at),
        "updated_at": _iso(case.updated_at),
        "days_missing": days_missing(case),
    }
    if include_reporter and case.reporter is not None:
        data["reporter_name"] = case.reporter.full_name
        data["reporter_email"] = case.reporter.email
        data["reporter_phone"] = case.reporter.phone
    return data


def status_update_to_dict(update: StatusUpdate) -> Dict[str, Any]:
    return {
        "id": update.id,
        "missing_person_id": update.missing_person_id,
        "user_id": update.user_id,
        "old_status": update.old_status.value if update.old_status else None,
        "new_status": update.new_status.value,
        "update_note": update.update_note,
        "created_at": _iso(update.created_at),
    }


def _coerce_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """Convert enum fields and check coordinate ranges; raises ValueError."""
    values = dict(data)
    if "gender" in values and values["gender"] is not None:
        values["gender"] = parse_enum(Gender, values["gender"], "gender")
    if "priority" in values and values["priority"] is not None:
        values["priority"] = parse_enum(CasePriority, values["priority"], "priority")
    lat = values.get("last_seen_latitude")
    lon = values.get("last_seen_longitude")
    if lat is not None or lon is not None:
        ok, error = validate_coordinates(lat, lon)
        if not ok:
            raise ValueError(f"Last seen {error[0].lower()}{error[1:]}")
    age = values.get("age")
    if age is not None and age < 0:
        raise ValueError("Age cannot be negative")
    return values


class CaseService:
    """Service for missing person cases."""

    @staticmethod
    def get_case(db: Session, case_id: int) -> Optional[MissingPerson]:
        return (
            db.query(MissingPerson)
            .options(joinedload(MissingPerson.reporter))
            .filter(MissingPerson.id == case_id)
            .first()
        )

    @staticmethod
    def list_cases(
        db: Session,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[MissingPerson], int]:
        """
        Filter, search and page through cases, most recently created first.

        Raises:
            ValueError: If status or priority is not a valid enum value

        Returns:
            Tuple of (rows, total matching rows)
        """
        limit = limit if limit is not None else config.CASE_LIST_DEFAULT_LIMIT
        query = db.query(MissingPerson)

        if status:
            query = query.filter(MissingPerson.status == parse_enum(CaseStatus, status, "status"))
        if priority:
            query = query.filter(MissingPerson.priority == parse_enum(CasePriority, priority, "priority"))
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(or_(
                MissingPerson.full_name.ilike(term),
                MissingPerson.case_number.ilike(term),
                MissingPerson.last_seen_location.ilike(term),
            ))

        total = query.count()
        rows = (
            query.options(joinedload(MissingPerson.reporter))
            .order_by(MissingPerson.created_at.desc(), MissingPerson.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )
        return rows, total

    @staticmethod
    def list_for_reporter(db: Session, reporter_id: int) -> List[MissingPerson]:
        return (
            db.query(MissingPerson)
            .filter(MissingPerson.reporter_id == reporter_id)
            .order_by(MissingPerson.created_at.desc(), MissingPerson.id.desc())
            .all()
        )

    @staticmethod
    def with_coordinates(db: Session) -> List[MissingPerson]:
        """Open cases that carry last-seen coordinates (for the public map)."""
        return (
            db.query(MissingPerson)
            .filter(
                MissingPerson.last_seen_latitude.isnot(None),
                MissingPerson.last_seen_longitude.isnot(None),
                MissingPerson.status.in_([CaseStatus.MISSING, CaseStatus.INVESTIGATION]),
            )
            .order_by(MissingPerson.created_at.desc())
            .all()
        )

    @staticmethod
    def create_case(db: Session, reporter_id: int, data: Dict[str, Any]) -> MissingPerson:
        """
        Create a case for the reporter.

        Raises:
            ValueError: On missing required fields or invalid values
            CaseNumberExhaustedError: If no unused case number could be drawn
        """
        missing = missing_fields(data, REQUIRED_CREATE_FIELDS)
        if missing:
            raise ValueError(f"Required fields: {', '.join(REQUIRED_CREATE_FIELDS)}")

        values = _coerce_fields(data)
        case = MissingPerson(
            reporter_id=reporter_id,
            case_number=allocate_case_number(db),
            full_name=values["full_name"].strip(),
            gender=values["gender"],
            last_seen_location=values["last_seen_location"].strip(),
            last_seen_date=values["last_seen_date"],
            contact_name=values["contact_name"].strip(),
            contact_phone=values["contact_phone"].strip(),
            priority=values.get("priority") or CasePriority.MEDIUM,
            status=CaseStatus.MISSING,
            **{field: values.get(field) for field in OPTIONAL_CREATE_FIELDS},
        )
        db.add(case)
        db.commit()
        db.refresh(case)
        logger.info(f"Case {case.case_number} (id={case.id}) reported by account {reporter_id}")
        return case

    @staticmethod
    def update_case(db: Session, case: MissingPerson, data: Dict[str, Any]) -> MissingPerson:
        """
        Overwrite the allow-listed fields present in data; others are untouched.

        Raises:
            ValueError: If no recognized field is present or a value is invalid
        """
        changes = {field: data[field] for field in UPDATABLE_FIELDS if field in data}
        if not changes:
            raise ValueError("No fields to update")

        nulled = sorted(
            field for field, value in changes.items()
            if field in NON_NULLABLE_FIELDS and (value is None or (isinstance(value, str) and not value.strip()))
        )
        if nulled:
            raise ValueError(f"Fields cannot be empty: {', '.join(nulled)}")

        for field, value in _coerce_fields(changes).items():
            setattr(case, field, value)
        db.commit()
        db.refresh(case)
        logger.info(f"Case {case.case_number} updated fields: {', '.join(sorted(changes))}")
        return case

    @staticmethod
    def delete_case(db: Session, case: MissingPerson) -> None:
        case_number = case.case_number
        db.delete(case)
        db.commit()
        logger.info(f"Case {case_number} deleted")

    @staticmethod
    def transition_status(
        db: Session,
        case: MissingPerson,
        actor_id: int,
        new_status: CaseStatus,
        update_note: Optional[str] = None,
        found_location: Optional[str] = None,
    ) -> MissingPerson:
        """
        Move a case to any status, audit the change and notify the reporter.

        Every status may move to every other status, including reopening found
        or closed cases. Moving to found stamps the resolver and time.
        """
        old_status = case.status
        case.status = new_status
        if new_status == CaseStatus.FOUND:
            case.found_date = datetime.utcnow()
            case.found_by = actor_id
            if found_location:
                case.found_location = found_location

        db.add(StatusUpdate(
            missing_person_id=case.id,
            user_id=actor_id,
            old_status=old_status,
            new_status=new_status,
            update_note=update_note or None,
        ))

        if case.reporter_id != actor_id:
            if new_status == CaseStatus.FOUND:
                message = f"Great news! {case.full_name} has been found."
            else:
                message = f"Status updated to: {new_status.value}"
            NotificationService.notify(
                db,
                user_id=case.reporter_id,
                title="Status Update",
                message=message,
                notification_type=NotificationType.STATUS_UPDATE,
                missing_person_id=case.id,
            )

        db.commit()
        db.refresh(case)
        logger.info(
            f"Case {case.case_number} status {old_status.value} -> {new_status.value} by account {actor_id}"
        )
        return case

    @staticmethod
    def status_history(db: Session, case_id: int) -> List[StatusUpdate]:
        return (
            db.query(StatusUpdate)
            .filter(StatusUpdate.missing_person_id == case_id)
            .order_by(StatusUpdate.created_at.desc(), StatusUpdate.id.desc())
            .all()
        )
