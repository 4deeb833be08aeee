"""
Display helpers used by the page templates.
"""
import re
from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime, str]

STATUS_BADGE_CLASSES = {
    "missing": "badge-missing",
    "found": "badge-found",
    "investigation": "badge-investigation",
    "closed": "badge-closed",
}

PRIORITY_BADGE_CLASSES = {
    "critical": "priority-critical",
    "high": "priority-high",
    "medium": "priority-medium",
    "low": "priority-low",
}

# (seconds per unit, unit name), largest first
_RELATIVE_UNITS = (
    (365 * 24 * 3600, "year"),
    (30 * 24 * 3600, "month"),
    (24 * 3600, "day"),
    (3600, "hour"),
    (60, "minute"),
)


def _to_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(value)


def format_date(value: Optional[DateLike], fmt: str = "%b %d, %Y") -> str:
    """Format a date, datetime or ISO string, e.g. 'Mar 04, 2026'."""
    if not value:
        return ""
    return _to_datetime(value).strftime(fmt)


def format_datetime(value: Optional[DateLike]) -> str:
    return format_date(value, "%b %d, %Y %H:%M")


def format_relative_time(value: Optional[DateLike], now: Optional[datetime] = None) -> str:
    """
    Human distance from now, e.g. '3 days ago' or 'in 2 hours'.

    Args:
        value: Point in time (naive values are treated as UTC)
        now: Reference time, defaults to utcnow()
    """
    if not value:
        return ""
    moment = _to_datetime(value).replace(tzinfo=None)
    now = now or datetime.utcnow()
    seconds = int((now - moment).total_seconds())
    past = seconds >= 0
    seconds = abs(seconds)

    if seconds < 60:
        phrase = "less than a minute"
    else:
        phrase = ""
        for unit_seconds, unit in _RELATIVE_UNITS:
            if seconds >= unit_seconds:
                count = seconds // unit_seconds
                phrase = f"{count} {unit}{'s' if count != 1 else ''}"
                break

    return f"{phrase} ago" if past else f"in {phrase}"


def format_phone_number(phone: Optional[str]) -> str:
    """Format 10-digit numbers as (XXX) XXX-XXXX; anything else is returned unchanged."""
    if not phone:
        return ""
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return phone


def format_case_number(case_number: Optional[str]) -> str:
    """MP2026004211 -> MP-2026-004211."""
    if not case_number:
        return ""
    if case_number.startswith("MP") and len(case_number) > 2:
        return f"MP-{case_number[2:6]}-{case_number[6:]}"
    return case_number


def truncate_text(text: Optional[str], max_length: int = 100) -> str:
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def capitalize(text: Optional[str]) -> str:
    if not text:
        return ""
    return text[0].upper() + text[1:].lower()


def status_badge_class(status: Optional[str]) -> str:
    return STATUS_BADGE_CLASSES.get(status or "", "badge-default")


def priority_badge_class(priority: Optional[str]) -> str:
    return PRIORITY_BADGE_CLASSES.get(priority or "", "priority-default")


# Registered on the Jinja2 environment by routers/pages.py
TEMPLATE_FILTERS = {
    "format_date": format_date,
    "format_datetime": format_datetime,
    "relative_time": format_relative_time,
    "phone": format_phone_number,
    "case_number": format_case_number,
    "truncate_text": truncate_text,
    "capitalize_first": capitalize,
    "status_badge": status_badge_class,
    "priority_badge": priority_badge_class,
}
