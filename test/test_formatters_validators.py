from datetime import datetime

import pytest

from core.validators import is_valid_case_number, missing_fields, parse_enum, validate_coordinates
from database.models import CaseStatus
from middleware.auth_middleware import is_public
from utils.formatters import (
    format_case_number, format_date, format_phone_number, format_relative_time,
    priority_badge_class, status_badge_class, truncate_text
)


def test_validate_coordinates():
    assert validate_coordinates(0, 0) == (True, None)
    assert validate_coordinates(90, -180) == (True, None)
    assert validate_coordinates("1", 2) == (False, "Invalid coordinates")
    assert validate_coordinates(True, 2) == (False, "Invalid coordinates")
    assert validate_coordinates(None, 2) == (False, "Invalid coordinates")
    assert validate_coordinates(90.01, 0) == (False, "Coordinates out of range")
    assert validate_coordinates(0, -180.01) == (False, "Coordinates out of range")


def test_missing_fields_treats_blank_strings_as_missing():
    assert missing_fields({"a": "x", "b": " ", "c": None}, ("a", "b", "c", "d")) == ["b", "c", "d"]


def test_parse_enum():
    assert parse_enum(CaseStatus, "FOUND", "status") is CaseStatus.FOUND
    assert parse_enum(CaseStatus, None, "status") is None
    with pytest.raises(ValueError, match="Invalid status: gone"):
        parse_enum(CaseStatus, "gone", "status")


def test_case_number_pattern():
    assert is_valid_case_number("MP2026004211")
    assert not is_valid_case_number("MP26004211")
    assert not is_valid_case_number("XX2026004211")


def test_format_case_number():
    assert format_case_number("MP2026004211") == "MP-2026-004211"
    assert format_case_number("ABC") == "ABC"
    assert format_case_number(None) == ""


def test_format_phone_number():
    assert format_phone_number("555-123-4567") == "(555) 123-4567"
    assert format_phone_number("+44 20 7946 0958") == "+44 20 7946 0958"


def test_format_date_and_relative_time():
    assert format_date("2026-03-04") == "Mar 04, 2026"
    now = datetime(2026, 3, 10, 12, 0, 0)
    assert format_relative_time("2026-03-10T11:59:30", now=now) == "less than a minute ago"
    assert format_relative_time("2026-03-07T12:00:00", now=now) == "3 days ago"
    assert format_relative_time("2026-03-10T13:00:00", now=now) == "in 1 hour"


def test_truncate_and_badges():
    assert truncate_text("a" * 5, 10) == "aaaaa"
    assert truncate_text("a" * 12, 10) == "a" * 10 + "..."
    assert status_badge_class("found") == "badge-found"
    assert status_badge_class("weird") == "badge-default"
    assert priority_badge_class("critical") == "priority-critical"


def test_public_route_matching():
    assert is_public("GET", "/")
    assert is_public("GET", "/missing-persons/3")
    assert is_public("GET", "/api/missing-persons")
    assert is_public("GET", "/api/missing-persons/3/updates")
    assert is_public("POST", "/api/auth/login")
    assert not is_public("POST", "/api/missing-persons")
    assert not is_public("GET", "/api/missing-persons/my-reports")
    assert not is_public("GET", "/api/auth/me")
    assert not is_public("GET", "/api/notifications")
