"""
Input validation utilities for the missing person tracker.
"""
import enum
import math
import re
from typing import Any, Iterable, List, Optional, Tuple, Type, TypeVar

E = TypeVar("E", bound=enum.Enum)

CASE_NUMBER_PATTERN = re.compile(r"^MP\d{10}$")


def is_number(value: Any) -> bool:
    """True for int/float values; bools are rejected even though they subclass int."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_coordinates(latitude: Any, longitude: Any) -> Tuple[bool, Optional[str]]:
    """
    Validate a latitude/longitude pair.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not is_number(latitude) or not is_number(longitude):
        return False, "Invalid coordinates"
    # NaN compares false against every bound
    if any(isinstance(v, float) and not math.isfinite(v) for v in (latitude, longitude)):
        return False, "Invalid coordinates"
    if latitude < -90 or latitude > 90 or longitude < -180 or longitude > 180:
        return False, "Coordinates out of range"
    return True, None


def missing_fields(data: dict, required: Iterable[str]) -> List[str]:
    """Names of required fields that are absent, None or blank strings."""
    missing = []
    for field in required:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing


def parse_enum(enum_class: Type[E], value: Optional[str], label: str) -> Optional[E]:
    """
    Parse an enum by value, case-insensitively.

    Returns:
        The member, or None when value is None

    Raises:
        ValueError: If the value is not a member
    """
    if value is None:
        return None
    if isinstance(value, enum_class):
        return value
    try:
        return enum_class(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"Invalid {label}: {value}")


def is_valid_case_number(case_number: str) -> bool:
    return bool(case_number and CASE_NUMBER_PATTERN.match(case_number))
