import random
from datetime import date, datetime, timedelta

import pytest

import config
from database.models import CaseStatus, MissingPerson
from services.auth_service import AuthService
from services.case_service import (
    CaseNumberExhaustedError, allocate_case_number, days_missing, generate_case_number
)
from conftest import PASSWORD


class FixedRandom(random.Random):
    """Yields the given suffixes in order."""

    def __init__(self, values):
        super().__init__()
        self.values = list(values)

    def randint(self, a, b):
        return self.values.pop(0)


def _insert_case(session, reporter_id, case_number):
    session.add(MissingPerson(
        reporter_id=reporter_id,
        case_number=case_number,
        full_name="Existing",
        gender="other",
        last_seen_location="Somewhere",
        last_seen_date=date.today(),
        contact_name="Someone",
        contact_phone="555",
    ))
    session.commit()


def test_generate_case_number_format():
    assert generate_case_number(year=2026, rng=FixedRandom([42])) == "MP2026000042"
    assert generate_case_number(year=2026, rng=FixedRandom([999999])) == "MP2026999999"


def test_allocate_skips_numbers_in_use(session):
    user = AuthService.create_user(session, "Reporter", "r@example.com", PASSWORD)
    year = datetime.utcnow().year
    _insert_case(session, user.id, f"MP{year}000001")

    assert allocate_case_number(session, rng=FixedRandom([1, 2])) == f"MP{year}000002"


def test_allocate_gives_up_after_max_attempts(session):
    user = AuthService.create_user(session, "Reporter", "r@example.com", PASSWORD)
    year = datetime.utcnow().year
    _insert_case(session, user.id, f"MP{year}000007")

    with pytest.raises(CaseNumberExhaustedError):
        allocate_case_number(session, rng=FixedRandom([7] * config.CASE_NUMBER_MAX_ATTEMPTS))


def test_days_missing_stops_at_found_date():
    case = MissingPerson(last_seen_date=date(2026, 1, 1), status=CaseStatus.MISSING)
    assert days_missing(case, today=date(2026, 1, 11)) == 10

    case.status = CaseStatus.FOUND
    case.found_date = datetime(2026, 1, 4, 9, 30)
    assert days_missing(case, today=date(2026, 1, 11)) == 3

    case.last_seen_date = None
    assert days_missing(case) is None
