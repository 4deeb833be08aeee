"""
Admin analytics: aggregate case statistics and distributions.
"""
from collections import OrderedDict
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func

from database.models import MissingPerson, CaseStatus, CasePriority
from services.case_service import case_to_dict
import config

AGE_GROUPS = (
    "Child (0-12)",
    "Teen (13-17)",
    "Young Adult (18-30)",
    "Adult (31-50)",
    "Senior (50+)",
    "Unknown",
)


def age_group(age: Optional[int]) -> str:
    if age is None:
        return "Unknown"
    if age < 13:
        return "Child (0-12)"
    if age <= 17:
        return "Teen (13-17)"
    if age <= 30:
        return "Young Adult (18-30)"
    if age <= 50:
        return "Adult (31-50)"
    return "Senior (50+)"


def months_back(now: datetime, count: int) -> List[str]:
    """The last `count` calendar months as YYYY-MM, newest first."""
    year, month = now.year, now.month
    months = []
    for _ in range(count):
        months.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return months


class AnalyticsService:
    """Aggregations for the admin dashboard."""

    @staticmethod
    def _distribution(db: Session, column) -> List[Dict[str, Any]]:
        rows = db.query(column, func.count(MissingPerson.id)).group_by(column).all()
        return [
            {"value": key.value if hasattr(key, "value") else key, "count": count}
            for key, count in rows
        ]

    @staticmethod
    def statistics(db: Session) -> Dict[str, Any]:
        counts = dict(
            db.query(MissingPerson.status, func.count(MissingPerson.id))
            .group_by(MissingPerson.status)
            .all()
        )
        priorities = dict(
            db.query(MissingPerson.priority, func.count(MissingPerson.id))
            .filter(MissingPerson.status.in_([CaseStatus.MISSING, CaseStatus.INVESTIGATION]))
            .group_by(MissingPerson.priority)
            .all()
        )

        found = (
            db.query(MissingPerson.last_seen_date, MissingPerson.found_date)
            .filter(MissingPerson.status == CaseStatus.FOUND, MissingPerson.found_date.isnot(None))
            .all()
        )
        durations = [(found_date.date() - last_seen).days for last_seen, found_date in found]
        avg_days = round(sum(durations) / len(durations), 1) if durations else 0

        return {
            "total_cases": sum(counts.values()),
            "active_missing": counts.get(CaseStatus.MISSING, 0),
            "found_cases": counts.get(CaseStatus.FOUND, 0),
            "under_investigation": counts.get(CaseStatus.INVESTIGATION, 0),
            "closed_cases": counts.get(CaseStatus.CLOSED, 0),
            "critical_cases": priorities.get(CasePriority.CRITICAL, 0),
            "high_priority_cases": priorities.get(CasePriority.HIGH, 0),
            "avg_days_to_find": avg_days,
        }

    @staticmethod
    def monthly_trends(db: Session, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Cases reported per month (and how many of those are found), newest month first."""
        now = now or datetime.utcnow()
        months = months_back(now, config.ANALYTICS_TREND_MONTHS)
        oldest = datetime.strptime(months[-1], "%Y-%m")
        rows = (
            db.query(MissingPerson.created_at, MissingPerson.status)
            .filter(MissingPerson.created_at >= oldest)
            .all()
        )
        trends = OrderedDict((month, {"month": month, "missing": 0, "found": 0}) for month in months)
        for created_at, status in rows:
            bucket = trends.get(created_at.strftime("%Y-%m"))
            if bucket is None:
                continue
            bucket["missing"] += 1
            if status == CaseStatus.FOUND:
                bucket["found"] += 1
        return [bucket for bucket in trends.values() if bucket["missing"]]

    @staticmethod
    def age_distribution(db: Session) -> List[Dict[str, Any]]:
        counts = {group: 0 for group in AGE_GROUPS}
        for (age,) in db.query(MissingPerson.age).all():
            counts[age_group(age)] += 1
        return [{"age_group": group, "count": count} for group, count in counts.items() if count]

    @staticmethod
    def recent_cases(db: Session) -> List[Dict[str, Any]]:
        rows = (
            db.query(MissingPerson)
            .options(joinedload(MissingPerson.reporter))
            .order_by(MissingPerson.created_at.desc(), MissingPerson.id.desc())
            .limit(config.ANALYTICS_RECENT_CASES)
            .all()
        )
        return [case_to_dict(case) for case in rows]

    @staticmethod
    def dashboard(db: Session) -> Dict[str, Any]:
        """Everything the admin analytics page shows."""
        return {
            "statistics": AnalyticsService.statistics(db),
            "recentCases": AnalyticsService.recent_cases(db),
            "statusDistribution": [
                {"status": row["value"], "count": row["count"]}
                for row in AnalyticsService._distribution(db, MissingPerson.status)
            ],
            "monthlyTrends": AnalyticsService.monthly_trends(db),
            "ageDistribution": AnalyticsService.age_distribution(db),
            "genderDistribution": [
                {"gender": row["value"], "count": row["count"]}
                for row in AnalyticsService._distribution(db, MissingPerson.gender)
            ],
            "priorityDistribution": [
                {"priority": row["value"], "count": row["count"]}
                for row in AnalyticsService._distribution(db, MissingPerson.priority)
            ],
        }
