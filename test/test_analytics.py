from datetime import datetime, timedelta

from services.analytics_service import age_group, months_back
from conftest import create_case


def test_analytics_is_admin_only(client, alice):
    assert client.get("/api/admin/analytics").status_code == 401
    assert client.get("/api/admin/analytics", headers=alice["headers"]).status_code == 403


def test_empty_dashboard(client, admin):
    data = client.get("/api/admin/analytics", headers=admin["headers"]).json()
    assert data["statistics"]["total_cases"] == 0
    assert data["statistics"]["avg_days_to_find"] == 0
    assert data["recentCases"] == []
    assert data["monthlyTrends"] == []
    assert data["ageDistribution"] == []


def test_statistics_and_distributions(client, alice, bob, admin):
    five_days_ago = (datetime.utcnow().date() - timedelta(days=5)).isoformat()
    found = create_case(client, alice["token"], age=8, priority="critical", last_seen_date=five_days_ago)
    create_case(client, alice["token"], age=15, priority="critical")
    create_case(client, alice["token"], age=40, priority="high", gender="male")
    closed = create_case(client, alice["token"], age=None, priority="high")
    investigating = create_case(client, alice["token"], age=70, priority="low")

    client.put(f"/api/missing-persons/{found['id']}/status", json={"status": "found"}, headers=bob["headers"])
    client.put(f"/api/missing-persons/{closed['id']}/status", json={"status": "closed"}, headers=bob["headers"])
    client.put(
        f"/api/missing-persons/{investigating['id']}/status", json={"status": "investigation"}, headers=bob["headers"]
    )

    data = client.get("/api/admin/analytics", headers=admin["headers"]).json()
    stats = data["statistics"]
    assert stats["total_cases"] == 5
    assert stats["active_missing"] == 2
    assert stats["found_cases"] == 1
    assert stats["under_investigation"] == 1
    assert stats["closed_cases"] == 1
    # only open cases count toward priority totals
    assert stats["critical_cases"] == 1
    assert stats["high_priority_cases"] == 1
    assert stats["avg_days_to_find"] == 5

    assert len(data["recentCases"]) == 5
    assert data["recentCases"][0]["reporter_name"] == "Alice Reporter"
    assert "days_missing" in data["recentCases"][0]

    status_counts = {row["status"]: row["count"] for row in data["statusDistribution"]}
    assert status_counts == {"missing": 2, "found": 1, "closed": 1, "investigation": 1}

    gender_counts = {row["gender"]: row["count"] for row in data["genderDistribution"]}
    assert gender_counts == {"female": 4, "male": 1}

    priority_counts = {row["priority"]: row["count"] for row in data["priorityDistribution"]}
    assert priority_counts == {"critical": 2, "high": 2, "low": 1}

    ages = {row["age_group"]: row["count"] for row in data["ageDistribution"]}
    assert ages == {
        "Child (0-12)": 1,
        "Teen (13-17)": 1,
        "Adult (31-50)": 1,
        "Senior (50+)": 1,
        "Unknown": 1,
    }

    this_month = datetime.utcnow().strftime("%Y-%m")
    assert data["monthlyTrends"] == [{"month": this_month, "missing": 5, "found": 1}]


def test_recent_cases_capped_at_ten(client, alice, admin):
    for i in range(12):
        create_case(client, alice["token"], full_name=f"Person {i}")
    recent = client.get("/api/admin/analytics", headers=admin["headers"]).json()["recentCases"]
    assert len(recent) == 10
    assert recent[0]["full_name"] == "Person 11"


def test_age_group_boundaries():
    assert age_group(None) == "Unknown"
    assert age_group(0) == "Child (0-12)"
    assert age_group(12) == "Child (0-12)"
    assert age_group(13) == "Teen (13-17)"
    assert age_group(17) == "Teen (13-17)"
    assert age_group(18) == "Young Adult (18-30)"
    assert age_group(30) == "Young Adult (18-30)"
    assert age_group(31) == "Adult (31-50)"
    assert age_group(50) == "Adult (31-50)"
    assert age_group(51) == "Senior (50+)"


def test_months_back_crosses_year_boundary():
    assert months_back(datetime(2026, 2, 15), 4) == ["2026-02", "2026-01", "2025-12", "2025-11"]
