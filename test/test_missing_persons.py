from datetime import date, timedelta

from core.validators import is_valid_case_number
from conftest import auth_headers, case_payload, create_case


def test_create_requires_authentication(client):
    response = client.post("/api/missing-persons", json=case_payload())
    assert response.status_code == 401


def test_create_assigns_case_number_and_defaults(client, alice):
    response = client.post("/api/missing-persons", json=case_payload(), headers=alice["headers"])

    assert response.status_code == 201
    case = response.json()["data"]
    assert is_valid_case_number(case["case_number"])
    assert case["case_number"][2:6] == str(date.today().year)
    assert case["status"] == "missing"
    assert case["priority"] == "medium"
    assert case["reporter_id"] == alice["user"]["id"]
    assert case["days_missing"] == 3


def test_create_reports_missing_required_fields(client, alice):
    payload = case_payload()
    del payload["contact_phone"]
    response = client.post("/api/missing-persons", json=payload, headers=alice["headers"])

    assert response.status_code == 400
    assert response.json()["error"].startswith("Required fields:")


def test_create_rejects_bad_enum_and_coordinates(client, alice):
    bad_gender = client.post("/api/missing-persons", json=case_payload(gender="robot"), headers=alice["headers"])
    assert bad_gender.status_code == 400
    assert bad_gender.json()["error"] == "Invalid gender: robot"

    bad_coords = client.post(
        "/api/missing-persons",
        json=case_payload(last_seen_latitude=120.0, last_seen_longitude=10.0),
        headers=alice["headers"],
    )
    assert bad_coords.status_code == 400


def test_get_case_is_public_and_includes_reporter(client, alice):
    case = create_case(client, alice["token"])

    response = client.get(f"/api/missing-persons/{case['id']}")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["reporter_name"] == "Alice Reporter"
    assert data["reporter_email"] == "alice@example.com"
    assert data["reporter_phone"] == "5550001111"


def test_get_unknown_case_is_404(client):
    response = client.get("/api/missing-persons/9999")
    assert response.status_code == 404
    assert response.json() == {"error": "Missing person not found"}


def test_list_filters_search_and_paginates(client, alice):
    create_case(client, alice["token"], full_name="Jane Doe", priority="high")
    create_case(client, alice["token"], full_name="Tom Smith", last_seen_location="Harbor Road")
    third = create_case(client, alice["token"], full_name="Rita Moreno", priority="critical")

    everything = client.get("/api/missing-persons").json()
    assert everything["pagination"]["total"] == 3
    assert everything["data"][0]["id"] == third["id"]

    high = client.get("/api/missing-persons", params={"priority": "high"}).json()
    assert [c["full_name"] for c in high["data"]] == ["Jane Doe"]

    harbor = client.get("/api/missing-persons", params={"search": "harbor"}).json()
    assert [c["full_name"] for c in harbor["data"]] == ["Tom Smith"]

    page = client.get("/api/missing-persons", params={"limit": 2, "offset": 0}).json()
    assert len(page["data"]) == 2
    assert page["pagination"] == {"total": 3, "limit": 2, "offset": 0, "hasMore": True}

    last = client.get("/api/missing-persons", params={"limit": 2, "offset": 2}).json()
    assert len(last["data"]) == 1
    assert last["pagination"]["hasMore"] is False


def test_list_rejects_unknown_status_filter(client):
    response = client.get("/api/missing-persons", params={"status": "vanished"})
    assert response.status_code == 400


def test_update_only_by_reporter_or_admin(client, alice, bob, admin):
    case = create_case(client, alice["token"])
    url = f"/api/missing-persons/{case['id']}"

    denied = client.put(url, json={"height": "170cm"}, headers=bob["headers"])
    assert denied.status_code == 403

    own = client.put(url, json={"height": "170cm", "priority": "critical"}, headers=alice["headers"])
    assert own.status_code == 200
    assert own.json()["data"]["height"] == "170cm"
    assert own.json()["data"]["priority"] == "critical"
    assert own.json()["data"]["full_name"] == "Jane Doe"

    by_admin = client.put(url, json={"hair_color": "brown"}, headers=admin["headers"])
    assert by_admin.status_code == 200
    assert by_admin.json()["data"]["height"] == "170cm"
    assert by_admin.json()["data"]["hair_color"] == "brown"


def test_update_ignores_fields_outside_allow_list(client, alice):
    case = create_case(client, alice["token"])
    url = f"/api/missing-persons/{case['id']}"

    response = client.put(url, json={"status": "found", "case_number": "MP0000000000"}, headers=alice["headers"])
    assert response.status_code == 400
    assert response.json() == {"error": "No fields to update"}

    unchanged = client.get(url).json()["data"]
    assert unchanged["status"] == "missing"
    assert unchanged["case_number"] == case["case_number"]


def test_update_cannot_blank_required_fields(client, alice):
    case = create_case(client, alice["token"])
    response = client.put(
        f"/api/missing-persons/{case['id']}", json={"full_name": "  "}, headers=alice["headers"]
    )
    assert response.status_code == 400


def test_delete_is_admin_only(client, alice, admin):
    case = create_case(client, alice["token"])
    url = f"/api/missing-persons/{case['id']}"

    assert client.delete(url, headers=alice["headers"]).status_code == 403
    assert client.delete(url, headers=admin["headers"]).status_code == 200
    assert client.get(url).status_code == 404
    assert client.delete(url, headers=admin["headers"]).status_code == 404


def test_status_requires_valid_value(client, alice):
    case = create_case(client, alice["token"])
    url = f"/api/missing-persons/{case['id']}/status"

    missing = client.put(url, json={}, headers=alice["headers"])
    assert missing.status_code == 400
    assert missing.json() == {"error": "Status is required"}

    invalid = client.put(url, json={"status": "teleported"}, headers=alice["headers"])
    assert invalid.status_code == 400
    assert invalid.json() == {"error": "Invalid status"}

    unknown_case = client.put("/api/missing-persons/9999/status", json={"status": "found"}, headers=alice["headers"])
    assert unknown_case.status_code == 404


def test_found_transition_stamps_resolution_and_audits(client, alice, bob):
    case = create_case(client, alice["token"])
    response = client.put(
        f"/api/missing-persons/{case['id']}/status",
        json={"status": "found", "found_location": "City Park", "update_note": "Safe and well"},
        headers=bob["headers"],
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "found"
    assert data["found_date"] is not None
    assert data["found_location"] == "City Park"
    assert data["found_by"] == bob["user"]["id"]

    history = client.get(f"/api/missing-persons/{case['id']}/updates").json()["data"]
    assert len(history) == 1
    assert history[0]["old_status"] == "missing"
    assert history[0]["new_status"] == "found"
    assert history[0]["update_note"] == "Safe and well"
    assert history[0]["user_id"] == bob["user"]["id"]


def test_any_status_may_follow_any_other(client, alice):
    case = create_case(client, alice["token"])
    url = f"/api/missing-persons/{case['id']}/status"

    for status in ("closed", "missing", "found", "investigation", "missing"):
        response = client.put(url, json={"status": status}, headers=alice["headers"])
        assert response.status_code == 200
        assert response.json()["data"]["status"] == status

    history = client.get(f"/api/missing-persons/{case['id']}/updates").json()["data"]
    assert [h["new_status"] for h in history] == ["missing", "investigation", "found", "missing", "closed"]


def test_my_reports_lists_only_own_cases(client, alice, bob):
    create_case(client, alice["token"], full_name="First")
    create_case(client, alice["token"], full_name="Second")
    create_case(client, bob["token"], full_name="Other")

    response = client.get("/api/missing-persons/my-reports", headers=alice["headers"])
    assert response.status_code == 200
    names = [c["full_name"] for c in response.json()["data"]]
    assert names == ["Second", "First"]
    assert all("days_missing" in c for c in response.json()["data"])

    assert client.get("/api/missing-persons/my-reports").status_code == 401


def test_days_missing_counts_from_last_seen_date(client, alice):
    last_seen = (date.today() - timedelta(days=10)).isoformat()
    case = create_case(client, alice["token"], last_seen_date=last_seen)
    assert case["days_missing"] == 10


def test_end_to_end_report_tip_and_resolution(client):
    from conftest import register
    token_a, _ = register(client, "User A", "a@example.com")
    token_b, _ = register(client, "User B", "b@example.com")

    case = create_case(client, token_a)
    assert case["id"]

    comment = client.post(
        "/api/comments",
        json={"missing_person_id": case["id"], "comment": "Saw her near the bridge"},
        headers=auth_headers(token_b),
    )
    assert comment.status_code == 201

    inbox = client.get("/api/notifications", headers=auth_headers(token_a)).json()
    assert inbox["unreadCount"] >= 1
    assert any(n["type"] == "comment" and not n["is_read"] for n in inbox["data"])

    found = client.put(
        f"/api/missing-persons/{case['id']}/status",
        json={"status": "found", "found_location": "Bridge Street"},
        headers=auth_headers(token_b),
    ).json()["data"]
    assert found["status"] == "found"
    assert found["found_date"] is not None

    fetched = client.get(f"/api/missing-persons/{case['id']}").json()["data"]
    assert fetched["status"] == "found"
    assert fetched["found_location"] == "Bridge Street"
