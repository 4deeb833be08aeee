from routers.pages import CACHED_ROUTES, CACHE_CONTROL_CACHED
from conftest import create_case


def test_offline_routes_are_cacheable(client):
    for path in CACHED_ROUTES:
        response = client.get(path)
        assert response.status_code == 200, path
        assert response.headers["content-type"].startswith("text/html")
        assert response.headers["cache-control"] == CACHE_CONTROL_CACHED


def test_other_pages_are_not_cached(client):
    for path in ("/login", "/register", "/map", "/admin", "/admin/live-tracking"):
        response = client.get(path)
        assert response.status_code == 200, path
        assert response.headers["cache-control"] == "no-cache"


def test_home_shows_recent_cases(client, alice):
    create_case(client, alice["token"], full_name="Harriet Vane")
    response = client.get("/")
    assert "Harriet Vane" in response.text


def test_case_detail_page(client, alice, bob):
    case = create_case(client, alice["token"], full_name="Peter Wimsey")
    client.post(
        "/api/comments",
        json={"missing_person_id": case["id"], "comment": "Seen at the library", "is_anonymous": True},
        headers=bob["headers"],
    )

    response = client.get(f"/missing-persons/{case['id']}")
    assert response.status_code == 200
    assert "Peter Wimsey" in response.text
    assert "Seen at the library" in response.text
    assert "Anonymous" in response.text
    assert "Bob Helper" not in response.text
    formatted = f"MP-{case['case_number'][2:6]}-{case['case_number'][6:]}"
    assert formatted in response.text


def test_case_detail_unknown_is_404(client):
    response = client.get("/missing-persons/12345")
    assert response.status_code == 404
    assert "Missing person not found" in response.text


def test_list_page_filters(client, alice):
    create_case(client, alice["token"], full_name="Alpha Person", priority="critical")
    create_case(client, alice["token"], full_name="Beta Person", priority="low")

    response = client.get("/missing-persons", params={"priority": "critical"})
    assert "Alpha Person" in response.text
    assert "Beta Person" not in response.text

    invalid = client.get("/missing-persons", params={"status": "nope"})
    assert invalid.status_code == 200
    assert "Invalid status" in invalid.text


def test_map_page_embeds_cases_with_coordinates(client, alice):
    create_case(client, alice["token"], full_name="Mapped Person", last_seen_latitude=48.85, last_seen_longitude=2.35)
    create_case(client, alice["token"], full_name="Unmapped Person")

    response = client.get("/map")
    assert "Mapped Person" in response.text
    assert "Unmapped Person" not in response.text


def test_security_headers_and_service_endpoints(client):
    response = client.get("/api")
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"
    assert response.json()["version"]

    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["checks"]["database"]["status"] == "ok"


def test_home_is_revalidated_quickly(client):
    cache_control = client.get("/").headers["cache-control"]
    assert "max-age=60" in cache_control
    assert "max-age=3600" not in cache_control


def test_service_worker_caches_offline_routes(client):
    response = client.get("/sw.js")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/javascript")
    assert response.headers["service-worker-allowed"] == "/"
    assert response.headers["cache-control"] == "no-cache"

    worker = response.text
    for path in CACHED_ROUTES:
        assert f'"{path}"' in worker
    assert '"sync-location"' in worker
    assert 'importScripts("/static/offline-queue.js")' in worker


def test_offline_queue_script_is_served(client):
    response = client.get("/static/offline-queue.js")
    assert response.status_code == 200
    assert "indexedDB" in response.text
    assert "replay" in response.text

    page = client.get("/").text
    assert '/static/offline-queue.js' in page
    assert 'register("/sw.js")' in page


def test_dashboard_queues_failed_pushes(client):
    page = client.get("/dashboard").text
    assert "offlineQueue.enqueue" in page
    assert '"sync-location"' in page
