from conftest import create_case


def test_listing_requires_case_id(client):
    response = client.get("/api/comments")
    assert response.status_code == 400
    assert response.json() == {"error": "Missing person ID is required"}


def test_comment_requires_auth_and_text(client, alice):
    case = create_case(client, alice["token"])

    assert client.post("/api/comments", json={"missing_person_id": case["id"], "comment": "hi"}).status_code == 401

    blank = client.post(
        "/api/comments", json={"missing_person_id": case["id"], "comment": "   "}, headers=alice["headers"]
    )
    assert blank.status_code == 400

    no_case = client.post("/api/comments", json={"comment": "hello"}, headers=alice["headers"])
    assert no_case.status_code == 400


def test_comment_on_unknown_case_is_404(client, alice):
    response = client.post(
        "/api/comments", json={"missing_person_id": 4242, "comment": "hello"}, headers=alice["headers"]
    )
    assert response.status_code == 404


def test_comment_by_other_account_notifies_reporter_once(client, alice, bob):
    case = create_case(client, alice["token"])

    response = client.post(
        "/api/comments",
        json={"missing_person_id": case["id"], "comment": "Saw someone matching this near the market"},
        headers=bob["headers"],
    )
    assert response.status_code == 201
    comment = response.json()["data"]
    assert comment["user_name"] == "Bob Helper"
    assert comment["user_id"] == bob["user"]["id"]

    inbox = client.get("/api/notifications", headers=alice["headers"]).json()
    comment_notes = [n for n in inbox["data"] if n["type"] == "comment"]
    assert len(comment_notes) == 1
    assert comment_notes[0]["title"] == "New Comment"
    assert comment_notes[0]["missing_person_id"] == case["id"]

    assert client.get("/api/notifications", headers=bob["headers"]).json()["data"] == []


def test_comment_by_reporter_creates_no_notification(client, alice):
    case = create_case(client, alice["token"])
    response = client.post(
        "/api/comments", json={"missing_person_id": case["id"], "comment": "Update: still missing"},
        headers=alice["headers"],
    )
    assert response.status_code == 201
    assert client.get("/api/notifications", headers=alice["headers"]).json()["data"] == []


def test_anonymous_comment_hides_author(client, alice, bob, database):
    case = create_case(client, alice["token"])
    client.post(
        "/api/comments",
        json={"missing_person_id": case["id"], "comment": "I would rather not say who I am", "is_anonymous": True},
        headers=bob["headers"],
    )
    client.post(
        "/api/comments",
        json={"missing_person_id": case["id"], "comment": "Second tip"},
        headers=bob["headers"],
    )

    comments = client.get("/api/comments", params={"missing_person_id": case["id"]}).json()["data"]
    assert [c["comment"] for c in comments] == ["Second tip", "I would rather not say who I am"]
    anonymous = comments[1]
    assert anonymous["user_name"] == "Anonymous"
    assert anonymous["user_id"] is None
    assert anonymous["is_anonymous"] is True

    from database.models import Comment
    with database.get_session() as s:
        stored = s.query(Comment).filter(Comment.is_anonymous == True).one()
        assert stored.user_id == bob["user"]["id"]
