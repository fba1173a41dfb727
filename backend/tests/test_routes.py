from datetime import date, datetime, timedelta, timezone

from conftest import auth_headers


def test_health_check(client):
    assert client.get("/api/v1/health-check").json()["status"] == "ok"


def test_requests_need_a_token(client):
    assert client.get("/api/v1/habits").status_code == 401
    assert client.get("/api/v1/habits", headers={"Authorization": "Bearer nope"}).status_code == 401


def test_habit_flow(client, alice):
    created = client.post("/api/v1/habits", json={"title": "Exercise", "category": "Fitness"}, headers=alice)
    assert created.status_code == 200
    habit_id = created.json()["data"]["id"]

    day = "2024-06-01"
    statuses = []
    for _ in range(3):
        res = client.post(f"/api/v1/habits/{habit_id}/toggle", json={"date": day}, headers=alice)
        assert res.status_code == 200
        statuses.append(res.json()["data"]["history"].get(day))
    assert statuses == ["COMPLETED", "FAILED", None]

    habit_logs = client.get("/api/v1/logs", params={"type": "habit"}, headers=alice).json()
    assert [e["description"] for e in habit_logs] == [
        'Completed "Exercise" for 2024-06-01',
        'Created habit "Exercise"',
    ]


def test_toggle_defaults_to_today_and_rejects_future(client, alice):
    habit_id = client.post("/api/v1/habits", json={"title": "Walk"}, headers=alice).json()["data"]["id"]
    res = client.post(f"/api/v1/habits/{habit_id}/toggle", headers=alice)
    assert res.status_code == 200
    assert res.json()["data"]["streak"] == 1

    tomorrow = (datetime.now(timezone.utc).date() + timedelta(days=2)).isoformat()
    res = client.post(f"/api/v1/habits/{habit_id}/toggle", json={"date": tomorrow}, headers=alice)
    assert res.status_code == 400

    assert client.post("/api/v1/habits/missing/toggle", headers=alice).status_code == 404


def test_goal_progress_reverse_and_edit(client, alice):
    goal = client.post("/api/v1/goals", json={"title": "Read", "target": 100, "unit": "pages"}, headers=alice)
    goal_id = goal.json()["data"]["id"]

    client.post(f"/api/v1/goals/{goal_id}/add", json={"amount": 30}, headers=alice)
    res = client.post(f"/api/v1/goals/{goal_id}/add", json={"amount": 40}, headers=alice)
    assert res.json()["data"]["current"] == 70

    logs = client.get("/api/v1/logs", params={"type": "goal"}, headers=alice).json()
    first = next(e for e in logs if e["amount"] == 30)
    second = next(e for e in logs if e["amount"] == 40)

    res = client.put(f"/api/v1/logs/{first['id']}/reverse", headers=alice)
    assert res.status_code == 200
    assert res.json()["data"]["reversed"] is True
    assert client.put(f"/api/v1/logs/{first['id']}/reverse", headers=alice).status_code == 409

    res = client.put(f"/api/v1/logs/{second['id']}", json={"new_amount": 25}, headers=alice)
    assert res.json()["data"]["description"] == "Added 25 pages to Read"

    goals = client.get("/api/v1/goals", headers=alice).json()
    assert goals[0]["current"] == 25


def test_bad_amounts_are_400(client, alice):
    goal_id = client.post("/api/v1/goals", json={"title": "Save", "target": 10}, headers=alice).json()["data"]["id"]
    for amount in (0, -5, "ten", None):
        res = client.post(f"/api/v1/goals/{goal_id}/add", json={"amount": amount}, headers=alice)
        assert res.status_code == 400
    assert client.post("/api/v1/goals", json={"title": "Bad", "target": -1}, headers=alice).status_code == 400


def test_reversing_progress_of_deleted_goal_returns_warning(client, alice):
    goal_id = client.post("/api/v1/goals", json={"title": "Save", "target": 10}, headers=alice).json()["data"]["id"]
    client.post(f"/api/v1/goals/{goal_id}/add", json={"amount": 3}, headers=alice)
    log_id = client.get("/api/v1/logs", params={"type": "goal"}, headers=alice).json()[0]["id"]
    assert client.delete(f"/api/v1/goals/{goal_id}", headers=alice).status_code == 200

    res = client.put(f"/api/v1/logs/{log_id}/reverse", headers=alice)
    assert res.status_code == 200
    assert res.json()["warnings"]


def test_timeline_groups_by_day(client, alice):
    client.post("/api/v1/habits", json={"title": "Walk"}, headers=alice)
    groups = client.get("/api/v1/logs/timeline", headers=alice).json()
    assert len(groups) == 1
    assert groups[0]["date"] == datetime.now(timezone.utc).date().isoformat()


def test_notifications_and_dismissal(client, alice):
    goal_id = client.post("/api/v1/goals", json={"title": "Save", "target": 10}, headers=alice).json()["data"]["id"]
    client.post(f"/api/v1/goals/{goal_id}/add", json={"amount": 10}, headers=alice)

    notes = client.get("/api/v1/notifications", headers=alice).json()
    assert [n["id"] for n in notes] == [f"goal-complete-{goal_id}"]

    assert client.delete(f"/api/v1/notifications/goal-complete-{goal_id}", headers=alice).status_code == 200
    assert client.get("/api/v1/notifications", headers=alice).json() == []


def test_friend_request_flow(client, alice, bob):
    client.post("/api/v1/users/sync", json={"name": "Alice"}, headers=alice)
    client.post("/api/v1/users/sync", json={"name": "Bob"}, headers=bob)

    assert client.post("/api/v1/social/friends", json={"friend_id": "bob"}, headers=alice).status_code == 200

    notes = client.get("/api/v1/notifications", headers=bob).json()
    assert notes[0]["type"] == "friend_request"
    assert notes[0]["action_data"] == {"friend_id": "alice"}

    res = client.post("/api/v1/social/friends/accept", json={"friend_id": "alice"}, headers=bob)
    assert res.json()["data"]["id"] == "alice"
    assert [f["id"] for f in client.get("/api/v1/social/friends", headers=alice).json()] == ["bob"]

    client.post("/api/v1/habits", json={"title": "Stretch"}, headers=bob)
    feed = client.get("/api/v1/social/feed", headers=alice).json()
    assert feed[0]["friend_name"] == "Bob"


def test_event_invite_notification(client, alice, bob):
    client.post("/api/v1/users/sync", json={"name": "Bob"}, headers=bob)
    client.post("/api/v1/social/friends", json={"friend_id": "bob"}, headers=alice)
    client.post("/api/v1/social/friends/accept", json={"friend_id": "alice"}, headers=bob)

    event = client.post(
        "/api/v1/events",
        json={"title": "Park run", "date": (date.today() + timedelta(days=3)).isoformat(), "time": "08:00"},
        headers=alice,
    ).json()["data"]
    assert client.post(f"/api/v1/events/{event['id']}/invite", json={"friend_ids": ["bob"]}, headers=bob).status_code == 403
    client.post(f"/api/v1/events/{event['id']}/invite", json={"friend_ids": ["bob"]}, headers=alice)

    notes = client.get("/api/v1/notifications", headers=bob).json()
    assert [n["id"] for n in notes] == [f"event-invite-{event['id']}"]

    res = client.post(f"/api/v1/events/{event['id']}/rsvp", json={"attending": True}, headers=bob)
    assert "bob" in res.json()["data"]["attendees"]
    assert client.get("/api/v1/notifications", headers=bob).json() == []


def test_user_profile_and_delete(client):
    carol = auth_headers("carol", "Carol", "carol@example.com")
    assert client.get("/api/v1/users/me", headers=carol).status_code == 404

    synced = client.post("/api/v1/users/sync", json={}, headers=carol).json()["data"]
    assert synced["name"] == "Carol"
    assert "ui-avatars.com" in synced["avatar_url"]

    updated = client.patch("/api/v1/users/me", json={"name": "Caz"}, headers=carol).json()["data"]
    assert updated["name"] == "Caz"

    client.post("/api/v1/habits", json={"title": "Walk"}, headers=carol)
    assert client.delete("/api/v1/users/me", headers=carol).status_code == 200
    assert client.get("/api/v1/users/me", headers=carol).status_code == 404
