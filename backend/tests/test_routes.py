"""HTTP-level tests: wiring, status codes and error mapping."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from database import Database
from main import create_app


@pytest.fixture()
def client():
    app = create_app(Database("sqlite://"))
    with TestClient(app) as c:
        yield c


def _create_habit(client, **fields) -> dict:
    payload = {"name": "Read", "frequency": "daily", **fields}
    resp = client.post("/api/v1/habits", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_health_check(client):
    assert client.get("/api/v1/health-check").json()["status"] == "ok"


def test_habit_crud(client):
    habit = _create_habit(client, rating_descriptions={"good": "30 pages"})
    assert habit["rating_descriptions"] == {"good": "30 pages", "okay": "", "bad": ""}

    resp = client.patch(f"/api/v1/habits/{habit['id']}", json={"name": "Read more"})
    assert resp.json()["name"] == "Read more"

    listed = client.get("/api/v1/habits").json()
    assert listed[0]["logged_this_period"] is False

    assert client.delete(f"/api/v1/habits/{habit['id']}").json() == {"id": habit["id"]}
    assert client.get(f"/api/v1/habits/{habit['id']}").status_code == 404


def test_invalid_frequency_is_422(client):
    resp = client.post("/api/v1/habits", json={"name": "Read", "frequency": "yearly"})
    assert resp.status_code == 422


def test_log_upsert_is_idempotent_per_period(client):
    habit = _create_habit(client, frequency="weekly")
    url = f"/api/v1/habits/{habit['id']}/logs"

    first = client.post(url, json={"period_start": "2025-03-15T12:00:00-05:00", "rating": "bad"})
    second = client.post(url, json={"period_start": "2025-03-10T01:00:00Z", "rating": "good", "comment": "ok"})
    assert first.status_code == second.status_code == 201
    assert first.json()["id"] == second.json()["id"]
    assert second.json()["period_start"] == "2025-03-10T00:00:00.000Z"

    logs = client.get(url).json()
    assert len(logs) == 1
    assert logs[0]["rating"] == "good"


def test_log_errors_are_mapped(client):
    habit = _create_habit(client, start_date="2025-03-20")
    url = f"/api/v1/habits/{habit['id']}/logs"

    assert client.post("/api/v1/habits/999/logs", json={"period_start": "2025-03-21", "rating": "good"}).status_code == 404
    assert client.post(url, json={"period_start": "2025-03-15", "rating": "good"}).status_code == 400
    assert client.post(url, json={"period_start": "whenever", "rating": "good"}).status_code == 400
    assert client.post(url, json={"period_start": "2025-03-21", "rating": "great"}).status_code == 422


def test_frequency_change_after_logging_is_400(client):
    habit = _create_habit(client)
    url = f"/api/v1/habits/{habit['id']}/logs"
    client.post(url, json={"period_start": "2025-03-11", "rating": "good"})
    client.post(url, json={"period_start": "2025-03-12", "rating": "good"})

    resp = client.patch(f"/api/v1/habits/{habit['id']}", json={"frequency": "weekly"})
    assert resp.status_code == 400
    client.post(url, json={"period_start": "2025-03-13", "rating": "good"})
    keys = {log["period_start"] for log in client.get(url).json()}
    assert len(keys) == 3


def test_log_update_and_delete(client):
    habit = _create_habit(client)
    url = f"/api/v1/habits/{habit['id']}/logs"
    log = client.post(url, json={"period_start": "2025-03-21", "rating": "okay"}).json()

    resp = client.patch(f"{url}/{log['id']}", json={"period_start": "2025-03-22T23:59:00+02:00"})
    assert resp.status_code == 200
    assert resp.json()["period_start"] == "2025-03-22T00:00:00.000Z"

    assert client.delete(f"{url}/{log['id']}").json() == {"id": log["id"]}
    assert client.delete(f"{url}/{log['id']}").status_code == 404


def test_bulk_log(client):
    a = _create_habit(client, name="Walk")
    b = _create_habit(client, name="Budget", frequency="monthly")
    resp = client.post("/api/v1/habits/logs/bulk", json={
        "reference": "2025-03-15",
        "entries": [{"habit_id": a["id"], "rating": "good"}, {"habit_id": b["id"], "rating": "bad"}],
    })
    assert resp.status_code == 201
    assert [log["period_start"] for log in resp.json()] == ["2025-03-15T00:00:00.000Z", "2025-03-01T00:00:00.000Z"]


def test_progress_and_overview(client):
    habit = _create_habit(client)
    url = f"/api/v1/habits/{habit['id']}/logs"
    for day in ("2025-03-13", "2025-03-14", "2025-03-15"):
        client.post(url, json={"period_start": day, "rating": "good"})

    progress = client.get(f"/api/v1/habits/{habit['id']}/progress").json()
    assert progress["category"]["kind"] == "hot_streak"
    assert progress["category"]["count"] == 3

    stats = client.get("/api/v1/overview").json()
    assert stats["total_logs"] == 3
    assert stats["average_rating_key"] == "good"

    chart = client.get("/api/v1/overview/chart", params={"preset": "custom", "from": "2025-03-14", "to": "2025-03-31"}).json()
    assert [row["period_key"] for row in chart] == ["2025-03-14T00:00:00.000Z", "2025-03-15T00:00:00.000Z"]

    categories = client.get("/api/v1/overview/categories").json()
    assert categories["hot_streak"][0]["habit"]["id"] == habit["id"]
    assert categories["uncategorized"] == []

    assert client.get("/api/v1/overview/chart", params={"preset": "1y"}).status_code == 400


def test_event_and_favorite_routes(client):
    resp = client.post("/api/v1/events", json={"day": "2025-03-15", "title": "Dentist", "start_time": "09:00"})
    assert resp.status_code == 201
    event = resp.json()
    assert event["day"] == "2025-03-15"

    bad = client.post("/api/v1/events", json={"day": "2025-03-15", "title": "x", "start_time": "10:00", "end_time": "09:00"})
    assert bad.status_code == 400

    fav = client.post("/api/v1/favorites", json={"title": "Run", "start_time": "06:30"}).json()
    scheduled = client.post(f"/api/v1/favorites/{fav['id']}/schedule", json={"day": "2025-03-16"})
    assert scheduled.status_code == 201
    assert scheduled.json()["favorite_id"] == fav["id"]

    listed = client.get("/api/v1/events", params={"from": "2025-03-15", "to": "2025-03-16"}).json()
    assert [e["title"] for e in listed] == ["Dentist", "Run"]
    assert [e["title"] for e in client.get("/api/v1/events", params={"day": "2025-03-16"}).json()] == ["Run"]

    patched = client.patch(f"/api/v1/events/{event['id']}", json={"is_completed": True})
    assert patched.json()["is_completed"] is True
    assert client.delete(f"/api/v1/favorites/{fav['id']}").json() == {"id": fav["id"]}
    assert client.delete(f"/api/v1/events/{event['id']}").json() == {"id": event["id"]}
    assert client.get(f"/api/v1/events/{event['id']}").status_code == 404


def test_backlog_and_schedule_routes(client):
    item = client.post("/api/v1/backlog", json={"title": "Taxes"}).json()
    done = client.patch(f"/api/v1/backlog/{item['id']}", json={"is_completed": True}).json()
    assert done["completed_at"] is not None
    client.post("/api/v1/backlog", json={"title": "Call bank"})

    today = client.get("/api/v1/schedule/today").json()
    assert set(today) == {"day", "now", "events", "backlog"}
    assert [i["title"] for i in today["backlog"]] == ["Call bank"]

    next_day = client.get("/api/v1/schedule/next-day").json()
    assert set(next_day) == {"day", "events", "backlog"}

    assert client.delete("/api/v1/backlog/999").status_code == 404
