"""
HTTP tests for /goals, /feed and /health.

"Today" is pinned to conftest.TODAY through the get_clock override.
"""
from __future__ import annotations

from datetime import date, timedelta

from dotoday.services import ledger

T = date(2026, 3, 15)


def _create(client, headers, **body) -> dict:
    body.setdefault("title", "Meditate")
    r = client.post("/goals", json=body, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


class TestHealth:
    def test_health_ok(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

    def test_request_id_echoed(self, client):
        r = client.get("/health", headers={"X-Request-Id": "abc-123"})
        assert r.headers["X-Request-Id"] == "abc-123"

    def test_request_id_generated(self, client):
        r = client.get("/health")
        assert r.headers.get("X-Request-Id")


class TestGoalCrud:
    def test_create_goal(self, client, auth, user_id):
        goal = _create(client, auth(user_id), category="health", is_public=True)
        assert goal["user_id"] == user_id
        assert goal["state"] == "active"
        assert goal["current_streak"] == 0
        assert goal["frequency"] == "daily"
        assert goal["archived"] is False

    def test_create_requires_identity(self, client):
        r = client.post("/goals", json={"title": "x"})
        assert r.status_code == 401
        assert r.json()["code"] == "UNAUTHENTICATED"

    def test_list_own_goals(self, client, auth, user_id):
        a = _create(client, auth(user_id), title="a")
        _create(client, auth("someone-else"), title="b")
        r = client.get("/goals", headers=auth(user_id))
        assert r.status_code == 200
        assert [g["id"] for g in r.json()["items"]] == [a["id"]]

    def test_update_goal(self, client, auth, user_id):
        goal = _create(client, auth(user_id))
        r = client.put(
            f"/goals/{goal['id']}",
            json={"title": "Meditate 10 min", "is_public": True},
            headers=auth(user_id),
        )
        assert r.status_code == 200
        assert r.json()["title"] == "Meditate 10 min"
        assert r.json()["is_public"] is True

    def test_update_rejects_streak_field(self, client, auth, user_id):
        goal = _create(client, auth(user_id))
        r = client.put(f"/goals/{goal['id']}", json={"current_streak": 50}, headers=auth(user_id))
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_update_rejects_blank_title(self, client, auth, user_id):
        goal = _create(client, auth(user_id))
        r = client.put(f"/goals/{goal['id']}", json={"title": "   "}, headers=auth(user_id))
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"
        assert client.get(f"/goals/{goal['id']}", headers=auth(user_id)).json()["title"] == "Meditate"

    def test_update_strips_title(self, client, auth, user_id):
        goal = _create(client, auth(user_id))
        r = client.put(f"/goals/{goal['id']}", json={"title": "  Walk  "}, headers=auth(user_id))
        assert r.status_code == 200
        assert r.json()["title"] == "Walk"

    def test_archive_goal(self, client, auth, user_id):
        goal = _create(client, auth(user_id))
        r = client.post(f"/goals/{goal['id']}/archive", headers=auth(user_id))
        assert r.status_code == 200
        assert r.json()["state"] == "archived"
        listed = client.get("/goals", headers=auth(user_id)).json()
        assert listed["total"] == 0
        listed = client.get("/goals?include_archived=true", headers=auth(user_id)).json()
        assert listed["total"] == 1

    def test_private_goal_forbidden(self, client, auth, user_id):
        goal = _create(client, auth(user_id), is_public=False)
        r = client.get(f"/goals/{goal['id']}", headers=auth("someone-else"))
        assert r.status_code == 403
        assert r.json()["code"] == "FORBIDDEN"

    def test_unknown_goal(self, client, auth, user_id):
        r = client.get("/goals/nope", headers=auth(user_id))
        assert r.status_code == 404
        assert r.json()["code"] == "GOAL_NOT_FOUND"


class TestComplete:
    def test_mark_complete(self, client, auth, user_id):
        goal = _create(client, auth(user_id))
        r = client.post(f"/goals/{goal['id']}/complete", headers=auth(user_id))
        assert r.status_code == 200
        body = r.json()
        assert body["day"] == str(T)
        assert body["count"] == 1
        assert body["current_streak"] == 1

        refreshed = client.get(f"/goals/{goal['id']}", headers=auth(user_id)).json()
        assert refreshed["current_streak"] == 1

    def test_twice_same_day_conflict(self, client, auth, user_id):
        goal = _create(client, auth(user_id))
        client.post(f"/goals/{goal['id']}/complete", headers=auth(user_id))
        r = client.post(f"/goals/{goal['id']}/complete", headers=auth(user_id))
        assert r.status_code == 409
        assert r.json()["code"] == "ALREADY_COMPLETED_TODAY"
        completions = client.get(f"/goals/{goal['id']}/completions", headers=auth(user_id)).json()
        assert completions["total"] == 1

    def test_non_owner_forbidden_even_if_public(self, client, auth, user_id):
        goal = _create(client, auth(user_id), is_public=True)
        r = client.post(f"/goals/{goal['id']}/complete", headers=auth("someone-else"))
        assert r.status_code == 403

    def test_complete_unknown_goal(self, client, auth, user_id):
        r = client.post("/goals/nope/complete", headers=auth(user_id))
        assert r.status_code == 404

    def test_private_goal_indistinguishable_from_unknown(self, client, auth, user_id, monkeypatch):
        from dotoday.core.config import settings

        monkeypatch.setattr(settings, "HIDE_PRIVATE_GOALS", True)
        goal = _create(client, auth(user_id), is_public=False)
        hidden = client.post(f"/goals/{goal['id']}/complete", headers=auth("someone-else"))
        unknown = client.post("/goals/nope/complete", headers=auth("someone-else"))
        assert hidden.status_code == unknown.status_code == 404
        assert hidden.json()["code"] == unknown.json()["code"] == "GOAL_NOT_FOUND"
        completions = client.get(f"/goals/{goal['id']}/completions", headers=auth(user_id)).json()
        assert completions["total"] == 0


class TestStreakAndGraph:
    def test_streak_with_grace(self, client, db, auth, user_id):
        goal = _create(client, auth(user_id))
        for offset in (3, 2, 1):
            ledger.record_completion(db, goal["id"], T - timedelta(days=offset))
        db.commit()
        r = client.get(f"/goals/{goal['id']}/streak", headers=auth(user_id))
        assert r.status_code == 200
        body = r.json()
        assert body["current_streak"] == 3
        assert body["longest_streak"] == 3
        assert body["total_completions_in_window"] == 3
        assert body["window_days"] == 365

    def test_public_streak_visible_to_others(self, client, auth, user_id):
        goal = _create(client, auth(user_id), is_public=True)
        r = client.get(f"/goals/{goal['id']}/streak", headers=auth("someone-else"))
        assert r.status_code == 200
        assert r.json()["current_streak"] == 0

    def test_graph_window_zero_empty_goal(self, client, auth, user_id):
        goal = _create(client, auth(user_id))
        r = client.get(f"/goals/{goal['id']}/graph?days=0", headers=auth(user_id))
        assert r.status_code == 200
        assert r.json()["points"] == [{"day": str(T), "completions": 0, "count": 0}]

    def test_graph_default_is_yearly(self, client, auth, user_id):
        goal = _create(client, auth(user_id))
        client.post(f"/goals/{goal['id']}/complete", headers=auth(user_id))
        body = client.get(f"/goals/{goal['id']}/graph", headers=auth(user_id)).json()
        assert body["window_days"] == 365
        assert len(body["points"]) == 366
        assert body["points"][-1] == {"day": str(T), "completions": 1, "count": 1}

    def test_graph_negative_window_rejected(self, client, auth, user_id):
        goal = _create(client, auth(user_id))
        r = client.get(f"/goals/{goal['id']}/graph?days=-1", headers=auth(user_id))
        assert r.status_code == 422

    def test_recompute_streak(self, client, db, auth, user_id):
        goal = _create(client, auth(user_id))
        ledger.record_completion(db, goal["id"], T)
        db.commit()
        r = client.post(f"/goals/{goal['id']}/recompute-streak", headers=auth(user_id))
        assert r.status_code == 200
        assert r.json()["current_streak"] == 1


class TestFeed:
    def test_feed_lists_public_goals(self, client, auth, user_id):
        public = _create(client, auth(user_id), is_public=True)
        private = _create(client, auth(user_id), is_public=False)
        r = client.get("/feed?limit=100")
        assert r.status_code == 200
        ids = {g["id"] for g in r.json()["items"]}
        assert public["id"] in ids
        assert private["id"] not in ids

    def test_feed_limit_out_of_range_falls_back(self, client):
        r = client.get("/feed?limit=0")
        assert r.status_code == 200
        assert r.json()["total"] <= 50
