"""
Badge catalog endpoints.
"""

import json

import pytest

from tests.conftest import MAKER_ID, USER_ID


@pytest.fixture
def badges(db):
    return db.seed(
        "badges",
        {"name": "Ghost Skull", "year": 2023, "category": "Elect Badge", "team_name": "Team Ghost",
         "description": "Blinky skull", "retired": False},
        {"name": "Pirate SAO", "year": 2024, "category": "SAO", "team_name": "Pirates", "retired": True},
        {"name": "Robot Arm", "year": 2024, "category": "Elect Badge", "team_name": "Team Ghost", "retired": False},
    )


class TestListBadges:

    def test_newest_first(self, client, badges):
        data = client.get("/api/v1/badges").json()
        assert [b["name"] for b in data] == ["Robot Arm", "Pirate SAO", "Ghost Skull"]

    def test_filters(self, client, badges):
        assert [b["name"] for b in client.get("/api/v1/badges", params={"category": "SAO"}).json()] == ["Pirate SAO"]
        assert len(client.get("/api/v1/badges", params={"year": 2024}).json()) == 2
        assert len(client.get("/api/v1/badges", params={"team_name": "Team Ghost"}).json()) == 2
        assert [b["name"] for b in client.get("/api/v1/badges", params={"search": "skull"}).json()] == ["Ghost Skull"]

    def test_exclude_retired(self, client, badges):
        data = client.get("/api/v1/badges", params={"include_retired": "false"}).json()
        assert "Pirate SAO" not in [b["name"] for b in data]

    def test_pagination(self, client, badges):
        data = client.get("/api/v1/badges", params={"limit": 1, "offset": 1}).json()
        assert [b["name"] for b in data] == ["Pirate SAO"]

    def test_list_is_cached_until_a_write(self, client, db, badges, user_headers):
        client.get("/api/v1/badges")
        client.get("/api/v1/badges")
        assert db.calls.count(("badges", "select")) == 1

        client.post("/api/v1/badges", headers=user_headers, json={"name": "New One"})
        data = client.get("/api/v1/badges").json()
        assert data[0]["name"] == "New One"


class TestGetBadge:

    def test_found(self, client, badges):
        resp = client.get(f"/api/v1/badges/{badges[0]['id']}")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Ghost Skull"

    def test_not_found(self, client):
        resp = client.get("/api/v1/badges/missing")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Badge not found"


class TestCreateBadge:

    def test_requires_sign_in(self, client):
        resp = client.post("/api/v1/badges", json={"name": "Anon"})
        assert resp.status_code in (401, 403)

    def test_creates_and_notifies(self, client, db, maker_headers, discord_requests):
        resp = client.post("/api/v1/badges", headers=maker_headers, json={
            "name": "Ghost v2", "year": 2025, "category": "SAO", "team_name": "Team Ghost",
            "image_url": "https://cdn.example.com/ghost.png",
        })
        assert resp.status_code == 201
        badge = resp.json()
        assert badge["maker_id"] == MAKER_ID

        payload = json.loads(discord_requests[0].content)
        embed = payload["embeds"][0]
        assert embed["title"] == "🏆 New Badge Submitted"
        assert {"name": "Maker", "value": "maker", "inline": True} in embed["fields"]
        assert embed["thumbnail"]["url"] == "https://cdn.example.com/ghost.png"

    def test_invalid_category(self, client, user_headers):
        resp = client.post("/api/v1/badges", headers=user_headers, json={"name": "X", "category": "Hat"})
        assert resp.status_code == 422


class TestUpdateBadge:

    def test_maker_of_same_team(self, client, badges, maker_headers):
        resp = client.put(f"/api/v1/badges/{badges[0]['id']}", headers=maker_headers, json={"year": 2022})
        assert resp.status_code == 200
        assert resp.json()["year"] == 2022
        assert resp.json()["updated_at"] is not None

    def test_maker_of_other_team(self, client, badges, maker_headers):
        resp = client.put(f"/api/v1/badges/{badges[1]['id']}", headers=maker_headers, json={"year": 2022})
        assert resp.status_code == 403
        assert resp.json()["detail"] == "You can only edit badges that belong to your assigned team"

    def test_admin_edits_any_team(self, client, badges, admin_headers):
        resp = client.put(f"/api/v1/badges/{badges[1]['id']}", headers=admin_headers, json={"retired": False})
        assert resp.status_code == 200
        assert resp.json()["retired"] is False

    def test_plain_user_is_forbidden(self, client, badges, user_headers):
        resp = client.put(f"/api/v1/badges/{badges[0]['id']}", headers=user_headers, json={"year": 2022})
        assert resp.status_code == 403


class TestDeleteBadge:

    def test_admin_deletes_with_related_rows(self, client, db, badges, admin_headers):
        badge_id = badges[0]["id"]
        db.seed("badge_images", {"badge_id": badge_id, "image_url": "https://x/1.png", "display_order": 0})
        db.seed("badge_embeddings", {"badge_id": badge_id, "embedding": [1.0]})
        db.seed("ownership", {"badge_id": badge_id, "user_id": USER_ID, "status": "own"})

        resp = client.delete(f"/api/v1/badges/{badge_id}", headers=admin_headers)
        assert resp.status_code == 204
        assert db.rows("badge_images") == []
        assert db.rows("badge_embeddings") == []
        assert db.rows("ownership") == []
        assert client.get(f"/api/v1/badges/{badge_id}").status_code == 404

    def test_maker_cannot_delete(self, client, badges, maker_headers):
        resp = client.delete(f"/api/v1/badges/{badges[0]['id']}", headers=maker_headers)
        assert resp.status_code == 403
        assert resp.json()["detail"] == "Only admins can perform this action"


class TestReview:

    def test_approve_notifies(self, client, badges, maker_headers, discord_requests):
        resp = client.post(f"/api/v1/badges/{badges[0]['id']}/approve", headers=maker_headers)
        assert resp.status_code == 200
        assert resp.json() == {
            "badge_id": badges[0]["id"],
            "message": 'Badge "Ghost Skull" approved successfully',
            "notified": True,
            "emailed": False,
        }
        embed = json.loads(discord_requests[0].content)["embeds"][0]
        assert embed["title"] == "✅ Badge Approved"

    def test_reject_requires_reason(self, client, badges, admin_headers):
        resp = client.post(f"/api/v1/badges/{badges[0]['id']}/reject", headers=admin_headers, json={})
        assert resp.status_code == 422

    def test_reject_sends_reason(self, client, badges, admin_headers, discord_requests):
        resp = client.post(f"/api/v1/badges/{badges[0]['id']}/reject", headers=admin_headers,
                           json={"reason": "Duplicate entry"})
        assert resp.status_code == 200
        fields = json.loads(discord_requests[0].content)["embeds"][0]["fields"]
        assert {"name": "Reason", "value": "Duplicate entry", "inline": False} in fields

    def test_plain_user_cannot_approve(self, client, badges, user_headers):
        assert client.post(f"/api/v1/badges/{badges[0]['id']}/approve", headers=user_headers).status_code == 403


class TestBadgeStats:

    def test_counts_rank_and_flags(self, client, db, badges, user_headers):
        ghost, pirate, robot = (b["id"] for b in badges)
        db.seed(
            "ownership",
            {"badge_id": pirate, "user_id": "u1", "status": "own"},
            {"badge_id": pirate, "user_id": "u2", "status": "own"},
            {"badge_id": ghost, "user_id": USER_ID, "status": "own"},
            {"badge_id": ghost, "user_id": "u3", "status": "want"},
            {"badge_id": ghost, "user_id": USER_ID, "status": "want"},
        )
        data = client.get(f"/api/v1/badges/{ghost}/stats", headers=user_headers).json()
        assert data == {
            "badge_id": ghost,
            "owners_count": 1,
            "wants_count": 2,
            "ownership_rank": 2,
            "is_owned": True,
            "is_wanted": True,
        }

    def test_anonymous_and_unowned(self, client, badges):
        data = client.get(f"/api/v1/badges/{badges[2]['id']}/stats").json()
        assert data["owners_count"] == 0
        assert data["ownership_rank"] is None
        assert data["is_owned"] is False
