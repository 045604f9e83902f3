"""
Bearer-token auth, /auth endpoints and permission enforcement.
"""

from tests.conftest import ADMIN_ID, USER_ID


def test_me_for_admin(client, admin_headers):
    resp = client.get("/api/v1/auth/me", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == ADMIN_ID
    assert data["roles"] == ["admin"]
    assert data["display_role"] == "Admin"
    assert data["can_access_admin"] is True
    assert data["can_manage_users"] is True
    assert data["can_manage_teams"] is True
    assert "diagnostics:read" in data["permissions"]


def test_me_for_approved_maker(client, maker_headers):
    data = client.get("/api/v1/auth/me", headers=maker_headers).json()
    assert data["display_role"] == "Badge Maker"
    assert data["can_access_admin"] is True
    assert data["profile"]["assigned_team"] == "Team Ghost"
    assert data["can_manage_badges"] is True
    assert data["can_manage_users"] is False


def test_me_for_plain_user(client, user_headers):
    data = client.get("/api/v1/auth/me", headers=user_headers).json()
    assert data["id"] == USER_ID
    assert data["display_role"] == "User"
    assert data["can_access_admin"] is False
    assert "badges:approve" not in data["permissions"]


def test_missing_token(client):
    resp = client.get("/api/v1/auth/me")
    assert resp.status_code in (401, 403)


def test_invalid_token(client):
    resp = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid or expired token"


def test_token_lookups_are_cached(client, db, user_headers):
    client.get("/api/v1/auth/me", headers=user_headers)
    client.get("/api/v1/auth/me", headers=user_headers)
    assert db.auth.get_user_calls == 1


def test_oauth_start(client):
    resp = client.get("/api/v1/auth/oauth/google", params={"redirect_to": "https://mybadgelife.test/"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["provider"] == "google"
    assert "provider=google" in data["url"]


def test_oauth_unsupported_provider(client):
    resp = client.get("/api/v1/auth/oauth/myspace")
    assert resp.status_code == 400


def test_logout_drops_cached_token(client, db, user_headers):
    client.get("/api/v1/auth/me", headers=user_headers)
    resp = client.post("/api/v1/auth/logout", headers=user_headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Logged out successfully"}
    assert db.auth.signed_out is True


def test_permission_denied_message(client, user_headers):
    resp = client.post("/api/v1/matching/embeddings/process", headers=user_headers, json={})
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Insufficient permissions. Required: matching:process"


def test_security_headers(client):
    resp = client.get("/health")
    assert resp.json() == {"status": "healthy"}
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_ready(client):
    assert client.get("/ready").json() == {"status": "ready"}
