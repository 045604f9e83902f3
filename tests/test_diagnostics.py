"""
Provider credential checks.
"""

import httpx
import pytest

from app.main import app
from app.modules.diagnostics.routes import get_diagnostics_service
from app.modules.diagnostics.service import DiagnosticsService
from app.modules.matching.replicate_client import ReplicateClient
from app.modules.notifications.service import NotificationService
from app.modules.search.clients import SerpApiClient
from app.config import Settings


def answer(status, json=None, text=None):
    return httpx.MockTransport(lambda request: httpx.Response(status, json=json, text=text))


def make_service(db, replicate=None, serpapi=None, notifier=None, **config):
    return DiagnosticsService(
        Settings(**config),
        replicate or ReplicateClient(None),
        serpapi or SerpApiClient(None),
        notifier or NotificationService(webhook_url=None, supabase=db),
    )


@pytest.fixture
def use_service():
    def install(service):
        app.dependency_overrides[get_diagnostics_service] = lambda: service
    return install


class TestReplicate:

    def test_working_token(self, client, db, use_service, admin_headers):
        replicate = ReplicateClient("r8_test", transport=answer(200, json={"results": []}))
        use_service(make_service(db, replicate=replicate))
        resp = client.post("/api/v1/diagnostics/test-replicate", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert resp.json()["test_response"] == {"results": []}

    def test_rejected_token(self, client, db, use_service, admin_headers):
        replicate = ReplicateClient("r8_bad", transport=answer(401, json={"detail": "Invalid token"}))
        use_service(make_service(db, replicate=replicate))
        resp = client.post("/api/v1/diagnostics/test-replicate", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["detail"]["error"] == "Replicate API test failed: 401 Unauthorized"
        assert resp.json()["detail"]["has_token"] is True

    def test_missing_token(self, client, db, use_service, admin_headers):
        use_service(make_service(db))
        resp = client.post("/api/v1/diagnostics/test-replicate", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == {"error": "REPLICATE_API_TOKEN not configured", "has_token": False}


class TestSerpApi:

    def test_reports_upstream_status(self, client, db, use_service, admin_headers):
        serpapi = SerpApiClient("serp-key-123", transport=answer(401, json={"error": "Invalid API key"}))
        use_service(make_service(db, serpapi=serpapi))
        data = client.post("/api/v1/diagnostics/test-serpapi", headers=admin_headers).json()
        assert data == {
            "status": 401,
            "key_found": True,
            "key_length": 12,
            "response": {"error": "Invalid API key"},
            "success": False,
            "error": None,
        }

    def test_missing_key(self, client, db, use_service, admin_headers):
        use_service(make_service(db))
        resp = client.post("/api/v1/diagnostics/test-serpapi", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json() == {
            "status": None,
            "key_found": False,
            "key_length": 0,
            "response": None,
            "success": False,
            "error": "SERPAPI_KEY not found in environment",
        }


class TestDiscord:

    def test_working_webhook(self, client, db, use_service, admin_headers):
        notifier = NotificationService(webhook_url="https://discord.test/hook", supabase=db, transport=answer(204))
        use_service(make_service(db, notifier=notifier))
        resp = client.post("/api/v1/diagnostics/test-discord", headers=admin_headers)
        assert resp.json() == {"success": True, "message": "Discord webhook is working correctly", "configured": True}

    def test_failing_webhook(self, client, db, use_service, admin_headers):
        notifier = NotificationService(webhook_url="https://discord.test/hook", supabase=db,
                                       transport=answer(404, text="Unknown Webhook"))
        use_service(make_service(db, notifier=notifier))
        resp = client.post("/api/v1/diagnostics/test-discord", headers=admin_headers)
        assert resp.status_code == 500
        assert resp.json()["detail"]["status"] == 404

    def test_not_configured(self, client, db, use_service, admin_headers):
        use_service(make_service(db))
        resp = client.post("/api/v1/diagnostics/test-discord", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["detail"]["configured"] is False


def test_api_keys_never_returns_values(client, db, use_service, admin_headers):
    use_service(make_service(db, serpapi_key="serp-secret", discord_webhook_url="https://discord.test/hook"))
    resp = client.get("/api/v1/diagnostics/api-keys", headers=admin_headers)
    data = resp.json()
    assert data["serpapi"] is True
    assert data["discord"] is True
    assert "serp-secret" not in resp.text


def test_diagnostics_are_admin_only(client, db, use_service, maker_headers):
    use_service(make_service(db))
    for path in ("test-replicate", "test-serpapi", "test-discord"):
        assert client.post(f"/api/v1/diagnostics/{path}", headers=maker_headers).status_code == 403
    assert client.get("/api/v1/diagnostics/api-keys", headers=maker_headers).status_code == 403
