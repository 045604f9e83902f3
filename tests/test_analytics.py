"""
Admin summaries of provider usage and search outcomes.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.modules.analytics.service import AnalyticsService


def ago(**delta):
    return (datetime.now(timezone.utc) - timedelta(**delta)).isoformat()


@pytest.fixture
def api_calls(db):
    return db.seed(
        "api_call_logs",
        {"api_provider": "replicate", "success": True, "estimated_cost_usd": 0.01,
         "response_time_ms": 1200, "created_at": ago(hours=1)},
        {"api_provider": "replicate", "success": False, "estimated_cost_usd": 0.01,
         "response_time_ms": 800, "created_at": ago(hours=2)},
        {"api_provider": "serpapi", "success": True, "estimated_cost_usd": 0.001,
         "response_time_ms": 300, "created_at": ago(hours=3)},
        {"api_provider": "openai", "success": True, "estimated_cost_usd": 0.0042,
         "response_time_ms": None, "created_at": ago(days=30)},
    )


@pytest.fixture
def searches(db):
    return db.seed(
        "analytics_searches",
        {"search_type": "image_analysis", "found_in_database": True, "found_via_image_matching": True,
         "search_source_used": "image_matching", "total_duration_ms": 400, "created_at": ago(hours=1)},
        {"search_type": "image_analysis", "found_in_database": False, "found_via_image_matching": False,
         "total_duration_ms": 600, "created_at": ago(hours=2)},
        {"search_type": "google_image_search", "found_via_web_search": True,
         "search_source_used": "Google Image Search", "total_duration_ms": 2000, "created_at": ago(hours=3)},
        {"search_type": "image_analysis", "found_in_database": True, "created_at": ago(days=10)},
    )


class TestApiUsage:

    def test_per_provider_breakdown(self, client, api_calls, admin_headers):
        resp = client.get("/api/v1/analytics/api-usage", headers=admin_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["days"] == 7
        assert data["total_calls"] == 3
        assert data["success_rate"] == pytest.approx(66.7)
        assert data["total_cost_usd"] == pytest.approx(0.021)
        assert data["avg_response_time_ms"] == pytest.approx(766.7)

        providers = {p["api_provider"]: p for p in data["providers"]}
        assert set(providers) == {"replicate", "serpapi"}
        assert providers["replicate"] == {
            "api_provider": "replicate",
            "calls": 2,
            "successful_calls": 1,
            "success_rate": 50.0,
            "total_cost_usd": 0.02,
            "avg_response_time_ms": 1000.0,
        }
        assert sum(d["calls"] for d in data["daily"]) == 3

    def test_window_is_configurable(self, client, api_calls, admin_headers):
        data = client.get("/api/v1/analytics/api-usage", headers=admin_headers, params={"days": 60}).json()
        assert data["total_calls"] == 4
        openai = next(p for p in data["providers"] if p["api_provider"] == "openai")
        assert openai["avg_response_time_ms"] == 0.0

    def test_no_calls(self, db):
        summary = AnalyticsService(db).api_usage()
        assert summary.total_calls == 0
        assert summary.success_rate == 0.0
        assert summary.providers == []

    def test_invalid_window(self, client, admin_headers):
        assert client.get("/api/v1/analytics/api-usage", headers=admin_headers, params={"days": 0}).status_code == 422


class TestSearchSummary:

    def test_outcome_counts(self, client, searches, admin_headers):
        data = client.get("/api/v1/analytics/searches", headers=admin_headers).json()
        assert data == {
            "days": 7,
            "total_searches": 3,
            "found_in_database": 1,
            "found_via_image_matching": 1,
            "found_via_web_search": 1,
            "no_result": 1,
            "success_rate": 66.7,
            "avg_search_time_ms": 1000.0,
            "by_type": {"image_analysis": 2, "google_image_search": 1},
            "by_source": {"image_matching": 1, "Google Image Search": 1},
        }

    def test_read_failure_is_500(self, client, db, admin_headers):
        db.failing_tables.add("analytics_searches")
        assert client.get("/api/v1/analytics/searches", headers=admin_headers).status_code == 500


def test_summaries_are_admin_only(client, api_calls, maker_headers, moderator_headers):
    for headers in (maker_headers, moderator_headers):
        assert client.get("/api/v1/analytics/api-usage", headers=headers).status_code == 403
        assert client.get("/api/v1/analytics/searches", headers=headers).status_code == 403


def test_summaries_require_sign_in(client):
    assert client.get("/api/v1/analytics/api-usage").status_code in (401, 403)
