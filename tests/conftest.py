"""
Pytest fixtures for the MyBadgeLife API test suite.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.database.supabase_client import get_supabase, get_service_supabase
from app.modules.auth.service import clear_auth_cache
from app.modules.badges.service import clear_badge_cache
from app.modules.notifications.service import NotificationService, get_notification_service
from app.modules.notifications.email import EmailService, get_email_service
from tests.fakes import FakeSupabase

ADMIN_ID = "00000000-0000-0000-0000-0000000000a1"
MAKER_ID = "00000000-0000-0000-0000-0000000000b2"
USER_ID = "00000000-0000-0000-0000-0000000000c3"
MODERATOR_ID = "00000000-0000-0000-0000-0000000000d4"


@pytest.fixture(autouse=True)
def clear_caches():
    clear_auth_cache()
    clear_badge_cache()
    yield
    clear_auth_cache()
    clear_badge_cache()


@pytest.fixture
def db():
    """Fresh in-memory Supabase for each test."""
    return FakeSupabase()


@pytest.fixture
def discord_requests():
    """Requests captured by the fake Discord webhook."""
    return []


@pytest.fixture
def notifier(db, discord_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        discord_requests.append(request)
        return httpx.Response(204)

    return NotificationService(
        webhook_url="https://discord.test/api/webhooks/1/abc",
        supabase=db,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def sent_emails():
    """Requests captured by the fake Resend API."""
    return []


@pytest.fixture
def mailer(db, sent_emails):
    def handler(request: httpx.Request) -> httpx.Response:
        sent_emails.append(request)
        return httpx.Response(200, json={"id": f"email-{len(sent_emails)}"})

    return EmailService(
        api_key="re_test",
        supabase=db,
        api_url="https://resend.test/emails",
        base_url="https://mybadgelife.test",
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def client(db, notifier, mailer):
    """TestClient wired to the fake Supabase, Discord webhook and Resend API."""
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_notification_service] = lambda: notifier
    app.dependency_overrides[get_email_service] = lambda: mailer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(db):
    return db.add_user("admin-token", ADMIN_ID, "admin@mybadgelife.test", roles=["admin"], profile={})


@pytest.fixture
def maker_headers(db):
    return db.add_user(
        "maker-token", MAKER_ID, "maker@mybadgelife.test",
        profile={"role": "maker", "maker_approved": True, "assigned_team": "Team Ghost"}
    )


@pytest.fixture
def user_headers(db):
    return db.add_user("user-token", USER_ID, "user@mybadgelife.test", profile={})


@pytest.fixture
def moderator_headers(db):
    return db.add_user("moderator-token", MODERATOR_ID, "mod@mybadgelife.test", roles=["moderator"], profile={})
