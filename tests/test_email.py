"""
Transactional email: preference gating, Resend calls and the route hooks.
"""

import json

import httpx
import pytest

from app.main import app
from app.modules.notifications.email import EmailService, build_email, get_email_service
from tests.conftest import ADMIN_ID, MAKER_ID, USER_ID


def opt_in(db, user_id, **flags):
    defaults = {
        "badge_submission_notifications": False,
        "badge_approval_notifications": False,
        "badge_rejection_notifications": False,
        "weekly_digest_emails": False,
        "system_announcements": False,
    }
    db.seed("email_preferences", {"user_id": user_id, **defaults, **flags})


def sent(sent_emails):
    return [json.loads(r.content) for r in sent_emails]


class TestPreferences:

    def test_missing_row_means_no_email(self, db, mailer):
        assert mailer.preference_allows(USER_ID, "badge_approved") is False

    def test_flag_per_type(self, db, mailer):
        opt_in(db, USER_ID, badge_approval_notifications=True)
        assert mailer.preference_allows(USER_ID, "badge_approved") is True
        assert mailer.preference_allows(USER_ID, "badge_rejected") is True
        assert mailer.preference_allows(USER_ID, "badge_submitted") is False
        assert mailer.preference_allows(USER_ID, "maker_request") is False

    def test_welcome_is_always_allowed(self, db, mailer):
        assert mailer.preference_allows(USER_ID, "welcome_user") is True

    def test_unknown_type_is_not_allowed(self, db, mailer):
        opt_in(db, USER_ID, system_announcements=True)
        assert mailer.preference_allows(USER_ID, "weekly_digest") is False

    def test_lookup_failure_means_no_email(self, db, mailer):
        opt_in(db, USER_ID, badge_approval_notifications=True)
        db.failing_tables.add("email_preferences")
        assert mailer.preference_allows(USER_ID, "badge_approved") is False


class TestSend:

    @pytest.mark.asyncio
    async def test_posts_to_resend(self, db, mailer, sent_emails):
        result = await mailer.send("badge_approved", "maker@mybadgelife.test", {"badge_name": "Ghost Skull"})
        assert result.success is True
        assert result.message_id == "email-1"

        message = sent(sent_emails)[0]
        assert message["to"] == ["maker@mybadgelife.test"]
        assert message["from"] == "MyBadgeLife <noreply@mybadgelife.com>"
        assert message["subject"] == "🎉 Badge Approved: Ghost Skull"
        assert sent_emails[0].headers["authorization"] == "Bearer re_test"

        logged = db.rows("api_call_logs")[-1]
        assert logged["api_provider"] == "resend"
        assert logged["estimated_cost_usd"] == 0.0001

    @pytest.mark.asyncio
    async def test_opted_out_user_is_skipped(self, db, mailer, sent_emails):
        result = await mailer.send("badge_rejected", "maker@mybadgelife.test", {}, user_id=MAKER_ID)
        assert result.skipped is True
        assert sent_emails == []

    @pytest.mark.asyncio
    async def test_notify_never_raises(self, db):
        refusing = EmailService(
            "re_test", supabase=db, api_url="https://resend.test/emails",
            transport=httpx.MockTransport(lambda r: httpx.Response(422, json={"message": "Invalid `to` field"})),
        )
        assert await refusing.notify("welcome_user", "not-an-address", {}) is False
        assert await EmailService(None, supabase=db).notify("welcome_user", "a@b.test", {}) is False
        assert await refusing.notify("welcome_user", None, {}) is False

    def test_user_values_are_escaped(self):
        _, _, html = build_email("badge_rejected", {"badge_name": "<b>x</b>", "rejection_reason": "<script>"}, "https://x")
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            build_email("weekly_digest", {}, "https://x")


class TestEmailRoute:

    def test_admin_sends(self, client, admin_headers, sent_emails):
        resp = client.post("/api/v1/notifications/email", headers=admin_headers, json={
            "type": "welcome_user", "to": "new@mybadgelife.test", "data": {"user_name": "New"}
        })
        assert resp.status_code == 200
        assert resp.json()["message_id"] == "email-1"
        assert sent(sent_emails)[0]["subject"] == "🎫 Welcome to MyBadgeLife!"

    def test_preferences_of_user_id_apply(self, client, admin_headers, sent_emails):
        resp = client.post("/api/v1/notifications/email", headers=admin_headers, json={
            "type": "badge_approved", "to": "user@mybadgelife.test", "user_id": USER_ID
        })
        assert resp.json()["skipped"] is True
        assert sent_emails == []

    def test_unknown_type_rejected(self, client, admin_headers):
        resp = client.post("/api/v1/notifications/email", headers=admin_headers, json={
            "type": "weekly_digest", "to": "user@mybadgelife.test"
        })
        assert resp.status_code == 422

    def test_plain_user_forbidden(self, client, user_headers):
        resp = client.post("/api/v1/notifications/email", headers=user_headers, json={
            "type": "welcome_user", "to": "user@mybadgelife.test"
        })
        assert resp.status_code == 403


class TestRouteHooks:

    def test_badge_submission_emails_opted_in_admins(self, client, db, admin_headers, maker_headers, sent_emails):
        db.add_user("admin2-token", "admin-2", "admin2@mybadgelife.test", roles=["admin"], profile={})
        opt_in(db, ADMIN_ID, badge_submission_notifications=True)
        resp = client.post("/api/v1/badges", headers=maker_headers, json={"name": "Ghost v2", "team_name": "Team Ghost"})
        assert resp.status_code == 201
        messages = sent(sent_emails)
        assert [m["to"] for m in messages] == [["admin@mybadgelife.test"]]
        assert messages[0]["from"].startswith("MyBadgeLife Admin")
        assert messages[0]["subject"] == "🎫 New Badge Submission: Ghost v2"

    def test_approval_emails_opted_in_maker(self, client, db, admin_headers, maker_headers, sent_emails):
        badge = db.seed("badges", {"name": "Ghost Skull", "team_name": "Team Ghost", "maker_id": MAKER_ID})[0]
        opt_in(db, MAKER_ID, badge_approval_notifications=True)
        resp = client.post(f"/api/v1/badges/{badge['id']}/approve", headers=admin_headers)
        assert resp.json()["emailed"] is True
        assert sent(sent_emails)[0]["to"] == ["maker@mybadgelife.test"]

    def test_rejection_skipped_without_opt_in(self, client, db, admin_headers, maker_headers, sent_emails):
        badge = db.seed("badges", {"name": "Ghost Skull", "team_name": "Team Ghost", "maker_id": MAKER_ID})[0]
        resp = client.post(f"/api/v1/badges/{badge['id']}/reject", headers=admin_headers, json={"reason": "Blurry"})
        assert resp.status_code == 200
        assert resp.json()["emailed"] is False
        assert sent_emails == []

    def test_first_sign_in_sends_welcome(self, client, db, sent_emails):
        headers = db.add_user("new-token", "new-user", "new@mybadgelife.test")
        assert client.get("/api/v1/profiles/me", headers=headers).status_code == 200
        assert sent(sent_emails)[0]["to"] == ["new@mybadgelife.test"]

        client.get("/api/v1/profiles/me", headers=headers)
        assert len(sent_emails) == 1

    def test_maker_request_emails_admins_with_announcements_on(self, client, db, admin_headers, user_headers, sent_emails):
        opt_in(db, ADMIN_ID, system_announcements=True)
        resp = client.post("/api/v1/profiles/me/maker-request", headers=user_headers)
        assert resp.status_code == 200
        assert sent(sent_emails)[0]["subject"] == "🛠️ New Maker Request: user"

    def test_email_failure_does_not_break_the_route(self, client, db, admin_headers, maker_headers):
        opt_in(db, ADMIN_ID, badge_submission_notifications=True)
        refusing = EmailService(
            "re_test", supabase=db, api_url="https://resend.test/emails",
            transport=httpx.MockTransport(lambda r: httpx.Response(500, text="internal error")),
        )
        app.dependency_overrides[get_email_service] = lambda: refusing
        resp = client.post("/api/v1/badges", headers=maker_headers, json={"name": "Ghost v3", "team_name": "Team Ghost"})
        assert resp.status_code == 201
        assert db.rows("api_call_logs")[-1]["success"] is False
