"""
Transactional email through the Resend HTTP API.

Emails tied to a user honour that user's email_preferences row; the system
is opt-in, so a missing row means the email is skipped. Welcome emails are
always sent.
"""

import logging
import time
from html import escape
from typing import Any, Dict, List, Optional, Tuple

import httpx
from fastapi import Depends, HTTPException
from supabase import Client

from app.config import settings
from app.core.api_logger import log_api_call
from app.core.providers import http_client, response_body, elapsed_ms
from app.database.supabase_client import get_service_supabase, first_row
from app.modules.notifications.schemas import EmailResponse

logger = logging.getLogger(__name__)

ALWAYS_SENT = ("welcome_user",)

PREFERENCE_FOR_TYPE = {
    "badge_submitted": "badge_submission_notifications",
    "badge_approved": "badge_approval_notifications",
    "badge_rejected": "badge_approval_notifications",
    "maker_request": "system_announcements",
}

ADMIN_SENDER = "MyBadgeLife Admin"
DEFAULT_SENDER = "MyBadgeLife"


def _row(label: str, value: Any) -> str:
    if value in (None, ""):
        return ""
    return f"<p><strong>{escape(label)}:</strong> {escape(str(value))}</p>"


def _page(heading: str, body: str, link: Optional[str] = None, link_text: str = "Open MyBadgeLife") -> str:
    button = (
        f'<p><a href="{escape(link)}" style="background:#7c3aed;color:#fff;padding:10px 18px;'
        f'border-radius:6px;text-decoration:none;">{escape(link_text)}</a></p>'
        if link else ""
    )
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="UTF-8"></head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <h2>{escape(heading)}</h2>
    {body}
    {button}
    <p style="color: #888; font-size: 12px;">You can change which emails you receive in your MyBadgeLife profile.</p>
  </div>
</body>
</html>"""


def build_email(email_type: str, data: Dict[str, Any], base_url: str) -> Tuple[str, str, str]:
    """(sender name, subject, html) for an email type. Unknown types raise ValueError."""
    base_url = base_url.rstrip("/")
    badge_name = data.get("badge_name") or "Unnamed badge"
    badge_details = (
        _row("Badge", badge_name)
        + _row("Maker", data.get("maker_name"))
        + _row("Team", data.get("team_name"))
        + _row("Category", data.get("category"))
    )
    image = f'<p><img src="{escape(data["image_url"])}" alt="" style="max-width: 280px;"></p>' \
        if data.get("image_url") else ""

    if email_type == "badge_submitted":
        body = badge_details + _row("Maker email", data.get("maker_email")) \
            + _row("Description", data.get("description")) + image
        return ADMIN_SENDER, f"🎫 New Badge Submission: {badge_name}", \
            _page("New badge submitted for review", body, f"{base_url}/admin", "Review in admin")
    if email_type == "badge_approved":
        link = f"{base_url}/?badge={data['badge_id']}" if data.get("badge_id") else base_url
        return DEFAULT_SENDER, f"🎉 Badge Approved: {badge_name}", \
            _page("Your badge is live", badge_details + image, link, "View badge")
    if email_type == "badge_rejected":
        body = badge_details + _row("Reason", data.get("rejection_reason")) + image
        return DEFAULT_SENDER, f"📝 Badge Submission Update: {badge_name}", \
            _page("Your badge submission needs changes", body, f"{base_url}/badge/register", "Submit again")
    if email_type == "welcome_user":
        name = data.get("user_name") or "there"
        body = f"<p>Hi {escape(name)}, welcome to MyBadgeLife. Start exploring the badge catalog " \
               f"and track the badges you own or want.</p>"
        return DEFAULT_SENDER, "🎫 Welcome to MyBadgeLife!", _page("Welcome to MyBadgeLife", body, f"{base_url}/")
    if email_type == "maker_request":
        user_name = data.get("user_name") or data.get("user_email") or "A user"
        body = _row("User", user_name) + _row("Email", data.get("user_email")) \
            + _row("Message", data.get("request_message"))
        return ADMIN_SENDER, f"🛠️ New Maker Request: {user_name}", \
            _page("New maker request", body, f"{base_url}/admin", "Review in admin")
    raise ValueError(f"Unknown email type: {email_type}")


class EmailService:
    def __init__(
        self,
        api_key: Optional[str],
        supabase: Optional[Client] = None,
        api_url: str = "https://api.resend.com/emails",
        from_address: str = "noreply@mybadgelife.com",
        base_url: str = "https://mybadgelife.com",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.supabase = supabase
        self.api_url = api_url
        self.from_address = from_address
        self.base_url = base_url
        self.transport = transport

    def preference_allows(self, user_id: str, email_type: str) -> bool:
        """Whether user_id opted in to email_type. Lookup failures count as opted out."""
        if email_type in ALWAYS_SENT:
            return True
        column = PREFERENCE_FOR_TYPE.get(email_type)
        if not column or self.supabase is None:
            return False
        try:
            result = self.supabase.table("email_preferences")\
                .select("*")\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error(f"Error checking email preferences for {user_id}: {e}")
            return False
        row = first_row(result)
        return bool(row and row.get(column))

    async def post_email(self, message: Dict[str, Any], user_id: Optional[str] = None) -> httpx.Response:
        started = time.monotonic()
        async with http_client(self.transport) as client:
            response = await client.post(
                self.api_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=message,
            )
        log_api_call(
            self.supabase, "resend", "/emails", "POST",
            success=response.is_success,
            request_data={"subject": message["subject"]},
            response_status=response.status_code,
            response_time_ms=elapsed_ms(started),
            error_message=None if response.is_success else response.text[:500],
            user_id=user_id,
        )
        return response

    async def send(
        self,
        email_type: str,
        to: str,
        data: Dict[str, Any],
        user_id: Optional[str] = None
    ) -> EmailResponse:
        """Send one email. Raises HTTPException when Resend is not configured or refuses it."""
        if not self.api_key:
            raise HTTPException(status_code=500, detail="RESEND_API_KEY not configured")
        if user_id and not self.preference_allows(user_id, email_type):
            logger.info(f"Email skipped due to user preferences: {email_type} for {user_id}")
            return EmailResponse(success=True, skipped=True, type=email_type, to=to,
                                 message="Email skipped due to user preferences")
        try:
            sender, subject, html = build_email(email_type, data, self.base_url)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        message = {
            "from": f"{sender} <{self.from_address}>",
            "to": [to],
            "subject": subject,
            "html": html,
        }
        logger.info(f"Sending {email_type} email to {to}")
        try:
            response = await self.post_email(message, user_id)
        except httpx.HTTPError as e:
            logger.error(f"Resend request failed: {e}")
            raise HTTPException(status_code=500, detail=f"Email send failed: {str(e)}")
        if not response.is_success:
            raise HTTPException(
                status_code=500,
                detail=f"Email send failed: {response.status_code} - {response.text}"
            )
        body = response_body(response)
        return EmailResponse(
            success=True,
            type=email_type,
            to=to,
            message_id=body.get("id") if isinstance(body, dict) else None,
        )

    async def notify(
        self,
        email_type: str,
        to: Optional[str],
        data: Dict[str, Any],
        user_id: Optional[str] = None
    ) -> bool:
        """Side-effect variant used by other operations; never raises. True only when an email went out."""
        if not to:
            return False
        try:
            result = await self.send(email_type, to, data, user_id=user_id)
            return not result.skipped
        except HTTPException as e:
            logger.warning(f"Email {email_type} to {to} not sent: {e.detail}")
        except Exception as e:
            logger.error(f"Email {email_type} to {to} failed: {e}")
        return False

    def profile_email(self, user_id: Optional[str]) -> Optional[str]:
        if not user_id or self.supabase is None:
            return None
        try:
            result = self.supabase.table("profiles")\
                .select("email")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error(f"Error reading profile email for {user_id}: {e}")
            return None
        row = first_row(result)
        return row.get("email") if row else None

    async def notify_user(self, email_type: str, user_id: Optional[str], data: Dict[str, Any]) -> bool:
        """Email a user at their profile address, subject to their preferences"""
        return await self.notify(email_type, self.profile_email(user_id), data, user_id=user_id)

    def admin_recipients(self) -> List[Tuple[str, str]]:
        """(user_id, email) of every admin with a profile email"""
        if self.supabase is None:
            return []
        try:
            roles = self.supabase.table("user_roles")\
                .select("user_id")\
                .eq("role", "admin")\
                .execute()
            admin_ids = list({r["user_id"] for r in roles.data or []})
            if not admin_ids:
                return []
            profiles = self.supabase.table("profiles")\
                .select("id, email")\
                .in_("id", admin_ids)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading admin recipients: {e}")
            return []
        return [(p["id"], p["email"]) for p in profiles.data or [] if p.get("email")]

    async def notify_admins(self, email_type: str, data: Dict[str, Any]) -> int:
        """Email every admin who opted in; returns how many emails went out"""
        sent = 0
        for user_id, email in self.admin_recipients():
            if await self.notify(email_type, email, data, user_id=user_id):
                sent += 1
        return sent


def get_email_service(supabase: Client = Depends(get_service_supabase)) -> EmailService:
    return EmailService(
        settings.resend_api_key,
        supabase=supabase,
        api_url=settings.resend_api_url,
        from_address=settings.email_from_address,
        base_url=settings.app_base_url,
    )
