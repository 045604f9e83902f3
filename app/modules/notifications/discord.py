"""
Discord webhook payloads.

build_payload turns a notification into the JSON body Discord expects: one
embed plus, when a link is known, an action row with a single link button.
The per-event builders at the bottom produce NotificationData for each type.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from app.config import settings
from app.modules.notifications.schemas import NotificationData, EmbedField, Thumbnail

TYPE_COLORS = {
    "badge_submitted": 0x3498db,  # blue
    "user_registered": 0x2ecc71,  # green
    "maker_request": 0xf39c12,  # orange
    "badge_approved": 0x27ae60,  # dark green
    "badge_rejected": 0xe74c3c,  # red
}
DEFAULT_COLOR = 0x7289da

FOOTER_TEXT = "MyBadgeLife Notifications"
TEST_FOOTER_TEXT = "MyBadgeLife Test"

# Discord component types
ACTION_ROW = 1
BUTTON = 2
LINK_STYLE = 5


def is_http_url(url: Optional[str]) -> bool:
    return bool(url) and (url.startswith("http://") or url.startswith("https://"))


def badge_link(data: NotificationData, base_url: Optional[str] = None) -> Optional[str]:
    if data.url:
        return data.url
    if data.badge_id:
        base = (base_url or settings.app_base_url).rstrip("/")
        return f"{base}/?badge={data.badge_id}"
    return None


def build_payload(notification_type: str, data: NotificationData, base_url: Optional[str] = None) -> Dict[str, Any]:
    link = badge_link(data, base_url)
    embed: Dict[str, Any] = {
        "title": data.title,
        "description": data.description,
        "color": data.color or TYPE_COLORS.get(notification_type, DEFAULT_COLOR),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "fields": [f.model_dump() for f in data.fields],
        "footer": {"text": FOOTER_TEXT},
    }
    if link:
        embed["url"] = link
    # blob: and data: URLs are rejected by Discord
    if data.thumbnail and is_http_url(data.thumbnail.url):
        embed["thumbnail"] = {"url": data.thumbnail.url}

    payload: Dict[str, Any] = {"embeds": [embed]}
    if link:
        label = "🔗 View Badge" if "badge" in notification_type else "🔗 View App"
        payload["components"] = [{
            "type": ACTION_ROW,
            "components": [{
                "type": BUTTON,
                "style": LINK_STYLE,
                "label": label,
                "url": link,
            }],
        }]
    return payload


def build_test_payload() -> Dict[str, Any]:
    """Embed posted by the Discord diagnostics endpoint"""
    return {
        "embeds": [{
            "title": "🔧 Discord Test",
            "description": "Testing Discord webhook configuration for MyBadgeLife",
            "color": DEFAULT_COLOR,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "footer": {"text": TEST_FOOTER_TEXT},
        }]
    }


def _field(name: str, value: Any, inline: bool = True) -> EmbedField:
    return EmbedField(name=name, value=str(value), inline=inline)


def _thumbnail(image_url: Optional[str]) -> Optional[Thumbnail]:
    return Thumbnail(url=image_url) if image_url else None


def badge_submitted(badge: Dict[str, Any], maker_name: Optional[str] = None) -> NotificationData:
    fields = []
    if badge.get("team_name"):
        fields.append(_field("Team", badge["team_name"]))
    if badge.get("category"):
        fields.append(_field("Category", badge["category"]))
    if badge.get("year"):
        fields.append(_field("Year", badge["year"]))
    if maker_name:
        fields.append(_field("Maker", maker_name))
    return NotificationData(
        title="🏆 New Badge Submitted",
        description=f"A new badge **{badge.get('name')}** has been submitted and is awaiting approval.",
        fields=fields,
        badge_id=badge.get("id"),
        thumbnail=_thumbnail(badge.get("image_url")),
    )


def user_registered(display_name: Optional[str] = None, email: Optional[str] = None) -> NotificationData:
    return NotificationData(
        title="👋 New User Registered",
        description=f"Welcome **{display_name or email or 'New User'}** to MyBadgeLife!",
        fields=[_field("Email", email)] if email else [],
    )


def maker_request(display_name: Optional[str] = None, email: Optional[str] = None) -> NotificationData:
    return NotificationData(
        title="🛠️ New Maker Request",
        description=f"**{display_name or email or 'User'}** has requested maker status.",
        fields=[_field("Email", email)] if email else [],
    )


def badge_approved(badge: Dict[str, Any]) -> NotificationData:
    fields = []
    if badge.get("team_name"):
        fields.append(_field("Team", badge["team_name"]))
    if badge.get("category"):
        fields.append(_field("Category", badge["category"]))
    return NotificationData(
        title="✅ Badge Approved",
        description=f"Badge **{badge.get('name')}** has been approved and is now live!",
        fields=fields,
        badge_id=badge.get("id"),
        thumbnail=_thumbnail(badge.get("image_url")),
    )


def badge_rejected(badge: Dict[str, Any], reason: Optional[str] = None) -> NotificationData:
    fields = []
    if badge.get("team_name"):
        fields.append(_field("Team", badge["team_name"]))
    if reason:
        fields.append(_field("Reason", reason, inline=False))
    return NotificationData(
        title="❌ Badge Rejected",
        description=f"Badge **{badge.get('name')}** has been rejected.",
        fields=fields,
        badge_id=badge.get("id"),
    )
