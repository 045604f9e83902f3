from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

PREFERENCE_KEYS = (
    "badge_submission_notifications",
    "badge_approval_notifications",
    "badge_rejection_notifications",
    "weekly_digest_emails",
    "system_announcements",
)

PreferenceKey = Literal[
    "badge_submission_notifications",
    "badge_approval_notifications",
    "badge_rejection_notifications",
    "weekly_digest_emails",
    "system_announcements",
]


class EmailPreferencesUpdate(BaseModel):
    badge_submission_notifications: Optional[bool] = None
    badge_approval_notifications: Optional[bool] = None
    badge_rejection_notifications: Optional[bool] = None
    weekly_digest_emails: Optional[bool] = None
    system_announcements: Optional[bool] = None


class EmailPreferencesResponse(BaseModel):
    id: str
    user_id: str
    badge_submission_notifications: bool = False
    badge_approval_notifications: bool = False
    badge_rejection_notifications: bool = False
    weekly_digest_emails: bool = False
    system_announcements: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
