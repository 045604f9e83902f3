from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal

NotificationType = Literal[
    "badge_submitted",
    "user_registered",
    "maker_request",
    "badge_approved",
    "badge_rejected",
]


class EmbedField(BaseModel):
    name: str
    value: str
    inline: bool = False


class Thumbnail(BaseModel):
    url: str


class NotificationData(BaseModel):
    title: str
    description: str
    color: Optional[int] = None
    fields: List[EmbedField] = Field(default_factory=list)
    thumbnail: Optional[Thumbnail] = None
    url: Optional[str] = None  # direct link to the badge or page
    badge_id: Optional[str] = None  # used to build a badge link when url is missing


class NotificationRequest(BaseModel):
    type: NotificationType
    data: NotificationData


class NotificationResponse(BaseModel):
    success: bool


EmailType = Literal[
    "badge_submitted",
    "badge_approved",
    "badge_rejected",
    "welcome_user",
    "maker_request",
]


class EmailRequest(BaseModel):
    type: EmailType
    to: str = Field(..., min_length=3)
    # badge_name, maker_name, team_name, category, description, image_url,
    # badge_id, rejection_reason, user_name, user_email, request_message
    data: Dict[str, Any] = Field(default_factory=dict)
    user_id: Optional[str] = None  # preferences of this user gate the email


class EmailResponse(BaseModel):
    success: bool
    skipped: bool = False
    type: Optional[str] = None
    to: Optional[str] = None
    message_id: Optional[str] = None
    message: Optional[str] = None
