from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class UploadResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    image_url: str
    badge_guess_id: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BadgeGuessUpdate(BaseModel):
    badge_guess_id: Optional[str] = None
