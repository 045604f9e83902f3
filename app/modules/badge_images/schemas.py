from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class BadgeImageResponse(BaseModel):
    id: str
    badge_id: str
    image_url: str
    is_primary: bool = False
    display_order: int = 0
    caption: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CaptionUpdate(BaseModel):
    caption: Optional[str] = None


class OrderUpdate(BaseModel):
    display_order: int = Field(..., ge=0)


class ReorderRequest(BaseModel):
    image_ids: List[str] = Field(..., min_length=1)  # new order, first = 0
