from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

BadgeCategory = Literal["Elect Badge", "None Elect Badge", "SAO", "Tool", "Misc"]


class BadgeCreate(BaseModel):
    name: str = Field(..., min_length=1)
    year: Optional[int] = None
    description: Optional[str] = None
    external_link: Optional[str] = None
    image_url: Optional[str] = None
    team_name: Optional[str] = None
    category: Optional[BadgeCategory] = None
    retired: bool = False


class BadgeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    year: Optional[int] = None
    description: Optional[str] = None
    external_link: Optional[str] = None
    image_url: Optional[str] = None
    team_name: Optional[str] = None
    category: Optional[BadgeCategory] = None
    retired: Optional[bool] = None


class BadgeResponse(BaseModel):
    id: str
    name: str
    year: Optional[int] = None
    description: Optional[str] = None
    external_link: Optional[str] = None
    image_url: Optional[str] = None
    maker_id: Optional[str] = None
    team_name: Optional[str] = None
    category: Optional[str] = None
    retired: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BadgeRejectRequest(BaseModel):
    reason: str = Field(..., min_length=1)


class BadgeReviewResponse(BaseModel):
    badge_id: str
    message: str
    notified: bool
    emailed: bool = False


class BadgeStats(BaseModel):
    badge_id: str
    owners_count: int
    wants_count: int
    ownership_rank: Optional[int] = None  # 1 = most owned; None when nobody owns it
    is_owned: bool = False
    is_wanted: bool = False
