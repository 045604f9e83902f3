from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

OwnershipStatus = Literal["own", "want"]


class OwnershipToggle(BaseModel):
    badge_id: str
    status: OwnershipStatus


class OwnershipResponse(BaseModel):
    id: str
    user_id: str
    badge_id: str
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OwnershipToggleResponse(BaseModel):
    badge_id: str
    status: str
    active: bool  # True when the row exists after the toggle
    ownership: Optional[OwnershipResponse] = None


class OwnershipStats(BaseModel):
    owned: int
    wanted: int
    total: int  # distinct badges with any status
