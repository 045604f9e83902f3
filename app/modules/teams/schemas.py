from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

TeamRequestStatus = Literal["pending", "approved", "rejected"]


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None


class TeamUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None


class TeamResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TeamMemberAdd(BaseModel):
    user_id: str


class TeamMemberResponse(BaseModel):
    id: str
    team_id: str
    user_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TeamRequestCreate(BaseModel):
    team_name: str = Field(..., min_length=1, max_length=100)


class TeamRequestResponse(BaseModel):
    id: str
    user_id: str
    team_name: str
    status: TeamRequestStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminNotificationCounts(BaseModel):
    team_requests: int
    new_uploads: int
    recent_users: int
    total: int
