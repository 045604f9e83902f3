from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = Field(None, max_length=100)


class ProfileResponse(BaseModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    role: str = "user"
    maker_approved: bool = False
    wants_to_be_maker: bool = False
    assigned_team: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    role: str = "user"
    maker_approved: bool = False
    wants_to_be_maker: bool = False
    assigned_team: Optional[str] = None
    roles: List[str] = []
    teams: List[str] = []
    display_roles: List[str] = []


class AssignedTeamUpdate(BaseModel):
    assigned_team: Optional[str] = None
