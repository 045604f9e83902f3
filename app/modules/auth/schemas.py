from pydantic import BaseModel
from typing import Optional, List, Dict, Any


class OAuthUrlResponse(BaseModel):
    provider: str
    url: str


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    profile: Optional[Dict[str, Any]] = None
    roles: List[str] = []
    display_role: str
    can_access_admin: bool
    can_manage_badges: bool = False
    can_manage_users: bool = False
    can_manage_teams: bool = False
    permissions: List[str] = []
