from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime

AppRole = Literal["admin", "moderator", "user"]


class RoleAssign(BaseModel):
    user_id: str
    role: AppRole


class UserRoleResponse(BaseModel):
    id: str
    user_id: str
    role: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MyRolesResponse(BaseModel):
    user_id: str
    roles: List[str]
    display_role: str
    permissions: List[str]


class PermissionInfo(BaseModel):
    name: str
    resource: str
    action: str
    description: str


class RoleInfo(BaseModel):
    name: str
    description: str
    permissions: List[str]


class PermissionMatrixResponse(BaseModel):
    permissions: List[PermissionInfo]
    roles: List[RoleInfo]
