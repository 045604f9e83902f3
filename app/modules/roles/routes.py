from fastapi import APIRouter, Depends, HTTPException, status
from app.database.supabase_client import get_supabase
from app.modules.roles.schemas import (
    AppRole, RoleAssign, UserRoleResponse, MyRolesResponse, PermissionMatrixResponse
)
from app.modules.roles.service import RoleService
from app.config.permissions_config import get_permission_matrix
from app.core import access
from app.core.dependencies import get_access_context, require_admin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/roles", tags=["roles"])


def get_role_service(supabase: Client = Depends(get_supabase)) -> RoleService:
    return RoleService(supabase)


@router.get("/me", response_model=MyRolesResponse)
async def get_my_roles(context: Dict = Depends(get_access_context)):
    """Caller's app roles, display role and derived permissions"""
    return MyRolesResponse(
        user_id=context["id"],
        roles=context["roles"],
        display_role=access.get_display_role(context["profile"], context["roles"]),
        permissions=context["permissions"],
    )


@router.get("/permissions", response_model=PermissionMatrixResponse)
async def get_permissions(context: Dict = Depends(require_admin)):
    """Permission names granted to each effective role"""
    return get_permission_matrix()


@router.get("/users/{user_id}", response_model=List[UserRoleResponse])
async def list_user_roles(
    user_id: str,
    context: Dict = Depends(require_admin),
    service: RoleService = Depends(get_role_service)
):
    return service.list_user_roles(user_id)


@router.post("", response_model=UserRoleResponse, status_code=201)
async def assign_role(
    request: RoleAssign,
    context: Dict = Depends(require_admin),
    service: RoleService = Depends(get_role_service)
):
    """Assign admin, moderator or user to an account"""
    return service.assign_role(request.user_id, request.role)


@router.delete("/users/{user_id}/{role}", status_code=204)
async def remove_role(
    user_id: str,
    role: AppRole,
    context: Dict = Depends(require_admin),
    service: RoleService = Depends(get_role_service)
):
    if user_id == context["id"] and role == "admin":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admins cannot remove their own admin role"
        )
    service.remove_role(user_id, role)
    return None
