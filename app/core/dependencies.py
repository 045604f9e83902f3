"""
Core dependencies for route protection and permission checking
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.database.supabase_client import get_supabase, first_row
from app.modules.auth.service import AuthService
from app.core import access
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (profile, roles, permissions)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(credentials.credentials)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[dict]:
    """Current user when a bearer token is sent, None for anonymous requests"""
    if credentials is None:
        return None
    return auth_service.get_current_user(credentials.credentials)


def get_user_roles(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> List[str]:
    """Return app roles from user_roles. Uses request-scoped cache when provided."""
    if cache is not None and "roles" in cache:
        return cache["roles"]
    try:
        result = supabase.table("user_roles")\
            .select("role")\
            .eq("user_id", user_id)\
            .execute()
        roles = [r["role"] for r in result.data] if result.data else []
    except Exception as e:
        logger.error(f"Error getting user roles: {e}")
        roles = []
    if cache is not None:
        cache["roles"] = roles
    return roles


def get_user_profile(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
    """Return the profiles row for a user, or None. Uses request-scoped cache when provided."""
    if cache is not None and "profile" in cache:
        return cache["profile"]
    try:
        result = supabase.table("profiles")\
            .select("*")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        profile = first_row(result)
    except Exception as e:
        logger.error(f"Error getting user profile: {e}")
        profile = None
    if cache is not None:
        cache["profile"] = profile
    return profile


def build_access_context(user_data: dict, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> dict:
    """User dict enriched with profile, roles and the derived permission names."""
    profile = get_user_profile(user_data["id"], supabase, cache)
    roles = get_user_roles(user_data["id"], supabase, cache)
    return {
        **user_data,
        "profile": profile,
        "roles": roles,
        "permissions": access.permissions_for(profile, roles),
    }


def get_access_context(
    request: Request,
    user_data: dict = Depends(get_current_user),
    supabase: Client = Depends(get_supabase)
) -> dict:
    """Dependency: signed-in user with profile, roles and permissions"""
    return build_access_context(user_data, supabase, _get_request_cache(request))


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(context: dict = Depends(get_access_context)) -> dict:
        """Dependency to check if user has required permission"""
        if required_permission not in context["permissions"]:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_permission}"
            )
        return context
    return check_permission


def require_admin(context: dict = Depends(get_access_context)) -> dict:
    """Dependency: caller must hold the admin role"""
    if not access.is_admin(context["roles"]):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only admins can perform this action"
        )
    return context


def check_badge_edit_access(badge: Dict[str, Any], context: dict) -> dict:
    """Allow admins, or approved makers whose assigned team owns the badge"""
    if access.can_edit_badge(context["profile"], context["roles"], badge.get("team_name")):
        return context
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="You can only edit badges that belong to your assigned team"
    )
