from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.modules.auth.schemas import OAuthUrlResponse, MeResponse
from app.modules.auth.service import AuthService
from app.core.dependencies import get_auth_service, get_access_context
from app.core import access
from typing import Dict, Optional

router = APIRouter(prefix="/auth", tags=["auth"])

# Security scheme for JWT Bearer token
security = HTTPBearer()


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


@router.get("/oauth/{provider}", response_model=OAuthUrlResponse)
async def oauth_start(
    provider: str,
    redirect_to: Optional[str] = None,
    service: AuthService = Depends(get_auth_service)
):
    """Return the provider URL that starts an OAuth sign-in"""
    return OAuthUrlResponse(provider=provider, url=service.get_oauth_url(provider, redirect_to))


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_me(context: Dict = Depends(get_access_context)):
    """Current user with profile, roles and permissions (for frontend UI)."""
    profile = context["profile"]
    roles = context["roles"]
    return MeResponse(
        id=context["id"],
        email=context.get("email"),
        profile=profile,
        roles=roles,
        display_role=access.get_display_role(profile, roles),
        can_access_admin=access.can_access_admin(profile, roles),
        can_manage_badges=access.can_manage_badges(profile, roles),
        can_manage_users=access.can_manage_users(roles),
        can_manage_teams=access.can_manage_teams(roles),
        permissions=context["permissions"],
    )
