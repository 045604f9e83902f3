from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse, AdminUserResponse, AssignedTeamUpdate
from app.modules.profiles.service import ProfileService
from app.modules.notifications import discord
from app.modules.notifications.service import NotificationService, get_notification_service
from app.modules.notifications.email import EmailService, get_email_service
from app.core.dependencies import get_current_user, require_admin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
    notifier: NotificationService = Depends(get_notification_service),
    mailer: EmailService = Depends(get_email_service)
):
    """Caller's profile, created on first sign-in"""
    profile, created = service.ensure_profile(user_data)
    if created:
        await notifier.notify("user_registered", discord.user_registered(profile.display_name, profile.email))
        await mailer.notify("welcome_user", profile.email, {
            "user_name": profile.display_name,
            "user_email": profile.email,
        }, user_id=profile.id)
    return profile


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    return service.update_profile(user_data["id"], profile_data)


@router.post("/me/maker-request", response_model=ProfileResponse)
async def request_maker_status(
    user_data: Dict = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
    notifier: NotificationService = Depends(get_notification_service),
    mailer: EmailService = Depends(get_email_service)
):
    """Ask an admin for badge maker status"""
    profile = service.request_maker(user_data["id"])
    await notifier.notify("maker_request", discord.maker_request(profile.display_name, profile.email))
    await mailer.notify_admins("maker_request", {
        "user_id": profile.id,
        "user_name": profile.display_name,
        "user_email": profile.email,
    })
    return profile


@router.get("", response_model=List[AdminUserResponse])
async def list_users(
    limit: int = 100,
    offset: int = 0,
    user_data: Dict = Depends(require_admin),
    service: ProfileService = Depends(get_profile_service)
):
    """All users with roles and teams (admin)"""
    return service.list_users(limit=limit, offset=offset)


@router.post("/{user_id}/approve-maker", response_model=ProfileResponse)
async def approve_maker(
    user_id: str,
    user_data: Dict = Depends(require_admin),
    service: ProfileService = Depends(get_profile_service)
):
    return service.approve_maker(user_id)


@router.post("/{user_id}/revoke-maker", response_model=ProfileResponse)
async def revoke_maker(
    user_id: str,
    user_data: Dict = Depends(require_admin),
    service: ProfileService = Depends(get_profile_service)
):
    return service.revoke_maker(user_id)


@router.put("/{user_id}/assigned-team", response_model=ProfileResponse)
async def set_assigned_team(
    user_id: str,
    request: AssignedTeamUpdate,
    user_data: Dict = Depends(require_admin),
    service: ProfileService = Depends(get_profile_service)
):
    """Set the team whose badges a maker may edit"""
    return service.set_assigned_team(user_id, request.assigned_team)
