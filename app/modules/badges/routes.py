from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.badges.schemas import (
    BadgeCreate, BadgeUpdate, BadgeResponse,
    BadgeRejectRequest, BadgeReviewResponse, BadgeStats
)
from app.modules.badges.service import BadgeService
from app.modules.notifications import discord
from app.modules.notifications.service import NotificationService, get_notification_service
from app.modules.notifications.email import EmailService, get_email_service
from app.core.dependencies import require_permission, require_admin, get_optional_user, check_badge_edit_access
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/badges", tags=["badges"])


def get_badge_service(supabase: Client = Depends(get_supabase)) -> BadgeService:
    return BadgeService(supabase)


def badge_email_data(badge: BadgeResponse) -> Dict:
    return {
        "badge_id": badge.id,
        "badge_name": badge.name,
        "team_name": badge.team_name,
        "category": badge.category,
        "image_url": badge.image_url,
    }


@router.get("", response_model=List[BadgeResponse])
async def list_badges(
    category: Optional[str] = None,
    year: Optional[int] = None,
    team_name: Optional[str] = None,
    search: Optional[str] = None,
    include_retired: bool = True,
    limit: int = 100,
    offset: int = 0,
    service: BadgeService = Depends(get_badge_service)
):
    """Browse the catalog (public)"""
    return service.list_badges(
        category=category, year=year, team_name=team_name, search=search,
        include_retired=include_retired, limit=limit, offset=offset
    )


@router.get("/{badge_id}", response_model=BadgeResponse)
async def get_badge(
    badge_id: str,
    service: BadgeService = Depends(get_badge_service)
):
    return service.get_badge(badge_id)


@router.get("/{badge_id}/stats", response_model=BadgeStats)
async def get_badge_stats(
    badge_id: str,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: BadgeService = Depends(get_badge_service)
):
    """Owner and want counts; own/want flags are filled in for signed-in callers"""
    return service.get_badge_stats(badge_id, user_data["id"] if user_data else None)


@router.post("", response_model=BadgeResponse, status_code=201)
async def create_badge(
    badge_data: BadgeCreate,
    user_data: Dict = Depends(require_permission("badges:create")),
    service: BadgeService = Depends(get_badge_service),
    notifier: NotificationService = Depends(get_notification_service),
    mailer: EmailService = Depends(get_email_service)
):
    """Submit a new badge; the caller becomes its maker"""
    badge = service.create_badge(badge_data, user_data["id"])
    profile = user_data.get("profile") or {}
    maker_name = profile.get("display_name") or user_data.get("email")
    await notifier.notify("badge_submitted", discord.badge_submitted(badge.model_dump(), maker_name))
    await mailer.notify_admins("badge_submitted", {
        **badge_email_data(badge),
        "maker_name": maker_name,
        "maker_email": user_data.get("email"),
        "description": badge.description,
    })
    return badge


@router.put("/{badge_id}", response_model=BadgeResponse)
async def update_badge(
    badge_id: str,
    badge_data: BadgeUpdate,
    user_data: Dict = Depends(require_permission("badges:update")),
    service: BadgeService = Depends(get_badge_service)
):
    """Update badge (admin, or approved maker of the badge's team)"""
    badge = service.get_badge(badge_id)
    check_badge_edit_access(badge.model_dump(), user_data)
    return service.update_badge(badge_id, badge_data)


@router.delete("/{badge_id}", status_code=204)
async def delete_badge(
    badge_id: str,
    user_data: Dict = Depends(require_admin),
    service: BadgeService = Depends(get_badge_service)
):
    """Delete badge (admin only)"""
    service.delete_badge(badge_id)
    return None


@router.post("/{badge_id}/approve", response_model=BadgeReviewResponse)
async def approve_badge(
    badge_id: str,
    user_data: Dict = Depends(require_permission("badges:approve")),
    service: BadgeService = Depends(get_badge_service),
    notifier: NotificationService = Depends(get_notification_service),
    mailer: EmailService = Depends(get_email_service)
):
    """Approve a submitted badge, announce it and tell its maker"""
    badge = service.get_badge(badge_id)
    notified = await notifier.notify("badge_approved", discord.badge_approved(badge.model_dump()))
    emailed = await mailer.notify_user("badge_approved", badge.maker_id, badge_email_data(badge))
    return BadgeReviewResponse(
        badge_id=badge_id, message=f'Badge "{badge.name}" approved successfully', notified=notified, emailed=emailed
    )


@router.post("/{badge_id}/reject", response_model=BadgeReviewResponse)
async def reject_badge(
    badge_id: str,
    request: BadgeRejectRequest,
    user_data: Dict = Depends(require_permission("badges:approve")),
    service: BadgeService = Depends(get_badge_service),
    notifier: NotificationService = Depends(get_notification_service),
    mailer: EmailService = Depends(get_email_service)
):
    """Reject a submitted badge with a reason"""
    badge = service.get_badge(badge_id)
    notified = await notifier.notify("badge_rejected", discord.badge_rejected(badge.model_dump(), request.reason))
    emailed = await mailer.notify_user(
        "badge_rejected", badge.maker_id, {**badge_email_data(badge), "rejection_reason": request.reason}
    )
    return BadgeReviewResponse(
        badge_id=badge_id, message=f'Badge "{badge.name}" rejection notification sent', notified=notified, emailed=emailed
    )
