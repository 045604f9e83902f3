from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form
from app.database.supabase_client import get_supabase
from app.modules.badge_images.schemas import BadgeImageResponse, CaptionUpdate, OrderUpdate, ReorderRequest
from app.modules.badge_images.service import BadgeImageService
from app.modules.badges.service import BadgeService
from app.core.dependencies import require_permission, check_badge_edit_access
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/badges/{badge_id}/images", tags=["badge_images"])


def get_badge_image_service(supabase: Client = Depends(get_supabase)) -> BadgeImageService:
    return BadgeImageService(supabase)


def check_edit(badge_id: str, user_data: Dict, supabase: Client) -> None:
    badge = BadgeService(supabase).get_badge(badge_id)
    check_badge_edit_access(badge.model_dump(), user_data)


def check_image_of_badge(image_id: str, badge_id: str, service: BadgeImageService) -> None:
    if service.get_image(image_id)["badge_id"] != badge_id:
        raise HTTPException(status_code=404, detail="Badge image not found")


@router.get("", response_model=List[BadgeImageResponse])
async def list_images(
    badge_id: str,
    service: BadgeImageService = Depends(get_badge_image_service)
):
    """Images of a badge ordered by display_order (public)"""
    return service.list_images(badge_id)


@router.post("", response_model=BadgeImageResponse, status_code=201)
async def add_image(
    badge_id: str,
    file: UploadFile = File(...),
    caption: Optional[str] = Form(None),
    user_data: Dict = Depends(require_permission("badge_images:create")),
    service: BadgeImageService = Depends(get_badge_image_service),
    supabase: Client = Depends(get_supabase)
):
    """Upload an additional photo for the badge"""
    check_edit(badge_id, user_data, supabase)
    content = await file.read()
    return service.add_image(badge_id, file.filename, content, file.content_type, caption)


@router.delete("/{image_id}", status_code=204)
async def remove_image(
    badge_id: str,
    image_id: str,
    user_data: Dict = Depends(require_permission("badge_images:delete")),
    service: BadgeImageService = Depends(get_badge_image_service),
    supabase: Client = Depends(get_supabase)
):
    check_edit(badge_id, user_data, supabase)
    check_image_of_badge(image_id, badge_id, service)
    service.remove_image(image_id)
    return None


@router.post("/{image_id}/primary", response_model=BadgeImageResponse)
async def set_primary(
    badge_id: str,
    image_id: str,
    user_data: Dict = Depends(require_permission("badge_images:update")),
    service: BadgeImageService = Depends(get_badge_image_service),
    supabase: Client = Depends(get_supabase)
):
    """Make this image the badge's only primary image"""
    check_edit(badge_id, user_data, supabase)
    check_image_of_badge(image_id, badge_id, service)
    return service.set_primary(image_id)


@router.put("/order", response_model=List[BadgeImageResponse])
async def reorder_images(
    badge_id: str,
    request: ReorderRequest,
    user_data: Dict = Depends(require_permission("badge_images:update")),
    service: BadgeImageService = Depends(get_badge_image_service),
    supabase: Client = Depends(get_supabase)
):
    check_edit(badge_id, user_data, supabase)
    return service.reorder(badge_id, request.image_ids)


@router.put("/{image_id}/order", response_model=BadgeImageResponse)
async def update_order(
    badge_id: str,
    image_id: str,
    request: OrderUpdate,
    user_data: Dict = Depends(require_permission("badge_images:update")),
    service: BadgeImageService = Depends(get_badge_image_service),
    supabase: Client = Depends(get_supabase)
):
    check_edit(badge_id, user_data, supabase)
    check_image_of_badge(image_id, badge_id, service)
    return service.update_order(image_id, request.display_order)


@router.put("/{image_id}/caption", response_model=BadgeImageResponse)
async def update_caption(
    badge_id: str,
    image_id: str,
    request: CaptionUpdate,
    user_data: Dict = Depends(require_permission("badge_images:update")),
    service: BadgeImageService = Depends(get_badge_image_service),
    supabase: Client = Depends(get_supabase)
):
    check_edit(badge_id, user_data, supabase)
    check_image_of_badge(image_id, badge_id, service)
    return service.update_caption(image_id, request.caption)
