from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.ownership.schemas import (
    OwnershipToggle, OwnershipResponse, OwnershipToggleResponse, OwnershipStats
)
from app.modules.ownership.service import OwnershipService
from app.core.dependencies import require_permission
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/ownership", tags=["ownership"])


def get_ownership_service(supabase: Client = Depends(get_supabase)) -> OwnershipService:
    return OwnershipService(supabase)


@router.get("", response_model=List[OwnershipResponse])
async def list_my_ownership(
    user_data: Dict = Depends(require_permission("ownership:read")),
    service: OwnershipService = Depends(get_ownership_service)
):
    """Own/want rows of the current user"""
    return service.list_ownership(user_data["id"])


@router.post("/toggle", response_model=OwnershipToggleResponse)
async def toggle_ownership(
    request: OwnershipToggle,
    user_data: Dict = Depends(require_permission("ownership:update")),
    service: OwnershipService = Depends(get_ownership_service)
):
    """Flip own or want for a badge"""
    return service.toggle(user_data["id"], request.badge_id, request.status)


@router.get("/stats", response_model=OwnershipStats)
async def my_ownership_stats(
    user_data: Dict = Depends(require_permission("ownership:read")),
    service: OwnershipService = Depends(get_ownership_service)
):
    return service.get_stats(user_data["id"])
