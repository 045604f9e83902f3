from fastapi import APIRouter, Depends, UploadFile, File
from app.database.supabase_client import get_supabase
from app.modules.uploads.schemas import UploadResponse, BadgeGuessUpdate
from app.modules.uploads.service import UploadService
from app.core.dependencies import require_permission, get_optional_user
from supabase import Client
from typing import List, Optional, Dict

router = APIRouter(prefix="/uploads", tags=["uploads"])


def get_upload_service(supabase: Client = Depends(get_supabase)) -> UploadService:
    return UploadService(supabase)


@router.post("", response_model=UploadResponse, status_code=201)
async def create_upload(
    file: UploadFile = File(...),
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: UploadService = Depends(get_upload_service)
):
    """Upload a badge photo; sign-in is optional"""
    content = await file.read()
    return service.create_upload(
        file.filename, content, file.content_type,
        user_id=user_data["id"] if user_data else None
    )


@router.get("", response_model=List[UploadResponse])
async def list_uploads(
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(require_permission("uploads:read")),
    service: UploadService = Depends(get_upload_service)
):
    """Recent uploads for moderation"""
    return service.list_uploads(limit=limit, offset=offset)


@router.put("/{upload_id}/guess", response_model=UploadResponse)
async def set_badge_guess(
    upload_id: str,
    request: BadgeGuessUpdate,
    user_data: Dict = Depends(require_permission("uploads:update")),
    service: UploadService = Depends(get_upload_service)
):
    """Link an upload to the badge it most likely shows"""
    return service.set_badge_guess(upload_id, request.badge_guess_id)


@router.delete("/{upload_id}", status_code=204)
async def delete_upload(
    upload_id: str,
    user_data: Dict = Depends(require_permission("uploads:delete")),
    service: UploadService = Depends(get_upload_service)
):
    service.delete_upload(upload_id)
    return None
