from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.matching.schemas import (
    MatchRequest, MatchResponse, AnalyzeResponse,
    ProcessEmbeddingsRequest, ProcessEmbeddingsResponse,
    ConfirmationCreate, ConfirmationResponse, ConfirmationStats
)
from app.modules.matching.replicate_client import ReplicateClient
from app.modules.matching.service import MatchingService
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/matching", tags=["matching"])


def get_replicate_client(supabase: Client = Depends(get_service_supabase)) -> ReplicateClient:
    return ReplicateClient.from_settings(supabase=supabase)


def get_matching_service(
    supabase: Client = Depends(get_service_supabase),
    replicate: ReplicateClient = Depends(get_replicate_client)
) -> MatchingService:
    return MatchingService(supabase, replicate)


@router.post("/match", response_model=MatchResponse)
async def match_badge_image(
    request: MatchRequest,
    service: MatchingService = Depends(get_matching_service)
):
    """Find catalog badges that look like the uploaded photo (anonymous allowed)"""
    return await service.match_badge_image(request.image_base64, request.user_text, request.debug)


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_badge_image(
    request: MatchRequest,
    service: MatchingService = Depends(get_matching_service)
):
    """Match the photo and suggest adding a new badge when nothing confident is found"""
    return await service.analyze_badge_image(request.image_base64, request.debug)


@router.post("/embeddings/process", response_model=ProcessEmbeddingsResponse)
async def process_badge_embeddings(
    request: ProcessEmbeddingsRequest = ProcessEmbeddingsRequest(),
    user_data: Dict = Depends(require_permission("matching:process")),
    service: MatchingService = Depends(get_matching_service)
):
    """Generate embeddings for badges that do not have one yet (admin)"""
    return await service.process_badge_embeddings(request.batch_size)


@router.post("/confirmations", response_model=ConfirmationResponse, status_code=201)
async def confirm_match(
    data: ConfirmationCreate,
    user_data: Dict = Depends(require_permission("matching:read")),
    service: MatchingService = Depends(get_matching_service)
):
    """Confirm that a suggested match was the right badge"""
    return service.confirm_match(user_data["id"], data)


@router.get("/confirmations/{badge_id}/stats", response_model=ConfirmationStats)
async def get_confirmation_stats(
    badge_id: str,
    service: MatchingService = Depends(get_matching_service)
):
    return service.get_confirmation_stats(badge_id)
