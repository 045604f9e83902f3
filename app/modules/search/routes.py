from fastapi import APIRouter, Depends
from app.database.supabase_client import get_service_supabase
from app.modules.search.schemas import (
    WebSearchTestRequest, WebSearchTestResponse,
    ReverseImageRequest, ReverseImageResponse,
    AIAnalysisRequest, AIAnalysisResponse,
    FeedbackCreate, FeedbackResponse, FeedbackStats
)
from app.modules.search.clients import (
    PerplexityClient, SerpApiClient, OpenAIVisionClient,
    get_perplexity_client_from_settings, get_serpapi_client_from_settings, get_openai_client_from_settings
)
from app.modules.search.service import SearchService
from app.core.dependencies import require_permission, get_optional_user
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/search", tags=["search"])


def get_perplexity_client(supabase: Client = Depends(get_service_supabase)) -> PerplexityClient:
    return get_perplexity_client_from_settings(supabase)


def get_serpapi_client(supabase: Client = Depends(get_service_supabase)) -> SerpApiClient:
    return get_serpapi_client_from_settings(supabase)


def get_openai_client(supabase: Client = Depends(get_service_supabase)) -> OpenAIVisionClient:
    return get_openai_client_from_settings(supabase)


def get_search_service(
    supabase: Client = Depends(get_service_supabase),
    perplexity: PerplexityClient = Depends(get_perplexity_client),
    serpapi: SerpApiClient = Depends(get_serpapi_client),
    openai: OpenAIVisionClient = Depends(get_openai_client)
) -> SearchService:
    return SearchService(supabase, perplexity, serpapi, openai)


@router.post("/web-test", response_model=WebSearchTestResponse)
async def test_web_search(
    request: WebSearchTestRequest,
    user_data: Dict = Depends(require_permission("search:test")),
    service: SearchService = Depends(get_search_service)
):
    """Try a search prompt template against a chat-completions endpoint (admin)"""
    return await service.test_web_search(request)


@router.post("/reverse-image", response_model=ReverseImageResponse)
async def reverse_image_search(
    request: ReverseImageRequest,
    service: SearchService = Depends(get_search_service)
):
    """Look the photo up with Google reverse image search"""
    return await service.reverse_image_search(request.image_base64)


@router.post("/ai-analysis", response_model=AIAnalysisResponse)
async def ai_analysis(
    request: AIAnalysisRequest,
    service: SearchService = Depends(get_search_service)
):
    """Identify the photo with the OpenAI vision model when matching and reverse image search found nothing"""
    return await service.ai_analysis(request.image_base64)


@router.post("/feedback", response_model=FeedbackResponse, status_code=201)
async def submit_feedback(
    data: FeedbackCreate,
    user_data: Optional[Dict] = Depends(get_optional_user),
    service: SearchService = Depends(get_search_service)
):
    """Rate a search result; anonymous feedback is accepted"""
    return service.submit_feedback(data, user_data["id"] if user_data else None)


@router.get("/feedback/stats", response_model=FeedbackStats)
async def get_feedback_stats(
    search_query: str,
    user_data: Dict = Depends(require_permission("search:read")),
    service: SearchService = Depends(get_search_service)
):
    return service.get_feedback_stats(search_query)
