from fastapi import APIRouter, Depends
from app.config import settings
from app.modules.diagnostics.schemas import (
    ReplicateTestResponse, SerpApiTestResponse, DiscordTestResponse, ApiKeysStatus
)
from app.modules.diagnostics.service import DiagnosticsService
from app.modules.matching.replicate_client import ReplicateClient
from app.modules.matching.routes import get_replicate_client
from app.modules.search.clients import SerpApiClient
from app.modules.search.routes import get_serpapi_client
from app.modules.notifications.service import NotificationService, get_notification_service
from app.core.dependencies import require_permission
from typing import Dict

router = APIRouter(prefix="/diagnostics", tags=["diagnostics"])


def get_diagnostics_service(
    replicate: ReplicateClient = Depends(get_replicate_client),
    serpapi: SerpApiClient = Depends(get_serpapi_client),
    notifier: NotificationService = Depends(get_notification_service)
) -> DiagnosticsService:
    return DiagnosticsService(settings, replicate, serpapi, notifier)


@router.post("/test-replicate", response_model=ReplicateTestResponse)
async def test_replicate(
    user_data: Dict = Depends(require_permission("diagnostics:read")),
    service: DiagnosticsService = Depends(get_diagnostics_service)
):
    """Verify the Replicate token with a predictions list call"""
    return await service.test_replicate()


@router.post("/test-serpapi", response_model=SerpApiTestResponse)
async def test_serpapi(
    user_data: Dict = Depends(require_permission("diagnostics:read")),
    service: DiagnosticsService = Depends(get_diagnostics_service)
):
    """Verify the SerpAPI key with a plain search"""
    return await service.test_serpapi()


@router.post("/test-discord", response_model=DiscordTestResponse)
async def test_discord(
    user_data: Dict = Depends(require_permission("diagnostics:read")),
    service: DiagnosticsService = Depends(get_diagnostics_service)
):
    """Post a test embed to the Discord webhook"""
    return await service.test_discord()


@router.get("/api-keys", response_model=ApiKeysStatus)
async def api_keys_status(
    user_data: Dict = Depends(require_permission("diagnostics:read")),
    service: DiagnosticsService = Depends(get_diagnostics_service)
):
    return service.api_keys_status()
