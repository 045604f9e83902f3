import logging

import httpx
from fastapi import HTTPException

from app.config import Settings
from app.core.providers import response_body
from app.modules.matching.replicate_client import ReplicateClient
from app.modules.search.clients import SerpApiClient
from app.modules.notifications import discord
from app.modules.notifications.service import NotificationService
from app.modules.diagnostics.schemas import (
    ReplicateTestResponse, SerpApiTestResponse, DiscordTestResponse, ApiKeysStatus
)

logger = logging.getLogger(__name__)


class DiagnosticsService:
    """Checks that provider credentials are present and accepted upstream"""

    def __init__(self, config: Settings, replicate: ReplicateClient, serpapi: SerpApiClient, notifier: NotificationService):
        self.config = config
        self.replicate = replicate
        self.serpapi = serpapi
        self.notifier = notifier

    async def test_replicate(self) -> ReplicateTestResponse:
        if not self.replicate.api_token:
            raise HTTPException(
                status_code=400,
                detail={"error": "REPLICATE_API_TOKEN not configured", "has_token": False}
            )
        logger.info(f"Testing Replicate API token (length {len(self.replicate.api_token)})")
        try:
            response = await self.replicate.list_predictions()
        except httpx.HTTPError as e:
            raise HTTPException(status_code=500, detail={"error": str(e), "has_token": True})
        if not response.is_success:
            logger.error(f"Replicate API test failed: {response.text}")
            raise HTTPException(
                status_code=400,
                detail={
                    "error": f"Replicate API test failed: {response.status_code} {response.reason_phrase}",
                    "details": response.text,
                    "has_token": True,
                }
            )
        return ReplicateTestResponse(
            success=True,
            message="Replicate API token is working correctly",
            has_token=True,
            test_response=response_body(response),
        )

    async def test_serpapi(self) -> SerpApiTestResponse:
        if not self.serpapi.api_key:
            return SerpApiTestResponse(key_found=False, success=False, error="SERPAPI_KEY not found in environment")
        try:
            response = await self.serpapi.test_search()
        except httpx.HTTPError as e:
            raise HTTPException(status_code=500, detail={"error": str(e), "key_found": True})
        logger.info(f"SerpAPI test response status: {response.status_code}")
        return SerpApiTestResponse(
            status=response.status_code,
            key_found=True,
            key_length=len(self.serpapi.api_key),
            response=response_body(response),
            success=response.is_success,
        )

    async def test_discord(self) -> DiscordTestResponse:
        if not self.notifier.webhook_url:
            raise HTTPException(
                status_code=400,
                detail={"error": "Discord webhook URL not configured", "configured": False}
            )
        try:
            response = await self.notifier.post_webhook(discord.build_test_payload())
        except httpx.HTTPError as e:
            raise HTTPException(status_code=500, detail={"error": str(e), "configured": True})
        if not response.is_success:
            logger.error(f"Discord webhook test failed: {response.status_code} {response.text}")
            raise HTTPException(
                status_code=500,
                detail={
                    "error": f"Discord webhook failed: {response.status_code} - {response.text}",
                    "status": response.status_code,
                    "configured": True,
                }
            )
        return DiscordTestResponse(success=True, message="Discord webhook is working correctly", configured=True)

    def api_keys_status(self) -> ApiKeysStatus:
        """Which provider keys are configured; values are never returned"""
        return ApiKeysStatus(
            replicate=bool(self.config.replicate_api_token),
            serpapi=bool(self.config.serpapi_key),
            perplexity=bool(self.config.perplexity_api_key),
            discord=bool(self.config.discord_webhook_url),
            openai=bool(self.config.openai_api_key),
            resend=bool(self.config.resend_api_key),
            supabase_service_role=bool(self.config.supabase_service_role_key),
        )
