import logging
import time
from typing import Optional

import httpx
from fastapi import Depends, HTTPException
from supabase import Client

from app.config import settings
from app.core.api_logger import log_api_call
from app.database.supabase_client import get_service_supabase
from app.core.providers import http_client, elapsed_ms
from app.modules.notifications import discord
from app.modules.notifications.schemas import NotificationData

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(
        self,
        webhook_url: Optional[str],
        supabase: Optional[Client] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.webhook_url = webhook_url
        self.supabase = supabase
        self.transport = transport

    async def post_webhook(self, payload: dict) -> httpx.Response:
        started = time.monotonic()
        async with http_client(self.transport) as client:
            response = await client.post(self.webhook_url, json=payload)
        log_api_call(
            self.supabase, "discord", "/webhook", "POST",
            success=response.is_success,
            response_status=response.status_code,
            response_time_ms=elapsed_ms(started),
            error_message=None if response.is_success else response.text[:500],
        )
        return response

    async def send(self, notification_type: str, data: NotificationData) -> bool:
        """Post a notification to the Discord webhook. Raises HTTPException on failure."""
        if not self.webhook_url:
            raise HTTPException(status_code=500, detail="Discord webhook URL not configured")
        payload = discord.build_payload(notification_type, data, settings.app_base_url)
        logger.info(f"Sending Discord notification: {notification_type} - {data.title}")
        try:
            response = await self.post_webhook(payload)
        except httpx.HTTPError as e:
            logger.error(f"Discord webhook request failed: {e}")
            raise HTTPException(status_code=500, detail=f"Discord webhook failed: {str(e)}")
        if not response.is_success:
            raise HTTPException(
                status_code=500,
                detail=f"Discord webhook failed: {response.status_code} - {response.text}"
            )
        return True

    async def notify(self, notification_type: str, data: NotificationData) -> bool:
        """Fire-and-forget variant for side effects of other operations; never raises."""
        try:
            return await self.send(notification_type, data)
        except HTTPException as e:
            logger.warning(f"Discord notification {notification_type} not sent: {e.detail}")
        except Exception as e:
            logger.error(f"Discord notification {notification_type} failed: {e}")
        return False


def get_notification_service(supabase: Client = Depends(get_service_supabase)) -> NotificationService:
    return NotificationService(settings.discord_webhook_url, supabase=supabase)
