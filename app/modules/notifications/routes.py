from fastapi import APIRouter, Depends
from app.modules.notifications.schemas import (
    NotificationRequest, NotificationResponse, EmailRequest, EmailResponse
)
from app.modules.notifications.service import NotificationService, get_notification_service
from app.modules.notifications.email import EmailService, get_email_service
from app.core.dependencies import require_permission
from typing import Dict

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post("/discord", response_model=NotificationResponse)
async def send_discord_notification(
    request: NotificationRequest,
    user_data: Dict = Depends(require_permission("notifications:send")),
    service: NotificationService = Depends(get_notification_service)
):
    """Post a notification embed to the configured Discord webhook"""
    await service.send(request.type, request.data)
    return NotificationResponse(success=True)


@router.post("/email", response_model=EmailResponse)
async def send_email(
    request: EmailRequest,
    user_data: Dict = Depends(require_permission("notifications:send")),
    service: EmailService = Depends(get_email_service)
):
    """Send a transactional email through Resend; user_id applies that user's preferences"""
    return await service.send(request.type, request.to, request.data, user_id=request.user_id)
