from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.email_preferences.schemas import (
    PreferenceKey, EmailPreferencesUpdate, EmailPreferencesResponse
)
from app.modules.email_preferences.service import EmailPreferencesService
from app.core.dependencies import get_current_user
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/email-preferences", tags=["email-preferences"])


def get_email_preferences_service(supabase: Client = Depends(get_supabase)) -> EmailPreferencesService:
    return EmailPreferencesService(supabase)


@router.get("", response_model=EmailPreferencesResponse)
async def get_email_preferences(
    user_data: Dict = Depends(get_current_user),
    service: EmailPreferencesService = Depends(get_email_preferences_service)
):
    return service.get_preferences(user_data["id"])


@router.put("", response_model=EmailPreferencesResponse)
async def update_email_preferences(
    data: EmailPreferencesUpdate,
    user_data: Dict = Depends(get_current_user),
    service: EmailPreferencesService = Depends(get_email_preferences_service)
):
    """Update any subset of the preference flags"""
    return service.update_preferences(user_data["id"], data)


@router.post("/{key}/toggle", response_model=EmailPreferencesResponse)
async def toggle_email_preference(
    key: PreferenceKey,
    user_data: Dict = Depends(get_current_user),
    service: EmailPreferencesService = Depends(get_email_preferences_service)
):
    return service.toggle_preference(user_data["id"], key)
