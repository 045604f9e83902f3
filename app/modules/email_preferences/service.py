import logging
from datetime import datetime, timezone
from supabase import Client
from fastapi import HTTPException
from typing import Any, Dict

from app.database.supabase_client import first_row
from app.modules.email_preferences.schemas import (
    PREFERENCE_KEYS, EmailPreferencesUpdate, EmailPreferencesResponse
)

logger = logging.getLogger(__name__)


class EmailPreferencesService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_preferences(self, user_id: str) -> EmailPreferencesResponse:
        """Caller's preferences; opt-in defaults (all false) are stored on first read"""
        try:
            result = self.supabase.table("email_preferences")\
                .select("*")\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
            row = first_row(result)
            if row:
                return EmailPreferencesResponse(**row)

            defaults = {key: False for key in PREFERENCE_KEYS}
            created = self.supabase.table("email_preferences").insert({
                "user_id": user_id,
                **defaults
            }).execute()
            if not created.data:
                raise HTTPException(status_code=500, detail="Failed to create email preferences")
            logger.info(f"Default email preferences created for user {user_id}")
            return EmailPreferencesResponse(**created.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _update(self, user_id: str, update_data: Dict[str, Any]) -> EmailPreferencesResponse:
        try:
            result = self.supabase.table("email_preferences")\
                .update({**update_data, "updated_at": datetime.now(timezone.utc).isoformat()})\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Email preferences not found")
            return EmailPreferencesResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_preferences(self, user_id: str, data: EmailPreferencesUpdate) -> EmailPreferencesResponse:
        current = self.get_preferences(user_id)
        update_data = data.model_dump(exclude_none=True)
        if not update_data:
            return current
        return self._update(user_id, update_data)

    def toggle_preference(self, user_id: str, key: str) -> EmailPreferencesResponse:
        current = self.get_preferences(user_id)
        return self._update(user_id, {key: not getattr(current, key)})
