from supabase import Client
from fastapi import HTTPException
from typing import List

from app.modules.ownership.schemas import (
    OwnershipResponse, OwnershipToggleResponse, OwnershipStats
)


class OwnershipService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_ownership(self, user_id: str) -> List[OwnershipResponse]:
        try:
            result = self.supabase.table("ownership")\
                .select("*")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            return [OwnershipResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def toggle(self, user_id: str, badge_id: str, status: str) -> OwnershipToggleResponse:
        """Remove the (user, badge, status) row when present, add it otherwise"""
        try:
            existing = self.supabase.table("ownership")\
                .select("id")\
                .eq("user_id", user_id)\
                .eq("badge_id", badge_id)\
                .eq("status", status)\
                .execute()
            if existing.data:
                self.supabase.table("ownership")\
                    .delete()\
                    .eq("id", existing.data[0]["id"])\
                    .execute()
                return OwnershipToggleResponse(badge_id=badge_id, status=status, active=False)

            result = self.supabase.table("ownership")\
                .upsert(
                    {"user_id": user_id, "badge_id": badge_id, "status": status},
                    on_conflict="user_id,badge_id,status"
                )\
                .execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to update ownership")
            return OwnershipToggleResponse(
                badge_id=badge_id,
                status=status,
                active=True,
                ownership=OwnershipResponse(**result.data[0]),
            )
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_stats(self, user_id: str) -> OwnershipStats:
        rows = self.list_ownership(user_id)
        return OwnershipStats(
            owned=len([r for r in rows if r.status == "own"]),
            wanted=len([r for r in rows if r.status == "want"]),
            total=len({r.badge_id for r in rows}),
        )
