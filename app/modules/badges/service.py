import logging
import time
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any

from supabase import Client
from fastapi import HTTPException

from app.config import settings
from app.database.supabase_client import first_row
from app.modules.badges.schemas import BadgeCreate, BadgeUpdate, BadgeResponse, BadgeStats

logger = logging.getLogger(__name__)

# Process-wide cache of the full badge list, newest first
_BADGE_LIST_CACHE: Dict[str, Any] = {"rows": None, "expires": 0.0}


def clear_badge_cache():
    _BADGE_LIST_CACHE["rows"] = None
    _BADGE_LIST_CACHE["expires"] = 0.0


def _matches_search(badge: Dict[str, Any], search: str) -> bool:
    needle = search.lower()
    return any(
        needle in (badge.get(field) or "").lower()
        for field in ("name", "description", "team_name")
    )


class BadgeService:
    def __init__(self, supabase: Client, cache_ttl: Optional[int] = None):
        self.supabase = supabase
        self.cache_ttl = settings.badge_cache_ttl if cache_ttl is None else cache_ttl

    def _all_badges(self) -> List[Dict[str, Any]]:
        now = time.monotonic()
        if _BADGE_LIST_CACHE["rows"] is not None and now < _BADGE_LIST_CACHE["expires"]:
            return _BADGE_LIST_CACHE["rows"]
        result = self.supabase.table("badges")\
            .select("*")\
            .order("created_at", desc=True)\
            .execute()
        rows = result.data or []
        _BADGE_LIST_CACHE["rows"] = rows
        _BADGE_LIST_CACHE["expires"] = now + self.cache_ttl
        logger.debug(f"Badge cache refreshed with {len(rows)} badges")
        return rows

    def list_badges(
        self,
        category: Optional[str] = None,
        year: Optional[int] = None,
        team_name: Optional[str] = None,
        search: Optional[str] = None,
        include_retired: bool = True,
        limit: int = 100,
        offset: int = 0
    ) -> List[BadgeResponse]:
        """List badges newest first, filtered in memory over the cached list"""
        try:
            rows = self._all_badges()
        except Exception as e:
            logger.error(f"Error fetching badges: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        if category:
            rows = [b for b in rows if b.get("category") == category]
        if year is not None:
            rows = [b for b in rows if b.get("year") == year]
        if team_name:
            rows = [b for b in rows if b.get("team_name") == team_name]
        if search:
            rows = [b for b in rows if _matches_search(b, search)]
        if not include_retired:
            rows = [b for b in rows if not b.get("retired")]
        return [BadgeResponse(**b) for b in rows[offset:offset + limit]]

    def get_badge(self, badge_id: str) -> BadgeResponse:
        """Get badge by ID"""
        try:
            result = self.supabase.table("badges")\
                .select("*")\
                .eq("id", badge_id)\
                .maybe_single()\
                .execute()
            badge = first_row(result)
            if not badge:
                raise HTTPException(status_code=404, detail="Badge not found")
            return BadgeResponse(**badge)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_badge(self, badge_data: BadgeCreate, maker_id: str) -> BadgeResponse:
        """Create a badge submitted by maker_id"""
        try:
            result = self.supabase.table("badges").insert({
                **badge_data.model_dump(),
                "maker_id": maker_id,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create badge")
            clear_badge_cache()
            logger.info(f"Badge created: {result.data[0]['id']} ({badge_data.name})")
            return BadgeResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_badge(self, badge_id: str, badge_data: BadgeUpdate) -> BadgeResponse:
        """Update badge"""
        try:
            update_data = badge_data.model_dump(exclude_unset=True)
            if not update_data:
                return self.get_badge(badge_id)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("badges")\
                .update(update_data)\
                .eq("id", badge_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Badge not found")
            clear_badge_cache()
            return BadgeResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_badge(self, badge_id: str) -> bool:
        """Delete badge with its images, embeddings and ownership rows"""
        try:
            for table in ("badge_images", "badge_embeddings", "ownership"):
                self.supabase.table(table)\
                    .delete()\
                    .eq("badge_id", badge_id)\
                    .execute()
            result = self.supabase.table("badges")\
                .delete()\
                .eq("id", badge_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Badge not found")
            clear_badge_cache()
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_badge_stats(self, badge_id: str, user_id: Optional[str] = None) -> BadgeStats:
        """Owner/want counts, popularity rank and the caller's own flags"""
        try:
            result = self.supabase.table("ownership")\
                .select("badge_id, user_id, status")\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        rows = result.data or []

        owners_per_badge: Dict[str, int] = {}
        wants_count = 0
        is_owned = False
        is_wanted = False
        for row in rows:
            if row.get("status") == "own":
                owners_per_badge[row["badge_id"]] = owners_per_badge.get(row["badge_id"], 0) + 1
            if row.get("badge_id") != badge_id:
                continue
            if row.get("status") == "want":
                wants_count += 1
            if user_id and row.get("user_id") == user_id:
                is_owned = is_owned or row.get("status") == "own"
                is_wanted = is_wanted or row.get("status") == "want"

        owners_count = owners_per_badge.get(badge_id, 0)
        ownership_rank = None
        if owners_count > 0:
            ownership_rank = 1 + len([c for c in owners_per_badge.values() if c > owners_count])
        return BadgeStats(
            badge_id=badge_id,
            owners_count=owners_count,
            wants_count=wants_count,
            ownership_rank=ownership_rank,
            is_owned=is_owned,
            is_wanted=is_wanted,
        )
