import logging
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any

from supabase import Client
from fastapi import HTTPException

from app.core.storage import upload_image, remove_image
from app.database.supabase_client import first_row
from app.modules.badges.service import clear_badge_cache
from app.modules.badge_images.schemas import BadgeImageResponse

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class BadgeImageService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_images(self, badge_id: str) -> List[BadgeImageResponse]:
        """Images of a badge in display order"""
        try:
            result = self.supabase.table("badge_images")\
                .select("*")\
                .eq("badge_id", badge_id)\
                .order("display_order")\
                .execute()
            return [BadgeImageResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_image(self, image_id: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table("badge_images")\
                .select("*")\
                .eq("id", image_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        image = first_row(result)
        if not image:
            raise HTTPException(status_code=404, detail="Badge image not found")
        return image

    def add_image(
        self,
        badge_id: str,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
        caption: Optional[str] = None
    ) -> BadgeImageResponse:
        """Upload a photo under {badge_id}/ and append it after the existing images.

        The stored object is removed again when the row cannot be recorded.
        """
        try:
            existing = self.supabase.table("badge_images")\
                .select("id")\
                .eq("badge_id", badge_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        display_order = len(existing.data or [])
        _, public_url = upload_image(self.supabase, badge_id, filename, content, content_type)
        try:
            result = self.supabase.table("badge_images").insert({
                "badge_id": badge_id,
                "image_url": public_url,
                "caption": caption,
                "display_order": display_order,
                "is_primary": False,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add image to badge")
            return BadgeImageResponse(**result.data[0])
        except HTTPException:
            remove_image(self.supabase, public_url)
            raise
        except Exception as e:
            logger.error(f"Error adding badge image: {e}")
            remove_image(self.supabase, public_url)
            raise HTTPException(status_code=500, detail=str(e))

    def remove_image(self, image_id: str) -> bool:
        image = self.get_image(image_id)
        try:
            self.supabase.table("badge_images")\
                .delete()\
                .eq("id", image_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        remove_image(self.supabase, image["image_url"])
        return True

    def set_primary(self, image_id: str) -> BadgeImageResponse:
        """Make one image the badge's primary photo; every other image is demoted"""
        image = self.get_image(image_id)
        try:
            self.supabase.table("badge_images")\
                .update({"is_primary": False, "updated_at": _now()})\
                .eq("badge_id", image["badge_id"])\
                .execute()
            result = self.supabase.table("badge_images")\
                .update({"is_primary": True, "updated_at": _now()})\
                .eq("id", image_id)\
                .execute()
            # badges.image_url mirrors the primary photo
            self.supabase.table("badges")\
                .update({"image_url": image["image_url"], "updated_at": _now()})\
                .eq("id", image["badge_id"])\
                .execute()
            clear_badge_cache()
            return BadgeImageResponse(**result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_order(self, image_id: str, display_order: int) -> BadgeImageResponse:
        return self._update(image_id, {"display_order": display_order})

    def update_caption(self, image_id: str, caption: Optional[str]) -> BadgeImageResponse:
        return self._update(image_id, {"caption": caption})

    def reorder(self, badge_id: str, image_ids: List[str]) -> List[BadgeImageResponse]:
        """Assign display_order 0..n-1 following image_ids"""
        current = {img.id for img in self.list_images(badge_id)}
        unknown = [i for i in image_ids if i not in current]
        if unknown:
            raise HTTPException(status_code=400, detail=f"Images do not belong to badge: {', '.join(unknown)}")
        try:
            for position, image_id in enumerate(image_ids):
                self.supabase.table("badge_images")\
                    .update({"display_order": position, "updated_at": _now()})\
                    .eq("id", image_id)\
                    .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        return self.list_images(badge_id)

    def _update(self, image_id: str, update_data: Dict[str, Any]) -> BadgeImageResponse:
        try:
            result = self.supabase.table("badge_images")\
                .update({**update_data, "updated_at": _now()})\
                .eq("id", image_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Badge image not found")
            return BadgeImageResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
