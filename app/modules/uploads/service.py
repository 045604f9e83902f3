import logging
from supabase import Client
from fastapi import HTTPException
from typing import List, Optional

from app.core.storage import upload_image, remove_image
from app.database.supabase_client import first_row
from app.modules.uploads.schemas import UploadResponse

logger = logging.getLogger(__name__)

ANONYMOUS_FOLDER = "anonymous"


class UploadService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_upload(
        self,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
        user_id: Optional[str] = None
    ) -> UploadResponse:
        """Store a user photo and record it; anonymous uploads go under anonymous/"""
        _, public_url = upload_image(
            self.supabase, user_id or ANONYMOUS_FOLDER, filename, content, content_type
        )
        try:
            result = self.supabase.table("uploads").insert({
                "user_id": user_id,
                "image_url": public_url,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to record upload")
            return UploadResponse(**result.data[0])
        except HTTPException:
            remove_image(self.supabase, public_url)
            raise
        except Exception as e:
            logger.error(f"Error recording upload: {e}")
            # no row points at the object any more
            remove_image(self.supabase, public_url)
            raise HTTPException(status_code=500, detail=str(e))

    def list_uploads(self, limit: int = 50, offset: int = 0) -> List[UploadResponse]:
        try:
            result = self.supabase.table("uploads")\
                .select("*")\
                .order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [UploadResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def set_badge_guess(self, upload_id: str, badge_guess_id: Optional[str]) -> UploadResponse:
        try:
            result = self.supabase.table("uploads")\
                .update({"badge_guess_id": badge_guess_id})\
                .eq("id", upload_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Upload not found")
            return UploadResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_upload(self, upload_id: str) -> bool:
        try:
            result = self.supabase.table("uploads")\
                .select("*")\
                .eq("id", upload_id)\
                .maybe_single()\
                .execute()
            upload = first_row(result)
            if not upload:
                raise HTTPException(status_code=404, detail="Upload not found")
            self.supabase.table("uploads")\
                .delete()\
                .eq("id", upload_id)\
                .execute()
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        remove_image(self.supabase, upload["image_url"])
        return True
