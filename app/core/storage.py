"""Photo uploads to the Supabase Storage bucket."""

import logging
import os
import time
from typing import Optional, Tuple

from fastapi import HTTPException
from supabase import Client

from app.config import settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp", "image/heic")


def build_object_path(folder: str, filename: Optional[str]) -> str:
    """{folder}/{epoch millis}.{ext}; the extension defaults to jpg"""
    extension = os.path.splitext(filename or "")[1].lstrip(".").lower() or "jpg"
    return f"{folder}/{int(time.time() * 1000)}.{extension}"


def upload_image(
    supabase: Client,
    folder: str,
    filename: Optional[str],
    content: bytes,
    content_type: Optional[str] = None,
    bucket: Optional[str] = None,
) -> Tuple[str, str]:
    """Store an image and return (object path, public URL)."""
    if content_type and content_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported image type: {content_type}")
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")
    bucket = bucket or settings.storage_bucket
    path = build_object_path(folder, filename)
    try:
        supabase.storage.from_(bucket).upload(
            path,
            content,
            file_options={"content-type": content_type or "image/jpeg"}
        )
        public_url = supabase.storage.from_(bucket).get_public_url(path)
    except Exception as e:
        logger.error(f"Supabase Storage upload failed: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to upload to storage: {str(e)}")
    logger.info(f"Uploaded image to {bucket}/{path}")
    return path, public_url


def object_path_from_url(public_url: str, bucket: Optional[str] = None) -> Optional[str]:
    """Object path inside the bucket for a public URL, or None for foreign URLs"""
    marker = f"/{bucket or settings.storage_bucket}/"
    if not public_url or marker not in public_url:
        return None
    return public_url.split(marker, 1)[1].split("?", 1)[0]


def remove_image(supabase: Client, public_url: str, bucket: Optional[str] = None) -> None:
    """Best-effort removal of a stored object; failures are logged."""
    path = object_path_from_url(public_url, bucket)
    if not path:
        return
    try:
        supabase.storage.from_(bucket or settings.storage_bucket).remove([path])
    except Exception as e:
        logger.warning(f"Could not remove storage object {path}: {e}")
