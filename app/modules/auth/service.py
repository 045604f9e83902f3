import hashlib
import logging
import time
from supabase import Client
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

SUPPORTED_OAUTH_PROVIDERS = ("google",)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache():
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            logger.info(f"Token rejected by Supabase Auth: {error_msg}")
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def get_oauth_url(self, provider: str, redirect_to: Optional[str] = None) -> str:
        """Start an OAuth sign-in and return the provider URL the browser should visit"""
        if provider not in SUPPORTED_OAUTH_PROVIDERS:
            raise HTTPException(status_code=400, detail=f"Unsupported OAuth provider: {provider}")
        try:
            credentials = {"provider": provider}
            if redirect_to:
                credentials["options"] = {"redirect_to": redirect_to}
            response = self.supabase.auth.sign_in_with_oauth(credentials)
            if not response or not response.url:
                raise HTTPException(status_code=502, detail="OAuth provider did not return a URL")
            return response.url
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error starting {provider} OAuth: {e}")
            raise HTTPException(status_code=502, detail=f"OAuth start failed: {str(e)}")

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        try:
            # Tokens are stateless JWTs; dropping our cache entry is the server-side part
            _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False
