from pydantic import BaseModel
from typing import Optional, Any


class ReplicateTestResponse(BaseModel):
    success: bool
    message: str
    has_token: bool
    test_response: Optional[Any] = None


class SerpApiTestResponse(BaseModel):
    status: Optional[int] = None
    key_found: bool
    key_length: int = 0
    response: Optional[Any] = None
    success: bool
    error: Optional[str] = None


class DiscordTestResponse(BaseModel):
    success: bool
    message: str
    configured: bool


class ApiKeysStatus(BaseModel):
    replicate: bool
    serpapi: bool
    perplexity: bool
    discord: bool
    openai: bool
    resend: bool
    supabase_service_role: bool
