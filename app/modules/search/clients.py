"""
Perplexity chat-completions, OpenAI vision and SerpAPI clients.
"""

import base64
import binascii
import logging
import re
import math
import time
from typing import Any, Dict, Optional

import httpx
from supabase import Client

from app.config import settings
from app.core.api_logger import log_api_call, count_tokens_approx, estimate_openai_cost
from app.core.providers import ProviderError, http_client, response_body, elapsed_ms

logger = logging.getLogger(__name__)

SEARCH_SYSTEM_PROMPT = "You are a helpful assistant that searches for badge information. Always return valid JSON responses."

VISION_SYSTEM_PROMPT = """You are an expert in electronic conference badges, SAO badges, and hacker badges. Analyze this image and provide detailed information.

Return JSON: {
  "name": "specific badge name",
  "description": "detailed description",
  "maker": "maker name if visible",
  "category": "badge category",
  "confidence": 70
}"""
VISION_USER_PROMPT = "Analyze this electronic badge image in detail. What specific badge is this?"
VISION_MAX_TOKENS = 300

_DATA_URL_PREFIX = re.compile(r"^data:image/[a-z]+;base64,")


def strip_data_url(image_base64: str) -> str:
    return _DATA_URL_PREFIX.sub("", image_base64)


class PerplexityClient:
    def __init__(
        self,
        api_key: Optional[str],
        model: str = "llama-3.1-sonar-small-128k-online",
        supabase: Optional[Client] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.supabase = supabase
        self.transport = transport

    def build_request(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SEARCH_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0.2,
            "top_p": 0.9,
            "max_tokens": 1000,
            "return_images": False,
            "return_related_questions": False,
            "frequency_penalty": 1,
            "presence_penalty": 0,
        }

    async def chat(self, url: str, prompt: str) -> Dict[str, Any]:
        """POST a chat completion to url. Raises ProviderError on non-2xx."""
        started = time.monotonic()
        async with http_client(self.transport) as client:
            response = await client.post(
                url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=self.build_request(prompt),
            )
        log_api_call(
            self.supabase, "perplexity", "/chat/completions", "POST",
            success=response.is_success,
            request_data={"model": self.model, "prompt": prompt},
            response_status=response.status_code,
            response_time_ms=elapsed_ms(started),
            error_message=None if response.is_success else response.text[:500],
        )
        if not response.is_success:
            raise ProviderError("perplexity", f"API request failed with status {response.status_code}", response.status_code, response.text)
        return response.json()


class OpenAIVisionClient:
    def __init__(
        self,
        api_key: Optional[str],
        url: str = "https://api.openai.com/v1/chat/completions",
        model: str = "gpt-4o",
        supabase: Optional[Client] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.model = model
        self.supabase = supabase
        self.transport = transport

    def build_request(self, image_url: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": VISION_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": VISION_USER_PROMPT},
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                },
            ],
            "max_tokens": VISION_MAX_TOKENS,
            "temperature": 0.3,
        }

    async def analyze_image(self, image_url: str) -> Dict[str, Any]:
        """Ask the vision model about a badge photo. Raises ProviderError on non-2xx or a non-JSON reply."""
        started = time.monotonic()
        async with http_client(self.transport) as client:
            response = await client.post(
                self.url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=self.build_request(image_url),
            )
        # output tokens are estimated at 70% of the cap
        input_tokens = count_tokens_approx(VISION_SYSTEM_PROMPT + VISION_USER_PROMPT)
        output_tokens = math.ceil(VISION_MAX_TOKENS * 0.7)
        log_api_call(
            self.supabase, "openai", "/v1/chat/completions", "POST",
            success=response.is_success,
            request_data={"model": self.model, "max_tokens": VISION_MAX_TOKENS},
            response_status=response.status_code,
            response_time_ms=elapsed_ms(started),
            error_message=None if response.is_success else response.text[:500],
            tokens_used=input_tokens + output_tokens,
            estimated_cost_usd=estimate_openai_cost(self.model, input_tokens, output_tokens),
        )
        if not response.is_success:
            raise ProviderError("openai", f"API request failed with status {response.status_code}", response.status_code, response_body(response))
        try:
            return response.json()
        except ValueError:
            raise ProviderError("openai", "invalid JSON", response.status_code, response.text)


class SerpApiClient:
    def __init__(
        self,
        api_key: Optional[str],
        url: str = "https://serpapi.com/search",
        supabase: Optional[Client] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.supabase = supabase
        self.transport = transport

    async def reverse_image(self, image_base64: str, num: int = 3) -> Dict[str, Any]:
        """Google reverse image search on an uploaded image. Raises ProviderError on non-2xx."""
        try:
            image_bytes = base64.b64decode(strip_data_url(image_base64), validate=True)
        except (binascii.Error, ValueError):
            raise ProviderError("serpapi", "Image is not valid base64")

        started = time.monotonic()
        async with http_client(self.transport) as client:
            response = await client.post(
                self.url,
                data={"engine": "google_reverse_image", "api_key": self.api_key, "num": str(num)},
                files={"image_upload": ("image.jpg", image_bytes, "image/jpeg")},
            )
        log_api_call(
            self.supabase, "serpapi", "/search", "POST",
            success=response.is_success,
            request_data={"engine": "google_reverse_image", "num": num},
            response_status=response.status_code,
            response_time_ms=elapsed_ms(started),
            error_message=None if response.is_success else response.text[:500],
        )
        if not response.is_success:
            raise ProviderError("serpapi", "reverse image search failed", response.status_code, response_body(response))
        return response.json()

    async def test_search(self) -> httpx.Response:
        """Plain Google search for "test"; used to check the key."""
        async with http_client(self.transport) as client:
            return await client.get(self.url, params={"engine": "google", "q": "test", "api_key": self.api_key})


def get_perplexity_client_from_settings(supabase: Optional[Client] = None) -> PerplexityClient:
    return PerplexityClient(settings.perplexity_api_key, settings.perplexity_model, supabase=supabase)


def get_openai_client_from_settings(supabase: Optional[Client] = None) -> OpenAIVisionClient:
    return OpenAIVisionClient(
        settings.openai_api_key, settings.openai_api_url, settings.openai_vision_model, supabase=supabase
    )


def get_serpapi_client_from_settings(supabase: Optional[Client] = None) -> SerpApiClient:
    return SerpApiClient(settings.serpapi_key, settings.serpapi_url, supabase=supabase)
