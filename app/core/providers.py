"""
Shared pieces for outbound calls to third-party providers (Replicate,
Perplexity, OpenAI, SerpAPI, Discord, Resend).
"""

import logging
import time
from typing import Any, Optional, Tuple

import httpx

from app.config import settings

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Non-2xx answer (or transport failure) from an external provider."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.provider = provider
        self.message = message
        self.status_code = status_code
        self.body = body

    def __str__(self):
        if self.status_code is not None:
            return f"{self.provider} error {self.status_code}: {self.message}"
        return f"{self.provider} error: {self.message}"


def http_client(transport: Optional[httpx.AsyncBaseTransport] = None, timeout: Optional[float] = None) -> httpx.AsyncClient:
    """AsyncClient with the configured timeout. Tests pass an httpx.MockTransport."""
    return httpx.AsyncClient(
        timeout=timeout if timeout is not None else settings.http_timeout,
        transport=transport,
    )


def response_body(response: httpx.Response) -> Any:
    """JSON body when the provider sent JSON, raw text otherwise."""
    try:
        return response.json()
    except ValueError:
        return response.text


def elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


async def check_url_reachable(url: str, transport: Optional[httpx.AsyncBaseTransport] = None) -> Tuple[bool, Optional[int]]:
    """HEAD request against a public URL. Returns (ok, status code)."""
    try:
        async with http_client(transport) as client:
            response = await client.head(url, follow_redirects=True)
            return response.is_success, response.status_code
    except httpx.HTTPError as e:
        logger.warning(f"URL not reachable {url}: {e}")
        return False, None
