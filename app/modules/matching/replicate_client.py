"""
Replicate client for CLIP image embeddings.

A prediction is created, then polled at a fixed interval until it reaches a
terminal state or the attempt cap runs out.
"""

import asyncio
import logging
import time
from typing import Any, List, Optional

import httpx
from pydantic import BaseModel
from supabase import Client

from app.config import settings
from app.core.api_logger import log_api_call
from app.core.providers import ProviderError, http_client, response_body, elapsed_ms

logger = logging.getLogger(__name__)

STATUS_SUCCEEDED = "succeeded"
STATUS_FAILED = "failed"
STATUS_TIMEOUT = "timeout"

_FAILED_STATES = ("failed", "canceled")


class EmbeddingResult(BaseModel):
    status: str
    embedding: Optional[List[float]] = None
    prediction_id: Optional[str] = None
    attempts: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SUCCEEDED and bool(self.embedding)


def extract_embedding(output: Any) -> Optional[List[float]]:
    """Pull the vector out of a prediction output.

    The clip-features model answers [{"input": ..., "embedding": [...]}];
    bare vectors and single dicts are accepted as well.
    """
    if isinstance(output, list) and output:
        first = output[0]
        if isinstance(first, dict):
            return first.get("embedding")
        if isinstance(first, (int, float)):
            return list(output)
    if isinstance(output, dict):
        return output.get("embedding")
    return None


def prediction_json(response: httpx.Response) -> dict:
    """Prediction object from a 2xx reply. Raises ProviderError when the body is not a JSON object."""
    try:
        body = response.json()
    except ValueError:
        raise ProviderError("replicate", "invalid JSON", response.status_code, response.text)
    if not isinstance(body, dict):
        raise ProviderError("replicate", "invalid JSON", response.status_code, response.text)
    return body


class ReplicateClient:
    def __init__(
        self,
        api_token: Optional[str],
        base_url: str = "https://api.replicate.com/v1",
        version: str = settings.replicate_clip_version,
        poll_interval: float = 1.0,
        max_attempts: int = 30,
        supabase: Optional[Client] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.version = version
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts
        self.supabase = supabase
        self.transport = transport

    @classmethod
    def from_settings(cls, supabase: Optional[Client] = None) -> "ReplicateClient":
        return cls(
            api_token=settings.replicate_api_token,
            base_url=settings.replicate_api_url,
            version=settings.replicate_clip_version,
            poll_interval=settings.replicate_poll_interval,
            max_attempts=settings.replicate_max_poll_attempts,
            supabase=supabase,
        )

    @property
    def headers(self) -> dict:
        return {
            "Authorization": f"Token {self.api_token}",
            "Content-Type": "application/json",
        }

    async def create_prediction(self, client: httpx.AsyncClient, image: str) -> dict:
        started = time.monotonic()
        payload = {"version": self.version, "input": {"inputs": image}}
        response = await client.post(f"{self.base_url}/predictions", headers=self.headers, json=payload)
        log_api_call(
            self.supabase, "replicate", "/predictions", "POST",
            success=response.is_success,
            request_data={"version": self.version},
            response_status=response.status_code,
            response_time_ms=elapsed_ms(started),
            error_message=None if response.is_success else response.text[:500],
        )
        if not response.is_success:
            raise ProviderError("replicate", "prediction create failed", response.status_code, response_body(response))
        return prediction_json(response)

    async def get_prediction(self, client: httpx.AsyncClient, prediction_id: str) -> dict:
        response = await client.get(f"{self.base_url}/predictions/{prediction_id}", headers=self.headers)
        if not response.is_success:
            raise ProviderError("replicate", "prediction poll failed", response.status_code, response_body(response))
        return prediction_json(response)

    async def embed_image(self, image: str) -> EmbeddingResult:
        """Embed an image URL or data URL. Never raises; failures come back as a result status."""
        if not self.api_token:
            return EmbeddingResult(status=STATUS_FAILED, error="REPLICATE_API_TOKEN not configured")
        try:
            async with http_client(self.transport) as client:
                prediction = await self.create_prediction(client, image)
                prediction_id = prediction.get("id")
                if not prediction_id:
                    return EmbeddingResult(status=STATUS_FAILED, error="Prediction created without an id")
                attempts = 0
                while True:
                    status = prediction.get("status")
                    if status == STATUS_SUCCEEDED:
                        embedding = extract_embedding(prediction.get("output"))
                        if not embedding:
                            return EmbeddingResult(
                                status=STATUS_FAILED, prediction_id=prediction_id, attempts=attempts,
                                error="Prediction succeeded without an embedding",
                            )
                        return EmbeddingResult(
                            status=STATUS_SUCCEEDED, embedding=embedding,
                            prediction_id=prediction_id, attempts=attempts,
                        )
                    if status in _FAILED_STATES:
                        return EmbeddingResult(
                            status=STATUS_FAILED, prediction_id=prediction_id, attempts=attempts,
                            error=str(prediction.get("error") or f"Prediction {status}"),
                        )
                    if attempts >= self.max_attempts:
                        logger.warning(f"Replicate prediction {prediction_id} still {status} after {attempts} polls")
                        return EmbeddingResult(
                            status=STATUS_TIMEOUT, prediction_id=prediction_id, attempts=attempts,
                            error=f"Prediction timed out after {attempts} attempts",
                        )
                    await asyncio.sleep(self.poll_interval)
                    attempts += 1
                    prediction = await self.get_prediction(client, prediction_id)
        except ProviderError as e:
            logger.error(f"Replicate embedding failed: {e}")
            return EmbeddingResult(status=STATUS_FAILED, error=str(e))
        except httpx.HTTPError as e:
            logger.error(f"Replicate request error: {e}")
            return EmbeddingResult(status=STATUS_FAILED, error=str(e))

    async def list_predictions(self) -> httpx.Response:
        """Cheap authenticated call used to verify the token."""
        async with http_client(self.transport) as client:
            return await client.get(f"{self.base_url}/predictions", headers=self.headers)
