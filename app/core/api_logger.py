"""Records outbound provider calls in the api_call_logs table."""

import logging
import math
import re
from typing import Any, Optional

from supabase import Client

logger = logging.getLogger(__name__)

_SECRET_KEY_PATTERN = re.compile(r"api[_-]?key|token|authorization|secret", re.IGNORECASE)
REDACTED = "[REDACTED]"

# Approximate cost per request, USD
COST_ESTIMATES = {
    "serpapi": 0.001,
    "replicate": 0.01,
    "perplexity": 0.0005,
    "discord": 0.0,
    "resend": 0.0001,
}

# USD per token, input and output
OPENAI_TOKEN_COSTS = {
    "gpt-4o-mini": (0.00015 / 1000, 0.0006 / 1000),
    "gpt-4o": (0.0025 / 1000, 0.01 / 1000),
}


def redact(data: Any) -> Any:
    """Copy of data with values of secret-looking keys replaced."""
    if isinstance(data, dict):
        return {
            k: REDACTED if isinstance(k, str) and _SECRET_KEY_PATTERN.search(k) else redact(v)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [redact(item) for item in data]
    return data


def estimate_api_cost(provider: str) -> float:
    return COST_ESTIMATES.get(provider, 0.0)


def count_tokens_approx(text: str) -> int:
    """Rough token count, one token per four characters"""
    return math.ceil(len(text or "") / 4)


def estimate_openai_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    costs = OPENAI_TOKEN_COSTS.get(model)
    if not costs:
        return 0.0
    return costs[0] * input_tokens + costs[1] * output_tokens


def log_api_call(
    supabase: Optional[Client],
    api_provider: str,
    endpoint: str,
    method: str,
    success: bool,
    request_data: Optional[dict] = None,
    response_status: Optional[int] = None,
    response_time_ms: Optional[int] = None,
    error_message: Optional[str] = None,
    user_id: Optional[str] = None,
    tokens_used: Optional[int] = None,
    estimated_cost_usd: Optional[float] = None,
) -> None:
    """Insert one api_call_logs row. Failures are logged and never raised.

    estimated_cost_usd overrides the flat per-request estimate for token-billed calls.
    """
    if supabase is None:
        logger.debug(f"No Supabase client for API logging ({api_provider} {endpoint})")
        return
    try:
        supabase.table("api_call_logs").insert({
            "user_id": user_id,
            "api_provider": api_provider,
            "endpoint": endpoint,
            "method": method,
            "request_data": redact(request_data) if request_data else None,
            "response_status": response_status,
            "response_time_ms": response_time_ms,
            "tokens_used": tokens_used,
            "estimated_cost_usd": estimated_cost_usd if estimated_cost_usd is not None else estimate_api_cost(api_provider),
            "success": success,
            "error_message": error_message,
        }).execute()
    except Exception as e:
        logger.error(f"Failed to log API call to {api_provider}{endpoint}: {e}")
