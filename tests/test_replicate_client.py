"""
Replicate prediction creation and polling, driven by httpx.MockTransport.
"""

import json

import httpx
import pytest

from app.modules.matching.replicate_client import (
    ReplicateClient,
    extract_embedding,
    STATUS_SUCCEEDED,
    STATUS_FAILED,
    STATUS_TIMEOUT,
)
from tests.fakes import FakeSupabase


def replicate_transport(poll_statuses, output=None, create_status=201):
    """Create answers "starting"; each poll answers the next status in poll_statuses."""
    seen = {"create": [], "polls": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path.endswith("/predictions"):
            seen["create"].append(json.loads(request.content))
            if create_status >= 400:
                return httpx.Response(create_status, json={"detail": "Invalid token"})
            return httpx.Response(create_status, json={"id": "pred-1", "status": "starting"})
        seen["polls"] += 1
        status = poll_statuses[min(seen["polls"], len(poll_statuses)) - 1]
        body = {"id": "pred-1", "status": status}
        if status == "succeeded":
            body["output"] = output
        if status == "failed":
            body["error"] = "CUDA out of memory"
        return httpx.Response(200, json=body)

    return httpx.MockTransport(handler), seen


def make_client(transport, max_attempts=30, supabase=None, token="r8_test"):
    return ReplicateClient(
        api_token=token,
        poll_interval=0,
        max_attempts=max_attempts,
        supabase=supabase,
        transport=transport,
    )


class TestExtractEmbedding:

    def test_clip_features_output(self):
        assert extract_embedding([{"input": "x", "embedding": [0.1, 0.2]}]) == [0.1, 0.2]

    def test_bare_vector(self):
        assert extract_embedding([0.1, 0.2]) == [0.1, 0.2]

    def test_dict_output(self):
        assert extract_embedding({"embedding": [1.0]}) == [1.0]

    def test_unknown_output(self):
        assert extract_embedding(None) is None
        assert extract_embedding([]) is None


@pytest.mark.asyncio
async def test_polls_until_succeeded():
    transport, seen = replicate_transport(
        ["processing", "processing", "succeeded"],
        output=[{"input": "img", "embedding": [0.1, 0.2, 0.3]}],
    )
    result = await make_client(transport).embed_image("data:image/jpeg;base64,AAAA")

    assert result.status == STATUS_SUCCEEDED
    assert result.ok
    assert result.embedding == [0.1, 0.2, 0.3]
    assert result.attempts == 3
    assert seen["polls"] == 3
    assert seen["create"][0]["input"] == {"inputs": "data:image/jpeg;base64,AAAA"}


@pytest.mark.asyncio
async def test_stops_on_failed():
    transport, seen = replicate_transport(["processing", "failed", "succeeded"])
    result = await make_client(transport).embed_image("https://example.com/badge.jpg")

    assert result.status == STATUS_FAILED
    assert not result.ok
    assert "CUDA" in result.error
    assert seen["polls"] == 2


@pytest.mark.asyncio
async def test_reports_timeout_after_cap():
    transport, seen = replicate_transport(["processing"])
    result = await make_client(transport, max_attempts=4).embed_image("https://example.com/badge.jpg")

    assert result.status == STATUS_TIMEOUT
    assert result.attempts == 4
    assert seen["polls"] == 4


@pytest.mark.asyncio
async def test_create_error_is_a_failed_result():
    transport, _ = replicate_transport([], create_status=401)
    result = await make_client(transport).embed_image("https://example.com/badge.jpg")

    assert result.status == STATUS_FAILED
    assert "401" in result.error


@pytest.mark.asyncio
async def test_missing_token_never_calls_replicate():
    transport, seen = replicate_transport(["succeeded"])
    result = await make_client(transport, token=None).embed_image("https://example.com/badge.jpg")

    assert result.status == STATUS_FAILED
    assert result.error == "REPLICATE_API_TOKEN not configured"
    assert seen["create"] == []


@pytest.mark.asyncio
async def test_prediction_create_is_logged_without_token():
    db = FakeSupabase()
    transport, _ = replicate_transport(["succeeded"], output=[{"embedding": [1.0]}])
    await make_client(transport, supabase=db).embed_image("https://example.com/badge.jpg")

    logs = db.rows("api_call_logs")
    assert len(logs) == 1
    assert logs[0]["api_provider"] == "replicate"
    assert logs[0]["endpoint"] == "/predictions"
    assert logs[0]["success"] is True
    assert "r8_test" not in json.dumps(logs[0])


def scripted_transport(create_response, poll_response=None):
    """Create answers create_response; every poll answers poll_response."""
    seen = {"polls": []}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return create_response
        seen["polls"].append(request.url.path)
        return poll_response

    return httpx.MockTransport(handler), seen


@pytest.mark.asyncio
async def test_non_json_create_reply_is_a_failed_result():
    transport, seen = scripted_transport(httpx.Response(201, text="<html>gateway</html>"))
    result = await make_client(transport).embed_image("data:image/jpeg;base64,AAAA")

    assert result.status == STATUS_FAILED
    assert "invalid JSON" in result.error
    assert seen["polls"] == []


@pytest.mark.asyncio
async def test_non_json_poll_reply_is_a_failed_result():
    transport, _ = scripted_transport(
        httpx.Response(201, json={"id": "pred-1", "status": "starting"}),
        httpx.Response(200, text="upstream hiccup"),
    )
    result = await make_client(transport).embed_image("data:image/jpeg;base64,AAAA")

    assert result.status == STATUS_FAILED
    assert "invalid JSON" in result.error


@pytest.mark.asyncio
async def test_prediction_without_id_is_not_polled():
    transport, seen = scripted_transport(httpx.Response(201, json={"status": "starting"}))
    result = await make_client(transport).embed_image("data:image/jpeg;base64,AAAA")

    assert result.status == STATUS_FAILED
    assert result.error == "Prediction created without an id"
    assert seen["polls"] == []
