import json

import httpx
import pytest

from core.errors import CollaboratorError
from push.client import PushClient


def _client(handler):
    return PushClient("http://push.test/", "svc", timeout=1.0, transport=httpx.MockTransport(handler))

@pytest.mark.asyncio
async def test_send_posts_notification():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"sent": 3})

    result = await _client(handler).send("u1", "t", "b", {"route": "/dashboard"})
    assert result.sent == 3
    assert result.errors == []
    assert str(seen[0].url) == "http://push.test/functions/v1/push-send"
    assert json.loads(seen[0].content) == {"userId": "u1", "title": "t", "body": "b", "data": {"route": "/dashboard"}}

@pytest.mark.asyncio
async def test_missing_sent_count_reads_as_zero():
    result = await _client(lambda r: httpx.Response(200, json={})).send("u1", "t", "b", {})
    assert result.sent == 0

@pytest.mark.asyncio
async def test_unreachable_collaborator():
    def handler(request):
        raise httpx.ConnectError("refused")

    with pytest.raises(CollaboratorError, match="unreachable"):
        await _client(handler).send("u1", "t", "b", {})

@pytest.mark.asyncio
async def test_non_json_reply():
    with pytest.raises(CollaboratorError, match="non-JSON"):
        await _client(lambda r: httpx.Response(200, text="ok")).send("u1", "t", "b", {})

@pytest.mark.asyncio
async def test_single_string_error_is_one_entry():
    reply = lambda r: httpx.Response(200, json={"sent": 1, "errors": "boom"})
    result = await _client(reply).send("u1", "t", "b", {})
    assert result.errors == ["boom"]

@pytest.mark.asyncio
async def test_error_objects_reduced_to_messages():
    reply = lambda r: httpx.Response(200, json={
        "sent": 2,
        "errors": [{"endpoint": "https://fcm.example/x", "error": "gone"}, {"code": 410}],
    })
    result = await _client(reply).send("u1", "t", "b", {})
    assert result.errors == ["gone", "{'code': 410}"]

@pytest.mark.asyncio
async def test_single_error_object_is_one_entry():
    reply = lambda r: httpx.Response(200, json={"sent": 1, "errors": {"message": "expired"}})
    result = await _client(reply).send("u1", "t", "b", {})
    assert result.errors == ["expired"]

@pytest.mark.asyncio
async def test_nothing_sent_with_errors_is_a_failure():
    reply = lambda r: httpx.Response(200, json={"sent": 0, "errors": ["gone", "gone"]})
    with pytest.raises(CollaboratorError, match="gone"):
        await _client(reply).send("u1", "t", "b", {})
