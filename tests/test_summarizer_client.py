from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from meeting_relay.schemas.meeting import MeetingPayload
from meeting_relay.services.llm_service import SYSTEM_PROMPT, Summarizer, SummaryError, build_messages
from tests.util_stubs import make_settings

PAYLOAD = MeetingPayload.model_validate(
    {
        "meetingTitle": "Sync",
        "date": "2024-01-01",
        "participants": ["A", "B"],
        "summary": "discussed X",
        "actionItems": ["do Y"],
    }
)


def _completion(content: str) -> dict:
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


def test_build_messages_has_system_and_serialized_payload():
    messages = build_messages(PAYLOAD)
    assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert messages[1]["role"] == "user"
    data = json.loads(messages[1]["content"].split("\n", 1)[1])
    assert data["meetingTitle"] == "Sync"
    assert data["actionItems"] == ["do Y"]


def test_summarize_posts_model_and_messages_with_bearer_token():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_completion("  Decisions: ship it.  "))

    settings = make_settings(OPENAI_MODEL="gpt-test", OPENAI_API_URL="https://llm.test/v1/chat/completions")
    client = Summarizer(settings, transport=httpx.MockTransport(handler))

    result = asyncio.run(client.summarize(PAYLOAD))

    assert result == "Decisions: ship it."
    assert len(seen) == 1
    req = seen[0]
    assert str(req.url) == "https://llm.test/v1/chat/completions"
    assert req.headers["Authorization"] == "Bearer sk-test"
    body = json.loads(req.content)
    assert body["model"] == "gpt-test"
    assert [m["role"] for m in body["messages"]] == ["system", "user"]


def test_summarize_non_success_status_raises_summary_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(429, text="rate limited"))
    client = Summarizer(make_settings(), transport=transport)

    with pytest.raises(SummaryError, match="LLM HTTP 429"):
        asyncio.run(client.summarize(PAYLOAD))


def test_summarize_network_error_raises_summary_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = Summarizer(make_settings(), transport=httpx.MockTransport(handler))

    with pytest.raises(SummaryError, match="connection refused"):
        asyncio.run(client.summarize(PAYLOAD))


def test_summarize_timeout_raises_summary_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = Summarizer(make_settings(OUTBOUND_TIMEOUT_SECONDS=5), transport=httpx.MockTransport(handler))

    with pytest.raises(SummaryError, match="timed out after 5.0s"):
        asyncio.run(client.summarize(PAYLOAD))


def test_summarize_unexpected_shape_raises_summary_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"id": "x", "choices": []}))
    client = Summarizer(make_settings(), transport=transport)

    with pytest.raises(SummaryError, match="Unexpected LLM response shape"):
        asyncio.run(client.summarize(PAYLOAD))


def test_summarize_invalid_json_raises_summary_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>oops</html>"))
    client = Summarizer(make_settings(), transport=transport)

    with pytest.raises(SummaryError, match="not valid JSON"):
        asyncio.run(client.summarize(PAYLOAD))


def test_summarize_without_api_key_makes_no_request():
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=_completion("x"))

    client = Summarizer(make_settings(OPENAI_API_KEY=""), transport=httpx.MockTransport(handler))

    with pytest.raises(SummaryError, match="OPENAI_API_KEY not configured"):
        asyncio.run(client.summarize(PAYLOAD))
    assert calls == []


def test_summarize_bounds_the_whole_call():
    async def slow_handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(2)
        return httpx.Response(200, json=_completion("too late"))

    client = Summarizer(make_settings(OUTBOUND_TIMEOUT_SECONDS=0.05), transport=httpx.MockTransport(slow_handler))

    with pytest.raises(SummaryError, match="timed out after 0.05s"):
        asyncio.run(client.summarize(PAYLOAD))
