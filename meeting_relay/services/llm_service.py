from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Optional

import httpx

from meeting_relay.schemas.meeting import MeetingPayload
from meeting_relay.settings import Settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an assistant that reviews meeting notes for a busy team. "
    "Given the meeting data as JSON, write a short analysis for a Slack channel: "
    "### INSTRUCTIONS: "
    "- Start with a 2-3 sentence overview of what the meeting was about "
    "- List the key decisions that were made "
    "- Restate the action items, with an owner where one is named "
    "- Call out open questions, risks or blockers if any "
    "- Use ONLY information present in the meeting data; do NOT invent facts "
    "- Keep it concise and use plain text or simple bullet points"
)


class LLMError(Exception):
    pass


class SummaryError(LLMError):
    """The analysis could not be produced. The message is the reason."""


def build_messages(payload: MeetingPayload) -> list[dict[str, str]]:
    user = "Meeting data:\n" + json.dumps(payload.to_prompt_dict(), indent=2, ensure_ascii=False)
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


def _extract_content(body: Any) -> str:
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise SummaryError(f"Unexpected LLM response shape: {_truncate(json.dumps(body, default=str))}") from e
    if not isinstance(content, str) or not content.strip():
        raise SummaryError("LLM returned empty content")
    return content.strip()


def _truncate(s: str, limit: int = 500) -> str:
    s = s.strip()
    return s if len(s) <= limit else s[:limit] + "...(truncated)"


class Summarizer:
    """Chat-completions client that turns a MeetingPayload into prose."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._api_key = settings.OPENAI_API_KEY
        self._model = settings.OPENAI_MODEL
        self._url = settings.OPENAI_API_URL
        self._timeout = settings.OUTBOUND_TIMEOUT_SECONDS
        self._transport = transport

    async def summarize(self, payload: MeetingPayload) -> str:
        if not self._api_key:
            raise SummaryError("OPENAI_API_KEY not configured")

        request_body = {"model": self._model, "messages": build_messages(payload)}
        headers = {"Authorization": f"Bearer {self._api_key}"}

        logger.info("🤖 Calling LLM API. model=%s title=%s", self._model, payload.meeting_title)
        start_time = time.time()

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                # httpx timeouts apply per connect/read/write; wait_for bounds the whole call.
                resp = await asyncio.wait_for(client.post(self._url, json=request_body, headers=headers), self._timeout)
                resp.raise_for_status()
                body = resp.json()
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise SummaryError(f"LLM request timed out after {self._timeout}s") from e
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            raise SummaryError(f"LLM HTTP {code}: {_truncate(e.response.text)}") from e
        except httpx.HTTPError as e:
            raise SummaryError(f"LLM request failed: {e}") from e
        except ValueError as e:
            raise SummaryError(f"LLM response was not valid JSON: {e}") from e
        except Exception as e:  # noqa: BLE001
            raise SummaryError(f"LLM request failed: {e}") from e

        result = _extract_content(body)
        logger.info("✅ LLM response received. elapsed=%.2fs response_len=%d", time.time() - start_time, len(result))
        logger.debug("LLM analysis: %s", _truncate(result, 1000))
        return result
