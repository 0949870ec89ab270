from __future__ import annotations

import hashlib
import hmac
from typing import Any, Optional

from meeting_relay.schemas.meeting import MeetingPayload
from meeting_relay.services.llm_service import SummaryError
from meeting_relay.settings import Settings


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "OPENAI_API_KEY": "sk-test",
        "SLACK_WEBHOOK_URL": "https://hooks.slack.test/services/T/B/X",
        "WEBHOOK_SECRET": "s3cret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def sign(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


class StubSummarizer:
    def __init__(self, result: str = "Stub analysis", error: Optional[str] = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[MeetingPayload] = []

    async def summarize(self, payload: MeetingPayload) -> str:
        self.calls.append(payload)
        if self.error is not None:
            raise SummaryError(self.error)
        return self.result


class StubNotifier:
    def __init__(self, ok: bool = True) -> None:
        self.ok = ok
        self.messages: list[str] = []

    async def send(self, text: str) -> bool:
        self.messages.append(text)
        return self.ok
