"""
Relay pipeline: authenticate -> validate -> summarize -> format -> notify.

Each step looks at the per-request RelayContext and either returns None
(carry on) or a RelayOutcome that ends the request. Nothing here is shared
between requests except the read-only settings and the two clients.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol

from pydantic import ValidationError

from meeting_relay.schemas.meeting import MeetingPayload, RelayResult
from meeting_relay.services.llm_service import SummaryError
from meeting_relay.settings import Settings
from meeting_relay.util.security import verify_hmac_signature
from meeting_relay.util.text_format import format_meeting_message

logger = logging.getLogger(__name__)

INVALID_SIGNATURE = "Invalid signature"
NOTIFY_FAILED = "Failed to send notification to Slack"
RELAYED = "Meeting summary relayed to Slack"


class SummarizerClient(Protocol):
    async def summarize(self, payload: MeetingPayload) -> str: ...


class NotifierClient(Protocol):
    async def send(self, text: str) -> bool: ...


class MeetingValidationError(Exception):
    pass


@dataclass(frozen=True)
class RelayOutcome:
    status_code: int
    result: RelayResult

    def body(self) -> dict[str, Any]:
        return self.result.model_dump(exclude_none=True)


@dataclass
class RelayContext:
    raw_body: bytes
    headers: Mapping[str, str]
    payload: Optional[MeetingPayload] = None
    analysis: str = ""
    message: str = ""
    steps_done: list[str] = field(default_factory=list)


Step = Callable[[RelayContext], Awaitable[Optional[RelayOutcome]]]


def parse_meeting_payload(raw_body: bytes) -> MeetingPayload:
    try:
        data = json.loads(raw_body.decode("utf-8") if raw_body else "{}")
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MeetingValidationError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MeetingValidationError("Payload must be a JSON object")

    try:
        payload = MeetingPayload.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise MeetingValidationError(f"Invalid meeting payload fields: {fields}") from e

    if not payload.meeting_title.strip():
        raise MeetingValidationError("Missing required field: meetingTitle")
    return payload


def _fail(status_code: int, error: str) -> RelayOutcome:
    return RelayOutcome(status_code=status_code, result=RelayResult(success=False, error=error))


def _require_payload(ctx: RelayContext) -> MeetingPayload:
    if ctx.payload is None:
        raise RuntimeError("Relay step ran before the payload was validated")
    return ctx.payload


class RelayHandler:
    def __init__(self, settings: Settings, summarizer: SummarizerClient, notifier: NotifierClient) -> None:
        self._secret = settings.WEBHOOK_SECRET
        self._require_signature = settings.REQUIRE_SIGNATURE
        self._signature_headers = settings.signature_headers()
        self._failure_mode = settings.SUMMARY_FAILURE_MODE
        self._summarizer = summarizer
        self._notifier = notifier
        self._steps: list[tuple[str, Step]] = [
            ("authenticated", self._authenticate),
            ("validated", self._validate),
            ("summarized", self._summarize),
            ("formatted", self._format),
            ("notified", self._notify),
        ]

    async def handle(self, raw_body: bytes, headers: Mapping[str, str]) -> RelayOutcome:
        ctx = RelayContext(raw_body=raw_body, headers=headers)
        try:
            for name, step in self._steps:
                outcome = await step(ctx)
                if outcome is not None:
                    logger.info("Relay stopped after %s. status=%d", ctx.steps_done or ["received"], outcome.status_code)
                    return outcome
                ctx.steps_done.append(name)
        except Exception as e:  # noqa: BLE001
            logger.exception("Relay failed with an unexpected error after %s", ctx.steps_done or ["received"])
            return _fail(500, str(e) or e.__class__.__name__)

        return RelayOutcome(status_code=200, result=RelayResult(success=True, message=RELAYED))

    def _signature_header(self, headers: Mapping[str, str]) -> Optional[str]:
        for name in self._signature_headers:
            value = headers.get(name)
            if value:
                return value
        return None

    async def _authenticate(self, ctx: RelayContext) -> Optional[RelayOutcome]:
        check = verify_hmac_signature(
            secret=self._secret,
            header_value=self._signature_header(ctx.headers),
            raw_body=ctx.raw_body,
            require_signature=self._require_signature,
        )
        if not check.ok:
            logger.warning("🔒 Rejected webhook: %s", check.reason)
            return _fail(401, INVALID_SIGNATURE)
        if check.reason:
            logger.info("Webhook accepted without signature check: %s", check.reason)
        return None

    async def _validate(self, ctx: RelayContext) -> Optional[RelayOutcome]:
        try:
            ctx.payload = parse_meeting_payload(ctx.raw_body)
        except MeetingValidationError as e:
            logger.warning("Rejected webhook payload: %s", e)
            return _fail(400, str(e))
        logger.info("📥 Meeting received. title=%s participants=%d", ctx.payload.meeting_title, len(ctx.payload.participants))
        return None

    async def _summarize(self, ctx: RelayContext) -> Optional[RelayOutcome]:
        payload = _require_payload(ctx)
        try:
            ctx.analysis = await self._summarizer.summarize(payload)
        except SummaryError as e:
            logger.error("❌ Meeting analysis failed: %s", e)
            if self._failure_mode == "error":
                return _fail(500, f"Summarization failed: {e}")
            ctx.analysis = f"Analysis failed: {e}"
        return None

    async def _format(self, ctx: RelayContext) -> Optional[RelayOutcome]:
        payload = _require_payload(ctx)
        ctx.message = format_meeting_message(payload, ctx.analysis)
        return None

    async def _notify(self, ctx: RelayContext) -> Optional[RelayOutcome]:
        if not await self._notifier.send(ctx.message):
            return _fail(200, NOTIFY_FAILED)
        return None
