from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from meeting_relay.services.llm_service import Summarizer
from meeting_relay.services.relay_service import RelayHandler
from meeting_relay.services.slack_service import SlackNotifier
from meeting_relay.settings import Settings, get_settings

router = APIRouter()

WEBHOOK_LIVE_TEXT = "Webhook endpoint is live. Send a POST request with meeting data."


def get_relay_handler(settings: Settings = Depends(get_settings)) -> RelayHandler:
    return RelayHandler(settings, Summarizer(settings), SlackNotifier(settings))


@router.post("/webhook")
async def meeting_webhook(request: Request, handler: RelayHandler = Depends(get_relay_handler)) -> JSONResponse:
    # Raw bytes first: the signature is computed over the exact body.
    raw = await request.body()
    outcome = await handler.handle(raw, request.headers)
    return JSONResponse(status_code=outcome.status_code, content=outcome.body())


@router.get("/webhook", response_class=PlainTextResponse)
def webhook_live() -> str:
    return WEBHOOK_LIVE_TEXT
