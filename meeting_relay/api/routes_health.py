from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()

ROOT_TEXT = "Meeting relay service is running."


@router.get("/", response_class=PlainTextResponse)
def root() -> str:
    return ROOT_TEXT


@router.get("/health")
def health() -> dict:
    return {"ok": True}
