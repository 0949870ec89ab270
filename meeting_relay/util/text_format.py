"""
Text formatting for the Slack notification.

Slack incoming webhooks render their own markdown flavour (*bold*, _italic_),
so everything built here uses that syntax.
"""

from __future__ import annotations

from meeting_relay.schemas.meeting import MeetingPayload

PLACEHOLDER = "N/A"
PARTICIPANT_DELIMITER = ", "


def numbered_bullets(items: list[str]) -> str:
    cleaned = [i.strip() for i in items if i and i.strip()]
    if not cleaned:
        return ""
    return "\n".join(f"{idx}. {val}" for idx, val in enumerate(cleaned, start=1))


def _or_placeholder(value: str) -> str:
    value = (value or "").strip()
    return value or PLACEHOLDER


def join_participants(participants: list[str]) -> str:
    names = [p.strip() for p in participants if p and p.strip()]
    return PARTICIPANT_DELIMITER.join(names) if names else PLACEHOLDER


def format_meeting_message(payload: MeetingPayload, analysis: str) -> str:
    """
    Build the Slack message for one meeting.

    Layout:
        *📅 Meeting Summary: <title>*
        *Date:* <date>
        *Participants:* A, B

        *Summary:*
        <summary>

        *Action Items:*
        1. ...

        *🤖 AI Analysis:*
        <analysis>
    """
    lines = [
        f"*📅 Meeting Summary: {_or_placeholder(payload.meeting_title)}*",
        f"*Date:* {_or_placeholder(payload.date)}",
        f"*Participants:* {join_participants(payload.participants)}",
        "",
        "*Summary:*",
        _or_placeholder(payload.summary),
        "",
        "*Action Items:*",
        numbered_bullets(payload.action_items) or PLACEHOLDER,
        "",
        "*🤖 AI Analysis:*",
        _or_placeholder(analysis),
    ]
    return "\n".join(lines)
