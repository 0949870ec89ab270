from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _to_text(v: Any) -> str:
    # Participant objects like {"name": "A", "email": ...} keep just the name.
    if isinstance(v, dict) and v.get("name") is not None:
        return str(v["name"])
    return str(v)


class MeetingPayload(BaseModel):
    """
    Inbound meeting data. Every field is optional at parse time.

    Scalars of any JSON type are accepted and rendered with str(); null list
    entries are dropped. Only a non-list participants/actionItems is rejected.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    meeting_title: str = Field(default="", validation_alias=AliasChoices("meetingTitle", "title"))
    date: str = Field(default="")
    participants: list[str] = Field(default_factory=list)
    summary: str = Field(default="")
    action_items: list[str] = Field(default_factory=list, validation_alias=AliasChoices("actionItems", "action_items"))

    @field_validator("meeting_title", "date", "summary", mode="before")
    @classmethod
    def _coerce_str(cls, v: Any) -> Any:
        if v is None:
            return ""
        return v if isinstance(v, str) else _to_text(v)

    @field_validator("participants", "action_items", mode="before")
    @classmethod
    def _coerce_list(cls, v: Any) -> Any:
        if v is None:
            return []
        if not isinstance(v, list):
            return v
        return [item if isinstance(item, str) else _to_text(item) for item in v if item is not None]

    def to_prompt_dict(self) -> dict[str, Any]:
        # Keeps the wire names the sender used.
        return {
            "meetingTitle": self.meeting_title,
            "date": self.date,
            "participants": self.participants,
            "summary": self.summary,
            "actionItems": self.action_items,
        }


class RelayResult(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
