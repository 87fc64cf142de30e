"""Event models (Luma)."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, field_validator


class Event(BaseModel):
    """Normalised upcoming event."""

    id: str
    title: str
    start: datetime
    location: str = "TBD"
    url: str = ""

    @field_validator("start")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Start times without an offset are UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class EventsResponse(BaseModel):
    events: list[Event]
    fallback: bool = False
