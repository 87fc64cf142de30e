"""HTTP client for the Luma events feed."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import ValidationError

from portal import config
from portal.models.event import Event

logger = logging.getLogger(__name__)

FALLBACK_EVENTS = [
    Event(
        id="e1",
        title="Afterwork business",
        start=datetime(2025, 10, 9, 18, 0, tzinfo=UTC),
        location="Boulogne, Paris",
        url="https://lu.ma/afterwork-business-09",
    ),
    Event(
        id="e2",
        title="Afterwork business",
        start=datetime(2025, 10, 16, 18, 0, tzinfo=UTC),
        location="Boulogne, Paris",
        url="https://lu.ma/afterwork-business-16",
    ),
    Event(
        id="e3",
        title="Afterwork business",
        start=datetime(2025, 10, 23, 18, 0, tzinfo=UTC),
        location="Boulogne, Paris",
        url="https://lu.ma/afterwork-business-23",
    ),
]


class EventsConfigError(RuntimeError):
    """Raised when LUMA_EVENTS_URL is not configured."""


def normalize_event(entry: dict[str, Any]) -> Event:
    """
    Convert a Luma entry to an Event.

    Location is the venue name, then its address, then "TBD".
    """
    location = entry.get("location") or {}
    return Event(
        id=entry["id"],
        title=entry.get("title") or "",
        start=entry["start_at"],
        location=location.get("name") or location.get("address") or "TBD",
        url=entry.get("url") or "",
    )


def upcoming(events: list[Event], now: datetime) -> list[Event]:
    """Drop events that already started and sort the rest by start time."""
    return sorted((event for event in events if event.start >= now), key=lambda event: event.start)


class EventsService:
    """Reads upcoming events from Luma."""

    def __init__(self, events_url: str | None = None, api_key: str | None = None) -> None:
        self._events_url = config.settings.LUMA_EVENTS_URL if events_url is None else events_url
        self._api_key = config.settings.LUMA_API_KEY if api_key is None else api_key

    async def fetch_events(self) -> list[Event]:
        """
        Fetch and normalise every entry of the Luma feed.

        Raises:
            EventsConfigError: If no feed URL is configured
            httpx.HTTPError: If Luma is unreachable or returns an error
        """
        if not self._events_url:
            raise EventsConfigError("LUMA_EVENTS_URL not configured")

        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(self._events_url, headers=headers)
            response.raise_for_status()
            data = response.json()

        return [normalize_event(entry) for entry in data.get("entries", [])]

    async def upcoming_events(self, now: datetime | None = None) -> tuple[list[Event], bool]:
        """
        Upcoming events, soonest first.

        Returns:
            The events and whether they are fallback sample data
        """
        now = now or datetime.now(UTC)
        try:
            return upcoming(await self.fetch_events(), now), False
        except (httpx.HTTPError, EventsConfigError, KeyError, TypeError, ValidationError):
            logger.exception("Luma fetch error")
            return upcoming(FALLBACK_EVENTS, now), True


events_service = EventsService()
