"""Tests for the Luma events service."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from portal.services.events import EventsService, normalize_event

pytestmark = pytest.mark.asyncio(loop_scope="session")

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

ENTRIES = [
    {
        "id": "evt-late",
        "title": "Dîner",
        "start_at": "2026-04-01T19:00:00.000Z",
        "location": {"address": "12 rue de Paris"},
        "url": "https://lu.ma/diner",
    },
    {
        "id": "evt-past",
        "title": "Past",
        "start_at": "2026-01-01T19:00:00.000Z",
        "location": {"name": "Boulogne"},
        "url": "https://lu.ma/past",
    },
    {
        "id": "evt-soon",
        "title": "Afterwork",
        "start_at": "2026-03-02T18:00:00.000Z",
        "location": {"name": "Boulogne", "address": "1 avenue"},
        "url": "https://lu.ma/afterwork",
    },
]


def _mock_client(mock_client_cls, get: AsyncMock) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    mock_client.get = get
    mock_client_cls.return_value = mock_client
    return mock_client


async def test_normalize_location_fallbacks():
    assert normalize_event(ENTRIES[0]).location == "12 rue de Paris"
    assert normalize_event(ENTRIES[2]).location == "Boulogne"
    assert normalize_event({"id": "x", "start_at": "2026-03-02T18:00:00Z"}).location == "TBD"


async def test_upcoming_events_filters_and_sorts():
    service = EventsService(events_url="https://api.lu.ma/events", api_key="luma-key")
    response = MagicMock()
    response.json.return_value = {"entries": ENTRIES}
    response.raise_for_status = MagicMock()

    with patch("httpx.AsyncClient") as mock_client_cls:
        mock_client = _mock_client(mock_client_cls, AsyncMock(return_value=response))
        events, fallback = await service.upcoming_events(now=NOW)

    assert fallback is False
    assert [e.id for e in events] == ["evt-soon", "evt-late"]
    assert mock_client.get.await_args.kwargs["headers"]["Authorization"] == "Bearer luma-key"


async def test_no_api_key_sends_no_authorization():
    service = EventsService(events_url="https://api.lu.ma/events", api_key="")
    response = MagicMock()
    response.json.return_value = {"entries": []}
    response.raise_for_status = MagicMock()

    with patch("httpx.AsyncClient") as mock_client_cls:
        mock_client = _mock_client(mock_client_cls, AsyncMock(return_value=response))
        events, fallback = await service.upcoming_events(now=NOW)

    assert events == []
    assert fallback is False
    assert "Authorization" not in mock_client.get.await_args.kwargs["headers"]


async def test_fallback_when_luma_down():
    service = EventsService(events_url="https://api.lu.ma/events", api_key="")

    with patch("httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, AsyncMock(side_effect=httpx.ConnectError("down")))
        events, fallback = await service.upcoming_events(now=datetime(2025, 10, 10, tzinfo=UTC))

    assert fallback is True
    assert [e.id for e in events] == ["e2", "e3"]


async def test_fallback_when_unconfigured():
    events, fallback = await EventsService(events_url="", api_key="").upcoming_events(now=NOW)

    assert fallback is True
    assert events == []


async def test_start_without_offset_is_utc():
    event = normalize_event({"id": "x", "start_at": "2027-01-01T18:00:00"})

    assert event.start == datetime(2027, 1, 1, 18, 0, tzinfo=UTC)


async def test_upcoming_with_naive_start_at():
    service = EventsService(events_url="https://api.lu.ma/events", api_key="")
    entries = [
        {"id": "evt-naive", "title": "Gala", "start_at": "2027-01-01T18:00:00"},
        {"id": "evt-old", "title": "Old", "start_at": "2026-01-01T18:00:00"},
        ENTRIES[2],
    ]
    response = MagicMock()
    response.json.return_value = {"entries": entries}
    response.raise_for_status = MagicMock()

    with patch("httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, AsyncMock(return_value=response))
        events, fallback = await service.upcoming_events(now=NOW)

    assert fallback is False
    assert [e.id for e in events] == ["evt-soon", "evt-naive"]
