"""Event routes: upcoming Luma events and joining them with tokens."""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from portal import config
from portal.auth import get_current_session
from portal.models.auth import SessionClaims
from portal.models.event import EventsResponse
from portal.models.ledger import JoinEventResponse
from portal.services.airtable import AirtableConfigError
from portal.services.events import events_service
from portal.services.ledger import InsufficientTokensError, MemberNotFoundError, ledger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/events", tags=["events"])


@router.get("", status_code=200)
async def list_events(session: SessionClaims = Depends(get_current_session)) -> EventsResponse:
    """Upcoming events, soonest first. ``fallback`` is set when Luma was unreachable."""
    events, fallback = await events_service.upcoming_events()
    return EventsResponse(events=events, fallback=fallback)


@router.post("/{event_id}/join", status_code=200)
async def join_event(
    event_id: str,
    session: SessionClaims = Depends(get_current_session),
) -> JoinEventResponse:
    """
    Join an event by spending EVENT_JOIN_COST tokens.

    Registration with Luma itself happens through the event URL.
    """
    try:
        user_data, transaction = await ledger.spend(session.email, config.settings.EVENT_JOIN_COST)
    except InsufficientTokensError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Insufficient tokens") from e
    except MemberNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from e
    except (httpx.HTTPError, AirtableConfigError) as e:
        logger.exception("Failed to spend tokens for event %s", event_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to join event",
        ) from e

    logger.info("Member %s joined event %s", user_data.id, event_id)
    return JoinEventResponse(eventId=event_id, user=user_data, transaction=transaction)
