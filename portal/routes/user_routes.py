"""Member profile and token ledger routes."""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, Response, status

from portal.auth import create_session_token, get_current_session, set_session_cookie
from portal.models.auth import SessionClaims
from portal.models.ledger import BalanceResponse, TokenAmountRequest, TokenTransactionResponse
from portal.models.member import ProfileResponse, ProfileUser
from portal.repos.member_repo import MemberRepo
from portal.services.airtable import AirtableConfigError
from portal.services.ledger import (
    InsufficientTokensError,
    InvalidAmountError,
    MemberNotFoundError,
    ledger,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["user"])
member_repo = MemberRepo()

UPSTREAM_ERRORS = (httpx.HTTPError, AirtableConfigError)


def _internal_error() -> HTTPException:
    logger.exception("Member store error")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


@router.get("/profile", status_code=200)
async def get_profile(
    response: Response,
    session: SessionClaims = Depends(get_current_session),
) -> ProfileResponse:
    """
    Fresh member record for the signed-in user.

    Re-issues the session cookie so the cached user data follows the store.
    """
    try:
        user_data = await member_repo.find_by_email(session.email)
    except UPSTREAM_ERRORS as e:
        raise _internal_error() from e

    if user_data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if user_data != session.user_data:
        set_session_cookie(response, create_session_token(session.email, user_data))

    return ProfileResponse(user=ProfileUser(email=session.email, userData=user_data))


@router.get("/tokens", status_code=200)
async def get_balance(session: SessionClaims = Depends(get_current_session)) -> BalanceResponse:
    """Current token balance."""
    try:
        user_data = await ledger.balance(session.email)
    except MemberNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from e
    except UPSTREAM_ERRORS as e:
        raise _internal_error() from e
    return BalanceResponse(user=user_data)


@router.post("/tokens/spend", status_code=200)
async def spend_tokens(
    req: TokenAmountRequest,
    session: SessionClaims = Depends(get_current_session),
) -> TokenTransactionResponse:
    """Spend tokens from the signed-in member's balance."""
    try:
        user_data, transaction = await ledger.spend(session.email, req.amount)
    except InvalidAmountError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid amount") from e
    except InsufficientTokensError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Insufficient tokens") from e
    except MemberNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from e
    except UPSTREAM_ERRORS as e:
        raise _internal_error() from e
    return TokenTransactionResponse(user=user_data, transaction=transaction)


@router.post("/tokens/add", status_code=200)
async def add_tokens(
    req: TokenAmountRequest,
    session: SessionClaims = Depends(get_current_session),
) -> TokenTransactionResponse:
    """Credit tokens to the signed-in member's balance."""
    try:
        user_data, transaction = await ledger.add(session.email, req.amount)
    except InvalidAmountError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid amount") from e
    except MemberNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from e
    except UPSTREAM_ERRORS as e:
        raise _internal_error() from e
    return TokenTransactionResponse(user=user_data, transaction=transaction)
