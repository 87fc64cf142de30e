"""
Authentication for the Net&Connect portal.

Magic link issuance, session cookie issuance, and the FastAPI dependency
that authenticates requests from the session cookie.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated
from urllib.parse import urlencode

from fastapi import Cookie, HTTPException, Response, status
from pydantic import ValidationError

from portal import config
from portal.models.auth import MagicLinkClaims, SessionClaims
from portal.models.member import UserData
from portal.signing import INVALID_TOKEN, TokenSigner, VerifyResult

signer = TokenSigner(config.settings.SESSION_SECRET)

MAGIC_LINK_TYP = "magic"


def magic_link_ttl() -> timedelta:
    return timedelta(minutes=config.settings.MAGIC_LINK_EXPIRY_MINUTES)


def session_ttl() -> timedelta:
    return timedelta(hours=config.settings.SESSION_EXPIRY_HOURS)


def create_magic_link_token(email: str) -> str:
    """
    Create a short-lived magic link token.

    Args:
        email: Email address the link signs in

    Returns:
        Signed token string
    """
    return signer.issue({"email": email, "typ": MAGIC_LINK_TYP}, magic_link_ttl())


def build_magic_link_url(token: str) -> str:
    """Absolute URL of the verify endpoint carrying the token."""
    return f"{config.settings.APP_URL}/api/auth/verify?{urlencode({'token': token})}"


def verify_magic_link(token: str) -> tuple[VerifyResult, MagicLinkClaims | None]:
    """
    Verify a magic link token.

    Returns:
        The raw verification result and, when valid, the typed claims.
        A signed payload that does not match the magic-link claim shape is
        reported as invalid.
    """
    result = signer.verify(token)
    if not result.valid:
        return result, None
    try:
        claims = MagicLinkClaims.model_validate(result.claims)
    except ValidationError:
        return VerifyResult.fail(INVALID_TOKEN), None
    return result, claims


def create_session_token(email: str, user_data: UserData | None = None) -> str:
    """
    Create a session token for the auth cookie.

    Args:
        email: Authenticated email address
        user_data: Optional member record to cache in the cookie

    Returns:
        Signed token string
    """
    claims = SessionClaims(email=email, exp=0, user_data=user_data).to_claims()
    return signer.issue(claims, session_ttl())


def read_session(token: str) -> SessionClaims | None:
    """
    Decode a session token.

    Returns:
        SessionClaims if the token is authentic, live and well shaped, None otherwise
    """
    result = signer.verify(token)
    if not result.valid:
        return None
    try:
        return SessionClaims.model_validate(result.claims)
    except ValidationError:
        return None


def set_session_cookie(response: Response, token: str) -> None:
    """Attach the session cookie to a response."""
    response.set_cookie(
        key=config.settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=config.settings.COOKIE_SECURE,
        samesite="lax",
        max_age=config.settings.SESSION_EXPIRY_HOURS * 3600,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    """Expire the session cookie immediately."""
    response.set_cookie(
        key=config.settings.SESSION_COOKIE_NAME,
        value="",
        httponly=True,
        secure=config.settings.COOKIE_SECURE,
        samesite="lax",
        max_age=0,
        path="/",
    )


async def get_current_session(
    session_cookie: Annotated[str | None, Cookie(alias=config.settings.SESSION_COOKIE_NAME)] = None,
) -> SessionClaims:
    """
    FastAPI dependency to get the current session from the auth cookie.

    Raises:
        HTTPException: 401 if the cookie is missing, forged, expired or malformed
    """
    if not session_cookie:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    session = read_session(session_cookie)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication",
        )

    return session
