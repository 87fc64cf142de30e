"""Authentication routes for magic link auth."""

from __future__ import annotations

import logging

import httpx
from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from portal import config
from portal.auth import (
    build_magic_link_url,
    clear_session_cookie,
    create_magic_link_token,
    create_session_token,
    set_session_cookie,
    verify_magic_link,
)
from portal.middleware.rate_limit import rate_limiter
from portal.models.auth import SendMagicLinkRequest, SendMagicLinkResponse
from portal.repos.member_repo import MemberRepo
from portal.repos.used_link_repo import used_link_repo
from portal.services.airtable import AirtableConfigError
from portal.services.email import EmailDeliveryError, email_configured, send_magic_link
from portal.signing import TOKEN_EXPIRED

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])
member_repo = MemberRepo()


def _sign_in_redirect(error: str) -> RedirectResponse:
    return RedirectResponse(url=f"/sign-in?error={error}", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/request-link", status_code=200)
async def request_magic_link(
    req: SendMagicLinkRequest,
    request: Request,
) -> SendMagicLinkResponse:
    """
    Email a magic link to the given address.

    Rate limits:
    - 5 per email per hour
    - 20 per IP per hour
    """
    email = req.email.lower()
    client_ip = request.client.host if request.client else "unknown"

    if not rate_limiter.check_rate_limit(
        f"email:{email}",
        max_requests=config.settings.MAGIC_LINK_RATE_LIMIT_PER_EMAIL,
        window_seconds=3600,
    ):
        max_links = config.settings.MAGIC_LINK_RATE_LIMIT_PER_EMAIL
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many requests. Maximum {max_links} magic links per hour.",
            headers={"Retry-After": "3600"},
        )

    if not rate_limiter.check_rate_limit(
        f"ip:{client_ip}",
        max_requests=config.settings.MAGIC_LINK_RATE_LIMIT_PER_IP,
        window_seconds=3600,
    ):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Too many requests from this IP. Maximum {config.settings.MAGIC_LINK_RATE_LIMIT_PER_IP} per hour.",
            headers={"Retry-After": "3600"},
        )

    magic_link_url = build_magic_link_url(create_magic_link_token(email))

    if not email_configured():
        if config.settings.ENVIRONMENT == "development":
            logger.warning("No email provider configured, returning magic link in response")
            return SendMagicLinkResponse(
                message="Development mode: Magic link generated but email not sent",
                dev_link=magic_link_url,
            )
        logger.error("No email provider configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send magic link",
        )

    try:
        await send_magic_link(email, magic_link_url)
    except EmailDeliveryError as e:
        logger.exception("Failed to send magic link email")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send magic link",
        ) from e

    return SendMagicLinkResponse()


@router.get("/verify")
async def verify_magic_link_endpoint(request: Request, token: str | None = None) -> RedirectResponse:
    """
    Exchange a magic link token for a session cookie.

    Redirects to /dashboard on success, otherwise to /sign-in with an error
    code: missing-token, expired, or invalid-token.
    Rate limit: 10 attempts per IP per minute.
    """
    client_ip = request.client.host if request.client else "unknown"
    if not rate_limiter.check_rate_limit(
        f"verify:{client_ip}",
        max_requests=config.settings.VERIFY_RATE_LIMIT_PER_IP,
        window_seconds=60,
    ):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many verification attempts. Please wait a moment.",
            headers={"Retry-After": "60"},
        )

    if not token:
        return _sign_in_redirect("missing-token")

    result, claims = verify_magic_link(token)
    if claims is None:
        logger.info("Magic link rejected: %s", result.reason)
        return _sign_in_redirect("expired" if result.reason == TOKEN_EXPIRED else "invalid-token")

    signature = token.rsplit(".", 1)[1]
    if not used_link_repo.mark_used(signature, claims.exp):
        logger.info("Magic link replay rejected")
        return _sign_in_redirect("invalid-token")

    try:
        user_data = await member_repo.get_or_create(claims.email)
    except (httpx.HTTPError, AirtableConfigError):
        # The cookie can be refreshed with member data later by /api/user/profile
        logger.exception("Member lookup failed during sign-in")
        user_data = None

    response = RedirectResponse(url="/dashboard", status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, create_session_token(claims.email, user_data))
    return response


@router.get("/logout")
async def logout_endpoint() -> RedirectResponse:
    """Clear the session cookie and return to the sign-in page."""
    response = RedirectResponse(url="/sign-in", status_code=status.HTTP_303_SEE_OTHER)
    clear_session_cookie(response)
    return response
