"""Claim sets carried by signed tokens, and auth request/response bodies."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from portal.models.member import UserData


class MagicLinkClaims(BaseModel):
    """Claims inside a magic-link token: ``{email, typ: "magic", exp}``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    email: str
    typ: Literal["magic"]
    exp: int


class SessionClaims(BaseModel):
    """
    Claims inside the session cookie: ``{email, exp, userData?}``.

    Unknown keys are rejected, so a magic-link token never reads as a session.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    email: str
    exp: int
    user_data: UserData | None = Field(default=None, alias="userData")

    def to_claims(self) -> dict[str, Any]:
        """Wire-format claims without ``exp`` (the signer adds it)."""
        return self.model_dump(by_alias=True, exclude={"exp"}, exclude_none=True)


class SendMagicLinkRequest(BaseModel):
    """Request to send a magic link."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr


class SendMagicLinkResponse(BaseModel):
    """Response after requesting a magic link."""

    ok: bool = True
    message: str = "Magic link sent successfully"
    dev_link: str | None = None
