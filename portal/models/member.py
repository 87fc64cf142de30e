"""Member models. A member is a row in the Airtable members table."""

from __future__ import annotations

from pydantic import BaseModel


class UserData(BaseModel):
    """Member identity and token balance, cached inside the session cookie."""

    id: str
    email: str
    full_name: str | None = None
    tokens: int = 0
    image: str | None = None


class ProfileUser(BaseModel):
    """Authenticated email plus the freshest member record."""

    email: str
    userData: UserData


class ProfileResponse(BaseModel):
    """What GET /api/user/profile returns."""

    success: bool = True
    user: ProfileUser
