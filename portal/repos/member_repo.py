"""Repository for member records stored in Airtable."""

from __future__ import annotations

from typing import Any

from portal import config
from portal.models.member import UserData
from portal.services.airtable import AirtableClient, airtable, escape_formula_string

FIELD_EMAIL = "Email"
FIELD_FULL_NAME = "Nom complet"
FIELD_TOKENS = "Tokens restants"
FIELD_IMAGE = "Image"


def coerce_tokens(value: Any) -> int:
    """Airtable number fields may come back as floats, strings or be missing."""
    if isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _record_to_user_data(record: dict[str, Any], fallback_email: str = "") -> UserData:
    """Convert an Airtable member record to UserData."""
    fields = record.get("fields", {})
    return UserData(
        id=record["id"],
        email=fields.get(FIELD_EMAIL) or fallback_email,
        full_name=fields.get(FIELD_FULL_NAME) or "",
        tokens=coerce_tokens(fields.get(FIELD_TOKENS)),
        image=fields.get(FIELD_IMAGE) or "",
    )


class MemberRepo:
    """All member-related Airtable operations."""

    def __init__(self, client: AirtableClient | None = None) -> None:
        self._client = client or airtable

    @property
    def table(self) -> str:
        return config.settings.AIRTABLE_MEMBERS_TABLE

    async def find_by_email(self, email: str) -> UserData | None:
        """
        Find a member by email address.

        Args:
            email: Email address to look up

        Returns:
            UserData if found, None otherwise
        """
        formula = f'{{{FIELD_EMAIL}}} = "{escape_formula_string(email)}"'
        record = await self._client.find_first(self.table, formula)
        return _record_to_user_data(record) if record else None

    async def create(
        self,
        email: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> UserData:
        """
        Create a member with the default token allowance.

        The full name falls back to the local part of the email.
        """
        full_name = f"{first_name or ''} {last_name or ''}".strip() or email.split("@")[0]
        record = await self._client.create_record(
            self.table,
            {
                FIELD_EMAIL: email,
                FIELD_FULL_NAME: full_name,
                FIELD_TOKENS: config.settings.DEFAULT_MEMBER_TOKENS,
            },
        )
        return _record_to_user_data(record, fallback_email=email)

    async def update_tokens(self, record_id: str, amount: int) -> UserData:
        """
        Overwrite a member's token balance.

        Args:
            record_id: Airtable record id
            amount: New balance

        Returns:
            Updated UserData
        """
        record = await self._client.update_record(self.table, record_id, {FIELD_TOKENS: amount})
        return _record_to_user_data(record)

    async def get_or_create(self, email: str) -> UserData:
        """Find a member by email, creating one on first sign-in."""
        user = await self.find_by_email(email)
        if user is None:
            user = await self.create(email)
        return user
