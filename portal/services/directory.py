"""Directory listings pulled from Airtable: members, experts, partners, community."""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Sequence
from typing import Any, TypeVar

import httpx

from portal import config
from portal.models.directory import (
    CommunityMember,
    DirectoryPage,
    Expert,
    Member,
    Pagination,
    Partner,
)
from portal.repos.member_repo import coerce_tokens
from portal.services.airtable import AirtableClient, AirtableConfigError, airtable

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNAVAILABLE = "Service temporarily unavailable"

FALLBACK_MEMBERS = [
    Member(
        id="rec001",
        name="Dupont Alice",
        email="dupontalice@example.com",
        phone="+33 1234 5678",
        company="Tech Entreprise",
        role="Developpeur",
        tokens=7,
        linkedin="https://www.linkedin.com/in/dupontalice",
    ),
    Member(
        id="rec002",
        name="Martin Bruno",
        email="martinbruno@example.com",
        phone="+33 1234 5678",
        company="Innovation Corp",
        role="Chef de projet",
        tokens=12,
        linkedin="https://www.linkedin.com/in/martinbruno",
    ),
    Member(
        id="rec003",
        name="Taibi Jalil",
        email="taibijalil@example.com",
        phone="+33 1234 5678",
        company="Digital Solutions",
        role="Consultant",
        tokens=5,
        linkedin="https://www.linkedin.com/in/taibijalil",
    ),
]

FALLBACK_PARTNERS = [
    Partner(id="rec001", title="NIKE"),
    Partner(id="rec002", title="FEED"),
    Partner(id="rec003", title="ADIDAS"),
]

# Upstream unavailable
UPSTREAM_ERRORS = (httpx.HTTPError, AirtableConfigError)


def paginate(items: Sequence[T], page: int, limit: int) -> tuple[list[T], Pagination]:
    """
    Slice one 1-based page out of a full list.

    Args:
        items: Complete, already sorted dataset
        page: Requested page; values below 1 are treated as 1
        limit: Page size, at least 1

    Returns:
        The page slice and its metadata
    """
    page = max(page, 1)
    limit = max(limit, 1)
    start = (page - 1) * limit
    total_count = len(items)
    total_pages = math.ceil(total_count / limit)
    return list(items[start : start + limit]), Pagination(
        currentPage=page,
        totalPages=total_pages,
        totalCount=total_count,
        hasNextPage=page < total_pages,
        hasPrevPage=page > 1,
        limit=limit,
    )


def _empty_page(model: type[T], page: int, limit: int) -> DirectoryPage[T]:
    return DirectoryPage[model](
        items=[],
        pagination=Pagination(
            currentPage=max(page, 1),
            totalPages=0,
            totalCount=0,
            hasNextPage=False,
            hasPrevPage=False,
            limit=max(limit, 1),
        ),
        error=UNAVAILABLE,
    )


class DirectoryService:
    """Fetches whole tables, maps them to public models, paginates in memory."""

    def __init__(self, client: AirtableClient | None = None) -> None:
        self._client = client or airtable

    async def _company_name(self, record_ids: list[str] | None) -> str:
        """Resolve the first linked company record to its name. Empty on any failure."""
        if not record_ids:
            return ""
        try:
            record = await self._client.get_record(config.settings.AIRTABLE_COMPANIES_TABLE, record_ids[0])
        except UPSTREAM_ERRORS:
            logger.warning("Failed to fetch company %s", record_ids[0])
            return ""
        return record.get("fields", {}).get("Company Name") or ""

    async def _member(self, record: dict[str, Any]) -> Member:
        fields = record.get("fields", {})
        return Member(
            id=record["id"],
            name=fields.get("Nom complet") or "",
            email=fields.get("Email") or "",
            phone=fields.get("Téléphone") or "",
            company=await self._company_name(fields.get("Entreprise")),
            role=fields.get("Fonction") or "",
            tokens=coerce_tokens(fields.get("Tokens restants")),
            linkedin=fields.get("LinkedIn") or None,
            image=fields.get("Image") or None,
        )

    async def _community_member(self, record: dict[str, Any]) -> CommunityMember:
        fields = record.get("fields", {})
        return CommunityMember(
            id=record["id"],
            name=fields.get("name") or "",
            email=fields.get("email") or "",
            phone=fields.get("phone") or "",
            title=fields.get("title") or "",
            company=await self._company_name(fields.get("enterprise")),
            image=fields.get("image") or "",
        )

    @staticmethod
    def _expert(record: dict[str, Any]) -> Expert:
        fields = record.get("fields", {})
        return Expert(
            id=record["id"],
            **{
                key: fields.get(key) or ""
                for key in ("name", "phone", "email", "description", "image", "title", "website")
            },
        )

    @staticmethod
    def _partner(record: dict[str, Any]) -> Partner:
        fields = record.get("fields", {})
        return Partner(id=record["id"], title=fields.get("title") or "", image=fields.get("image") or "")

    async def members(self, page: int = 1, limit: int = 9) -> DirectoryPage[Member]:
        """Members sorted by full name. Falls back to sample data when Airtable fails."""
        try:
            records = await self._client.list_all(config.settings.AIRTABLE_MEMBERS_TABLE, sort_field="Nom complet")
            members = await asyncio.gather(*(self._member(record) for record in records))
        except UPSTREAM_ERRORS:
            logger.exception("Airtable fetch error (members)")
            items, pagination = paginate(sorted(FALLBACK_MEMBERS, key=lambda m: m.name.casefold()), page, limit)
            return DirectoryPage[Member](items=items, pagination=pagination, fallback=True)

        items, pagination = paginate(members, page, limit)
        return DirectoryPage[Member](items=items, pagination=pagination)

    async def experts(self, page: int = 1, limit: int = 6) -> DirectoryPage[Expert]:
        try:
            records = await self._client.list_all(config.settings.AIRTABLE_EXPERTS_TABLE, sort_field="id")
        except UPSTREAM_ERRORS:
            logger.exception("Airtable fetch error (experts)")
            return _empty_page(Expert, page, limit)

        items, pagination = paginate([self._expert(record) for record in records], page, limit)
        return DirectoryPage[Expert](items=items, pagination=pagination)

    async def partners(self, page: int = 1, limit: int = 8) -> DirectoryPage[Partner]:
        """Partners. Falls back to sample data when Airtable fails."""
        try:
            records = await self._client.list_all(config.settings.AIRTABLE_PARTNERS_TABLE, sort_field="id")
        except UPSTREAM_ERRORS:
            logger.exception("Airtable fetch error (partners)")
            items, pagination = paginate(sorted(FALLBACK_PARTNERS, key=lambda p: p.title.casefold()), page, limit)
            return DirectoryPage[Partner](items=items, pagination=pagination, fallback=True)

        items, pagination = paginate([self._partner(record) for record in records], page, limit)
        return DirectoryPage[Partner](items=items, pagination=pagination)

    async def community(self, page: int = 1, limit: int = 8) -> DirectoryPage[CommunityMember]:
        try:
            records = await self._client.list_all(config.settings.AIRTABLE_COMMUNITY_TABLE, sort_field="id")
            people = await asyncio.gather(*(self._community_member(record) for record in records))
        except UPSTREAM_ERRORS:
            logger.exception("Airtable fetch error (community)")
            return _empty_page(CommunityMember, page, limit)

        items, pagination = paginate(people, page, limit)
        return DirectoryPage[CommunityMember](items=items, pagination=pagination)


directory_service = DirectoryService()
