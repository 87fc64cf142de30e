"""Directory routes: members, experts, partners, community. Session required."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from portal.auth import get_current_session
from portal.models.directory import CommunityMember, DirectoryPage, Expert, Member, Partner
from portal.services.directory import directory_service

router = APIRouter(prefix="/api", tags=["directory"], dependencies=[Depends(get_current_session)])

Page = Annotated[int, Query(ge=1)]
Limit = Annotated[int, Query(ge=1, le=100)]


@router.get("/members")
async def list_members(page: Page = 1, limit: Limit = 9) -> DirectoryPage[Member]:
    """Club members, A to Z."""
    return await directory_service.members(page, limit)


@router.get("/experts")
async def list_experts(page: Page = 1, limit: Limit = 6) -> DirectoryPage[Expert]:
    return await directory_service.experts(page, limit)


@router.get("/partners")
async def list_partners(page: Page = 1, limit: Limit = 8) -> DirectoryPage[Partner]:
    return await directory_service.partners(page, limit)


@router.get("/community")
async def list_community(page: Page = 1, limit: Limit = 8) -> DirectoryPage[CommunityMember]:
    return await directory_service.community(page, limit)
