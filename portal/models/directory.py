"""Directory listing models: members, experts, partners, community."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Member(BaseModel):
    """A club member as shown in the directory."""

    id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    company: str = ""
    role: str = ""
    tokens: int = 0
    linkedin: str | None = None
    image: str | None = None


class Expert(BaseModel):
    """An expert from the "Nos experts" table."""

    id: str
    name: str = ""
    phone: str = ""
    email: str = ""
    description: str = ""
    image: str = ""
    title: str = ""
    website: str = ""


class Partner(BaseModel):
    id: str
    title: str = ""
    image: str = ""


class CommunityMember(BaseModel):
    """A person from the "Le cercle" table."""

    id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    title: str = ""
    company: str = ""
    image: str = ""


class Pagination(BaseModel):
    """Page metadata, 1-based."""

    currentPage: int
    totalPages: int
    totalCount: int
    hasNextPage: bool
    hasPrevPage: bool
    limit: int


class DirectoryPage(BaseModel, Generic[T]):
    """One page of a directory listing."""

    items: list[T]
    pagination: Pagination
    fallback: bool = False
    error: str | None = None
