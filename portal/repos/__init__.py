"""
Repository layer for the Net&Connect portal.

Member records live in Airtable; consumed magic links live in memory.
"""

from portal.repos.member_repo import MemberRepo
from portal.repos.used_link_repo import UsedLinkRepo

__all__ = [
    "MemberRepo",
    "UsedLinkRepo",
]
