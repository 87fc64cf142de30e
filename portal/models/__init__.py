"""
Pydantic models for the Net&Connect portal.

All data shapes defined here. No imports from repos, services, or routes.
"""

from portal.models.auth import (
    MagicLinkClaims,
    SendMagicLinkRequest,
    SendMagicLinkResponse,
    SessionClaims,
)
from portal.models.directory import (
    CommunityMember,
    DirectoryPage,
    Expert,
    Member,
    Pagination,
    Partner,
)
from portal.models.event import Event, EventsResponse
from portal.models.ledger import (
    BalanceResponse,
    JoinEventResponse,
    TokenAmountRequest,
    TokenTransactionResponse,
    Transaction,
)
from portal.models.member import ProfileResponse, ProfileUser, UserData

__all__ = [
    # Member models
    "UserData",
    "ProfileUser",
    "ProfileResponse",
    # Auth models
    "MagicLinkClaims",
    "SessionClaims",
    "SendMagicLinkRequest",
    "SendMagicLinkResponse",
    # Directory models
    "Member",
    "Expert",
    "Partner",
    "CommunityMember",
    "Pagination",
    "DirectoryPage",
    # Event models
    "Event",
    "EventsResponse",
    # Ledger models
    "TokenAmountRequest",
    "Transaction",
    "TokenTransactionResponse",
    "BalanceResponse",
    "JoinEventResponse",
]
