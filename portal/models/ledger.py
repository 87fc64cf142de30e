"""Token ledger models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from portal.models.member import UserData


class TokenAmountRequest(BaseModel):
    """Request body for spending or adding tokens."""

    model_config = ConfigDict(extra="forbid")

    amount: int


class Transaction(BaseModel):
    """A single balance change."""

    type: Literal["spend", "add"]
    amount: int
    previousBalance: int
    newBalance: int


class TokenTransactionResponse(BaseModel):
    """Response after a balance change."""

    success: bool = True
    user: UserData
    transaction: Transaction


class BalanceResponse(BaseModel):
    success: bool = True
    user: UserData


class JoinEventResponse(BaseModel):
    """Response after joining an event."""

    success: bool = True
    eventId: str
    user: UserData
    transaction: Transaction
