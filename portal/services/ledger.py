"""Token ledger: members spend credits to join events."""

from __future__ import annotations

import logging

from portal.models.ledger import Transaction
from portal.models.member import UserData
from portal.repos.member_repo import MemberRepo

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base class for ledger failures."""


class InvalidAmountError(LedgerError):
    pass


class MemberNotFoundError(LedgerError):
    pass


class InsufficientTokensError(LedgerError):
    def __init__(self, balance: int, requested: int) -> None:
        super().__init__(f"Insufficient tokens: balance {balance}, requested {requested}")
        self.balance = balance
        self.requested = requested


class Ledger:
    """
    Balance changes against the member table.

    Read-then-write: two concurrent spends by the same member can both read
    the same balance. Airtable offers no compare-and-set to prevent it.
    """

    def __init__(self, member_repo: MemberRepo | None = None) -> None:
        self._members = member_repo or MemberRepo()

    async def balance(self, email: str) -> UserData:
        user = await self._members.find_by_email(email)
        if user is None:
            raise MemberNotFoundError(email)
        return user

    async def spend(self, email: str, amount: int) -> tuple[UserData, Transaction]:
        """
        Deduct tokens from a member's balance.

        Raises:
            InvalidAmountError: amount is not a positive integer
            MemberNotFoundError: no member with this email
            InsufficientTokensError: balance lower than amount
        """
        _check_amount(amount)
        user = await self.balance(email)
        if user.tokens < amount:
            raise InsufficientTokensError(user.tokens, amount)
        return await self._apply(user, "spend", amount, user.tokens - amount)

    async def add(self, email: str, amount: int) -> tuple[UserData, Transaction]:
        """
        Credit tokens to a member's balance.

        Raises:
            InvalidAmountError: amount is not a positive integer
            MemberNotFoundError: no member with this email
        """
        _check_amount(amount)
        user = await self.balance(email)
        return await self._apply(user, "add", amount, user.tokens + amount)

    async def _apply(
        self, user: UserData, kind: str, amount: int, new_balance: int
    ) -> tuple[UserData, Transaction]:
        updated = await self._members.update_tokens(user.id, new_balance)
        logger.info("Ledger %s of %d tokens for member %s: %d -> %d", kind, amount, user.id, user.tokens, new_balance)
        transaction = Transaction(
            type=kind,
            amount=amount,
            previousBalance=user.tokens,
            newBalance=new_balance,
        )
        return updated, transaction


def _check_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmountError("Invalid amount")


ledger = Ledger()
