"""Tests for MemberRepo and the token Ledger against a mocked Airtable client."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from portal.repos.member_repo import MemberRepo, coerce_tokens
from portal.services.airtable import AirtableClient
from portal.services.ledger import (
    InsufficientTokensError,
    InvalidAmountError,
    Ledger,
    MemberNotFoundError,
)

pytestmark = pytest.mark.asyncio(loop_scope="session")


def _record(tokens=5, **fields) -> dict:
    return {
        "id": "rec1",
        "fields": {"Email": "alice@example.com", "Nom complet": "Alice", "Tokens restants": tokens, **fields},
    }


def _client(found: dict | None = None) -> MagicMock:
    client = MagicMock(spec=AirtableClient)
    client.find_first = AsyncMock(return_value=found)
    client.create_record = AsyncMock()
    client.update_record = AsyncMock(
        side_effect=lambda table, record_id, fields: _record(tokens=fields["Tokens restants"])
    )
    return client


class TestMemberRepo:
    async def test_find_by_email(self):
        client = _client(_record(tokens=5, Image="https://img"))
        repo = MemberRepo(client)

        user = await repo.find_by_email("alice@example.com")

        assert user.id == "rec1"
        assert user.full_name == "Alice"
        assert user.tokens == 5
        assert user.image == "https://img"
        table, formula = client.find_first.await_args.args
        assert table == "Membres du club"
        assert formula == '{Email} = "alice@example.com"'

    async def test_find_by_email_escapes_quotes(self):
        client = _client(None)

        assert await MemberRepo(client).find_by_email('x"), TRUE()') is None
        assert client.find_first.await_args.args[1] == '{Email} = "x\\"), TRUE()"'

    async def test_create_defaults(self):
        client = _client(None)
        client.create_record.return_value = {"id": "recNew", "fields": {"Nom complet": "bob", "Tokens restants": 10}}

        user = await MemberRepo(client).get_or_create("bob@example.com")

        assert user.id == "recNew"
        assert user.email == "bob@example.com"
        assert user.tokens == 10
        fields = client.create_record.await_args.args[1]
        assert fields == {"Email": "bob@example.com", "Nom complet": "bob", "Tokens restants": 10}

    async def test_create_with_names(self):
        client = _client(None)
        client.create_record.return_value = {"id": "recNew", "fields": {}}

        await MemberRepo(client).create("bob@example.com", first_name="Bob", last_name="Martin")

        assert client.create_record.await_args.args[1]["Nom complet"] == "Bob Martin"

    async def test_get_or_create_existing(self):
        client = _client(_record())

        user = await MemberRepo(client).get_or_create("alice@example.com")

        assert user.id == "rec1"
        client.create_record.assert_not_awaited()

    async def test_coerce_tokens(self):
        assert coerce_tokens(7.0) == 7
        assert coerce_tokens("3") == 3
        assert coerce_tokens(None) == 0
        assert coerce_tokens("lots") == 0
        assert coerce_tokens(True) == 0


class TestLedger:
    async def test_spend(self):
        client = _client(_record(tokens=5))
        ledger = Ledger(MemberRepo(client))

        user, transaction = await ledger.spend("alice@example.com", 2)

        assert user.tokens == 3
        assert transaction.type == "spend"
        assert transaction.previousBalance == 5
        assert transaction.newBalance == 3
        assert client.update_record.await_args.args == ("Membres du club", "rec1", {"Tokens restants": 3})

    async def test_spend_whole_balance(self):
        ledger = Ledger(MemberRepo(_client(_record(tokens=2))))

        user, transaction = await ledger.spend("alice@example.com", 2)

        assert user.tokens == 0
        assert transaction.newBalance == 0

    async def test_spend_insufficient(self):
        client = _client(_record(tokens=1))
        ledger = Ledger(MemberRepo(client))

        with pytest.raises(InsufficientTokensError) as exc_info:
            await ledger.spend("alice@example.com", 2)

        assert exc_info.value.balance == 1
        client.update_record.assert_not_awaited()

    @pytest.mark.parametrize("amount", [0, -1, True])
    async def test_invalid_amount(self, amount):
        client = _client(_record())

        with pytest.raises(InvalidAmountError):
            await Ledger(MemberRepo(client)).spend("alice@example.com", amount)

        client.find_first.assert_not_awaited()

    async def test_unknown_member(self):
        with pytest.raises(MemberNotFoundError):
            await Ledger(MemberRepo(_client(None))).add("ghost@example.com", 1)

    async def test_add(self):
        ledger = Ledger(MemberRepo(_client(_record(tokens=5))))

        user, transaction = await ledger.add("alice@example.com", 4)

        assert user.tokens == 9
        assert transaction.type == "add"
        assert transaction.amount == 4
