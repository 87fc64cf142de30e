"""Tests for AirtableClient with mocked HTTP."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from portal.services.airtable import AirtableClient, AirtableConfigError, escape_formula_string

pytestmark = pytest.mark.asyncio(loop_scope="session")


def _response(payload: dict) -> MagicMock:
    response = MagicMock()
    response.is_error = False
    response.json.return_value = payload
    response.raise_for_status = MagicMock()
    return response


def _mock_client(mock_client_cls, responses: list[MagicMock]) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    mock_client.request = AsyncMock(side_effect=responses)
    mock_client_cls.return_value = mock_client
    return mock_client


async def test_list_all_follows_offsets():
    """Pages are fetched until a response has no offset."""
    client = AirtableClient(api_key="key", base_id="appX")
    pages = [
        _response({"records": [{"id": "rec1"}, {"id": "rec2"}], "offset": "itr1"}),
        _response({"records": [{"id": "rec3"}], "offset": "itr2"}),
        _response({"records": [{"id": "rec4"}]}),
    ]

    with patch("httpx.AsyncClient") as mock_client_cls:
        mock_client = _mock_client(mock_client_cls, pages)
        records = await client.list_all("Nos experts", sort_field="id")

    assert [r["id"] for r in records] == ["rec1", "rec2", "rec3", "rec4"]
    assert mock_client.request.await_count == 3
    offsets = [call.kwargs["params"].get("offset") for call in mock_client.request.await_args_list]
    assert offsets == [None, "itr1", "itr2"]
    first = mock_client.request.await_args_list[0]
    assert first.args[0] == "GET"
    assert first.args[1] == "https://api.airtable.com/v0/appX/Nos%20experts"
    assert first.kwargs["params"]["sort[0][field]"] == "id"
    assert first.kwargs["params"]["pageSize"] == "100"
    assert first.kwargs["headers"]["Authorization"] == "Bearer key"


async def test_find_first_uses_formula():
    client = AirtableClient(api_key="key", base_id="appX")

    with patch("httpx.AsyncClient") as mock_client_cls:
        mock_client = _mock_client(mock_client_cls, [_response({"records": [{"id": "rec9", "fields": {}}]})])
        record = await client.find_first("Membres du club", '{Email} = "a@b.com"')

    assert record == {"id": "rec9", "fields": {}}
    params = mock_client.request.await_args.kwargs["params"]
    assert params == {"filterByFormula": '{Email} = "a@b.com"', "maxRecords": "1"}


async def test_find_first_no_match():
    client = AirtableClient(api_key="key", base_id="appX")

    with patch("httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, [_response({"records": []})])
        record = await client.find_first("Membres du club", '{Email} = "x@y.com"')

    assert record is None


async def test_update_record_patches_fields():
    client = AirtableClient(api_key="key", base_id="appX")

    with patch("httpx.AsyncClient") as mock_client_cls:
        mock_client = _mock_client(mock_client_cls, [_response({"id": "rec1", "fields": {"Tokens restants": 3}})])
        await client.update_record("Membres du club", "rec1", {"Tokens restants": 3})

    call = mock_client.request.await_args
    assert call.args == ("PATCH", "https://api.airtable.com/v0/appX/Membres%20du%20club/rec1")
    assert call.kwargs["json"] == {"fields": {"Tokens restants": 3}}


async def test_http_error_propagates():
    client = AirtableClient(api_key="key", base_id="appX")
    failing = MagicMock()
    failing.is_error = True
    failing.status_code = 422
    failing.text = "INVALID_FILTER_BY_FORMULA"
    failing.raise_for_status.side_effect = httpx.HTTPStatusError(
        "422 Unprocessable Entity", request=MagicMock(), response=MagicMock()
    )

    with patch("httpx.AsyncClient") as mock_client_cls:
        _mock_client(mock_client_cls, [failing])
        with pytest.raises(httpx.HTTPStatusError):
            await client.get_record("Entreprises", "rec1")


async def test_missing_configuration():
    client = AirtableClient(api_key="", base_id="appX")

    assert client.configured is False
    with pytest.raises(AirtableConfigError):
        await client.list_page("partners")


async def test_escape_formula_string():
    assert escape_formula_string('a"b@c.com') == 'a\\"b@c.com'
    assert escape_formula_string("a\\b") == "a\\\\b"
