"""HTTP client for the Airtable REST API."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from portal import config

logger = logging.getLogger(__name__)

AIRTABLE_API_URL = "https://api.airtable.com/v0"
PAGE_SIZE = 100


class AirtableConfigError(RuntimeError):
    """Raised when the Airtable API key or base id is not configured."""


def escape_formula_string(value: str) -> str:
    """Escape a value for use inside a double-quoted Airtable formula string."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


class AirtableClient:
    """
    Thin async client over one Airtable base.

    Each call opens its own httpx.AsyncClient. Non-2xx responses raise
    httpx.HTTPStatusError after being logged.
    """

    def __init__(self, api_key: str | None = None, base_id: str | None = None) -> None:
        self._api_key = config.settings.AIRTABLE_API_KEY if api_key is None else api_key
        self._base_id = config.settings.AIRTABLE_BASE_ID if base_id is None else base_id

    @property
    def configured(self) -> bool:
        return bool(self._api_key and self._base_id)

    def _table_url(self, table: str, record_id: str | None = None) -> str:
        if not self.configured:
            raise AirtableConfigError("Airtable configuration missing")
        url = f"{AIRTABLE_API_URL}/{self._base_id}/{quote(table, safe='')}"
        if record_id:
            url = f"{url}/{quote(record_id, safe='')}"
        return url

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=15.0) as client:
            response = await client.request(method, url, params=params, json=json, headers=self._headers())
            if response.is_error:
                logger.error("Airtable API error: %s %s", response.status_code, response.text)
            response.raise_for_status()
            return response.json()

    async def list_page(
        self,
        table: str,
        page_size: int = PAGE_SIZE,
        sort_field: str | None = None,
        offset: str | None = None,
    ) -> dict[str, Any]:
        """
        Fetch one page of records.

        Args:
            table: Table name
            page_size: Records per page (Airtable caps this at 100)
            sort_field: Optional field to sort ascending by
            offset: Continuation cursor from a previous page

        Returns:
            Raw response: ``{"records": [...], "offset": "..."}``, offset absent on the last page
        """
        params = {"pageSize": str(page_size)}
        if sort_field:
            params["sort[0][field]"] = sort_field
            params["sort[0][direction]"] = "asc"
        if offset:
            params["offset"] = offset
        return await self._request("GET", self._table_url(table), params=params)

    async def list_all(self, table: str, sort_field: str | None = None) -> list[dict[str, Any]]:
        """Fetch every record of a table by following offsets."""
        records: list[dict[str, Any]] = []
        offset: str | None = None
        while True:
            data = await self.list_page(table, sort_field=sort_field, offset=offset)
            records.extend(data.get("records", []))
            offset = data.get("offset")
            if not offset:
                return records

    async def get_record(self, table: str, record_id: str) -> dict[str, Any]:
        return await self._request("GET", self._table_url(table, record_id))

    async def find_first(self, table: str, formula: str) -> dict[str, Any] | None:
        """
        Return the first record matching a filterByFormula expression.

        Returns:
            Record dict if found, None otherwise
        """
        params = {"filterByFormula": formula, "maxRecords": "1"}
        data = await self._request("GET", self._table_url(table), params=params)
        records = data.get("records", [])
        return records[0] if records else None

    async def create_record(self, table: str, fields: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", self._table_url(table), json={"fields": fields})

    async def update_record(self, table: str, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Patch only the given fields of a record."""
        return await self._request("PATCH", self._table_url(table, record_id), json={"fields": fields})


airtable = AirtableClient()
