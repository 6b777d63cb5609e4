"""Supabase adapter - PostgREST HTTP client for row storage."""

import logging
from typing import Any

import requests

from cadence.config import Config, load_config
from cadence.ports.row_store import DuplicateRowError, RowNotFoundError, StoreError

logger = logging.getLogger(__name__)

REST_PATH = "/rest/v1"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _format_filter(condition: Any) -> str:
    """Render a filter condition in PostgREST syntax, e.g. "lt.2025-01-15"."""
    if isinstance(condition, tuple):
        op, value = condition
    else:
        op, value = "eq", condition

    if value is None:
        return "is.null" if op == "eq" else "not.is.null"
    if op == "in":
        return f"in.({','.join(_format_value(v) for v in value)})"
    return f"{op}.{_format_value(value)}"


class SupabaseStore:
    """
    Supabase (PostgREST) row store.

    Implements RowStore protocol. Handles request building and error
    translation. No business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, timeout: int = 30):
        self.config = config or load_config()
        if not self.config.supabase_url or not self.config.supabase_key:
            raise StoreError("SUPABASE_URL and SUPABASE_KEY must be set in cadence.conf")
        self.base_url = self.config.supabase_url.rstrip("/") + REST_PATH
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update(
            {
                "apikey": self.config.supabase_key,
                "Authorization": f"Bearer {self.config.supabase_key}",
                "Content-Type": "application/json",
                "Prefer": "return=representation",
            }
        )

    def _request(self, method: str, table: str, **kwargs) -> list[dict]:
        """Make a request against a table endpoint."""
        try:
            resp = self._session.request(
                method,
                f"{self.base_url}/{table}",
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise StoreError(f"{method} {table} failed: {e}") from e

        if resp.status_code == 409:
            raise DuplicateRowError(f"{method} {table} conflict: {resp.text}")
        if resp.status_code >= 400:
            raise StoreError(f"{method} {table} failed ({resp.status_code}): {resp.text}")

        if not resp.content:
            return []
        return resp.json()

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        """Select rows matching all filters."""
        params = {"select": "*"}
        for column, condition in (filters or {}).items():
            params[column] = _format_filter(condition)
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = str(limit)

        logger.debug(f"SELECT {table} {params}")
        return self._request("GET", table, params=params)

    def insert(self, table: str, row: dict) -> dict:
        """Insert a row and return it as stored."""
        rows = self._request("POST", table, json=[row])
        if not rows:
            raise StoreError(f"Insert into {table} returned no row")
        return rows[0]

    def update(self, table: str, row_id: str, patch: dict) -> dict:
        """Patch a row by id and return it."""
        rows = self._request("PATCH", table, params={"id": f"eq.{row_id}"}, json=patch)
        if not rows:
            raise RowNotFoundError(f"No row {row_id} in {table}")
        return rows[0]
