"""In-memory row store adapter."""

import copy
import uuid
from typing import Any

from cadence.ports.row_store import DuplicateRowError, RowNotFoundError, StoreError

_OPERATORS = {
    "eq": lambda a, b: a == b,
    "neq": lambda a, b: a != b,
    "lt": lambda a, b: a is not None and a < b,
    "lte": lambda a, b: a is not None and a <= b,
    "gt": lambda a, b: a is not None and a > b,
    "gte": lambda a, b: a is not None and a >= b,
    "in": lambda a, b: a in b,
}


class InMemoryStore:
    """
    Dict-backed row store.

    Implements RowStore protocol. Rows get a generated string id when
    inserted without one. Optional unique keys per table reject duplicate
    inserts the way a database unique constraint would.
    """

    def __init__(self, unique: dict[str, list[tuple[str, ...]]] | None = None):
        self.tables: dict[str, list[dict]] = {}
        self.unique = unique or {}

    def _matches(self, row: dict, filters: dict[str, Any]) -> bool:
        for column, condition in filters.items():
            if isinstance(condition, tuple):
                op, value = condition
            else:
                op, value = "eq", condition
            if op not in _OPERATORS:
                raise StoreError(f"Unsupported filter operator: {op}")
            if not _OPERATORS[op](row.get(column), value):
                return False
        return True

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        """Select rows matching all filters."""
        rows = [r for r in self.tables.get(table, []) if self._matches(r, filters or {})]
        if order:
            # Nulls sort last in either direction
            present = [r for r in rows if r.get(order) is not None]
            missing = [r for r in rows if r.get(order) is None]
            rows = sorted(present, key=lambda r: r[order], reverse=descending) + missing
        if limit is not None:
            rows = rows[:limit]
        return copy.deepcopy(rows)

    def insert(self, table: str, row: dict) -> dict:
        """Insert a row and return it as stored."""
        stored = copy.deepcopy(row)
        stored.setdefault("id", str(uuid.uuid4()))
        rows = self.tables.setdefault(table, [])

        for key in self.unique.get(table, []):
            values = tuple(stored.get(c) for c in key)
            if any(tuple(r.get(c) for c in key) == values for r in rows):
                raise DuplicateRowError(f"Duplicate key {key}={values} in {table}")

        rows.append(stored)
        return copy.deepcopy(stored)

    def update(self, table: str, row_id: str, patch: dict) -> dict:
        """Patch a row by id and return it."""
        for row in self.tables.get(table, []):
            if row.get("id") == row_id:
                row.update(copy.deepcopy(patch))
                return copy.deepcopy(row)
        raise RowNotFoundError(f"No row {row_id} in {table}")
