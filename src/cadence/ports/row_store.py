"""Row store interface."""

from typing import Any, Protocol


class StoreError(Exception):
    """Raised when a persistence operation fails."""

    pass


class RowNotFoundError(StoreError):
    """Raised when a row addressed by id does not exist."""

    pass


class DuplicateRowError(StoreError):
    """Raised when an insert violates a unique key."""

    pass


class RowStore(Protocol):
    """
    Interface for a relational row store.

    Filters map column names to either a plain value (equality) or an
    (operator, value) tuple where operator is one of "eq", "neq", "lt",
    "lte", "gt", "gte", "in".
    """

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        """Select rows matching all filters."""
        ...

    def insert(self, table: str, row: dict) -> dict:
        """Insert a row and return it as stored."""
        ...

    def update(self, table: str, row_id: str, patch: dict) -> dict:
        """Patch a row by id and return it. Raises RowNotFoundError if missing."""
        ...
