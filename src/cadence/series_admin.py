"""Recurring series management - create, update and status transitions."""

import logging
from datetime import datetime

from .core.recurrence import RecurrencePattern
from .core.series import RecurringSeries, SeriesStatus, to_iso
from .ports import RowStore
from .processing import SERIES_TABLE

logger = logging.getLogger(__name__)


class SeriesStateError(Exception):
    """Raised when a status transition is not allowed."""

    pass


def _normalize(fields: dict) -> dict:
    """Serialize datetimes and enums for storage."""
    row = {}
    for key, value in fields.items():
        if isinstance(value, datetime):
            value = to_iso(value)
        elif isinstance(value, (SeriesStatus, RecurrencePattern)):
            value = value.value
        row[key] = value
    return row


class SeriesAdmin:
    """Operations on recurring series outside of the processing pass."""

    def __init__(self, store: RowStore):
        self.store = store

    def create_series(self, fields: dict) -> RecurringSeries:
        """Create a new active series."""
        pattern = fields.get("recurrence_pattern")
        if pattern not in {p.value for p in RecurrencePattern}:
            raise ValueError(f"Unknown recurrence pattern: {pattern!r}")
        interval = fields.get("recurrence_interval", 1)
        if not isinstance(interval, int) or interval <= 0:
            raise ValueError(f"Recurrence interval must be a positive integer, got {interval!r}")
        if not fields.get("contact_id") or not fields.get("start_date"):
            raise ValueError("contact_id and start_date are required")

        row = {
            "recurrence_interval": 1,
            "occurrences_completed": 0,
            "status": SeriesStatus.ACTIVE.value,
            "metadata": {},
            **_normalize(fields),
        }
        created = self.store.insert(SERIES_TABLE, row)
        logger.info(f"Created recurring series {created['id']} for contact {created['contact_id']}")
        return RecurringSeries.from_row(created)

    def update_series(self, series_id: str, patch: dict) -> RecurringSeries:
        """
        Patch a series and return the stored result.

        A completed or cancelled series cannot change status, and the
        completed-occurrence counter can only move forward.
        """
        current = self.get(series_id)
        if current is None:
            raise SeriesStateError(f"Recurring series {series_id} not found")

        row = _normalize(patch)
        if "status" in row and row["status"] != current.status.value:
            if current.status.is_terminal:
                raise SeriesStateError(f"Recurring series {series_id} is {current.status.value}")
            if row["status"] not in {s.value for s in SeriesStatus}:
                raise ValueError(f"Unknown series status: {row['status']!r}")
        completed = row.get("occurrences_completed")
        if completed is not None and completed < current.occurrences_completed:
            raise SeriesStateError(
                f"Recurring series {series_id} has {current.occurrences_completed} completed occurrences, "
                f"cannot set {completed}"
            )

        return RecurringSeries.from_row(self.store.update(SERIES_TABLE, series_id, row))

    def get(self, series_id: str) -> RecurringSeries | None:
        rows = self.store.select(SERIES_TABLE, {"id": series_id}, limit=1)
        return RecurringSeries.from_row(rows[0]) if rows else None

    def _transition(self, series_id: str, status: SeriesStatus) -> RecurringSeries:
        current = self.get(series_id)
        if current is None:
            raise SeriesStateError(f"Recurring series {series_id} not found")
        if current.status.is_terminal:
            raise SeriesStateError(f"Recurring series {series_id} is {current.status.value}")
        updated = self.update_series(series_id, {"status": status.value})
        logger.info(f"Recurring series {series_id}: {current.status.value} -> {status.value}")
        return updated

    def pause(self, series_id: str) -> RecurringSeries:
        return self._transition(series_id, SeriesStatus.PAUSED)

    def resume(self, series_id: str) -> RecurringSeries:
        return self._transition(series_id, SeriesStatus.ACTIVE)

    def cancel(self, series_id: str) -> RecurringSeries:
        return self._transition(series_id, SeriesStatus.CANCELLED)

    def list_active(self) -> list[RecurringSeries]:
        """Active series, oldest start date first."""
        rows = self.store.select(SERIES_TABLE, {"status": SeriesStatus.ACTIVE.value}, order="start_date")
        return [RecurringSeries.from_row(r) for r in rows]

    def list_by_contact(self, contact_id: str) -> list[RecurringSeries]:
        """All series for a contact, newest first."""
        rows = self.store.select(SERIES_TABLE, {"contact_id": contact_id}, order="created_at", descending=True)
        return [RecurringSeries.from_row(r) for r in rows]
