"""Buffered booking conflict check against the bookings table."""

import logging
from datetime import datetime, timedelta

from cadence.core.series import parse_timestamp, to_iso
from cadence.ports.conflicts import ConflictError
from cadence.ports.row_store import RowStore

logger = logging.getLogger(__name__)

BLOCKING_STATUSES = ["confirmed", "pending"]

# Widest buffer a booking may carry on either side
MAX_BUFFER = timedelta(days=1)


def buffered_range(booking: dict) -> tuple[datetime, datetime] | None:
    """
    The time a booking blocks, buffers included.

    Uses actual_start_time/actual_end_time when stored, otherwise widens
    start_time/end_time by the booking's own buffer minutes.
    """
    start = parse_timestamp(booking.get("actual_start_time"))
    end = parse_timestamp(booking.get("actual_end_time"))
    if start is None:
        start = parse_timestamp(booking.get("start_time"))
        if start is not None:
            start -= timedelta(minutes=int(booking.get("buffer_time_before") or 0))
    if end is None:
        end = parse_timestamp(booking.get("end_time"))
        if end is not None:
            end += timedelta(minutes=int(booking.get("buffer_time_after") or 0))
    if start is None or end is None:
        return None
    return start, end


class BookingConflictChecker:
    """
    Conflict oracle backed by a row store.

    Implements ConflictChecker protocol. A booking conflicts when it still
    holds its slot and its buffered range intersects the requested window.
    All services share one calendar, so every booking is checked.
    """

    def __init__(self, store: RowStore, table: str = "bookings"):
        self.store = store
        self.table = table

    def _candidates(self, actual_start: datetime, actual_end: datetime) -> list[dict]:
        # Coarse query on the plain times; buffers are applied below
        return self.store.select(
            self.table,
            {
                "status": ("in", BLOCKING_STATUSES),
                "start_time": ("lt", to_iso(actual_end + MAX_BUFFER)),
                "end_time": ("gt", to_iso(actual_start - MAX_BUFFER)),
            },
        )

    def check_buffered_conflicts(
        self,
        actual_start: datetime,
        actual_end: datetime,
        service_id: str | None = None,
    ) -> None:
        """Raise ConflictError if any active booking overlaps the window."""
        overlapping = []
        for booking in self._candidates(actual_start, actual_end):
            blocked = buffered_range(booking)
            if blocked is None:
                continue
            # Overlap condition: start < window_end AND end > window_start
            if blocked[0] < actual_end and blocked[1] > actual_start:
                overlapping.append(booking)

        if overlapping:
            ids = [str(b.get("id")) for b in overlapping]
            logger.debug(f"Window {to_iso(actual_start)}-{to_iso(actual_end)} overlaps bookings {ids}")
            raise ConflictError(
                f"Time slot {to_iso(actual_start)} - {to_iso(actual_end)} is already booked",
                booking_ids=ids,
            )
