"""Booking conflict oracle interface."""

from datetime import datetime
from typing import Protocol


class ConflictError(Exception):
    """Raised when a buffered window overlaps existing bookings."""

    def __init__(self, message: str, booking_ids: list[str] | None = None):
        super().__init__(message)
        self.booking_ids = booking_ids or []


class ConflictChecker(Protocol):
    """Interface for checking a time window against existing bookings."""

    def check_buffered_conflicts(
        self,
        actual_start: datetime,
        actual_end: datetime,
        service_id: str | None = None,
    ) -> None:
        """Raise ConflictError if the window is taken."""
        ...
