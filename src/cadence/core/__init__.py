"""Functional core - pure business logic with no I/O."""

from .recurrence import RecurrencePattern, next_occurrence, advance_past, within_horizon
from .series import (
    SeriesStatus,
    RecurringSeries,
    Service,
    Booking,
    BookingWindow,
    is_exhausted,
    compute_window,
    correlation_id,
    format_notification,
)

__all__ = [
    # Recurrence
    "RecurrencePattern",
    "next_occurrence",
    "advance_past",
    "within_horizon",
    # Series
    "SeriesStatus",
    "RecurringSeries",
    "Service",
    "Booking",
    "BookingWindow",
    "is_exhausted",
    "compute_window",
    "correlation_id",
    "format_notification",
]
