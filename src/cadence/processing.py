"""Recurring appointment processing - one pass over all active series."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from .ports import (
    Clock,
    ConflictChecker,
    ConflictError,
    DuplicateRowError,
    Messenger,
    RowStore,
    StoreError,
)

from .core.recurrence import advance_past, next_occurrence, within_horizon
from .core.series import (
    DEFAULT_DURATION_MINUTES,
    DEFAULT_TITLE,
    Booking,
    RecurringSeries,
    SeriesStatus,
    Service,
    compute_window,
    correlation_id,
    format_notification,
    is_exhausted,
    to_iso,
)

logger = logging.getLogger(__name__)

SERIES_TABLE = "recurring_appointments"
BOOKINGS_TABLE = "bookings"
SERVICES_TABLE = "services"
CONTACTS_TABLE = "contacts"
CONVERSATIONS_TABLE = "conversations"


@dataclass
class ProcessResult:
    """Counts from one processing pass."""

    created: int = 0
    failed: int = 0
    skipped: int = 0
    completed: int = 0


class RecurringProcessingService:
    """
    Creates the next booking for every active recurring series that is due.

    Series are processed sequentially and independently. The occurrence
    counter only moves after the booking insert succeeds, so a series that
    fails is retried unchanged on the next pass.
    """

    def __init__(
        self,
        store: RowStore,
        messenger: Messenger,
        conflicts: ConflictChecker,
        clock: Clock,
        lookahead_days: int = 7,
        default_duration_minutes: int = DEFAULT_DURATION_MINUTES,
        timezone: str = "UTC",
        address_field: str = "phone_number",
    ):
        self.store = store
        self.messenger = messenger
        self.conflicts = conflicts
        self.clock = clock
        self.lookahead_days = lookahead_days
        self.default_duration_minutes = default_duration_minutes
        self.timezone = timezone
        self.address_field = address_field

    def active_series(self) -> list[RecurringSeries]:
        """Active series, oldest start date first."""
        rows = self.store.select(SERIES_TABLE, {"status": SeriesStatus.ACTIVE.value}, order="start_date")
        return [RecurringSeries.from_row(r) for r in rows]

    def process_due(self) -> ProcessResult:
        """Run one pass over all active series."""
        result = ProcessResult()

        try:
            all_series = self.active_series()
        except StoreError as e:
            logger.error(f"Failed to load active recurring appointments: {e}")
            return result

        logger.info(f"Processing {len(all_series)} active recurring appointments")

        for series in all_series:
            try:
                self._process_series(series, result)
            except ConflictError as e:
                logger.warning(f"Conflict for recurring appointment {series.id}: {e}")
                result.failed += 1
            except StoreError as e:
                logger.error(f"Storage error for recurring appointment {series.id}: {e}")
                result.failed += 1
            except Exception:
                logger.exception(f"Error processing recurring appointment {series.id}")
                result.failed += 1

        return result

    def _process_series(self, series: RecurringSeries, result: ProcessResult) -> None:
        now = self.clock.now()

        if is_exhausted(series, now):
            self.store.update(SERIES_TABLE, series.id, {"status": SeriesStatus.COMPLETED.value})
            logger.info(f"Completed series {series.id}")
            result.completed += 1
            return

        candidate = self._next_candidate(series, now)
        if not within_horizon(candidate, now, self.lookahead_days):
            logger.debug(f"Series {series.id}: next occurrence {to_iso(candidate)} outside horizon")
            return

        if self._booking_exists(series.id, candidate):
            logger.info(f"Series {series.id}: booking already exists for {to_iso(candidate)}, skipping")
            result.skipped += 1
            return

        service = self._load_service(series.service_id)
        window = compute_window(candidate, service)

        # Raises ConflictError; the series stays untouched for the next pass
        self.conflicts.check_buffered_conflicts(window.actual_start, window.actual_end, series.service_id)

        conversation_id = self._resolve_conversation(series.contact_id)

        try:
            self.store.insert(
                BOOKINGS_TABLE,
                {
                    "conversation_id": conversation_id,
                    "contact_id": series.contact_id,
                    "calendar_event_id": correlation_id(series.id, candidate),
                    "title": service.name or DEFAULT_TITLE,
                    "start_time": to_iso(window.start),
                    "end_time": to_iso(window.end),
                    "actual_start_time": to_iso(window.actual_start),
                    "actual_end_time": to_iso(window.actual_end),
                    "buffer_time_before": service.buffer_before,
                    "buffer_time_after": service.buffer_after,
                    "status": "confirmed",
                    "service_id": series.service_id,
                    "recurring_appointment_id": series.id,
                    "metadata": {
                        "auto_booked": True,
                        "recurrence_pattern": series.recurrence_pattern,
                    },
                },
            )
        except DuplicateRowError:
            logger.warning(f"Series {series.id}: occurrence {to_iso(candidate)} inserted concurrently, skipping")
            result.skipped += 1
            return

        self._notify(series, service, candidate)

        self.store.update(
            SERIES_TABLE,
            series.id,
            {"occurrences_completed": series.occurrences_completed + 1},
        )

        result.created += 1
        logger.info(f"Created booking for series {series.id} at {to_iso(candidate)}")

    def _next_candidate(self, series: RecurringSeries, now: datetime) -> datetime:
        """
        First occurrence strictly after now, anchored on the latest booking.

        Steps run on local wall-clock time in the configured zone, so a
        10:00 appointment stays at 10:00 across DST changes.
        """
        zone = ZoneInfo(self.timezone)
        last = self.store.select(
            BOOKINGS_TABLE,
            {"recurring_appointment_id": series.id},
            order="start_time",
            descending=True,
            limit=1,
        )
        if last and last[0].get("start_time"):
            anchor = Booking.from_row(last[0]).start_time.astimezone(zone)
            first = next_occurrence(series.recurrence_pattern, series.recurrence_interval, anchor)
        else:
            first = series.start_date.astimezone(zone)

        candidate = advance_past(series.recurrence_pattern, series.recurrence_interval, first, now)
        return candidate.astimezone(timezone.utc)

    def _booking_exists(self, series_id: str, start: datetime) -> bool:
        rows = self.store.select(
            BOOKINGS_TABLE,
            {"recurring_appointment_id": series_id, "start_time": to_iso(start)},
            limit=1,
        )
        return bool(rows)

    def _load_service(self, service_id: str | None) -> Service:
        if not service_id:
            return Service(duration_minutes=self.default_duration_minutes)
        rows = self.store.select(SERVICES_TABLE, {"id": service_id}, limit=1)
        return Service.from_row(rows[0] if rows else None, self.default_duration_minutes)

    def _resolve_conversation(self, contact_id: str) -> str | None:
        """Find or create the customer's conversation."""
        rows = self.store.select(CONVERSATIONS_TABLE, {"contact_id": contact_id}, limit=1)
        if rows:
            return rows[0].get("id")
        created = self.store.insert(CONVERSATIONS_TABLE, {"contact_id": contact_id, "status": "active"})
        return created.get("id")

    def _notify(self, series: RecurringSeries, service: Service, start: datetime) -> None:
        """Tell the customer about the new booking. Never fails the series."""
        try:
            rows = self.store.select(CONTACTS_TABLE, {"id": series.contact_id}, limit=1)
            destination = (rows[0].get(self.address_field) or "") if rows else ""
            message = format_notification(service.name, start, self.timezone)
            self.messenger.send_proactive_message(destination, message, series.contact_id)
        except Exception as e:
            # Booking already exists; delivery problems are not counted as failures
            logger.warning(f"Failed to notify contact {series.contact_id} for series {series.id}: {e}")
