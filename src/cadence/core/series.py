"""Pure recurring series domain logic - no I/O dependencies."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from zoneinfo import ZoneInfo

DEFAULT_DURATION_MINUTES = 30
DEFAULT_TITLE = "Recurring Appointment"


class SeriesStatus(str, Enum):
    """Lifecycle of a recurring series. COMPLETED and CANCELLED are final."""

    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SeriesStatus.COMPLETED, SeriesStatus.CANCELLED)


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse a stored timestamp. Naive values are taken as UTC."""
    if value is None or value == "":
        return None
    dt = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision, e.g. 2025-01-15T10:00:00.000Z."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class RecurringSeries:
    """A recurring appointment definition."""

    id: str
    contact_id: str
    recurrence_pattern: str
    recurrence_interval: int
    start_date: datetime
    service_id: str | None = None
    routine_id: str | None = None
    end_date: datetime | None = None
    occurrences_count: int | None = None
    occurrences_completed: int = 0
    status: SeriesStatus = SeriesStatus.ACTIVE
    metadata: dict = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: dict) -> "RecurringSeries":
        """Create a series from a recurring_appointments row."""
        return cls(
            id=str(row["id"]),
            contact_id=str(row["contact_id"]),
            recurrence_pattern=row.get("recurrence_pattern") or "custom",
            recurrence_interval=int(row.get("recurrence_interval") or 1),
            start_date=parse_timestamp(row["start_date"]),
            service_id=row.get("service_id"),
            routine_id=row.get("routine_id"),
            end_date=parse_timestamp(row.get("end_date")),
            occurrences_count=row.get("occurrences_count"),
            occurrences_completed=row.get("occurrences_completed") or 0,
            status=SeriesStatus(row.get("status") or "active"),
            metadata=row.get("metadata") or {},
        )

    def to_row(self) -> dict:
        """Row representation for the recurring_appointments table."""
        return {
            "id": self.id,
            "contact_id": self.contact_id,
            "service_id": self.service_id,
            "routine_id": self.routine_id,
            "recurrence_pattern": self.recurrence_pattern,
            "recurrence_interval": self.recurrence_interval,
            "start_date": to_iso(self.start_date),
            "end_date": to_iso(self.end_date) if self.end_date else None,
            "occurrences_count": self.occurrences_count,
            "occurrences_completed": self.occurrences_completed,
            "status": self.status.value,
            "metadata": self.metadata,
        }


@dataclass
class Service:
    """Reference data used to size an occurrence."""

    id: str | None = None
    name: str | None = None
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    buffer_before: int = 0
    buffer_after: int = 0

    @classmethod
    def from_row(cls, row: dict | None, default_duration: int = DEFAULT_DURATION_MINUTES) -> "Service":
        """Create from a services row. A missing row gives the defaults."""
        if not row:
            return cls(duration_minutes=default_duration)
        return cls(
            id=row.get("id"),
            name=row.get("name"),
            duration_minutes=row.get("duration_minutes") or default_duration,
            buffer_before=row.get("buffer_time_before") or 0,
            buffer_after=row.get("buffer_time_after") or 0,
        )


@dataclass
class BookingWindow:
    """Occurrence time range, plain and buffer-adjusted."""

    start: datetime
    end: datetime
    actual_start: datetime
    actual_end: datetime


@dataclass
class Booking:
    """A booking as read back from storage."""

    id: str
    start_time: datetime
    end_time: datetime | None = None
    status: str = "confirmed"
    recurring_appointment_id: str | None = None

    @classmethod
    def from_row(cls, row: dict) -> "Booking":
        return cls(
            id=str(row.get("id", "")),
            start_time=parse_timestamp(row["start_time"]),
            end_time=parse_timestamp(row.get("end_time")),
            status=row.get("status") or "confirmed",
            recurring_appointment_id=row.get("recurring_appointment_id"),
        )


def is_exhausted(series: RecurringSeries, now: datetime) -> bool:
    """
    True once either boundary of a bounded series is reached.

    Count boundary: occurrences_completed >= occurrences_count.
    Date boundary: end_date is in the past.
    """
    if series.occurrences_count and series.occurrences_completed >= series.occurrences_count:
        return True
    if series.end_date and series.end_date < now:
        return True
    return False


def compute_window(start: datetime, service: Service) -> BookingWindow:
    """Occurrence window: duration after start, widened by the service buffers."""
    end = start + timedelta(minutes=service.duration_minutes)
    return BookingWindow(
        start=start,
        end=end,
        actual_start=start - timedelta(minutes=service.buffer_before),
        actual_end=end + timedelta(minutes=service.buffer_after),
    )


def correlation_id(series_id: str, start: datetime) -> str:
    """Deterministic external id for one occurrence of a series."""
    epoch_ms = int(start.timestamp() * 1000)
    return f"recurring-{series_id}-{epoch_ms}"


def format_notification(service_name: str | None, start: datetime, tz: str = "UTC") -> str:
    """Customer-facing message announcing an auto-booked occurrence."""
    local = start.astimezone(ZoneInfo(tz))
    day = f"{local:%A, %B} {local.day}"
    at = local.strftime("%I:%M %p")
    return (
        f"📅 Your recurring {service_name or 'appointment'} has been automatically "
        f"scheduled for {day} at {at}. "
        'Reply "cancel" if you need to reschedule.'
    )
