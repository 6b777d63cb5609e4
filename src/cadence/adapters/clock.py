"""System clock adapter."""

from datetime import datetime, timezone


class SystemClock:
    """Implements Clock protocol with the UTC wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
