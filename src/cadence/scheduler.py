"""Periodic driver for recurring appointment processing."""

import logging
import threading
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .processing import ProcessResult, RecurringProcessingService

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MINUTES = 1440
JOB_ID = "recurring_appointments"


class RecurringScheduler:
    """
    Runs processing passes on a fixed cadence, one at a time.

    A tick that fires while a pass is still running is skipped, not
    queued. Manual runs go through the same guard.
    """

    def __init__(self, service: RecurringProcessingService, scheduler: BackgroundScheduler | None = None):
        self.service = service
        self._scheduler = scheduler
        self._job = None
        self._lock = threading.Lock()

    @property
    def started(self) -> bool:
        return self._job is not None

    @property
    def is_running(self) -> bool:
        """True while a processing pass is in progress."""
        return self._lock.locked()

    def start(self, interval_minutes: int = DEFAULT_INTERVAL_MINUTES) -> None:
        """Schedule passes every interval_minutes, starting immediately."""
        if self.started:
            logger.info("Recurring appointment scheduler already running")
            return

        if self._scheduler is None:
            self._scheduler = BackgroundScheduler(timezone="UTC")

        logger.info(f"Starting recurring appointment scheduler (checking every {interval_minutes} minutes)")

        self._job = self._scheduler.add_job(
            self.run_once,
            IntervalTrigger(minutes=interval_minutes),
            id=JOB_ID,
            next_run_time=datetime.now(timezone.utc),
            max_instances=1,
            coalesce=True,
        )
        if not self._scheduler.running:
            self._scheduler.start()

    def stop(self) -> None:
        """Cancel future passes. An in-flight pass finishes on its own."""
        if not self.started:
            return
        self._job.remove()
        self._job = None
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Recurring appointment scheduler stopped")

    def run_once(self) -> ProcessResult | None:
        """Run one pass now. Returns None if a pass was already in progress."""
        if not self._lock.acquire(blocking=False):
            logger.info("Recurring appointment processing already in progress, skipping")
            return None

        try:
            logger.info("Processing recurring appointments...")
            result = self.service.process_due()
            logger.info(
                f"Recurring processing complete: {result.created} created, "
                f"{result.failed} failed, {result.skipped} skipped, {result.completed} completed"
            )
            return result
        except Exception:
            logger.exception("Error processing recurring appointments")
            return None
        finally:
            self._lock.release()
