"""Tests for the scheduler loop."""

import threading
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from cadence.processing import ProcessResult
from cadence.scheduler import JOB_ID, RecurringScheduler


@pytest.fixture
def service():
    service = MagicMock()
    service.process_due.return_value = ProcessResult(created=2, failed=1)
    return service


@pytest.fixture
def aps():
    aps = MagicMock()
    aps.running = False
    return aps


class TestRunOnce:
    def test_returns_pass_result(self, service):
        scheduler = RecurringScheduler(service)
        assert scheduler.run_once() == ProcessResult(created=2, failed=1)
        service.process_due.assert_called_once()

    def test_overlapping_run_is_skipped(self, service):
        scheduler = RecurringScheduler(service)
        nested = []

        def process_due():
            assert scheduler.is_running
            nested.append(scheduler.run_once())
            return ProcessResult(created=1)

        service.process_due.side_effect = process_due

        assert scheduler.run_once() == ProcessResult(created=1)
        assert nested == [None]
        service.process_due.assert_called_once()
        assert not scheduler.is_running

    def test_concurrent_thread_is_skipped(self, service):
        scheduler = RecurringScheduler(service)
        entered = threading.Event()
        release = threading.Event()

        def slow_pass():
            entered.set()
            release.wait(timeout=5)
            return ProcessResult(created=1)

        service.process_due.side_effect = slow_pass
        results = []
        worker = threading.Thread(target=lambda: results.append(scheduler.run_once()))
        worker.start()
        assert entered.wait(timeout=5)

        assert scheduler.run_once() is None

        release.set()
        worker.join(timeout=5)
        assert results == [ProcessResult(created=1)]
        assert service.process_due.call_count == 1

    def test_error_releases_flag(self, service):
        scheduler = RecurringScheduler(service)
        service.process_due.side_effect = [RuntimeError("boom"), ProcessResult(created=1)]

        assert scheduler.run_once() is None
        assert not scheduler.is_running
        assert scheduler.run_once() == ProcessResult(created=1)


class TestStartStop:
    def test_start_schedules_interval_job(self, service, aps):
        scheduler = RecurringScheduler(service, scheduler=aps)

        scheduler.start(60)

        aps.add_job.assert_called_once()
        func, trigger = aps.add_job.call_args.args
        kwargs = aps.add_job.call_args.kwargs
        assert func == scheduler.run_once
        assert isinstance(trigger, IntervalTrigger)
        assert trigger.interval == timedelta(minutes=60)
        assert kwargs["id"] == JOB_ID
        assert kwargs["next_run_time"] is not None
        assert kwargs["max_instances"] == 1
        aps.start.assert_called_once()
        assert scheduler.started

    def test_default_cadence_is_daily(self, service, aps):
        RecurringScheduler(service, scheduler=aps).start()
        trigger = aps.add_job.call_args.args[1]
        assert trigger.interval == timedelta(minutes=1440)

    def test_start_twice_is_noop(self, service, aps):
        scheduler = RecurringScheduler(service, scheduler=aps)
        scheduler.start(60)
        scheduler.start(30)
        aps.add_job.assert_called_once()

    def test_stop_cancels_job(self, service, aps):
        scheduler = RecurringScheduler(service, scheduler=aps)
        scheduler.start(60)
        job = aps.add_job.return_value
        aps.running = True

        scheduler.stop()

        job.remove.assert_called_once()
        aps.shutdown.assert_called_once_with(wait=False)
        assert not scheduler.started

    def test_stop_is_idempotent(self, service, aps):
        scheduler = RecurringScheduler(service, scheduler=aps)
        scheduler.stop()
        scheduler.start(60)
        scheduler.stop()
        scheduler.stop()
        aps.add_job.return_value.remove.assert_called_once()

    def test_start_runs_first_pass_immediately(self, service):
        ran = threading.Event()

        def process_due():
            ran.set()
            return ProcessResult()

        service.process_due.side_effect = process_due
        scheduler = RecurringScheduler(service)
        scheduler.start(60)
        try:
            assert ran.wait(timeout=10)
        finally:
            scheduler.stop()
