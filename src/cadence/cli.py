"""Cadence CLI - recurring appointment processing."""

import json
import logging
import sys
import time
from datetime import datetime, timezone

import click

from .adapters import SupabaseStore
from .config import load_config
from .core.recurrence import RecurrencePattern, upcoming
from .core.series import to_iso
from .factory import build_scheduler
from .ports import StoreError
from .series_admin import SeriesAdmin, SeriesStateError

PATTERNS = [p.value for p in RecurrencePattern]


def _utc(dt: datetime | None) -> datetime | None:
    """click.DateTime gives naive datetimes; treat them as UTC."""
    if dt is None or dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=timezone.utc)


def _admin() -> SeriesAdmin:
    return SeriesAdmin(SupabaseStore(load_config()))


@click.group()
@click.version_option()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """Cadence - recurring appointment processing."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if verbose else logging.INFO,
    )


@main.command("run-once")
def run_once():
    """Run one processing pass now."""
    try:
        scheduler = build_scheduler(load_config())
    except (StoreError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    result = scheduler.run_once()
    if result is None:
        click.echo("Processing did not complete, see logs.")
        sys.exit(1)
    click.echo(f"Created: {result.created}, failed: {result.failed}, skipped: {result.skipped}, completed: {result.completed}")


@main.command()
@click.option("--interval", type=click.IntRange(min=1), default=None, help="Minutes between passes")
def serve(interval: int | None):
    """Run the scheduler until interrupted."""
    config = load_config()
    if not config.scheduler_enabled:
        click.echo("Scheduler disabled (SCHEDULER_ENABLED=false).")
        return

    try:
        scheduler = build_scheduler(config)
    except (StoreError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    scheduler.start(interval or config.scheduler_interval_minutes)
    try:
        while True:
            time.sleep(60)
    except (KeyboardInterrupt, SystemExit):
        pass
    finally:
        scheduler.stop()


@main.command("next")
@click.argument("pattern", type=click.Choice(PATTERNS))
@click.argument("interval", type=click.IntRange(min=1))
@click.argument("from_date", type=click.DateTime())
@click.option("--count", default=5, show_default=True, help="Number of occurrences")
def next_dates(pattern: str, interval: int, from_date: datetime, count: int):
    """Preview upcoming occurrences for a recurrence rule."""
    for dt in upcoming(pattern, interval, _utc(from_date), count):
        click.echo(f"{dt:%a %Y-%m-%d %H:%M}")


@main.group()
def series():
    """Manage recurring series."""
    pass


@series.command("list")
@click.option("--contact", "contact_id", default=None, help="Only series for this contact")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_series(contact_id: str | None, as_json: bool):
    """List active series, or all series of a contact."""
    try:
        admin = _admin()
        items = admin.list_by_contact(contact_id) if contact_id else admin.list_active()
    except StoreError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([s.to_row() for s in items], indent=2))
        return

    if not items:
        click.echo("No recurring series.")
        return

    for s in items:
        limit = f"/{s.occurrences_count}" if s.occurrences_count else ""
        click.echo(
            f"{s.id}  {s.status.value:<9} every {s.recurrence_interval} {s.recurrence_pattern:<8} "
            f"from {to_iso(s.start_date)}  done {s.occurrences_completed}{limit}"
        )


@series.command("create")
@click.option("--contact", "contact_id", required=True, help="Contact id")
@click.option("--pattern", type=click.Choice(PATTERNS), required=True)
@click.option("--interval", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--start", "start_date", type=click.DateTime(), required=True, help="First occurrence (UTC)")
@click.option("--end", "end_date", type=click.DateTime(), default=None, help="Last day of the series (UTC)")
@click.option("--count", "occurrences_count", type=click.IntRange(min=1), default=None, help="Maximum occurrences")
@click.option("--service", "service_id", default=None, help="Service id")
def create_series(contact_id, pattern, interval, start_date, end_date, occurrences_count, service_id):
    """Create a recurring series."""
    fields = {
        "contact_id": contact_id,
        "recurrence_pattern": pattern,
        "recurrence_interval": interval,
        "start_date": _utc(start_date),
        "end_date": _utc(end_date),
        "occurrences_count": occurrences_count,
        "service_id": service_id,
    }
    try:
        created = _admin().create_series({k: v for k, v in fields.items() if v is not None})
    except (StoreError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"Created recurring series {created.id}")


def _transition(action: str, series_id: str) -> None:
    try:
        updated = getattr(_admin(), action)(series_id)
    except (StoreError, SeriesStateError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"Series {updated.id} is now {updated.status.value}")


@series.command()
@click.argument("series_id")
def pause(series_id: str):
    """Pause a series."""
    _transition("pause", series_id)


@series.command()
@click.argument("series_id")
def resume(series_id: str):
    """Resume a paused series."""
    _transition("resume", series_id)


@series.command()
@click.argument("series_id")
def cancel(series_id: str):
    """Cancel a series for good."""
    _transition("cancel", series_id)
