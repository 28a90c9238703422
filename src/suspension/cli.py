"""CLI entry point for the suspension status engine.

Provides three commands:
  - suspension run: Load the feed, resolve statuses, write status.json
  - suspension show: Print county and township statuses for a day
  - suspension bulletins: Print current CWA weather bulletins
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

import click

from suspension import __version__
from suspension.aggregator import build_snapshot, level_counts
from suspension.bulletins import fetch_bulletins
from suspension.classifiers.location import load_location_rules
from suspension.classifiers.status import load_status_rules
from suspension.config import PROJECT_ROOT, load_config
from suspension.dates import format_display_date, format_iso, today_in
from suspension.display import (
    StatusView,
    affected_townships,
    county_keys,
    outlying_island_statuses,
    read_status,
)
from suspension.feed import FeedError, FeedStructureError, fetch_feed
from suspension.output import SNAPSHOT_FILENAME, load_snapshot, write_snapshot
from suspension.store import StatusStore

logger = logging.getLogger("suspension")


def _setup_logging(level: str, fmt: str) -> None:
    """Configure logging for the CLI."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt,
        stream=sys.stderr,
    )


def _resolve_path(path_str: str) -> Path:
    """Resolve a path relative to the project root."""
    p = Path(path_str)
    if p.is_absolute():
        return p
    return (PROJECT_ROOT / p).resolve()


def _parse_day(value: str | None) -> date | None:
    """Parse a YYYY-MM-DD option value."""
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise click.BadParameter(f"Expected YYYY-MM-DD, got '{value}'") from exc


def _read_feed_file(path: str) -> Any:
    """Load a feed document saved to disk."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except ValueError as exc:
        # JSONDecodeError and UnicodeDecodeError
        raise FeedStructureError(f"Feed file is not valid UTF-8 JSON: {exc}") from exc


def _format_line(label: str, day: date, view: StatusView) -> str:
    return f"{label}  {format_display_date(day)}：{view.text} [{view.label}]"


env_option = click.option(
    "--env", type=click.Choice(["dev", "staging", "prod"]), default=None,
    help="Environment (default: dev or SUSPENSION_ENV)",
)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Typhoon work/school suspension status engine."""


@main.command()
@env_option
@click.option("--feed-file", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Read the feed from a saved JSON file instead of fetching it")
@click.option("--output-dir", default=None,
              help="Output directory (default: paths.output_dir from config)")
@click.option("--today", "today_str", default=None,
              help="Current day in YYYY-MM-DD format (default: today in local time)")
def run(
    env: str | None,
    feed_file: str | None,
    output_dir: str | None,
    today_str: str | None,
) -> None:
    """Load the suspension feed and write the resolved status snapshot."""
    config = load_config(env=env)
    _setup_logging(config.logging.level, config.logging.format)

    tz = config.timezone.tzinfo
    rules = load_status_rules(config.keywords.status_keywords)
    location_rules = load_location_rules(config.keywords.locations)
    today = _parse_day(today_str) or today_in(tz)
    resolved_output = output_dir or str(_resolve_path(config.paths.output_dir))

    def loader():
        if feed_file:
            logger.info("Reading feed from %s", feed_file)
            payload = _read_feed_file(feed_file)
        else:
            logger.info("Fetching feed from %s", config.feeds.suspension_url)
            payload = fetch_feed(config.feeds.suspension_url, timeout=config.feeds.timeout_seconds)
        return build_snapshot(payload, today, rules, location_rules, tz)

    store = StatusStore()
    try:
        snapshot = store.reload(loader)
    except FeedError as exc:
        raise click.ClickException(f"停班課資料載入失敗：{exc}") from exc

    output_path = write_snapshot(snapshot, resolved_output)

    today_counts = level_counts(snapshot.records, snapshot.today)
    tomorrow_counts = level_counts(snapshot.records, format_iso(today + timedelta(days=1)))

    click.echo(f"Status snapshot written for {snapshot.today}")
    click.echo(f"  Feed updated: {snapshot.feed_updated or 'unknown'}")
    click.echo(f"  Locations: {len(snapshot.records)}")
    click.echo(f"  Today:    {_format_counts(today_counts)}")
    click.echo(f"  Tomorrow: {_format_counts(tomorrow_counts)}")
    click.echo(f"  Output:   {output_path}")


def _format_counts(counts: dict[str, int]) -> str:
    if not counts:
        return "no announcements"
    return ", ".join(f"{label}={count}" for label, count in sorted(counts.items()))


@main.command()
@env_option
@click.option("--snapshot", "snapshot_path", default=None,
              help="Snapshot file (default: {output_dir}/latest/status.json)")
@click.option("--date", "date_str", default=None,
              help="Day to display in YYYY-MM-DD format (default: today)")
@click.option("--today", "today_str", default=None,
              help="Current day in YYYY-MM-DD format (default: today in local time)")
def show(
    env: str | None,
    snapshot_path: str | None,
    date_str: str | None,
    today_str: str | None,
) -> None:
    """Print county, township and outlying island statuses for a day."""
    config = load_config(env=env)
    _setup_logging(config.logging.level, config.logging.format)

    today = _parse_day(today_str) or today_in(config.timezone.tzinfo)
    day = _parse_day(date_str) or today
    next_day = day + timedelta(days=1)

    path = Path(snapshot_path) if snapshot_path else (
        _resolve_path(config.paths.output_dir) / "latest" / SNAPSHOT_FILENAME
    )
    try:
        snapshot = load_snapshot(path)
    except FileNotFoundError as exc:
        raise click.ClickException(f"{exc}. Run 'suspension run' first.") from exc
    except ValueError as exc:
        raise click.ClickException(f"停班課資料載入失敗：{exc}") from exc

    records = snapshot.records
    location_rules = load_location_rules(config.keywords.locations)

    click.echo(f"資料更新時間：{snapshot.feed_updated or '無法取得'}")
    for key in county_keys(records):
        click.echo(_format_line(key, day, read_status(records, key, day, today)))
        click.echo(_format_line(" " * len(key), next_day, read_status(records, key, next_day, today)))
        for township in affected_townships(records, key, day, today):
            click.echo(_format_line(f"  {township.key}", day, township.day))
            click.echo(_format_line(f"  {township.key}", next_day, township.next_day))

    click.echo("離島：")
    for island in outlying_island_statuses(records, day, today, location_rules):
        click.echo(_format_line(f"  {island.key}", day, island.day))
        click.echo(_format_line(f"  {island.key}", next_day, island.next_day))


@main.command()
@env_option
def bulletins(env: str | None) -> None:
    """Print current CWA weather bulletins."""
    config = load_config(env=env)
    _setup_logging(config.logging.level, config.logging.format)

    items = fetch_bulletins(config.feeds.bulletin_url, timeout=config.feeds.timeout_seconds)
    if not items:
        click.echo("目前無天氣快報。")
        return

    for item in items:
        published = item.published.isoformat() if item.published else item.published_text
        click.echo(f"{item.title}")
        if published:
            click.echo(f"  {published}")
        click.echo(f"  {item.link}")


if __name__ == "__main__":
    main()
