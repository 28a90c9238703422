"""Announcement-to-status aggregation.

Reduces a feed load to one ResolvedStatus per (location, date):

  1. Opt-out entries are dropped; the rest are bucketed by resolved
     location key and target date.
  2. Each bucket is reduced by severity, newest entry winning ties.
     Entries classified as normal never displace the seeded default.
  3. For the current real-world day only, townships that deviate from
     normal flag their parent county, and counties whose own status is
     partial flag themselves.

The result is built in private structures and returned as a read-only
snapshot. Township flags never change any county's own status.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import date, tzinfo
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from suspension.classifiers.location import (
    DEFAULT_LOCATION_RULES,
    LocationRules,
    resolve_location,
)
from suspension.classifiers.status import (
    DEFAULT_RULES,
    StatusRules,
    classify_status,
    is_opt_out,
)
from suspension.config import TimezoneConfig
from suspension.dates import format_iso, local_date, resolve_target_date, today_in
from suspension.feed import parse_feed
from suspension.status_types import (
    DEFAULT_STATUS,
    LocationRecord,
    RawAnnouncement,
    ResolvedStatus,
    StatusLevel,
    StatusSnapshot,
)

logger = logging.getLogger(__name__)

TAIWAN_TZ = TimezoneConfig().tzinfo


@dataclass
class _RecordBuilder:
    """Mutable accumulator for one location during a single load."""

    is_township: bool
    parent_county_key: str
    buckets: dict[str, list[RawAnnouncement]] = field(default_factory=dict)
    dates_status: dict[str, ResolvedStatus] = field(default_factory=dict)
    has_township_specific_data: bool = False

    def freeze(self) -> LocationRecord:
        return LocationRecord(
            is_township=self.is_township,
            parent_county_key=self.parent_county_key,
            dates_status=MappingProxyType(dict(self.dates_status)),
            has_township_specific_data=self.has_township_specific_data,
        )


def _localize(announcement: RawAnnouncement, tz: tzinfo) -> RawAnnouncement:
    """Attach ``tz`` to an announcement with a naive publish time."""
    if announcement.published_at.tzinfo is not None:
        return announcement
    return replace(announcement, published_at=announcement.published_at.replace(tzinfo=tz))


def reduce_bucket(
    entries: Iterable[RawAnnouncement],
    rules: StatusRules = DEFAULT_RULES,
    tz: tzinfo = TAIWAN_TZ,
) -> ResolvedStatus:
    """Reduce all announcements for one (location, date) to a single status.

    A candidate replaces the current best when it is strictly more severe,
    or equally severe and strictly newer.

    Args:
        entries: Announcements sharing a location key and target date.
        rules: Classifier keyword lists.
        tz: Timezone assumed for naive publish times.

    Returns:
        The winning ResolvedStatus; the normal default when nothing
        mentions a suspension.
    """
    ordered = sorted(
        (_localize(e, tz) for e in entries), key=lambda e: e.published_at, reverse=True
    )

    best = DEFAULT_STATUS
    for entry in ordered:
        level = classify_status(entry.status_text, rules)
        if level == StatusLevel.NORMAL:
            continue
        if level > best.level or (
            level == best.level and entry.published_at > best.updated_at
        ):
            best = ResolvedStatus(level=level, text=entry.status_text, updated_at=entry.published_at)

    return best


def group_announcements(
    announcements: Iterable[RawAnnouncement],
    rules: StatusRules = DEFAULT_RULES,
    location_rules: LocationRules = DEFAULT_LOCATION_RULES,
    tz: tzinfo = TAIWAN_TZ,
) -> dict[str, _RecordBuilder]:
    """Bucket announcements by location key and target ISO date."""
    builders: dict[str, _RecordBuilder] = {}
    dropped = 0

    for announcement in announcements:
        if is_opt_out(announcement.status_text, rules):
            dropped += 1
            continue

        announcement = _localize(announcement, tz)

        location = resolve_location(announcement.location_text, location_rules)
        published_on = local_date(announcement.published_at, tz)
        target = resolve_target_date(announcement.status_text, published_on, rules)

        builder = builders.get(location.key)
        if builder is None:
            builder = _RecordBuilder(
                is_township=location.is_township,
                parent_county_key=location.parent_county_key,
            )
            builders[location.key] = builder
        builder.buckets.setdefault(format_iso(target), []).append(announcement)

    if dropped:
        logger.debug("Dropped %d opt-out announcements", dropped)

    return builders


def _ensure_parent_records(builders: dict[str, _RecordBuilder]) -> None:
    """Add an empty county record for every parent that was never announced."""
    missing = {
        b.parent_county_key
        for b in builders.values()
        if b.is_township and b.parent_county_key not in builders
    }
    for parent in sorted(missing):
        builders[parent] = _RecordBuilder(is_township=False, parent_county_key=parent)


def _propagate_township_flags(builders: dict[str, _RecordBuilder], today: str) -> None:
    """Flag counties with township-level detail for the current day."""
    for builder in builders.values():
        status = builder.dates_status.get(today)
        if status is None:
            continue
        if builder.is_township and status.level != StatusLevel.NORMAL:
            parent = builders.get(builder.parent_county_key)
            if parent is not None:
                parent.has_township_specific_data = True
        if not builder.is_township and status.level == StatusLevel.PARTIAL:
            builder.has_township_specific_data = True


def aggregate(
    announcements: Iterable[RawAnnouncement],
    today: date | None = None,
    rules: StatusRules = DEFAULT_RULES,
    location_rules: LocationRules = DEFAULT_LOCATION_RULES,
    tz: tzinfo = TAIWAN_TZ,
) -> Mapping[str, LocationRecord]:
    """Resolve a feed load into one record per location.

    Args:
        announcements: Parsed feed entries.
        today: Current real-world date. Defaults to today in ``tz``.
        rules: Classifier and date keyword lists.
        location_rules: Outlying island and noise phrase lists.
        tz: Timezone used to truncate publish timestamps to dates.

    Returns:
        Read-only mapping of location key to LocationRecord.
    """
    today_str = format_iso(today or today_in(tz))

    builders = group_announcements(announcements, rules, location_rules, tz)
    for builder in builders.values():
        for day, entries in builder.buckets.items():
            builder.dates_status[day] = reduce_bucket(entries, rules, tz)

    _ensure_parent_records(builders)
    _propagate_township_flags(builders, today_str)

    records = {key: builder.freeze() for key, builder in builders.items()}
    logger.info(
        "Aggregated %d locations (%d townships)",
        len(records),
        sum(1 for r in records.values() if r.is_township),
    )
    return MappingProxyType(records)


def build_snapshot(
    payload: Any,
    today: date | None = None,
    rules: StatusRules = DEFAULT_RULES,
    location_rules: LocationRules = DEFAULT_LOCATION_RULES,
    tz: tzinfo = TAIWAN_TZ,
) -> StatusSnapshot:
    """Parse a decoded feed document and aggregate it into a snapshot.

    Raises:
        FeedStructureError: If the payload has no ``entry`` array. No
            partial snapshot is produced.
    """
    resolved_today = today or today_in(tz)
    feed = parse_feed(payload, tz)
    records = aggregate(feed.announcements, resolved_today, rules, location_rules, tz)
    return StatusSnapshot(records=records, today=format_iso(resolved_today), feed_updated=feed.updated)


def level_counts(records: Mapping[str, LocationRecord], day: str) -> Counter[str]:
    """Count locations by resolved status label for one ISO date."""
    counts: Counter[str] = Counter()
    for record in records.values():
        status = record.status_on(day)
        if status is not None:
            counts[status.level.label] += 1
    return counts
