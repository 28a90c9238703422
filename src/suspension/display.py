"""Read-side queries over a status snapshot.

Every consumer reads statuses through ``read_status`` so the default for
a missing (location, date) is applied the same way everywhere: normal on
the current day, no information on any other day.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Mapping

from suspension.classifiers.location import (
    DEFAULT_LOCATION_RULES,
    LocationRules,
    canonicalize,
)
from suspension.dates import format_iso
from suspension.status_types import (
    NO_INFO,
    NO_INFO_TEXT,
    NORMAL_TEXT,
    LocationRecord,
    StatusLevel,
)

STATUS_COLORS: dict[str, str] = {
    "suspended": "#ef4444",
    "partial_time": "#facc15",
    "partial": "#f97316",
    "normal": "#3b82f6",
    NO_INFO: "#cccccc",
}

STATUS_LABELS: dict[str, str] = {
    "suspended": "全天停止上班上課",
    "partial_time": "非全天停止上班或上課",
    "partial": "部分區域或特定人員停止上班上課",
    "normal": "正常上班上課",
    NO_INFO: "沒有公布資訊",
}


@dataclass(frozen=True)
class StatusView:
    """What a consumer shows for one location on one day."""

    status: str
    text: str

    @property
    def color(self) -> str:
        return STATUS_COLORS.get(self.status, STATUS_COLORS[NO_INFO])

    @property
    def label(self) -> str:
        return STATUS_LABELS.get(self.status, STATUS_LABELS[NO_INFO])

    @property
    def is_normal(self) -> bool:
        return self.status == StatusLevel.NORMAL.label


@dataclass(frozen=True)
class TownshipView:
    """A township with its statuses for a day and the day after."""

    key: str
    day: StatusView
    next_day: StatusView


def read_status(
    records: Mapping[str, LocationRecord],
    key: str,
    day: date,
    today: date,
) -> StatusView:
    """Read the status of a location on a day, applying the missing-data default.

    Args:
        records: Snapshot records keyed by canonical location key.
        key: Location key (canonicalized before lookup).
        day: Day to read.
        today: Current real-world day.

    Returns:
        StatusView. Missing data reads as normal on ``today`` and as
        ``no_info`` on every other day.
    """
    record = records.get(canonicalize(key))
    status = record.status_on(format_iso(day)) if record is not None else None
    if status is not None:
        return StatusView(status=status.level.label, text=status.text)
    if day == today:
        return StatusView(status=StatusLevel.NORMAL.label, text=NORMAL_TEXT)
    return StatusView(status=NO_INFO, text=NO_INFO_TEXT)


def county_keys(records: Mapping[str, LocationRecord]) -> list[str]:
    """Return the keys of all county-level records, sorted."""
    return sorted(key for key, record in records.items() if not record.is_township)


def townships_of(records: Mapping[str, LocationRecord], county_key: str) -> list[str]:
    """Return the keys of townships whose parent is the given county."""
    parent = canonicalize(county_key)
    return sorted(
        key
        for key, record in records.items()
        if record.is_township and record.parent_county_key == parent and key != parent
    )


def affected_townships(
    records: Mapping[str, LocationRecord],
    county_key: str,
    day: date,
    today: date,
) -> list[TownshipView]:
    """List townships of a county that deviate from normal on a day or the next.

    Only counties flagged with township-specific data and not fully
    suspended on ``day`` list their townships.
    """
    county = records.get(canonicalize(county_key))
    if county is None or not county.has_township_specific_data:
        return []
    if read_status(records, county_key, day, today).status == StatusLevel.SUSPENDED.label:
        return []

    next_day = day + timedelta(days=1)
    result: list[TownshipView] = []
    for key in townships_of(records, county_key):
        record = records[key]
        deviates = any(
            status is not None and status.level != StatusLevel.NORMAL
            for status in (record.status_on(format_iso(day)), record.status_on(format_iso(next_day)))
        )
        if deviates:
            result.append(TownshipView(
                key=key,
                day=read_status(records, key, day, today),
                next_day=read_status(records, key, next_day, today),
            ))
    return result


def outlying_island_statuses(
    records: Mapping[str, LocationRecord],
    day: date,
    today: date,
    rules: LocationRules = DEFAULT_LOCATION_RULES,
) -> list[TownshipView]:
    """Statuses of every configured outlying island for a day and the next."""
    next_day = day + timedelta(days=1)
    return [
        TownshipView(
            key=island,
            day=read_status(records, island, day, today),
            next_day=read_status(records, island, next_day, today),
        )
        for island in rules.outlying_islands
    ]
