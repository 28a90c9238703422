"""Structured type definitions for announcements and resolved statuses.

These types document the shape of the data as it flows through the
pipeline: Raw announcement → Resolved status → Location record.
Records handed to consumers are frozen; the aggregator builds them in
private structures and only exposes the finished snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from types import MappingProxyType
from typing import Any, Mapping

NORMAL_TEXT = "照常上班、照常上課"
NO_INFO = "no_info"
NO_INFO_TEXT = "尚未發布資訊"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class StatusLevel(IntEnum):
    """Suspension severity, ordered from least to most severe."""

    NORMAL = 0
    PARTIAL = 1
    PARTIAL_TIME = 2
    SUSPENDED = 3

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> StatusLevel:
        return cls[label.upper()]


@dataclass(frozen=True)
class RawAnnouncement:
    """One feed entry after the summary has been split into its halves."""

    location_text: str
    status_text: str
    published_at: datetime


@dataclass(frozen=True)
class ResolvedStatus:
    """Winning classification for one (location, date) pair."""

    level: StatusLevel
    text: str
    updated_at: datetime = EPOCH

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.level.label,
            "text": self.text,
            "updated": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ResolvedStatus:
        updated = data.get("updated")
        return cls(
            level=StatusLevel.from_label(data["status"]),
            text=data.get("text", ""),
            updated_at=datetime.fromisoformat(updated) if updated else EPOCH,
        )


DEFAULT_STATUS = ResolvedStatus(level=StatusLevel.NORMAL, text=NORMAL_TEXT, updated_at=EPOCH)


@dataclass(frozen=True)
class LocationRecord:
    """Resolved statuses for a county or township, keyed by ISO date."""

    is_township: bool
    parent_county_key: str
    dates_status: Mapping[str, ResolvedStatus] = field(
        default_factory=lambda: MappingProxyType({})
    )
    has_township_specific_data: bool = False

    def status_on(self, day: str) -> ResolvedStatus | None:
        """Return the resolved status for an ISO date, or None if unannounced."""
        return self.dates_status.get(day)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_township": self.is_township,
            "parent_county": self.parent_county_key,
            "has_township_specific_data": self.has_township_specific_data,
            "dates": {day: status.to_dict() for day, status in sorted(self.dates_status.items())},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LocationRecord:
        dates = {
            day: ResolvedStatus.from_dict(status)
            for day, status in data.get("dates", {}).items()
        }
        return cls(
            is_township=bool(data.get("is_township", False)),
            parent_county_key=data["parent_county"],
            dates_status=MappingProxyType(dates),
            has_township_specific_data=bool(data.get("has_township_specific_data", False)),
        )


@dataclass(frozen=True)
class StatusSnapshot:
    """The complete result of one feed load, published as a unit."""

    records: Mapping[str, LocationRecord]
    today: str
    feed_updated: str | None = None
