"""NCDR suspension feed fetching and parsing.

The feed is a JSON atom document:

    {"updated": "...", "entry": [{"updated": "...", "summary": "..."}, ...]}

Each summary reads "[annotation] location:status". Annotations in square
brackets are dropped and the text is split on the first colon.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any

import requests
from jsonschema import ValidationError, validate

from suspension.status_types import RawAnnouncement

logger = logging.getLogger(__name__)

FEED_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "NCDR suspension feed envelope",
    "type": "object",
    "required": ["entry"],
    "properties": {
        "entry": {"type": "array"},
    },
}

_ANNOTATION_PATTERN = re.compile(r"\[.*?\]")


class FeedError(Exception):
    """The upstream feed could not be loaded."""


class FeedStructureError(FeedError):
    """The feed payload does not have the expected entry list."""


@dataclass(frozen=True)
class FeedPayload:
    """Announcements parsed from one feed document."""

    updated: str | None
    announcements: list[RawAnnouncement] = field(default_factory=list)


def validate_feed(payload: Any) -> list[Any]:
    """Check the feed envelope and return its entry list.

    Raises:
        FeedStructureError: If the payload is not an object with an
            ``entry`` array.
    """
    try:
        validate(instance=payload, schema=FEED_SCHEMA)
    except ValidationError as exc:
        path_str = " > ".join(str(p) for p in exc.absolute_path) or "<root>"
        raise FeedStructureError(
            f"Invalid feed structure at {path_str}: {exc.message}"
        ) from exc
    return payload["entry"]


def summary_text(entry: dict[str, Any]) -> str:
    """Extract the summary text from an entry.

    The summary is either a plain string or an object holding the
    text under ``#text``.
    """
    summary = entry.get("summary", "")
    if isinstance(summary, dict):
        summary = summary.get("#text", "")
    return summary if isinstance(summary, str) else ""


def split_summary(summary: str) -> tuple[str, str] | None:
    """Split a summary into (location, status).

    Returns:
        The stripped halves, or None when there is no colon or either
        half is empty.
    """
    clean = _ANNOTATION_PATTERN.sub("", summary).strip()
    if ":" not in clean:
        return None

    location, status = clean.split(":", 1)
    location, status = location.strip(), status.strip()
    if not location or not status:
        return None
    return location, status


def parse_timestamp(value: Any, tz: tzinfo) -> datetime | None:
    """Parse an ISO 8601 feed timestamp.

    Naive timestamps are interpreted in ``tz``.

    Returns:
        An aware datetime, or None if the value cannot be parsed.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def parse_entry(entry: Any, tz: tzinfo) -> RawAnnouncement | None:
    """Turn one feed entry into a RawAnnouncement, or None if it is unusable."""
    if not isinstance(entry, dict):
        logger.debug("Skipping non-object entry: %r", entry)
        return None

    halves = split_summary(summary_text(entry))
    if halves is None:
        logger.debug("Skipping entry without location:status summary: %r", entry.get("summary"))
        return None

    published_at = parse_timestamp(entry.get("updated"), tz)
    if published_at is None:
        logger.debug("Skipping entry with unparsable timestamp: %r", entry.get("updated"))
        return None

    location, status = halves
    return RawAnnouncement(location_text=location, status_text=status, published_at=published_at)


def parse_feed(payload: Any, tz: tzinfo) -> FeedPayload:
    """Parse a decoded feed document.

    Args:
        payload: The decoded JSON document.
        tz: Timezone for naive entry timestamps.

    Returns:
        FeedPayload with every usable entry.

    Raises:
        FeedStructureError: If the ``entry`` array is missing or malformed.
    """
    entries = validate_feed(payload)

    announcements: list[RawAnnouncement] = []
    for entry in entries:
        announcement = parse_entry(entry, tz)
        if announcement is not None:
            announcements.append(announcement)

    skipped = len(entries) - len(announcements)
    if skipped:
        logger.info("Skipped %d of %d feed entries", skipped, len(entries))

    updated = payload.get("updated")
    return FeedPayload(
        updated=updated if isinstance(updated, str) else None,
        announcements=announcements,
    )


def fetch_feed(url: str, timeout: int = 20) -> Any:
    """Download and decode the feed document.

    Raises:
        FeedError: On network failure, a non-OK status or undecodable JSON.
    """
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise FeedError(f"Suspension feed fetch failed: {exc}") from exc

    try:
        return resp.json()
    except ValueError as exc:
        raise FeedStructureError(f"Suspension feed is not valid JSON: {exc}") from exc
