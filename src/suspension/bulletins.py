"""CWA weather bulletin RSS feed.

Bulletins are informational only; they never affect suspension
statuses. A failed fetch is logged and yields an empty list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import feedparser
import requests

logger = logging.getLogger(__name__)

UNTITLED = "無標題"


@dataclass(frozen=True)
class WeatherBulletin:
    """A single weather bulletin item."""

    title: str
    link: str
    published: datetime | None = None
    published_text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "published": self.published.isoformat() if self.published else self.published_text,
        }


def _published(entry: Any) -> datetime | None:
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return None
    return datetime(*parsed[:6], tzinfo=timezone.utc)


def parse_bulletins(content: bytes | str) -> list[WeatherBulletin]:
    """Parse RSS content into bulletins, keeping feed order."""
    feed = feedparser.parse(content)
    if feed.get("bozo") and not feed.entries:
        logger.warning("Weather bulletin feed could not be parsed: %s", feed.get("bozo_exception"))
        return []

    return [
        WeatherBulletin(
            title=entry.get("title") or UNTITLED,
            link=entry.get("link") or "#",
            published=_published(entry),
            published_text=entry.get("published", ""),
        )
        for entry in feed.entries
    ]


def fetch_bulletins(url: str, timeout: int = 20) -> list[WeatherBulletin]:
    """Download and parse the weather bulletin feed.

    Returns:
        Bulletins in feed order, or an empty list on any fetch failure.
    """
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Weather bulletin fetch failed: %s", exc)
        return []

    bulletins = parse_bulletins(resp.content)
    logger.info("Fetched %d weather bulletins", len(bulletins))
    return bulletins
