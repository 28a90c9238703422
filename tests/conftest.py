"""Shared fixtures for suspension status tests."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from suspension.status_types import RawAnnouncement

TAIWAN = timezone(timedelta(hours=8))


@pytest.fixture
def announcement() -> Callable[[str, str, str], RawAnnouncement]:
    """Factory for RawAnnouncements published at a Taiwan-local time."""

    def _make(location: str, status: str, published: str) -> RawAnnouncement:
        return RawAnnouncement(
            location_text=location,
            status_text=status,
            published_at=datetime.fromisoformat(published).replace(tzinfo=TAIWAN),
        )

    return _make


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).resolve().parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the config directory."""
    return project_root / "config"


@pytest.fixture
def keyword_dicts_dir(config_dir: Path) -> Path:
    """Return the keyword_dicts directory."""
    return config_dir / "keyword_dicts"


@pytest.fixture
def status_keywords(keyword_dicts_dir: Path) -> dict[str, list[str]]:
    """Load status_keywords.yaml."""
    path = keyword_dicts_dir / "status_keywords.yaml"
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def locations(keyword_dicts_dir: Path) -> dict[str, list[str]]:
    """Load locations.yaml."""
    path = keyword_dicts_dir / "locations.yaml"
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def sample_feed() -> dict[str, Any]:
    """A feed document shaped like the NCDR JSON atom feed."""
    return {
        "updated": "2024-07-06T21:00:00+08:00",
        "entry": [
            {
                "updated": "2024-07-06T20:00:00+08:00",
                "summary": {"#text": "[停班停課] 臺北市:明天停止上班停止上課"},
            },
            {
                "updated": "2024-07-06T06:00:00+08:00",
                "summary": "澎湖縣:今天學校停止上課",
            },
            {
                "updated": "2024-07-06T07:00:00+08:00",
                "summary": "南投縣信義鄉:今天停止上班停止上課",
            },
            {
                "updated": "2024-07-06T07:30:00+08:00",
                "summary": "花蓮縣:今天部分區域停止上班停止上課",
            },
            {
                "updated": "2024-07-06T08:00:00+08:00",
                "summary": "臺南市:尚未列入警戒區",
            },
            {
                "updated": "2024-07-06T08:00:00+08:00",
                "summary": "沒有冒號的摘要",
            },
        ],
    }


@pytest.fixture
def feed_file(tmp_path: Path, sample_feed: dict[str, Any]) -> Path:
    """Write the sample feed to disk."""
    path = tmp_path / "feed.json"
    with open(path, "w", encoding="utf-8") as f:
        json.dump(sample_feed, f, ensure_ascii=False)
    return path
