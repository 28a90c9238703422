"""Environment-aware configuration loader.

Loads YAML config from config/suspension.{env}.yaml and keyword
dictionaries from config/keyword_dicts/.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta, timezone
from pathlib import Path
from typing import Any

import yaml

VALID_ENVS = ("dev", "staging", "prod")
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_SUSPENSION_URL = "https://alerts.ncdr.nat.gov.tw/JSONAtomFeed.ashx?AlertType=33"
DEFAULT_BULLETIN_URL = "https://www.cwa.gov.tw/rss/Data/cwa_warning.xml"


@dataclass(frozen=True)
class PathsConfig:
    """Filesystem paths for snapshot output."""

    output_dir: str


@dataclass(frozen=True)
class FeedsConfig:
    """Upstream feed locations."""

    suspension_url: str = DEFAULT_SUSPENSION_URL
    bulletin_url: str = DEFAULT_BULLETIN_URL
    timeout_seconds: int = 20


@dataclass(frozen=True)
class TimezoneConfig:
    """Local time used for day truncation and "today"."""

    utc_offset_hours: int = 8

    @property
    def tzinfo(self) -> timezone:
        return timezone(timedelta(hours=self.utc_offset_hours))


@dataclass(frozen=True)
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(frozen=True)
class KeywordDicts:
    """Loaded keyword dictionaries."""

    status_keywords: dict[str, list[str]] = field(default_factory=dict)
    locations: dict[str, list[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    env: str
    paths: PathsConfig
    feeds: FeedsConfig
    timezone: TimezoneConfig
    logging: LoggingConfig
    keywords: KeywordDicts


def detect_env(cli_env: str | None = None) -> str:
    """Detect the runtime environment.

    Priority:
      1. Explicit CLI flag
      2. SUSPENSION_ENV environment variable
      3. Default to 'dev'
    """
    env = cli_env or os.environ.get("SUSPENSION_ENV", "dev")
    if env not in VALID_ENVS:
        raise ValueError(f"Invalid environment '{env}'. Must be one of {VALID_ENVS}")
    return env


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _load_keyword_dicts(config_dir: Path) -> KeywordDicts:
    """Load all keyword dictionary YAML files."""
    kw_dir = config_dir / "keyword_dicts"

    status_path = kw_dir / "status_keywords.yaml"
    locations_path = kw_dir / "locations.yaml"

    status_keywords: dict[str, list[str]] = {}
    if status_path.exists():
        status_keywords = _load_yaml(status_path)

    locations: dict[str, list[str]] = {}
    if locations_path.exists():
        locations = _load_yaml(locations_path)

    return KeywordDicts(status_keywords=status_keywords, locations=locations)


def load_config(
    env: str | None = None,
    config_dir: Path | None = None,
) -> AppConfig:
    """Load and parse the YAML config for the given environment.

    Args:
        env: The environment name (dev/staging/prod). Auto-detected if None.
        config_dir: Override the config directory path.

    Returns:
        Fully resolved AppConfig instance.
    """
    resolved_env = detect_env(env)
    resolved_config_dir = config_dir or PROJECT_ROOT / "config"
    config_path = resolved_config_dir / f"suspension.{resolved_env}.yaml"

    raw = _load_yaml(config_path)

    paths_raw = raw.get("paths", {})
    paths = PathsConfig(
        output_dir=paths_raw.get("output_dir", "./data/processed"),
    )

    feeds_raw = raw.get("feeds", {})
    feeds = FeedsConfig(
        suspension_url=feeds_raw.get("suspension_url", DEFAULT_SUSPENSION_URL),
        bulletin_url=feeds_raw.get("bulletin_url", DEFAULT_BULLETIN_URL),
        timeout_seconds=feeds_raw.get("timeout_seconds", 20),
    )

    tz_raw = raw.get("timezone", {})
    tz = TimezoneConfig(utc_offset_hours=tz_raw.get("utc_offset_hours", 8))

    logging_raw = raw.get("logging", {})
    logging_cfg = LoggingConfig(
        level=logging_raw.get("level", "INFO"),
        format=logging_raw.get("format", "%(asctime)s [%(levelname)s] %(name)s: %(message)s"),
    )

    keywords = _load_keyword_dicts(resolved_config_dir)

    return AppConfig(
        env=resolved_env,
        paths=paths,
        feeds=feeds,
        timezone=tz,
        logging=logging_cfg,
        keywords=keywords,
    )
