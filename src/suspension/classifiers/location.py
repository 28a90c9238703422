"""Location text to canonical county/township key resolution.

Resolves the location half of a feed summary into one of three shapes:
  - outlying island: reported at county granularity but treated as a
    township of its own county (e.g. 澎湖縣, 台東縣蘭嶼鄉)
  - township: "<county>縣|市<town>鄉|鎮|市|區"
  - county: anything else, after noise phrases are removed
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

OUTLYING_ISLANDS = ("澎湖縣", "金門縣", "連江縣", "臺東縣蘭嶼鄉", "臺東縣綠島鄉")
NOISE_PHRASES = ("部分區域", "災害應變中心")

_PAREN_PATTERN = re.compile(r"[(（].*?[)）]")
_COUNTY_PREFIX_PATTERN = re.compile(r"^(.*?)(縣|市)")
_TOWNSHIP_PATTERN = re.compile(r"(.*?)(縣|市)(.*?)(鄉|鎮|市|區)")


@dataclass(frozen=True)
class LocationRules:
    """Name lists used by the resolver."""

    outlying_islands: tuple[str, ...] = OUTLYING_ISLANDS
    noise_phrases: tuple[str, ...] = NOISE_PHRASES


DEFAULT_LOCATION_RULES = LocationRules()


@dataclass(frozen=True)
class ResolvedLocation:
    """Canonical key of a location and its owning county."""

    key: str
    is_township: bool
    parent_county_key: str


def load_location_rules(locations: dict[str, Any] | None) -> LocationRules:
    """Build LocationRules from locations.yaml contents, keeping defaults for gaps."""
    if not locations:
        return DEFAULT_LOCATION_RULES

    overrides: dict[str, tuple[str, ...]] = {}
    for name in ("outlying_islands", "noise_phrases"):
        values = locations.get(name)
        if values:
            overrides[name] = tuple(str(v) for v in values)

    return LocationRules(**overrides)


def canonicalize(name: str) -> str:
    """Normalize a county/township name.

    Unifies 臺 and 台, removes parenthetical notes and trims whitespace.
    Applying it twice gives the same result as applying it once.
    """
    return _PAREN_PATTERN.sub("", name.replace("臺", "台")).strip()


def _island_parent(island: str, location: str) -> str:
    """Derive the county that owns an outlying island."""
    match = _COUNTY_PREFIX_PATTERN.match(island)
    if match:
        return canonicalize(match.group(1).strip() + match.group(2))

    # Island names without a county suffix: cut at the first suffix character
    suffix = "縣" if "縣" in location else "市"
    return canonicalize(location.split("縣")[0].split("市")[0] + suffix)


def resolve_location(
    location_text: str,
    rules: LocationRules = DEFAULT_LOCATION_RULES,
) -> ResolvedLocation:
    """Resolve raw location text to its canonical key.

    Args:
        location_text: The location half of a feed summary.
        rules: Outlying island and noise phrase lists.

    Returns:
        ResolvedLocation. Text that matches no township shape falls back
        to a county-level key.
    """
    location = canonicalize(location_text)

    for island in rules.outlying_islands:
        island_key = canonicalize(island)
        if island_key and island_key in location:
            return ResolvedLocation(
                key=island_key,
                is_township=True,
                parent_county_key=_island_parent(island_key, location),
            )

    match = _TOWNSHIP_PATTERN.search(location)
    if match:
        return ResolvedLocation(
            key=location,
            is_township=True,
            parent_county_key=canonicalize(match.group(1).strip() + match.group(2)),
        )

    cleaned = location
    for phrase in rules.noise_phrases:
        cleaned = cleaned.replace(phrase, "")
    county_key = canonicalize(cleaned)
    return ResolvedLocation(key=county_key, is_township=False, parent_county_key=county_key)


def is_outlying_island(key: str, rules: LocationRules = DEFAULT_LOCATION_RULES) -> bool:
    """Check whether a canonical key names one of the outlying islands."""
    return key in {canonicalize(island) for island in rules.outlying_islands}
