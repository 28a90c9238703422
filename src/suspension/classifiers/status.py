"""Keyword-based suspension status classification.

Maps an announcement sentence to a StatusLevel:
  1. No suspension keyword                 → normal
  2. Suspension + specific area/personnel  → partial
  3. Suspension + time-of-day word         → partial_time
  4. Suspension otherwise                  → suspended (full day)

The area check takes precedence over the time-of-day check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from suspension.status_types import StatusLevel

SUSPENSION_KEYWORDS = ("停止上班", "停止上課", "已達停止上班及上課標準")
AREA_KEYWORDS = ("部分區域", "特定人員", "學校", "鄰里")
TIME_OF_DAY_KEYWORDS = ("下午", "晚上", "中午", "早上")

TODAY_KEYWORDS = ("今天",)
TOMORROW_KEYWORDS = ("明天",)

# The feed marks locations outside the warning area with this phrase
OPT_OUT_KEYWORDS = ("尚未列入警戒區",)


@dataclass(frozen=True)
class StatusRules:
    """Keyword lists used by the classifier and the date resolver."""

    suspension: tuple[str, ...] = SUSPENSION_KEYWORDS
    area: tuple[str, ...] = AREA_KEYWORDS
    time_of_day: tuple[str, ...] = TIME_OF_DAY_KEYWORDS
    today: tuple[str, ...] = TODAY_KEYWORDS
    tomorrow: tuple[str, ...] = TOMORROW_KEYWORDS
    opt_out: tuple[str, ...] = OPT_OUT_KEYWORDS


DEFAULT_RULES = StatusRules()


def load_status_rules(status_keywords: dict[str, Any] | None) -> StatusRules:
    """Build StatusRules from a keyword dictionary, keeping defaults for gaps.

    Args:
        status_keywords: Parsed status_keywords.yaml contents.

    Returns:
        StatusRules with every list present in the dictionary overridden.
    """
    if not status_keywords:
        return DEFAULT_RULES

    overrides: dict[str, tuple[str, ...]] = {}
    for name in ("suspension", "area", "time_of_day", "today", "tomorrow", "opt_out"):
        values = status_keywords.get(name)
        if values:
            overrides[name] = tuple(str(v) for v in values)

    return StatusRules(**overrides)


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(kw in text for kw in keywords)


def is_opt_out(sentence: str, rules: StatusRules = DEFAULT_RULES) -> bool:
    """Check whether a status sentence says the location is outside the warning area."""
    return _contains_any(sentence, rules.opt_out)


def classify_status(sentence: str, rules: StatusRules = DEFAULT_RULES) -> StatusLevel:
    """Classify an announcement sentence.

    Args:
        sentence: The status half of a feed summary.
        rules: Keyword lists to match against.

    Returns:
        The StatusLevel for the sentence. Unmatched text is normal.
    """
    if not _contains_any(sentence, rules.suspension):
        return StatusLevel.NORMAL
    if _contains_any(sentence, rules.area):
        return StatusLevel.PARTIAL
    if _contains_any(sentence, rules.time_of_day):
        return StatusLevel.PARTIAL_TIME
    return StatusLevel.SUSPENDED
