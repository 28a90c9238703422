"""Target date resolution for announcement sentences.

An announcement applies to:
  1. its publish date if it says "今天"
  2. the following day if it says "明天"
  3. an explicit "M/D" or "M月D日" date in the publish year
  4. its publish date when nothing above matches
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta, tzinfo

from suspension.classifiers.status import DEFAULT_RULES, StatusRules

_SLASH_DATE_PATTERN = re.compile(r"(\d{1,2})/(\d{1,2})")
_CJK_DATE_PATTERN = re.compile(r"(\d{1,2})月(\d{1,2})日")


def _valid_month_day(year: int, month: int, day: int) -> bool:
    if not 1 <= month <= 12:
        return False
    return 1 <= day <= calendar.monthrange(year, month)[1]


def parse_explicit_date(text: str, reference: date) -> date | None:
    """Find an explicit month/day in text, using the reference year.

    Tries "M/D" first, then "M月D日". A match naming an impossible date
    (e.g. 2/30) is ignored rather than rolled over.

    Args:
        text: Status sentence.
        reference: Date whose year completes the month/day.

    Returns:
        The parsed date, or None if no valid date was found.
    """
    for pattern in (_SLASH_DATE_PATTERN, _CJK_DATE_PATTERN):
        match = pattern.search(text)
        if not match:
            continue
        month, day = int(match.group(1)), int(match.group(2))
        if _valid_month_day(reference.year, month, day):
            return date(reference.year, month, day)
    return None


def resolve_target_date(
    status_text: str,
    published_on: date,
    rules: StatusRules = DEFAULT_RULES,
) -> date:
    """Resolve the calendar date an announcement applies to.

    Args:
        status_text: Status sentence of the announcement.
        published_on: Publish date of the announcement (local, day precision).
        rules: Keyword lists providing the "today"/"tomorrow" words.

    Returns:
        The target date. Never fails; unknown text means the publish date.
    """
    if any(kw in status_text for kw in rules.today):
        return published_on
    if any(kw in status_text for kw in rules.tomorrow):
        return published_on + timedelta(days=1)

    explicit = parse_explicit_date(status_text, published_on)
    if explicit is not None:
        return explicit

    return published_on


def local_date(moment: datetime, tz: tzinfo) -> date:
    """Truncate a timestamp to its calendar date in the given timezone.

    Naive timestamps are taken to be local already.
    """
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()


def today_in(tz: tzinfo) -> date:
    """Return the current real-world date in the given timezone."""
    return datetime.now(tz).date()


def format_iso(day: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return day.strftime("%Y-%m-%d")


def format_display_date(day: date) -> str:
    """Format a date as M月D日 for display."""
    return f"{day.month}月{day.day}日"
