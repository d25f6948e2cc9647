"""
domain/streaks.py — Consecutive-day streak counting.

Shared by every streak-style achievement criterion. A streak is anchored at
"today" and walks backward one calendar day at a time until the first gap.
If nothing qualifies today the streak is 0, even when yesterday and the
days before are unbroken.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

DateLike = Union[date, datetime, str]


def to_calendar_date(value: DateLike) -> date:
    """Reduce a timestamp, date or ISO string to its calendar date.

    Strings are cut at the 'T' separator, so '2025-03-01T23:10:00Z' and
    '2025-03-01' both map to March 1st.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).split("T")[0].strip())


def calculate_streak(dates: Iterable[DateLike], today: Optional[date] = None) -> int:
    """Count consecutive qualifying days ending today.

    Args:
        dates: Unordered date-bearing values; duplicates are fine.
        today: Anchor day (default: current UTC date).

    Returns:
        Number of consecutive days, starting at `today`, present in `dates`.
    """
    unique_days = sorted({to_calendar_date(d) for d in dates if d is not None}, reverse=True)
    if not unique_days:
        return 0

    expected = today or datetime.utcnow().date()
    streak = 0
    for day in unique_days:
        if day != expected:
            break
        streak += 1
        expected -= timedelta(days=1)

    return streak
