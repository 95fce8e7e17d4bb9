"""
Calendar helpers for the 90-day validation window.

All window arithmetic is done on calendar dates.  Market timestamps carry a
time-of-day from some providers; it is dropped before any comparison so a
point stamped ``2025-02-18T16:00`` matches a candidate date of 2025-02-18.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta

DEFAULT_HORIZON_DAYS = 90


def to_calendar_date(value: date | datetime | str) -> date:
    """Return the calendar date of ``value``, dropping any time component.

    Accepts ``date``, ``datetime``, or an ISO-8601 string (date or datetime).

    Raises:
        ValueError: If a string is not ISO-8601.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) > 10:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return date.fromisoformat(text)


def horizon_end(score_date: date, horizon_days: int = DEFAULT_HORIZON_DAYS) -> date:
    """Last calendar date inside the validation window (inclusive)."""
    return score_date + timedelta(days=horizon_days)


def days_since(start: date, end: date) -> int:
    """Signed whole calendar days from ``start`` to ``end``."""
    return (end - start).days


def weekly_offsets(horizon_days: int = DEFAULT_HORIZON_DAYS, step_days: int = 7) -> list[int]:
    """Day offsets ``0, step, 2*step, ...`` always ending exactly at ``horizon_days``.

    Example::

        weekly_offsets(90)  # [0, 7, 14, ..., 84, 90]
    """
    offsets = list(range(0, horizon_days + 1, step_days))
    if offsets[-1] != horizon_days:
        offsets.append(horizon_days)
    return offsets
