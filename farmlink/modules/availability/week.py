"""Submission-week arithmetic. Weeks start Monday 00:00 UTC."""

from __future__ import annotations

from datetime import datetime, timedelta

from farmlink.clock import as_utc

# Monday and Tuesday
SUBMISSION_WINDOW_WEEKDAYS = frozenset({0, 1})


def week_start(moment: datetime) -> datetime:
    moment = as_utc(moment)
    monday = moment - timedelta(days=moment.weekday())
    return monday.replace(hour=0, minute=0, second=0, microsecond=0)


def week_end(moment: datetime) -> datetime:
    """Last instant of the week containing ``moment``."""
    return week_start(moment) + timedelta(days=7) - timedelta(microseconds=1)


def is_late_submission(moment: datetime) -> bool:
    return as_utc(moment).weekday() not in SUBMISSION_WINDOW_WEEKDAYS


__all__ = [
    "SUBMISSION_WINDOW_WEEKDAYS",
    "is_late_submission",
    "week_end",
    "week_start",
]
