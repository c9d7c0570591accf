# Salon Ledger - Bookkeeping dashboard for beauty salons
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Time window helpers for Salon Ledger.

This module defines the TimeInterval value object and the functions that
drive the dashboard's reporting window:

- ``compute_intervals`` / ``get_intervals``: ordered buckets covering the
  window that ends at an anchor date (day, week, month or year buckets),
- ``navigate``: move the anchor one full page backward or forward,
- ``can_navigate_next``: refuse to page into the future,
- ``describe_window`` / ``interval_title``: French labels for display.

Weeks always start on Monday. All bounds are inclusive calendar dates.

Window sizes
------------
The number of buckets depends on the granularity and on the compact
display mode (small screens):

    day   14 (compact: 7)
    week   8 (compact: 6)
    month 12 (compact: 6)
    year   5 (always)

Navigation moves the anchor by exactly one window size, so repeated
navigation tiles the timeline without gaps or overlaps.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, Optional, TypeVar

from .transactions import Transaction


class Granularity(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class Direction(str, Enum):
    PREVIOUS = "previous"
    NEXT = "next"


@dataclass(frozen=True)
class TimeInterval:
    """One bucket of a reporting window, with a short human-readable label."""

    start: date
    end: date
    label: str

    def contains(self, day: date) -> bool:
        """Inclusive containment test on [start, end]."""
        return self.start <= day <= self.end


# Short month names, as rendered by the French locale ("d MMM").
MONTH_ABBR_FR = (
    "janv.",
    "févr.",
    "mars",
    "avr.",
    "mai",
    "juin",
    "juil.",
    "août",
    "sept.",
    "oct.",
    "nov.",
    "déc.",
)

_WINDOW_SIZES: dict[Granularity, tuple[int, int]] = {
    # granularity: (regular, compact)
    Granularity.DAY: (14, 7),
    Granularity.WEEK: (8, 6),
    Granularity.MONTH: (12, 6),
    Granularity.YEAR: (5, 5),
}

_TITLE_PREFIX = {
    Granularity.DAY: "Jour du",
    Granularity.WEEK: "Semaine du",
    Granularity.MONTH: "Mois de",
    Granularity.YEAR: "Année",
}


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def _day_label(d: date) -> str:
    return f"{d.day} {MONTH_ABBR_FR[d.month - 1]}"


def _month_label(d: date) -> str:
    return f"{MONTH_ABBR_FR[d.month - 1]} {d.year}"


def add_months(d: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month."""
    index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    day = min(d.day, monthrange(year, month)[1])
    return date(year, month, day)


def _week_start(d: date) -> date:
    return d - timedelta(days=d.weekday())


def lookback_count(granularity: Granularity, compact: bool = False) -> int:
    """Number of buckets shown for a granularity."""
    regular, small = _WINDOW_SIZES[Granularity(granularity)]
    return small if compact else regular


def compute_intervals(
    granularity: Granularity,
    anchor: date,
    lookback_count: int,
) -> list[TimeInterval]:
    """
    Compute the ordered buckets of the window ending at `anchor`.

    Parameters
    ----------
    granularity:
        Bucket size (day, week, month, year).
    anchor:
        Right edge of the window. The last bucket is the day, week, month
        or year containing it.
    lookback_count:
        Number of buckets, oldest first.

    Returns
    -------
    list[TimeInterval]
        Exactly `lookback_count` contiguous, non-overlapping intervals.

    Raises
    ------
    ValueError
        If `lookback_count` is lower than 1.
    """
    if lookback_count < 1:
        raise ValueError(f"lookback_count must be at least 1, got {lookback_count}.")

    granularity = Granularity(granularity)
    intervals: list[TimeInterval] = []

    for offset in range(lookback_count - 1, -1, -1):
        if granularity is Granularity.DAY:
            start = anchor - timedelta(days=offset)
            end = start
            label = _day_label(start)
        elif granularity is Granularity.WEEK:
            start = _week_start(anchor) - timedelta(weeks=offset)
            end = start + timedelta(days=6)
            label = _day_label(start)
        elif granularity is Granularity.MONTH:
            start = add_months(anchor.replace(day=1), -offset)
            end = start.replace(day=monthrange(start.year, start.month)[1])
            label = _month_label(start)
        else:
            year = anchor.year - offset
            start = date(year, 1, 1)
            end = date(year, 12, 31)
            label = str(year)

        intervals.append(TimeInterval(start=start, end=end, label=label))

    return intervals


def get_intervals(
    granularity: Granularity,
    anchor: date,
    compact: bool = False,
) -> list[TimeInterval]:
    """Intervals of the window for the display mode (regular or compact)."""
    return compute_intervals(granularity, anchor, lookback_count(granularity, compact))


def shift_anchor(granularity: Granularity, anchor: date, units: int) -> date:
    """Move `anchor` by `units` buckets (negative moves backward)."""
    granularity = Granularity(granularity)
    if granularity is Granularity.DAY:
        return anchor + timedelta(days=units)
    if granularity is Granularity.WEEK:
        return anchor + timedelta(weeks=units)
    if granularity is Granularity.MONTH:
        return add_months(anchor, units)
    return add_months(anchor, 12 * units)


def navigate(
    direction: Direction,
    granularity: Granularity,
    anchor: date,
    compact: bool = False,
) -> date:
    """
    Return the anchor one full window before or after `anchor`.

    The result is never clamped: callers check :func:`can_navigate_next`
    before moving forward.
    """
    count = lookback_count(granularity, compact)
    if Direction(direction) is Direction.PREVIOUS:
        count = -count
    return shift_anchor(granularity, anchor, count)


def can_navigate_next(
    granularity: Granularity,
    anchor: date,
    compact: bool = False,
    today: Optional[date] = None,
) -> bool:
    """
    True if moving forward one window does not put the anchor in the future.

    Parameters
    ----------
    today:
        Reference date, defaults to the real current date.
    """
    reference = today if today is not None else _today()
    next_anchor = navigate(Direction.NEXT, granularity, anchor, compact)
    return next_anchor <= reference


def describe_window(
    granularity: Granularity,
    anchor: date,
    compact: bool = False,
) -> str:
    """
    Human description of the whole window, e.g. '5 janv. - 18 janv. 2025'.
    """
    intervals = get_intervals(granularity, anchor, compact)
    first, last = intervals[0], intervals[-1]
    granularity = Granularity(granularity)

    if granularity is Granularity.YEAR:
        return f"{first.start.year} - {last.end.year}"
    if granularity is Granularity.MONTH:
        return f"{_month_label(first.start)} - {_month_label(last.start)}"
    # Day and week windows: first bucket start to last bucket end.
    return f"{_day_label(first.start)} - {_day_label(last.end)} {last.end.year}"


def interval_title(granularity: Granularity, interval: TimeInterval) -> str:
    """Tooltip title of one bucket, e.g. 'Semaine du 6 janv.'."""
    return f"{_TITLE_PREFIX[Granularity(granularity)]} {interval.label}"


T = TypeVar("T", bound=Transaction)


def filter_by_interval(transactions: Iterable[T], interval: TimeInterval) -> list[T]:
    """
    Keep only transactions dated within the interval.

    Parameters
    ----------
    transactions:
        Revenue or expense transactions.
    interval:
        Interval defining the [start, end] boundaries (inclusive).
    """
    return [t for t in transactions if interval.contains(t.date)]
