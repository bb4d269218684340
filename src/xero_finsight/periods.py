# Xero FinSight - Financial Dashboard for Xero organisations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for Xero FinSight.

This module defines a Period value object and helpers to derive the
reporting windows used by the dashboard: the default YEAR / MONTH
timeframes, explicit from/to dates, the comparison (previous) period and
calendar month boundaries for trends.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

TIMEFRAMES: tuple[str, ...] = ("YEAR", "MONTH")


@dataclass(frozen=True)
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a calendar month."""
    last_day = monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def period_year(year: int) -> Period:
    """Full calendar year."""
    return Period(start=date(year, 1, 1), end=date(year, 12, 31), label=f"Year {year}")


def period_month(year: int, month: int) -> Period:
    """Full calendar month."""
    start, end = month_bounds(year, month)
    return Period(start=start, end=end, label=start.strftime("%B %Y"))


def period_for_timeframe(timeframe: str, today: Optional[date] = None) -> Period:
    """
    Default period of a dashboard timeframe.

    - "YEAR":  calendar year containing ``today``,
    - "MONTH": calendar month containing ``today``.

    Raises:
        ValueError: on an unknown timeframe.
    """
    today = today or _today()
    tf = timeframe.upper()
    if tf == "YEAR":
        return period_year(today.year)
    if tf == "MONTH":
        return period_month(today.year, today.month)
    raise ValueError(f"Unknown timeframe: {timeframe!r}")


def resolve_period(
    timeframe: str = "YEAR",
    from_date: Optional[str] = None,
    to_date: Optional[str] = None,
    today: Optional[date] = None,
) -> Period:
    """
    Determine the reporting period from request-style arguments.

    Priority (highest to lowest):

        1. explicit from_date AND to_date (YYYY-MM-DD)
        2. the timeframe default window

    A single explicit bound is ignored, as the dashboard does.
    """
    if from_date and to_date:
        start = date.fromisoformat(from_date)
        end = date.fromisoformat(to_date)
        if end < start:
            raise ValueError("Custom period end date cannot be before start date.")
        return Period(start=start, end=end, label=f"Custom period ({start} → {end})")

    return period_for_timeframe(timeframe, today)


def previous_period(period: Period) -> Period:
    """
    Period of the same shape immediately preceding ``period``.

    Whole calendar years map to the previous year and whole calendar months
    to the previous month; any other window is shifted back by its own
    length.
    """
    start, end = period.start, period.end

    if (start.month, start.day) == (1, 1) and (end.month, end.day) == (12, 31):
        if start.year == end.year:
            return period_year(start.year - 1)

    if (
        start.day == 1
        and start.year == end.year
        and start.month == end.month
        and end == month_bounds(end.year, end.month)[1]
    ):
        if start.month == 1:
            return period_month(start.year - 1, 12)
        return period_month(start.year, start.month - 1)

    length = end - start
    prev_end = start - timedelta(days=1)
    prev_start = prev_end - length
    return Period(
        start=prev_start,
        end=prev_end,
        label=f"Previous period ({prev_start} → {prev_end})",
    )
