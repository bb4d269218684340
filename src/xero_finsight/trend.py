# Xero FinSight - Financial Dashboard for Xero organisations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Monthly revenue / expenses trend.

``build_monthly_trend`` fetches one Profit & Loss report per calendar month
of a year through an injected function and extracts revenue ("Total
Income") and expenses ("Total Operating Expenses" summary row) from each.

The result always holds 12 points, January to December. A month whose fetch
fails (exception raised or no report returned) is logged and yields a
zero point; it never interrupts the other months.

Months are fetched one at a time by default. With ``max_workers > 1`` they
are fetched from a thread pool; results are still returned in calendar
order.
"""

import calendar
import logging
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from .extractors import TOTAL_INCOME, extract_total_operating_expenses, extract_value
from .periods import month_bounds
from .report import ReportDocument
from .sources import ReportFetchError

logger = logging.getLogger(__name__)

MonthFetcher = Callable[[date, date], Any]


@dataclass(frozen=True)
class TrendPoint:
    """Revenue and expenses of one month."""

    month: str
    revenue: float = 0.0
    expenses: float = 0.0

    @property
    def net_profit(self) -> float:
        return self.revenue - self.expenses


def _as_document(result: Any) -> ReportDocument:
    if isinstance(result, ReportDocument):
        return result
    if isinstance(result, Mapping):
        return ReportDocument.from_dict(result)
    if result is None:
        raise ReportFetchError("No report returned.")
    raise ReportFetchError(f"Unexpected report type: {type(result).__name__}")


def _month_point(
    year: int, month: int, fetch: MonthFetcher
) -> Optional[TrendPoint]:
    """Trend point of one month, None when its report could not be fetched."""
    label = calendar.month_abbr[month]
    start, end = month_bounds(year, month)

    try:
        document = _as_document(fetch(start, end))
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "Failed to fetch report for %s %d (%s → %s): %s",
            label,
            year,
            start,
            end,
            exc,
            exc_info=exc,
        )
        return None

    return TrendPoint(
        month=label,
        revenue=extract_value(document, TOTAL_INCOME),
        expenses=extract_total_operating_expenses(document),
    )


def build_monthly_trend(
    year: int,
    fetch_report_for_month: MonthFetcher,
    max_workers: int = 1,
) -> list[TrendPoint]:
    """
    Build the 12-point revenue/expenses trend of ``year``.

    Args:
        year: Calendar year.
        fetch_report_for_month: Called with the first and last date of each
            month; returns a ReportDocument (or a raw report payload).
        max_workers: 1 fetches months sequentially, more uses a thread pool.

    Returns:
        Exactly 12 TrendPoint objects, January first.

    Raises:
        ValueError: if ``year`` or ``max_workers`` is invalid.
        TypeError: if ``fetch_report_for_month`` is not callable.
    """
    if isinstance(year, bool) or not isinstance(year, int) or not 1 <= year <= 9999:
        raise ValueError(f"Invalid year: {year!r}")
    if not callable(fetch_report_for_month):
        raise TypeError("fetch_report_for_month must be callable.")
    if max_workers < 1:
        raise ValueError("max_workers must be at least 1.")

    months = range(1, 13)

    if max_workers == 1:
        results = [_month_point(year, m, fetch_report_for_month) for m in months]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [
                pool.submit(_month_point, year, m, fetch_report_for_month)
                for m in months
            ]
            results = [f.result() for f in futures]

    points = [
        point if point is not None else TrendPoint(month=calendar.month_abbr[m])
        for m, point in zip(months, results)
    ]
    failed = sum(1 for point in results if point is None)
    logger.info(
        "Built %d trend point(s) for %d, %d failed fetch(es) zero-filled",
        len(points),
        year,
        failed,
    )
    return points
