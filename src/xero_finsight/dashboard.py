# Xero FinSight - Financial Dashboard for Xero organisations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Dashboard orchestration.

This module provides the high-level entry point used to compute all the
data behind the dashboard for one reporting period, from a ``ReportSource``.

Overview
--------
``build_dashboard()`` performs, in order:

1. Primary fetches: the Profit & Loss of the period and the Balance Sheet
   at the period end date. These are required; if either fails a single
   ``DashboardError`` is raised (the original error is chained).

2. KPIs and the expense breakdown, computed from the primary reports with
   the configured policies.

3. Optional comparison: the same reports for the previous period
   (``periods.previous_period``). A failure here degrades to comparisons
   with ``has_data=False``.

4. Optional trend: 12 monthly Profit & Loss reports for the year of the
   period end date. A failing month degrades to a zero point.

Separation of concerns
----------------------
- ``extractors.py`` / ``breakdown.py`` read figures out of one report,
- ``kpis.py`` composes the headline KPIs of one period,
- ``trend.py`` and ``comparison.py`` work across periods,
- this module wires them to a source and decides which failures are fatal.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .breakdown import ExpenseLine, extract_section_breakdown
from .comparison import CategoryChange, compare_breakdowns, compare_kpis
from .config import AppConfig, default_app_config
from .kpis import KpiSet, compose_kpis
from .periods import Period, previous_period
from .report import ReportDocument
from .sources import ReportSource
from .trend import TrendPoint, build_monthly_trend

logger = logging.getLogger(__name__)


class DashboardError(RuntimeError):
    """The primary reports of the requested period could not be obtained."""


@dataclass(frozen=True)
class PeriodComparison:
    """
    Period-over-period variations.

    Attributes
    ----------
    previous :
        Period compared against.
    kpis :
        One CategoryChange per amount KPI (revenue, expenses, net_profit,
        cash_balance).
    categories :
        One CategoryChange per line of the current expense breakdown.
    """

    previous: Period
    kpis: list[CategoryChange] = field(default_factory=list)
    categories: list[CategoryChange] = field(default_factory=list)


@dataclass(frozen=True)
class DashboardData:
    """Everything the presentation layer needs for one period."""

    period: Period
    kpis: KpiSet
    expense_breakdown: list[ExpenseLine]
    trend: list[TrendPoint] = field(default_factory=list)
    comparison: Optional[PeriodComparison] = None


def _fetch_reports(
    source: ReportSource, user_id: str, tenant_id: str, period: Period
) -> tuple[ReportDocument, ReportDocument]:
    profit_loss = source.fetch_profit_and_loss(
        user_id, tenant_id, period.start, period.end
    )
    balance_sheet = source.fetch_balance_sheet(user_id, tenant_id, period.end)
    return profit_loss, balance_sheet


def build_monthly_trend_from_source(
    source: ReportSource,
    user_id: str,
    tenant_id: str,
    year: int,
    max_workers: int = 1,
) -> list[TrendPoint]:
    """Run ``build_monthly_trend`` with monthly P&L fetches from ``source``."""

    def fetch(from_date: date, to_date: date) -> ReportDocument:
        return source.fetch_profit_and_loss(user_id, tenant_id, from_date, to_date)

    return build_monthly_trend(year, fetch, max_workers=max_workers)


def _build_comparison(
    source: ReportSource,
    user_id: str,
    tenant_id: str,
    period: Period,
    kpis: KpiSet,
    breakdown: list[ExpenseLine],
    config: AppConfig,
) -> PeriodComparison:
    previous = previous_period(period)
    try:
        prev_pl, prev_bs = _fetch_reports(source, user_id, tenant_id, previous)
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "Comparison reports unavailable for %s: %s",
            previous.label,
            exc,
            exc_info=exc,
        )
        return PeriodComparison(
            previous=previous,
            kpis=compare_kpis(kpis, None),
            categories=compare_breakdowns(breakdown, []),
        )

    prev_kpis = compose_kpis(prev_pl, prev_bs, config.kpi_policy)
    prev_breakdown = extract_section_breakdown(
        prev_pl, config.breakdown_titles, config.breakdown_policy
    )
    return PeriodComparison(
        previous=previous,
        kpis=compare_kpis(kpis, prev_kpis),
        categories=compare_breakdowns(breakdown, prev_breakdown),
    )


def build_dashboard(
    source: ReportSource,
    user_id: str,
    tenant_id: str,
    period: Period,
    config: Optional[AppConfig] = None,
    include_trend: bool = True,
    include_comparison: bool = True,
) -> DashboardData:
    """
    Compute KPIs, breakdown, trend and comparison for ``period``.

    Parameters
    ----------
    source :
        Report source (accounting platform client or offline files).
    user_id, tenant_id :
        Identify the connection on the accounting platform.
    period :
        Reporting period.
    config :
        Application configuration (policies, trend workers). Defaults to
        ``default_app_config()``.
    include_trend, include_comparison :
        Skip the secondary fetches when False.

    Returns
    -------
    DashboardData

    Raises
    ------
    DashboardError
        If the current-period Profit & Loss or Balance Sheet cannot be
        fetched.
    """
    config = config or default_app_config()

    try:
        profit_loss, balance_sheet = _fetch_reports(source, user_id, tenant_id, period)
    except Exception as exc:  # noqa: BLE001
        logger.error("Failed to fetch reports for %s: %s", period.label, exc)
        raise DashboardError(f"Failed to fetch reports for {period.label}.") from exc

    kpis = compose_kpis(profit_loss, balance_sheet, config.kpi_policy)
    breakdown = extract_section_breakdown(
        profit_loss, config.breakdown_titles, config.breakdown_policy
    )

    comparison: Optional[PeriodComparison] = None
    if include_comparison:
        comparison = _build_comparison(
            source, user_id, tenant_id, period, kpis, breakdown, config
        )

    trend: list[TrendPoint] = []
    if include_trend:
        trend = build_monthly_trend_from_source(
            source,
            user_id,
            tenant_id,
            period.end.year,
            max_workers=config.trend_max_workers,
        )

    return DashboardData(
        period=period,
        kpis=kpis,
        expense_breakdown=breakdown,
        trend=trend,
        comparison=comparison,
    )
