# Xero FinSight - Financial Dashboard for Xero organisations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Tabular and serializable views of dashboard results.

The DataFrame builders are used for console rendering and CSV export; the
dict builder produces the JSON document served to the front end and used
for JSON downloads. No figure is recomputed here.
"""

from collections.abc import Sequence
from typing import Any

import pandas as pd

from .breakdown import ExpenseLine
from .comparison import CategoryChange
from .dashboard import DashboardData
from .kpis import KpiSet
from .trend import TrendPoint

KPI_LABELS: tuple[tuple[str, str], ...] = (
    ("revenue", "Revenue"),
    ("expenses", "Expenses"),
    ("net_profit", "Net Profit"),
    ("net_margin", "Net Margin (%)"),
    ("cash_balance", "Cash Balance"),
)


def kpis_to_frame(kpis: KpiSet, decimals: int = 2) -> pd.DataFrame:
    """One row per KPI: metric, amount."""
    rows = [
        {"metric": label, "amount": round(float(getattr(kpis, key)), decimals)}
        for key, label in KPI_LABELS
    ]
    return pd.DataFrame(rows, columns=["metric", "amount"])


def breakdown_to_frame(
    breakdown: Sequence[ExpenseLine], decimals: int = 2
) -> pd.DataFrame:
    """One row per breakdown line: category, amount, percentage."""
    rows = [
        {
            "category": line.name,
            "amount": line.value,
            "percentage": round(line.percentage, decimals),
        }
        for line in breakdown
    ]
    return pd.DataFrame(rows, columns=["category", "amount", "percentage"])


def trend_to_frame(trend: Sequence[TrendPoint]) -> pd.DataFrame:
    """One row per month: month, revenue, expenses, net_profit."""
    rows = [
        {
            "month": p.month,
            "revenue": p.revenue,
            "expenses": p.expenses,
            "net_profit": p.net_profit,
        }
        for p in trend
    ]
    return pd.DataFrame(rows, columns=["month", "revenue", "expenses", "net_profit"])


def comparison_to_frame(
    changes: Sequence[CategoryChange], decimals: int = 1
) -> pd.DataFrame:
    """One row per compared item; change is empty when has_data is False."""
    rows = [
        {
            "name": c.name,
            "change_pct": round(c.change, decimals) if c.has_data else None,
            "has_data": c.has_data,
        }
        for c in changes
    ]
    return pd.DataFrame(rows, columns=["name", "change_pct", "has_data"])


def _change_dict(change: CategoryChange) -> dict[str, Any]:
    return {"name": change.name, "change": change.change, "hasData": change.has_data}


def dashboard_to_dict(data: DashboardData) -> dict[str, Any]:
    """JSON-ready representation of a DashboardData."""
    kpis = data.kpis
    out: dict[str, Any] = {
        "period": {
            "from": data.period.start.isoformat(),
            "to": data.period.end.isoformat(),
            "label": data.period.label,
        },
        "summary": {
            "revenue": kpis.revenue,
            "expenses": kpis.expenses,
            "netProfit": kpis.net_profit,
            "netMargin": kpis.net_margin,
            "cashBalance": kpis.cash_balance,
        },
        "expenseBreakdown": [
            {"name": line.name, "value": line.value, "percentage": line.percentage}
            for line in data.expense_breakdown
        ],
        "trend": [
            {"month": p.month, "revenue": p.revenue, "expenses": p.expenses}
            for p in data.trend
        ],
        "comparison": None,
    }

    if data.comparison is not None:
        out["comparison"] = {
            "previous": {
                "from": data.comparison.previous.start.isoformat(),
                "to": data.comparison.previous.end.isoformat(),
            },
            "kpis": [_change_dict(c) for c in data.comparison.kpis],
            "categories": [_change_dict(c) for c in data.comparison.categories],
        }

    return out


def _summary_csv_frame(kpis: KpiSet, decimals: int) -> pd.DataFrame:
    rows = []
    for key, label in KPI_LABELS:
        value = float(getattr(kpis, key))
        if key == "net_margin":
            rows.append({"Metric": label, "Amount": f"{value:.{decimals}f}"})
        else:
            rows.append({"Metric": label, "Amount": value})
    return pd.DataFrame(rows, columns=["Metric", "Amount"])


def _breakdown_csv_frame(
    breakdown: Sequence[ExpenseLine], decimals: int
) -> pd.DataFrame:
    rows = [
        {
            "Category": line.name,
            "Amount": line.value,
            "Percentage": f"{line.percentage:.{decimals}f}",
        }
        for line in breakdown
    ]
    return pd.DataFrame(rows, columns=["Category", "Amount", "Percentage"])


def dashboard_to_csv(data: DashboardData, decimals: int = 2) -> str:
    """
    CSV export of the summary and expense breakdown sections.

    Amounts are written as extracted; the net margin and the breakdown
    percentages are formatted with ``decimals`` digits.

    Layout::

        Financial Report
        Period: <from> to <to>

        Summary
        Metric,Amount
        ...

        Expense Breakdown
        Category,Amount,Percentage
        ...
    """
    summary = _summary_csv_frame(data.kpis, decimals)
    breakdown = _breakdown_csv_frame(data.expense_breakdown, decimals)

    parts = [
        "Financial Report\n",
        f"Period: {data.period.start.isoformat()} to {data.period.end.isoformat()}\n",
        "\n",
        "Summary\n",
        summary.to_csv(index=False, lineterminator="\n"),
        "\n",
        "Expense Breakdown\n",
        breakdown.to_csv(index=False, lineterminator="\n"),
    ]
    return "".join(parts)
