import json
from datetime import date

import pandas as pd
import pytest

from xero_finsight.breakdown import ExpenseLine
from xero_finsight.comparison import CategoryChange
from xero_finsight.dashboard import DashboardData, PeriodComparison
from xero_finsight.export import (
    breakdown_to_frame,
    comparison_to_frame,
    dashboard_to_csv,
    dashboard_to_dict,
    kpis_to_frame,
    trend_to_frame,
)
from xero_finsight.kpis import KpiSet
from xero_finsight.periods import Period, period_month
from xero_finsight.trend import TrendPoint


def _data(with_comparison: bool = True) -> DashboardData:
    period = period_month(2025, 1)
    comparison = None
    if with_comparison:
        comparison = PeriodComparison(
            previous=period_month(2024, 12),
            kpis=[CategoryChange(name="revenue", change=12.3456, has_data=True)],
            categories=[CategoryChange(name="Rent", change=0.0, has_data=False)],
        )
    return DashboardData(
        period=period,
        kpis=KpiSet(
            revenue=5000.0,
            expenses=1000.0,
            net_profit=4000.0,
            net_margin=80.0,
            cash_balance=250.5,
        ),
        expense_breakdown=[
            ExpenseLine(name="Rent, office", value=600.0, percentage=60.0),
            ExpenseLine(name="Software", value=400.0, percentage=40.0),
        ],
        trend=[TrendPoint(month="Jan", revenue=5000.0, expenses=1000.0)],
        comparison=comparison,
    )


def test_kpis_to_frame() -> None:
    df = kpis_to_frame(KpiSet(revenue=10.0, net_margin=33.33333))

    assert list(df.columns) == ["metric", "amount"]
    assert list(df["metric"]) == [
        "Revenue",
        "Expenses",
        "Net Profit",
        "Net Margin (%)",
        "Cash Balance",
    ]
    assert df.loc[3, "amount"] == pytest.approx(33.33)


def test_breakdown_and_trend_frames() -> None:
    data = _data()

    breakdown = breakdown_to_frame(data.expense_breakdown)
    assert list(breakdown.columns) == ["category", "amount", "percentage"]
    assert list(breakdown["category"]) == ["Rent, office", "Software"]

    trend = trend_to_frame(data.trend)
    assert trend.loc[0, "net_profit"] == pytest.approx(4000.0)

    assert breakdown_to_frame([]).empty
    assert list(trend_to_frame([]).columns) == ["month", "revenue", "expenses", "net_profit"]


def test_comparison_frame_leaves_missing_changes_empty() -> None:
    df = comparison_to_frame(_data().comparison.kpis + _data().comparison.categories)

    assert df.loc[0, "change_pct"] == pytest.approx(12.3)
    assert pd.isna(df.loc[1, "change_pct"])
    assert list(df["has_data"]) == [True, False]


def test_dashboard_to_dict_is_json_serializable() -> None:
    out = dashboard_to_dict(_data())

    assert out["period"]["from"] == "2025-01-01"
    assert out["period"]["to"] == "2025-01-31"
    assert out["summary"]["netMargin"] == 80.0
    assert out["expenseBreakdown"][0] == {
        "name": "Rent, office",
        "value": 600.0,
        "percentage": 60.0,
    }
    assert out["comparison"]["categories"] == [
        {"name": "Rent", "change": 0.0, "hasData": False}
    ]
    json.dumps(out)

    assert dashboard_to_dict(_data(with_comparison=False))["comparison"] is None


def test_dashboard_to_csv_layout_and_quoting() -> None:
    text = dashboard_to_csv(_data())
    lines = text.splitlines()

    assert lines[0] == "Financial Report"
    assert lines[1] == "Period: 2025-01-01 to 2025-01-31"
    assert "Summary" in lines
    assert "Metric,Amount" in lines
    assert "Net Margin (%),80.00" in lines
    assert "Expense Breakdown" in lines
    assert "Category,Amount,Percentage" in lines
    assert '"Rent, office",600.0,60.00' in lines
    assert "Software,400.0,40.00" in lines


def test_dashboard_to_csv_rounds_ratios_but_not_amounts() -> None:
    """Margin and percentages get fixed decimals, amounts are written as is."""
    data = DashboardData(
        period=period_month(2025, 1),
        kpis=KpiSet(revenue=1234.567, net_margin=33.33333, cash_balance=0.125),
        expense_breakdown=[
            ExpenseLine(name="Rent", value=987.654, percentage=66.66666),
        ],
    )

    lines = dashboard_to_csv(data).splitlines()

    assert "Revenue,1234.567" in lines
    assert "Cash Balance,0.125" in lines
    assert "Net Margin (%),33.33" in lines
    assert "Rent,987.654,66.67" in lines

    assert "Net Margin (%),33.3" in dashboard_to_csv(data, decimals=1).splitlines()


def test_custom_period_in_dict() -> None:
    data = _data(with_comparison=False)
    custom = DashboardData(
        period=Period(start=date(2025, 2, 3), end=date(2025, 2, 9), label="Week"),
        kpis=data.kpis,
        expense_breakdown=[],
    )

    out = dashboard_to_dict(custom)

    assert out["period"]["label"] == "Week"
    assert out["expenseBreakdown"] == []
    assert out["trend"] == []
