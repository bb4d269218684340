# Xero FinSight - Financial Dashboard for Xero organisations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
KPI composition.

``compose_kpis`` combines the single-figure extractors into the headline
KPIs shown on the dashboard:

- revenue       : first "Total Income" line of the Profit & Loss,
- expenses      : "Total Operating Expenses" summary row, falling back to a
                  generic expense label lookup when that row is absent,
- net_profit    : signed "Net Profit" row, falling back to
                  revenue - expenses when the row yields exactly 0,
- net_margin    : net_profit / revenue * 100 (0 when revenue is not positive),
- cash_balance  : first "Total Bank" line of the Balance Sheet.

A net profit of exactly 0 cannot be told apart from a missing row, so it is
always replaced by revenue - expenses.

Candidate names are held by ``KpiPolicy``. Two policies are provided:
``KpiPolicy.canonical()`` (the default, narrow candidates) and
``KpiPolicy.legacy()`` (the broader candidate lists used by older
dashboards).
"""

import logging
from dataclasses import dataclass

from .extractors import (
    TOTAL_BANK,
    TOTAL_INCOME,
    ensure_document,
    extract_net_profit,
    extract_total_operating_expenses,
    extract_value,
    normalize_candidates,
)
from .report import ReportDocument

logger = logging.getLogger(__name__)

GENERIC_EXPENSE_CANDIDATES: tuple[str, ...] = (
    "Total Operating Expenses",
    "Total Expenses",
    "Expenses",
    "Operating Expenses",
)
LEGACY_REVENUE_CANDIDATES: tuple[str, ...] = (
    "Sales",
    "Revenue",
    "Income",
    "Total Income",
)
LEGACY_CASH_CANDIDATES: tuple[str, ...] = (
    "Business Bank Account",
    "Business Savings Account",
    "Total Bank",
    "Cash",
    "Bank",
    "Current Assets",
)


@dataclass(frozen=True)
class KpiSet:
    """Headline KPIs of one period. Amounts are in the reporting currency."""

    revenue: float = 0.0
    expenses: float = 0.0
    net_profit: float = 0.0
    net_margin: float = 0.0
    cash_balance: float = 0.0


@dataclass(frozen=True)
class KpiPolicy:
    """Candidate label lists used by ``compose_kpis``."""

    revenue_candidates: tuple[str, ...] = TOTAL_INCOME
    expense_candidates: tuple[str, ...] = GENERIC_EXPENSE_CANDIDATES
    cash_candidates: tuple[str, ...] = TOTAL_BANK

    def __post_init__(self) -> None:
        # Fail at construction time rather than at the first extraction.
        for attr in ("revenue_candidates", "expense_candidates", "cash_candidates"):
            normalize_candidates(getattr(self, attr))

    @classmethod
    def canonical(cls) -> "KpiPolicy":
        return cls()

    @classmethod
    def legacy(cls) -> "KpiPolicy":
        return cls(
            revenue_candidates=LEGACY_REVENUE_CANDIDATES,
            cash_candidates=LEGACY_CASH_CANDIDATES,
        )


def net_margin(net_profit: float, revenue: float) -> float:
    """Net profit as a percentage of revenue (0 when revenue <= 0)."""
    if revenue > 0:
        return net_profit / revenue * 100
    return 0.0


def compose_kpis(
    profit_loss: ReportDocument,
    balance_sheet: ReportDocument,
    policy: KpiPolicy = KpiPolicy(),
) -> KpiSet:
    """
    Compute the KpiSet of one period.

    Args:
        profit_loss: Profit & Loss report of the period.
        balance_sheet: Balance Sheet report at the end of the period.
        policy: Candidate label lists.

    Returns:
        A KpiSet. Missing lines resolve to 0 (see module docstring for the
        fallback rules).

    Raises:
        TypeError: if either document is None.
    """
    ensure_document(profit_loss)
    ensure_document(balance_sheet)

    revenue = extract_value(profit_loss, policy.revenue_candidates)

    expenses = extract_total_operating_expenses(profit_loss)
    if expenses == 0:
        expenses = extract_value(profit_loss, policy.expense_candidates)
        logger.debug("No operating expenses summary row, generic lookup: %s", expenses)

    net_profit = extract_net_profit(profit_loss)
    if net_profit == 0:
        net_profit = revenue - expenses
        logger.debug("Net profit derived from revenue - expenses: %s", net_profit)

    cash_balance = extract_value(balance_sheet, policy.cash_candidates)

    return KpiSet(
        revenue=revenue,
        expenses=expenses,
        net_profit=net_profit,
        net_margin=net_margin(net_profit, revenue),
        cash_balance=cash_balance,
    )
