# Xero FinSight - Financial Dashboard for Xero organisations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period-over-period comparison helpers.

``percentage_change`` is the single rule used everywhere a variation is
displayed. ``match_by_name`` and ``compare_breakdowns`` pair breakdown lines
of two periods by exact (case-insensitive) name; a category missing from
either period is reported with ``has_data=False`` so that the presentation
layer shows "no comparison available" instead of a 0 % change.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from .breakdown import ExpenseLine
from .kpis import KpiSet

COMPARED_KPIS: tuple[str, ...] = ("revenue", "expenses", "net_profit", "cash_balance")


@dataclass(frozen=True)
class CategoryChange:
    """Variation of one category (or KPI) between two periods."""

    name: str
    change: float
    has_data: bool


def percentage_change(current: float, previous: float) -> float:
    """
    Signed variation from ``previous`` to ``current``, in percent.

    When ``previous`` is 0 the result is 100 if ``current`` is positive
    and 0 otherwise.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def _find_line(breakdown: Sequence[ExpenseLine], name: str) -> Optional[ExpenseLine]:
    key = name.strip().lower()
    for line in breakdown:
        if line.name.strip().lower() == key:
            return line
    return None


def match_by_name(
    breakdown_a: Sequence[ExpenseLine],
    breakdown_b: Sequence[ExpenseLine],
    name: str,
) -> CategoryChange:
    """Compare category ``name`` of ``breakdown_a`` (current) against ``breakdown_b``.

    Raises:
        ValueError: if ``name`` is not a non-empty string.
    """
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Invalid category name: {name!r}")

    current = _find_line(breakdown_a, name)
    previous = _find_line(breakdown_b, name)
    if current is None or previous is None:
        return CategoryChange(name=name, change=0.0, has_data=False)

    return CategoryChange(
        name=name,
        change=percentage_change(current.value, previous.value),
        has_data=True,
    )


def compare_breakdowns(
    current: Sequence[ExpenseLine],
    previous: Sequence[ExpenseLine],
) -> list[CategoryChange]:
    """One CategoryChange per line of ``current``, in the same order."""
    return [match_by_name(current, previous, line.name) for line in current]


def compare_kpis(current: KpiSet, previous: Optional[KpiSet]) -> list[CategoryChange]:
    """Variation of the amount KPIs between two periods.

    Net margin is a ratio and is not compared. With no previous KpiSet,
    every entry has ``has_data=False``.
    """
    changes: list[CategoryChange] = []
    for key in COMPARED_KPIS:
        value = getattr(current, key)
        if previous is None:
            changes.append(CategoryChange(name=key, change=0.0, has_data=False))
            continue
        changes.append(
            CategoryChange(
                name=key,
                change=percentage_change(value, getattr(previous, key)),
                has_data=True,
            )
        )
    return changes
