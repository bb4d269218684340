# Xero FinSight - Financial Dashboard for Xero organisations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Section breakdowns (ranked, percentage-weighted line items).

A breakdown is built from the direct line items of one report section,
typically "Less Operating Expenses" in a Profit & Loss report:

1. find the first top-level section whose title contains one of the
   requested substrings (case-insensitive),
2. collect its direct plain rows with a label and an amount, skipping
   total lines and the section's own aggregate label,
3. apply the sign policy (see ``BreakdownPolicy``) and drop zero and
   non-numeric amounts,
4. compute each line's share of the total,
5. sort by descending value (stable) and keep the top ``limit`` lines.

The sign of expense amounts is not consistent across report layouts, hence
the explicit policy. The default takes the absolute value of any non-zero
amount.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional, Union

from .extractors import ensure_document
from .report import ReportDocument, Row, RowKind

logger = logging.getLogger(__name__)

OPERATING_EXPENSES_SECTION = "less operating expenses"
# Legacy matcher: any section mentioning expenses or costs.
LEGACY_EXPENSE_SECTIONS: tuple[str, ...] = ("expense", "cost")

SIGN_POLICIES: tuple[str, ...] = ("absolute", "positive", "negative")
DENOMINATORS: tuple[str, ...] = ("all", "shown")
DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class ExpenseLine:
    """One line of a breakdown."""

    name: str
    value: float
    percentage: float


@dataclass(frozen=True)
class BreakdownPolicy:
    """
    Rules applied when turning a section into a breakdown.

    Attributes
    ----------
    sign_policy :
        'absolute' keeps any non-zero amount as its absolute value,
        'positive' keeps strictly positive amounts as-is,
        'negative' keeps strictly negative amounts as their absolute value.
    denominator :
        'all' computes percentages against the sum of every collected line,
        'shown' against the sum of the lines kept after truncation.
    limit :
        Maximum number of lines returned.
    exclude_keywords :
        Lines whose label contains one of these (case-insensitive) are
        skipped.
    """

    sign_policy: str = "absolute"
    denominator: str = "all"
    limit: int = DEFAULT_LIMIT
    exclude_keywords: tuple[str, ...] = ("total",)

    def __post_init__(self) -> None:
        if self.sign_policy not in SIGN_POLICIES:
            raise ValueError(
                f"Unknown sign policy {self.sign_policy!r}, "
                f"expected one of {SIGN_POLICIES}."
            )
        if self.denominator not in DENOMINATORS:
            raise ValueError(
                f"Unknown denominator {self.denominator!r}, "
                f"expected one of {DENOMINATORS}."
            )
        if self.limit < 1:
            raise ValueError("Breakdown limit must be a positive integer.")

    def apply_sign(self, amount: float) -> Optional[float]:
        """Return the kept (non-negative) value, or None if dropped."""
        if amount == 0:
            return None
        if self.sign_policy == "positive":
            return amount if amount > 0 else None
        if self.sign_policy == "negative":
            return -amount if amount < 0 else None
        return abs(amount)


def _title_needles(section_title: Union[str, Iterable[str]]) -> tuple[str, ...]:
    if isinstance(section_title, str):
        titles = [section_title]
    else:
        titles = list(section_title)
    needles = tuple(
        t.strip().lower() for t in titles if isinstance(t, str) and t.strip()
    )
    if not needles:
        raise ValueError("section_title must be a non-empty string.")
    return needles


def find_section(
    document: ReportDocument, section_title: Union[str, Iterable[str]]
) -> Optional[Row]:
    """Return the first top-level section whose title contains the text."""
    ensure_document(document)
    needles = _title_needles(section_title)

    for row in document.top_level_rows():
        if row.kind is not RowKind.SECTION:
            continue
        title = row.title.lower()
        if any(n in title for n in needles):
            return row
    return None


def _aggregate_labels(section: Row) -> set[str]:
    labels = {
        row.label.lower() for row in section.rows if row.kind is RowKind.SUMMARY_ROW
    }
    if section.title:
        labels.add(section.title.strip().lower())
    labels.discard("")
    return labels


def extract_section_breakdown(
    document: ReportDocument,
    section_title: Union[str, Iterable[str]] = OPERATING_EXPENSES_SECTION,
    policy: Optional[BreakdownPolicy] = None,
) -> list[ExpenseLine]:
    """
    Build the ranked breakdown of a report section.

    Args:
        document: Parsed report.
        section_title: Substring (or substrings, any of which may match)
            searched in top-level section titles.
        policy: Sign, denominator and truncation rules. Defaults to
            ``BreakdownPolicy()``.

    Returns:
        At most ``policy.limit`` ExpenseLine objects, by descending value.
        An empty list when no section or no qualifying line is found.
    """
    policy = policy or BreakdownPolicy()
    section = find_section(document, section_title)
    if section is None:
        logger.debug("No section matching %r", section_title)
        return []

    excluded_labels = _aggregate_labels(section)
    keywords = tuple(k.lower() for k in policy.exclude_keywords)

    collected: list[tuple[str, float]] = []
    for row in section.rows:
        if row.kind is not RowKind.ROW or not row.has_amount_cells:
            continue
        name = row.label
        lowered = name.lower()
        if not name or lowered in excluded_labels:
            continue
        if any(k in lowered for k in keywords):
            continue

        amount = row.amount
        if amount is None:
            continue
        value = policy.apply_sign(amount)
        if value is None:
            continue
        collected.append((name, value))

    if not collected:
        return []

    # sorted() is stable: ties keep their encounter order.
    ranked = sorted(collected, key=lambda item: item[1], reverse=True)
    shown = ranked[: policy.limit]

    if policy.denominator == "shown":
        total = sum(value for _, value in shown)
    else:
        total = sum(value for _, value in collected)

    return [
        ExpenseLine(
            name=name,
            value=value,
            percentage=(value / total * 100) if total > 0 else 0.0,
        )
        for name, value in shown
    ]
