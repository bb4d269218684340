# Xero FinSight - Financial Dashboard for Xero organisations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Single-figure extraction from report documents.

Reports vary in shape across organisations and layouts, so every lookup
here follows the same rules:

- rows are visited depth-first, in document order (``ReportDocument.iter_rows``),
- only plain and summary rows with a label and an amount cell are considered,
- a row matches when its label contains one of the candidate names
  (case-insensitive substring match),
- the first matching row with a numeric amount wins; a matching row whose
  amount is not numeric is skipped and the walk continues,
- when nothing matches the result is 0.0.

Absent or malformed data never raises. Invalid arguments (empty candidate
list, missing document) do, since they are caller bugs.
"""

import logging
from collections.abc import Iterable, Iterator
from typing import Optional

from .report import VALUE_KINDS, ReportDocument, Row, RowKind

logger = logging.getLogger(__name__)

TOTAL_INCOME: tuple[str, ...] = ("Total Income",)
TOTAL_OPERATING_EXPENSES: tuple[str, ...] = ("Total Operating Expenses",)
TOTAL_BANK: tuple[str, ...] = ("Total Bank",)
NET_PROFIT_LABEL = "net profit"


def ensure_document(document: Optional[ReportDocument]) -> ReportDocument:
    """Validate that ``document`` is a ReportDocument.

    Raises:
        TypeError: if ``document`` is None or of another type.
    """
    if document is None:
        raise TypeError("A ReportDocument is required, got None.")
    if not isinstance(document, ReportDocument):
        raise TypeError(
            f"Expected a ReportDocument, got {type(document).__name__}."
        )
    return document


def normalize_candidates(candidate_names: Iterable[str]) -> tuple[str, ...]:
    """Return lower-cased candidate names, preserving order.

    Raises:
        ValueError: if the list is a bare string, is empty, or contains a
            non-string or blank item.
    """
    if isinstance(candidate_names, str):
        raise ValueError(
            "candidate_names must be a sequence of names, not a single string."
        )
    try:
        names = list(candidate_names)
    except TypeError as exc:
        raise ValueError("candidate_names must be an iterable of strings.") from exc

    if not names:
        raise ValueError("candidate_names must contain at least one name.")

    normalized: list[str] = []
    for name in names:
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Invalid candidate name: {name!r}")
        normalized.append(name.strip().lower())
    return tuple(normalized)


def iter_value_rows(
    document: ReportDocument,
    kinds: Iterable[RowKind] = VALUE_KINDS,
    section_title: Optional[str] = None,
) -> Iterator[Row]:
    """
    Yield rows carrying a (label, amount) pair, in traversal order.

    Args:
        document: Report to walk.
        kinds: Row kinds to keep (plain and summary rows by default).
        section_title: When given, only rows located (at any depth) below
            a section whose title contains this text are yielded.
    """
    wanted = frozenset(kinds)
    needle = section_title.strip().lower() if section_title else None

    # matched[d] tells whether the enclosing section at depth d matched.
    matched: list[bool] = []
    for row, depth in document.iter_rows():
        del matched[depth:]

        if row.kind is RowKind.SECTION:
            matched.append(needle is not None and needle in row.title.lower())
            continue

        if row.kind not in wanted or not row.has_amount_cells:
            continue
        if needle is not None and not any(matched):
            continue
        yield row


def extract_value(
    document: ReportDocument,
    candidate_names: Iterable[str],
    kinds: Iterable[RowKind] = VALUE_KINDS,
    section_title: Optional[str] = None,
) -> float:
    """
    Return the absolute amount of the first row matching any candidate name.

    The earliest matching row in traversal order wins, regardless of the
    order of ``candidate_names``.

    Args:
        document: Parsed report.
        candidate_names: Names searched as case-insensitive substrings of
            the row label (e.g. "Total Income" matches "Total Income (YTD)").
        kinds: Row kinds eligible for matching.
        section_title: Optional restriction to rows below a matching section.

    Returns:
        The absolute value of the first numeric match, or 0.0.
    """
    ensure_document(document)
    candidates = normalize_candidates(candidate_names)

    for row in iter_value_rows(document, kinds=kinds, section_title=section_title):
        label = row.label.lower()
        if not any(c in label for c in candidates):
            continue
        amount = row.amount
        if amount is None:
            logger.debug("Skipping non-numeric match %r", row.label)
            continue
        logger.debug("Matched %r = %s for %s", row.label, amount, candidates)
        return abs(amount)

    return 0.0


def extract_net_profit(document: ReportDocument) -> float:
    """
    Return the signed amount of the first plain row labelled "net profit".

    Net profit may legitimately be negative, so no absolute value is applied.
    Returns 0.0 when the row is absent.
    """
    ensure_document(document)

    for row in iter_value_rows(document, kinds=(RowKind.ROW,)):
        if NET_PROFIT_LABEL not in row.label.lower():
            continue
        amount = row.amount
        if amount is not None:
            return amount
    return 0.0


def extract_total_operating_expenses(document: ReportDocument) -> float:
    """Return the "Total Operating Expenses" summary row amount (or 0.0)."""
    return extract_value(
        document,
        TOTAL_OPERATING_EXPENSES,
        kinds=(RowKind.SUMMARY_ROW,),
    )
