# Xero FinSight - Financial Dashboard for Xero organisations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Report tree model for Xero FinSight.

Reports returned by the accounting platform (Profit & Loss, Balance Sheet)
are loosely structured JSON documents. Rows and sections are mixed at the
same nesting level, cell values are either display strings or numbers, and
the key casing depends on whether the payload came from the SDK (camelCase)
or from the raw REST API (PascalCase).

This module turns such a payload into a small, immutable, typed tree:

    ReportDocument
      └── ReportBlock (one per report in the payload)
            └── Row (HEADER | ROW | SUMMARY_ROW | SECTION)
                  ├── cells   (ROW / SUMMARY_ROW)
                  └── rows    (SECTION, recursive)

It does not interpret the content: extraction of figures lives in
``extractors.py`` and ``breakdown.py``. The only interpretation done here is
numeric coercion of cell values (``coerce_amount``), which is shared by all
extractors so that every call site parses amounts the same way.
"""

import json
import math
import os
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Union


class RowKind(str, Enum):
    """Kind of a report row, as tagged by the accounting platform."""

    HEADER = "Header"
    ROW = "Row"
    SUMMARY_ROW = "SummaryRow"
    SECTION = "Section"


# Row kinds carrying a (label, amount) pair of cells.
VALUE_KINDS: tuple[RowKind, ...] = (RowKind.ROW, RowKind.SUMMARY_ROW)

_KIND_BY_TAG: dict[str, RowKind] = {kind.value.lower(): kind for kind in RowKind}

_CURRENCY_SYMBOLS = ("$", "€", "£")


@dataclass(frozen=True)
class Cell:
    """A single cell: a display string, a number or nothing."""

    value: Union[str, float, int, None] = None

    @property
    def text(self) -> str:
        """Cell value rendered as a stripped string ('' when empty)."""
        if self.value is None:
            return ""
        return str(self.value).strip()


@dataclass(frozen=True)
class Row:
    """
    A node of the report tree.

    Attributes
    ----------
    kind :
        Row kind (header, plain row, summary row or section).
    title :
        Section title. Only meaningful for SECTION rows, '' otherwise.
    cells :
        Ordered cells. Position 0 is the label, position 1 the amount.
    rows :
        Child rows. Only populated for SECTION rows.
    """

    kind: RowKind
    title: str = ""
    cells: tuple[Cell, ...] = ()
    rows: tuple["Row", ...] = ()

    @property
    def label(self) -> str:
        """Label cell (position 0) as text, '' if absent."""
        if not self.cells:
            return ""
        return self.cells[0].text

    @property
    def amount(self) -> Optional[float]:
        """Amount cell (position 1) coerced to float, None if not numeric."""
        if len(self.cells) < 2:
            return None
        return coerce_amount(self.cells[1].value)

    @property
    def has_amount_cells(self) -> bool:
        """True for plain/summary rows with at least a label and an amount."""
        return self.kind in VALUE_KINDS and len(self.cells) >= 2


@dataclass(frozen=True)
class ReportBlock:
    """One report of a payload (most payloads contain exactly one)."""

    rows: tuple[Row, ...] = ()
    name: str = ""
    date: str = ""
    titles: tuple[str, ...] = ()


@dataclass(frozen=True)
class ReportDocument:
    """Immutable, fully parsed report payload."""

    blocks: tuple[ReportBlock, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not any(block.rows for block in self.blocks)

    def iter_rows(self) -> Iterator[tuple[Row, int]]:
        """Depth-first, pre-order traversal over every row of every block.

        Yields ``(row, depth)`` pairs, depth 0 being a block's top-level rows.
        The traversal keeps no state on the document, so it can be restarted
        any number of times.
        """
        for block in self.blocks:
            yield from iter_rows(block.rows)

    def top_level_rows(self) -> Iterator[Row]:
        """Top-level rows of every block, in document order."""
        for block in self.blocks:
            yield from block.rows

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ReportDocument":
        """Build a document from a decoded JSON payload.

        Accepted shapes:

        - ``{"reports": [{"rows": [...]}, ...]}`` (SDK response body),
        - ``{"Reports": [{"Rows": [...]}, ...]}`` (raw REST response),
        - a single report ``{"rows": [...]}``.

        A payload without any report yields an empty document.

        Raises:
            TypeError: if ``payload`` is not a mapping (e.g. None).
        """
        if not isinstance(payload, Mapping):
            raise TypeError(
                "Report payload must be a mapping, "
                f"got {type(payload).__name__}."
            )

        reports = _get(payload, "reports")
        if reports is None and _get(payload, "rows") is not None:
            reports = [payload]

        blocks: list[ReportBlock] = []
        if isinstance(reports, Sequence) and not isinstance(reports, str):
            for report in reports:
                if isinstance(report, Mapping):
                    blocks.append(_parse_block(report))

        return cls(blocks=tuple(blocks))

    @classmethod
    def load_json(cls, path: Union[str, "os.PathLike[str]"]) -> "ReportDocument":
        """Read a JSON file containing a report payload.

        Raises:
            FileNotFoundError: if the file does not exist.
            ValueError: if the file is not valid JSON.
        """
        with open(path, encoding="utf-8") as fh:
            try:
                payload = json.load(fh)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid JSON report file: {path}") from exc
        return cls.from_dict(payload)


def iter_rows(rows: Sequence[Row], depth: int = 0) -> Iterator[tuple[Row, int]]:
    """Pre-order traversal of ``rows`` and their descendants."""
    for row in rows:
        yield row, depth
        if row.rows:
            yield from iter_rows(row.rows, depth + 1)


def coerce_amount(value: Any) -> Optional[float]:
    """
    Convert a cell value into a float.

    Numbers are returned as floats. Strings are parsed as decimals after
    removing thousands separators, currency symbols and spaces; accounting
    parentheses ``(123.45)`` denote a negative amount.

    Returns None when the value is not a finite number (None, booleans,
    empty or non-numeric strings, NaN, infinities).
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None

    text = str(value).strip()
    for symbol in _CURRENCY_SYMBOLS:
        text = text.replace(symbol, "")
    text = text.replace(",", "").replace(" ", "")
    if text.startswith("(") and text.endswith(")"):
        text = "-" + text[1:-1]
    if not text:
        return None

    try:
        number = float(Decimal(text))
    except (InvalidOperation, ValueError):
        return None
    return number if math.isfinite(number) else None


# ---------------------------------------------------------------------------
# Payload parsing helpers
# ---------------------------------------------------------------------------


def _get(data: Mapping[str, Any], key: str) -> Any:
    """Lookup tolerant to camelCase / PascalCase key variants."""
    value = data.get(key)
    if value is not None:
        return value
    pascal = key[:1].upper() + key[1:]
    return data.get(pascal)


def _parse_block(report: Mapping[str, Any]) -> ReportBlock:
    raw_titles = _get(report, "reportTitles") or ()
    titles = tuple(str(t) for t in raw_titles if t is not None)
    return ReportBlock(
        rows=_parse_rows(_get(report, "rows")),
        name=str(_get(report, "reportName") or ""),
        date=str(_get(report, "reportDate") or ""),
        titles=titles,
    )


def _parse_rows(raw_rows: Any) -> tuple[Row, ...]:
    if not isinstance(raw_rows, Sequence) or isinstance(raw_rows, str):
        return ()
    return tuple(_parse_row(r) for r in raw_rows if isinstance(r, Mapping))


def _parse_row(raw: Mapping[str, Any]) -> Row:
    tag = str(_get(raw, "rowType") or "").strip().lower()
    # Unknown row types carry nothing the extractors can use.
    kind = _KIND_BY_TAG.get(tag, RowKind.HEADER)

    raw_cells = _get(raw, "cells")
    cells: tuple[Cell, ...] = ()
    if isinstance(raw_cells, Sequence) and not isinstance(raw_cells, str):
        cells = tuple(_parse_cell(c) for c in raw_cells)

    return Row(
        kind=kind,
        title=str(_get(raw, "title") or ""),
        cells=cells,
        rows=_parse_rows(_get(raw, "rows")),
    )


def _parse_cell(raw: Any) -> Cell:
    if isinstance(raw, Mapping):
        value = _get(raw, "value")
    else:
        value = raw
    if value is not None and not isinstance(value, (str, int, float)):
        value = str(value)
    return Cell(value=value)
