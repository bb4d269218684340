# Xero FinSight - Financial Dashboard for Xero organisations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Report sources.

The extraction core never talks to the accounting platform itself. It
consumes reports through the ``ReportSource`` protocol:

    fetch_profit_and_loss(user_id, tenant_id, from_date, to_date)
    fetch_balance_sheet(user_id, tenant_id, date)

Both return a ``ReportDocument`` or raise ``ReportFetchError``. Token
handling, retries and timeouts belong to the implementation.

``JsonDirectorySource`` is the offline implementation used by the CLI: it
reads report payloads previously exported as JSON files.
"""

import logging
import os
from datetime import date
from pathlib import Path
from typing import Protocol, Union

from .report import ReportDocument

logger = logging.getLogger(__name__)


class ReportFetchError(RuntimeError):
    """A report could not be obtained from the source."""


class ReportSource(Protocol):
    def fetch_profit_and_loss(
        self, user_id: str, tenant_id: str, from_date: date, to_date: date
    ) -> ReportDocument: ...

    def fetch_balance_sheet(
        self, user_id: str, tenant_id: str, date: date
    ) -> ReportDocument: ...


class JsonDirectorySource:
    """
    Read reports from a directory of JSON files.

    Expected file names:

        profit_and_loss_<from>_<to>.json
        balance_sheet_<date>.json

    with ISO dates, e.g. profit_and_loss_2025-01-01_2025-01-31.json.

    A single directory holds the reports of one tenant; ``user_id`` and
    ``tenant_id`` are accepted for interface compatibility only.
    """

    def __init__(self, root: Union[str, "os.PathLike[str]"]) -> None:
        self.root = Path(root)

    def profit_and_loss_path(self, from_date: date, to_date: date) -> Path:
        return self.root / (
            f"profit_and_loss_{from_date.isoformat()}_{to_date.isoformat()}.json"
        )

    def balance_sheet_path(self, at: date) -> Path:
        return self.root / f"balance_sheet_{at.isoformat()}.json"

    def fetch_profit_and_loss(
        self, user_id: str, tenant_id: str, from_date: date, to_date: date
    ) -> ReportDocument:
        return self._load(self.profit_and_loss_path(from_date, to_date))

    def fetch_balance_sheet(
        self, user_id: str, tenant_id: str, date: date
    ) -> ReportDocument:
        return self._load(self.balance_sheet_path(date))

    def _load(self, path: Path) -> ReportDocument:
        try:
            document = ReportDocument.load_json(path)
        except FileNotFoundError as exc:
            raise ReportFetchError(f"Report file not found: {path}") from exc
        except (TypeError, ValueError) as exc:
            raise ReportFetchError(f"Invalid report file: {path}") from exc

        logger.debug("Loaded %s (%d block(s))", path, len(document.blocks))
        return document
