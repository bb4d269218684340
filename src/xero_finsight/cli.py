# Xero FinSight - Financial Dashboard for Xero organisations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Xero FinSight.

This module wires together the main building blocks of Xero FinSight:

- application configuration (extraction policies, display, logging),
- report sources (offline JSON exports of Profit & Loss / Balance Sheet),
- the extraction core (KPIs, expense breakdown, trend, comparison),
- export helpers (tables, JSON, CSV).

The CLI is intentionally thin: it does not implement any extraction logic
itself.


Commands
--------

``kpis``
    Compute KPIs and the expense breakdown from two report files:

        xero-finsight kpis --profit-loss pl.json --balance-sheet bs.json

``dashboard``
    Run the full dashboard pipeline against a directory of exported
    reports (see ``sources.JsonDirectorySource`` for file names):

        xero-finsight dashboard --reports-dir data/reports --timeframe YEAR

    ``--from-date`` and ``--to-date`` (both required together) override the
    timeframe window. ``--no-trend`` and ``--no-comparison`` skip the
    secondary fetches.

``trend``
    Print the 12-month revenue / expenses trend of a year:

        xero-finsight trend --reports-dir data/reports --year 2025


Output
------

``--display-mode`` (or ``[display] mode`` in the configuration) selects
between console tables (``table``), a JSON document (``json``) and CSV
(``csv``).


Configuration
-------------

By default, the CLI reads ``xero_finsight_config.toml`` in the current
working directory when it exists, and falls back to built-in defaults
otherwise. Use ``--config PATH`` to point to another file.
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from . import __version__
from .breakdown import extract_section_breakdown
from .config import (
    DEFAULT_CONFIG_FILE,
    DISPLAY_MODES,
    LOG_LEVELS,
    AppConfig,
    default_app_config,
    load_app_config,
)
from .dashboard import (
    DashboardData,
    DashboardError,
    build_dashboard,
    build_monthly_trend_from_source,
)
from .export import (
    breakdown_to_frame,
    comparison_to_frame,
    dashboard_to_csv,
    dashboard_to_dict,
    kpis_to_frame,
    trend_to_frame,
)
from .kpis import compose_kpis
from .periods import TIMEFRAMES, Period, resolve_period
from .report import ReportDocument
from .sources import JsonDirectorySource

logger = logging.getLogger(__name__)

# The offline source serves a single tenant.
LOCAL_USER = "local"
LOCAL_TENANT = "local"


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m xero_finsight.cli",
        description=(
            "Xero FinSight - Financial Dashboard for Xero organisations. "
            "Reads Profit & Loss and Balance Sheet reports, extracts KPIs, "
            "expense breakdowns, monthly trends and period comparisons."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of xero_finsight and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            f"'{DEFAULT_CONFIG_FILE}' in the current directory is used when present."
        ),
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=list(DISPLAY_MODES),
        help="Output format. Overrides [display] mode from the configuration.",
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        choices=list(LOG_LEVELS),
        help="Logging level. Overrides [logging] level from the configuration.",
    )

    sub = ap.add_subparsers(dest="command")

    # kpis
    kpis_p = sub.add_parser(
        "kpis", help="KPIs and expense breakdown from report files."
    )
    kpis_p.add_argument("--profit-loss", dest="profit_loss", required=True)
    kpis_p.add_argument("--balance-sheet", dest="balance_sheet", required=True)

    # dashboard
    dash_p = sub.add_parser(
        "dashboard", help="Full dashboard from a reports directory."
    )
    dash_p.add_argument("--reports-dir", dest="reports_dir")
    dash_p.add_argument("--timeframe", choices=list(TIMEFRAMES), default="YEAR")
    dash_p.add_argument("--from-date", dest="from_date", help="YYYY-MM-DD")
    dash_p.add_argument("--to-date", dest="to_date", help="YYYY-MM-DD")
    dash_p.add_argument("--no-trend", dest="include_trend", action="store_false")
    dash_p.add_argument(
        "--no-comparison", dest="include_comparison", action="store_false"
    )

    # trend
    trend_p = sub.add_parser("trend", help="12-month revenue/expenses trend.")
    trend_p.add_argument("--reports-dir", dest="reports_dir")
    trend_p.add_argument("--year", type=int, default=date.today().year)

    return ap


def _load_config(config_path: Optional[str]) -> AppConfig:
    if config_path:
        return load_app_config(config_path)
    if Path(DEFAULT_CONFIG_FILE).is_file():
        return load_app_config()
    return default_app_config()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _reports_dir(
    args: argparse.Namespace, config: AppConfig, parser: argparse.ArgumentParser
) -> Path:
    if args.reports_dir:
        return Path(args.reports_dir)
    if config.reports_dir is not None:
        return config.reports_dir
    parser.error(
        "No reports directory: provide --reports-dir or set [source] reports_dir."
    )


def _render_dashboard(data: DashboardData, mode: str, decimals: int) -> None:
    if mode == "json":
        print(json.dumps(dashboard_to_dict(data), indent=2))
        return
    if mode == "csv":
        print(dashboard_to_csv(data, decimals=decimals), end="")
        return

    print(
        f"Applied period: {data.period.label} "
        f"({data.period.start.isoformat()} → {data.period.end.isoformat()})"
    )
    print()
    print("=== KPIs ===")
    print(kpis_to_frame(data.kpis, decimals=decimals).to_string(index=False))

    print()
    print("=== Expense breakdown ===")
    if data.expense_breakdown:
        print(
            breakdown_to_frame(data.expense_breakdown, decimals=decimals).to_string(
                index=False
            )
        )
    else:
        print("No expense data available.")

    if data.comparison is not None:
        print()
        print(f"=== Compared with {data.comparison.previous.label} ===")
        print(comparison_to_frame(data.comparison.kpis).to_string(index=False))
        if data.comparison.categories:
            print()
            categories = comparison_to_frame(data.comparison.categories)
            print(categories.to_string(index=False))

    if data.trend:
        print()
        print("=== Monthly trend ===")
        print(trend_to_frame(data.trend).to_string(index=False))


def _handle_kpis(args: argparse.Namespace, config: AppConfig, mode: str) -> None:
    profit_loss = ReportDocument.load_json(args.profit_loss)
    balance_sheet = ReportDocument.load_json(args.balance_sheet)

    kpis = compose_kpis(profit_loss, balance_sheet, config.kpi_policy)
    breakdown = extract_section_breakdown(
        profit_loss, config.breakdown_titles, config.breakdown_policy
    )

    # Report files are not tied to a resolved period.
    today = date.today()
    period = Period(start=today, end=today, label="Report files")
    data = DashboardData(period=period, kpis=kpis, expense_breakdown=breakdown)
    _render_dashboard(data, mode, config.decimals)


def _handle_dashboard(
    args: argparse.Namespace,
    config: AppConfig,
    mode: str,
    parser: argparse.ArgumentParser,
) -> int:
    if bool(args.from_date) != bool(args.to_date):
        parser.error("--from-date and --to-date must be provided together.")

    try:
        period = resolve_period(args.timeframe, args.from_date, args.to_date)
    except ValueError as exc:
        parser.error(str(exc))

    source = JsonDirectorySource(_reports_dir(args, config, parser))
    try:
        data = build_dashboard(
            source,
            LOCAL_USER,
            LOCAL_TENANT,
            period,
            config=config,
            include_trend=args.include_trend,
            include_comparison=args.include_comparison,
        )
    except DashboardError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    _render_dashboard(data, mode, config.decimals)
    return 0


def _handle_trend(
    args: argparse.Namespace,
    config: AppConfig,
    mode: str,
    parser: argparse.ArgumentParser,
) -> None:
    source = JsonDirectorySource(_reports_dir(args, config, parser))
    trend = build_monthly_trend_from_source(
        source,
        LOCAL_USER,
        LOCAL_TENANT,
        args.year,
        max_workers=config.trend_max_workers,
    )
    frame = trend_to_frame(trend)

    if mode == "json":
        print(json.dumps(frame.to_dict(orient="records"), indent=2))
    elif mode == "csv":
        print(frame.to_csv(index=False, lineterminator="\n"), end="")
    else:
        print(f"=== Monthly trend {args.year} ===")
        print(frame.to_string(index=False))


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the Xero FinSight CLI.

    Parses command-line arguments, loads the configuration, configures
    logging and dispatches to the requested command. Returns the process
    exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"xero_finsight version {__version__}")
        return 0

    config = _load_config(args.config_path)
    _configure_logging(args.log_level or config.log_level)

    mode = args.display_mode or config.display_mode

    if args.command == "kpis":
        _handle_kpis(args, config, mode)
        return 0
    if args.command == "dashboard":
        return _handle_dashboard(args, config, mode, parser)
    if args.command == "trend":
        _handle_trend(args, config, mode, parser)
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
