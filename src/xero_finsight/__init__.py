# Xero FinSight - Financial Dashboard for Xero organisations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Xero FinSight
-------------

A Python financial dashboard backend for organisations using the Xero
accounting platform. It reads Profit & Loss and Balance Sheet reports and
derives the figures shown on the dashboard.

Main capabilities:
- a typed model of the platform's nested report documents,
- single-figure extraction (revenue, operating expenses, net profit, cash),
- ranked, percentage-weighted expense breakdowns,
- KPI composition with fallback rules (net profit, net margin),
- 12-month revenue / expenses trends with per-month failure isolation,
- period-over-period comparisons,
- table, JSON and CSV exports and a command-line interface.

The extraction core is pure: it receives already-fetched reports, does not
persist anything and does not convert currencies.


Version: 0.1.0

Usage:
    python -m xero_finsight.cli --help
"""

__all__ = [
    "report",
    "extractors",
    "breakdown",
    "comparison",
    "kpis",
    "trend",
    "dashboard",
    "export",
]

__version__ = "0.1.0"
