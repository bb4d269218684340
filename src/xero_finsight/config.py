# Xero FinSight - Financial Dashboard for Xero organisations
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Xero FinSight.

This module is responsible for:
- loading the application configuration from a TOML file,
- resolving the extraction policies (KPI candidate labels, breakdown rules),
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .breakdown import (
    LEGACY_EXPENSE_SECTIONS,
    OPERATING_EXPENSES_SECTION,
    BreakdownPolicy,
)
from .kpis import KpiPolicy

DEFAULT_CONFIG_FILE = "xero_finsight_config.toml"
VARIANTS: tuple[str, ...] = ("canonical", "legacy")
DISPLAY_MODES: tuple[str, ...] = ("table", "json", "csv")
LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Xero FinSight.

    This aggregates:
    - the extraction variant and the resulting KPI policy,
    - the breakdown section titles and policy,
    - trend fetching options,
    - the offline reports directory used by the CLI,
    - display and logging options.
    """

    variant: str = "canonical"
    kpi_policy: KpiPolicy = field(default_factory=KpiPolicy.canonical)
    breakdown_titles: tuple[str, ...] = (OPERATING_EXPENSES_SECTION,)
    breakdown_policy: BreakdownPolicy = field(default_factory=BreakdownPolicy)
    trend_max_workers: int = 1
    reports_dir: Optional[Path] = None
    display_mode: str = "table"
    decimals: int = 2
    log_level: str = "WARNING"


def default_app_config() -> AppConfig:
    """Configuration used when no TOML file is given."""
    return AppConfig()


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _string_list(section: Mapping[str, Any], key: str) -> Optional[tuple[str, ...]]:
    """Read an optional list of strings, None when the key is absent."""
    value = section.get(key)
    if value is None:
        return None
    if isinstance(value, str) or not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list of strings.")
    if not value or not all(isinstance(v, str) and v.strip() for v in value):
        raise ValueError(f"'{key}' must be a non-empty list of non-empty strings.")
    return tuple(value)


def _int(section: Mapping[str, Any], key: str, default: int, name: str) -> int:
    value = section.get(key, default)
    if isinstance(value, bool):
        raise ValueError(f"Invalid value for '{name}', expected an integer.")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid value for '{name}', expected an integer.") from exc


def _parse_kpi_policy(variant: str, extraction: Mapping[str, Any]) -> KpiPolicy:
    base = KpiPolicy.legacy() if variant == "legacy" else KpiPolicy.canonical()

    revenue = _string_list(extraction, "revenue_candidates")
    expenses = _string_list(extraction, "expense_candidates")
    cash = _string_list(extraction, "cash_candidates")

    return KpiPolicy(
        revenue_candidates=revenue or base.revenue_candidates,
        expense_candidates=expenses or base.expense_candidates,
        cash_candidates=cash or base.cash_candidates,
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Xero FinSight configuration from a TOML file.

    Expected top-level sections in the TOML file (all optional)
    ------------------------------------------------------------
    [extraction]
        variant ("canonical" or "legacy"), and optional overrides
        revenue_candidates, expense_candidates, cash_candidates.

    [breakdown]
        section_titles, sign_policy ("absolute", "positive", "negative"),
        denominator ("all", "shown"), limit.

    [trend]
        max_workers (1 = sequential monthly fetches).

    [source]
        reports_dir: directory of exported report JSON files, resolved
        relative to the TOML file.

    [display]
        mode ("table", "json", "csv") and decimals.

    [logging]
        level (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML file. Defaults to 'xero_finsight_config.toml' in
        the current directory.

    Returns
    -------
    AppConfig
        Parsed and validated configuration.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file cannot be parsed or holds invalid values.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Extraction variant and KPI candidates
    extraction = _section(raw, "extraction")
    variant = str(extraction.get("variant", "canonical")).lower()
    if variant not in VARIANTS:
        raise ValueError(
            f"Invalid 'extraction.variant' {variant!r}, expected one of {VARIANTS}."
        )
    kpi_policy = _parse_kpi_policy(variant, extraction)

    # 2) Breakdown
    breakdown = _section(raw, "breakdown")
    default_titles = (
        LEGACY_EXPENSE_SECTIONS
        if variant == "legacy"
        else (OPERATING_EXPENSES_SECTION,)
    )
    titles = _string_list(breakdown, "section_titles") or default_titles
    breakdown_policy = BreakdownPolicy(
        sign_policy=str(breakdown.get("sign_policy", "absolute")),
        denominator=str(breakdown.get("denominator", "all")),
        limit=_int(breakdown, "limit", 10, "breakdown.limit"),
    )

    # 3) Trend
    trend = _section(raw, "trend")
    max_workers = _int(trend, "max_workers", 1, "trend.max_workers")
    if max_workers < 1:
        raise ValueError("'trend.max_workers' must be at least 1.")

    # 4) Source
    source = _section(raw, "source")
    reports_dir_raw = source.get("reports_dir")
    reports_dir: Optional[Path] = None
    if reports_dir_raw:
        reports_dir = (base_dir / str(reports_dir_raw)).resolve()

    # 5) Display options
    display = _section(raw, "display")
    display_mode = str(display.get("mode", "table"))
    if display_mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid 'display.mode' {display_mode!r}, expected one of {DISPLAY_MODES}."
        )
    decimals = _int(display, "decimals", 2, "display.decimals")
    if decimals < 0:
        raise ValueError("'display.decimals' must not be negative.")

    # 6) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level", "WARNING")).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"Invalid 'logging.level' {log_level!r}.")

    return AppConfig(
        variant=variant,
        kpi_policy=kpi_policy,
        breakdown_titles=tuple(titles),
        breakdown_policy=breakdown_policy,
        trend_max_workers=max_workers,
        reports_dir=reports_dir,
        display_mode=display_mode,
        decimals=decimals,
        log_level=log_level,
    )
