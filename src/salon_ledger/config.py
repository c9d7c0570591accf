# Salon Ledger - Bookkeeping dashboard for beauty salons
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Salon Ledger.

This module is responsible for:
- loading the application configuration from a TOML file,
- applying the environment override of the email allow-list,
- exposing typed dataclasses used by the CLI and the dashboard.
"""

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .categories import DEFAULT_CATEGORIES, CategorySet, load_category_set
from .engine import PaymentFilter
from .periods import Granularity
from .store import DatabaseConfig

DEFAULT_CONFIG_FILE = "salon_ledger_config.toml"
ALLOWED_EMAILS_ENV = "SALON_LEDGER_ALLOWED_EMAILS"


@dataclass(frozen=True)
class DisplayConfig:
    """Default dashboard selection and presentation options."""

    compact: bool
    default_granularity: Granularity
    default_payment_filter: PaymentFilter
    currency: str


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Salon Ledger.

    This aggregates:
    - the database configuration (where transactions are stored),
    - the email allow-list and the default owner,
    - display defaults for the dashboard,
    - an optional category file overriding the built-in categories,
    - the log level.
    """

    database: DatabaseConfig
    allowed_emails: tuple[str, ...]
    owner_email: Optional[str]
    display: DisplayConfig
    categories_file: Optional[Path]
    log_level: str


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        raise ValueError(f"Config section [{name}] must be a table.")
    return section


def _normalize_emails(emails: Iterable[str]) -> tuple[str, ...]:
    return tuple(e.strip().lower() for e in emails if e and e.strip())


def parse_allowed_emails(value: str) -> tuple[str, ...]:
    """Parse a comma separated allow-list, as found in the environment."""
    return _normalize_emails(value.split(","))


def is_email_allowed(email: Optional[str], allowed_emails: Iterable[str]) -> bool:
    """
    True if `email` is on the allow-list.

    The comparison ignores case and surrounding spaces. An empty allow-list
    lets nobody in.
    """
    if not email or not email.strip():
        return False
    return email.strip().lower() in set(_normalize_emails(allowed_emails))


def load_app_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """
    Load the Salon Ledger configuration from a TOML file.

    Expected top-level sections in the TOML file
    --------------------------------------------
    [database]
        Database engine ("sqlite") and SQLite file path.

    [access]
        `allowed_emails`: list of owner emails allowed to use the ledger.
        The SALON_LEDGER_ALLOWED_EMAILS environment variable (comma
        separated) replaces this list when set.

    [owner]
        `email`: default owner used by the CLI.

    [display]
        `compact`, `default_granularity`, `default_payment_filter` and
        `currency` (only "EUR" is supported).

    [categories]
        `file`: optional CSV file (kind, name, color) replacing the
        built-in categories.

    [logging]
        `level`: log level name (default "WARNING").

    Every section is optional. All file paths are resolved relative to the
    directory of the TOML file itself.

    Parameters
    ----------
    config_path :
        Path to the TOML file, defaults to 'salon_ledger_config.toml' in
        the current directory.
    environ :
        Environment mapping, defaults to os.environ.

    Returns
    -------
    AppConfig
        Parsed and validated application configuration.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    ValueError
        If the file cannot be parsed or holds an invalid value.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
    else:
        config_file = Path(config_path).resolve()
    if environ is None:
        environ = os.environ

    raw = _load_toml(config_file)
    base_dir = config_file.parent

    # 1) Database section
    database_section = _section(raw, "database")
    db_engine = str(database_section.get("engine") or "sqlite")
    db_path_raw = database_section.get("path") or "data/salon_ledger.sqlite"
    database = DatabaseConfig(
        engine=db_engine, path=(base_dir / str(db_path_raw)).resolve()
    )

    # 2) Access: allow-list, the environment wins when set
    access_section = _section(raw, "access")
    raw_allowed = access_section.get("allowed_emails") or []
    if isinstance(raw_allowed, str):
        allowed_emails = parse_allowed_emails(raw_allowed)
    elif isinstance(raw_allowed, list):
        allowed_emails = _normalize_emails(str(e) for e in raw_allowed)
    else:
        raise ValueError("[access].allowed_emails must be a list of emails.")

    env_allowed = environ.get(ALLOWED_EMAILS_ENV)
    if env_allowed:
        allowed_emails = parse_allowed_emails(env_allowed)

    # 3) Owner
    owner_section = _section(raw, "owner")
    owner_email = owner_section.get("email") or None
    if owner_email is not None:
        owner_email = str(owner_email).strip().lower()

    # 4) Display options
    display_section = _section(raw, "display")
    try:
        granularity = Granularity(
            str(display_section.get("default_granularity", "week")).lower()
        )
    except ValueError as exc:
        raise ValueError(
            "Invalid value for 'display.default_granularity'. "
            "Expected one of: day, week, month, year."
        ) from exc

    try:
        payment_filter = PaymentFilter(
            str(display_section.get("default_payment_filter", "total")).lower()
        )
    except ValueError as exc:
        raise ValueError(
            "Invalid value for 'display.default_payment_filter'. "
            "Expected one of: total, cash, card."
        ) from exc

    currency = str(display_section.get("currency", "EUR")).upper()
    if currency != "EUR":
        raise ValueError(f"Unsupported currency {currency!r}, only EUR is supported.")

    compact = display_section.get("compact", False)
    if not isinstance(compact, bool):
        raise ValueError("Invalid value for 'display.compact', expected true or false.")

    display = DisplayConfig(
        compact=compact,
        default_granularity=granularity,
        default_payment_filter=payment_filter,
        currency=currency,
    )

    # 5) Categories
    categories_section = _section(raw, "categories")
    categories_raw = categories_section.get("file") or None
    categories_file = (
        (base_dir / str(categories_raw)).resolve() if categories_raw else None
    )

    # 6) Logging
    logging_section = _section(raw, "logging")
    log_level = str(logging_section.get("level", "WARNING")).upper()

    return AppConfig(
        database=database,
        allowed_emails=allowed_emails,
        owner_email=owner_email,
        display=display,
        categories_file=categories_file,
        log_level=log_level,
    )


def load_categories(cfg: AppConfig) -> CategorySet:
    """Category set of the configuration: the CSV file if set, else the defaults."""
    if cfg.categories_file is None:
        return DEFAULT_CATEGORIES
    if not cfg.categories_file.is_file():
        raise FileNotFoundError(f"Category file not found: {cfg.categories_file}")
    return load_category_set(str(cfg.categories_file))
