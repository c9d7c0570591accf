# Salon Ledger - Bookkeeping dashboard for beauty salons
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Salon Ledger.

This module wires together the main building blocks of Salon Ledger:

- configuration (database, allow-list, display defaults),
- the SQLite transaction store and CSV import,
- the dashboard orchestration (windows, aggregation, chart series),
- the calendar and payment method summaries.

The CLI is intentionally thin: it does not implement any financial logic
itself. It resolves the owner, checks the allow-list, calls the underlying
modules and prints their results as console tables.


Subcommands
-----------

chart
    Per-interval revenue / expenses / net profit of the current window,
    then the window totals. Options: --granularity, --anchor, --compact,
    --payment, --details (tooltip lines per interval), --csv PATH.

calendar
    Daily statistics of one month (--month YYYY-MM, default: this month).

payments
    Breakdown of all revenues by payment method.

summary
    Headline figures: prestations this week / month, month profit, top
    category.

import
    Load prestations or expenses from a CSV file (--kind revenue|expense).


Global options
--------------

--config      path to the TOML configuration file,
--owner       owner email (default: [owner].email of the configuration),
--log-level   override of [logging].level,
--version     print the installed version and exit.

Owners that are not on the allow-list are refused before any data access.


Examples
--------

    salon-ledger chart --granularity month
    salon-ledger --owner me@salon.fr chart --anchor 2025-01-31 --payment cash
    salon-ledger calendar --month 2025-01
    salon-ledger import --kind expense data/expenses.csv
"""

import argparse
from datetime import date
from pathlib import Path
from typing import Optional

from . import __version__
from .categories import CategorySet
from .config import AppConfig, is_email_allowed, load_app_config, load_categories
from .dashboard import DashboardState, build_dashboard, current_date
from .engine import PaymentFilter
from .io import read_expense_csv, read_revenue_csv
from .logging_config import configure_logging, get_logger
from .periods import Granularity
from .series import format_euros, tooltip_lines
from .store import SQLiteTransactionStore
from .summaries import (
    combined_daily_stats,
    dashboard_highlights,
    month_grid,
    payment_method_stats,
)
from .transactions import PaymentMethod

logger = get_logger("cli")


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="salon-ledger",
        description=(
            "Salon Ledger - Bookkeeping dashboard for beauty salons. "
            "Records prestations and expenses and renders revenue, expense "
            "and profit views per day, week, month or year."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of salon_ledger and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. "
            "If omitted, 'salon_ledger_config.toml' in the current directory is used."
        ),
    )
    ap.add_argument(
        "--owner",
        help="Owner email. Defaults to [owner].email of the configuration.",
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        help="Log level (DEBUG, INFO, WARNING, ...). Overrides [logging].level.",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="COMMAND")

    # chart
    chart = subparsers.add_parser(
        "chart", help="Revenue, expenses and net profit of the current window."
    )
    chart.add_argument(
        "--granularity",
        choices=[g.value for g in Granularity],
        help="Bucket size. Defaults to [display].default_granularity.",
    )
    chart.add_argument(
        "--anchor",
        help="Last day of the window (YYYY-MM-DD). Defaults to today.",
    )
    chart.add_argument(
        "--compact",
        action="store_true",
        default=None,
        help="Use the compact window sizes (fewer buckets).",
    )
    chart.add_argument(
        "--payment",
        choices=[f.value for f in PaymentFilter],
        help="Payment filter. Defaults to [display].default_payment_filter.",
    )
    chart.add_argument(
        "--details",
        action="store_true",
        help="Print the tooltip lines of every interval.",
    )
    chart.add_argument(
        "--csv",
        dest="csv_path",
        metavar="CSV_PATH",
        help="Also export the per-interval table to this CSV file.",
    )

    # calendar
    calendar = subparsers.add_parser("calendar", help="Daily statistics of a month.")
    calendar.add_argument(
        "--month",
        help="Month to show (YYYY-MM). Defaults to the current month.",
    )

    # payments
    subparsers.add_parser("payments", help="Revenues by payment method.")

    # summary
    subparsers.add_parser("summary", help="Headline figures of the current month.")

    # import
    import_parser = subparsers.add_parser(
        "import", help="Import prestations or expenses from a CSV file."
    )
    import_parser.add_argument(
        "--kind",
        choices=["revenue", "expense"],
        required=True,
        help="Kind of records contained in the file.",
    )
    import_parser.add_argument("csv_path", metavar="CSV_PATH", help="CSV file to import.")

    return ap


def _parse_optional_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an optional CLI date argument (YYYY-MM-DD).

    Raises
    ------
    SystemExit
        If the date format is invalid.
    """
    if value is None:
        return None

    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"Invalid date format: {value!r}. Expected YYYY-MM-DD."
        raise SystemExit(msg) from exc


def _parse_month(value: Optional[str], today: date) -> tuple[int, int]:
    if value is None:
        return today.year, today.month
    try:
        first = date.fromisoformat(f"{value}-01")
    except ValueError as exc:
        msg = f"Invalid month format: {value!r}. Expected YYYY-MM."
        raise SystemExit(msg) from exc
    return first.year, first.month


def _resolve_owner(args: argparse.Namespace, config: AppConfig) -> str:
    """Owner email from the CLI or the configuration, checked against the allow-list."""
    owner = args.owner or config.owner_email
    if not owner:
        raise SystemExit(
            "No owner email given. Use --owner or set [owner].email in the configuration."
        )
    if not is_email_allowed(owner, config.allowed_emails):
        logger.warning("Refused owner %s (not on the allow-list)", owner)
        raise SystemExit(f"Access denied: {owner} is not on the allow-list.")
    return owner.strip().lower()


def _handle_chart(
    args: argparse.Namespace,
    config: AppConfig,
    store: SQLiteTransactionStore,
    owner: str,
    categories: CategorySet,
) -> None:
    today = current_date()
    state = DashboardState(
        granularity=Granularity(args.granularity or config.display.default_granularity),
        anchor=_parse_optional_date(args.anchor) or today,
        compact=config.display.compact if args.compact is None else args.compact,
        payment_filter=PaymentFilter(
            args.payment or config.display.default_payment_filter
        ),
    )
    view = build_dashboard(store, owner, state, categories, today=today)

    print(
        f"Window: {view.description} "
        f"({state.granularity.value}, payment filter: {state.payment_filter.value})"
    )

    table = view.totals_frame()
    print()
    print(table.to_string(index=False))

    print()
    print(
        f"Revenue: {format_euros(view.totals.total_revenue)} | "
        f"Expenses: {format_euros(view.totals.total_expenses)} | "
        f"Net profit: {format_euros(view.totals.net_profit, signed=True)}"
    )
    if not view.can_go_next:
        print("This window reaches today: no next page.")

    if args.details:
        for index in range(len(view.aggregates)):
            detail = view.point_detail(index)
            print()
            print(detail.title)
            for line in tooltip_lines(detail):
                print(f"  {line}")

    if args.csv_path:
        out = Path(args.csv_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        table.to_csv(out, index=False)
        print(f"Exported {len(table)} row(s) to {out}")


def _handle_calendar(
    args: argparse.Namespace, store: SQLiteTransactionStore, owner: str
) -> None:
    year, month = _parse_month(args.month, current_date())
    grid = month_grid(year, month)
    first, last = grid.days[0], grid.days[-1]

    stats = [
        s
        for s in combined_daily_stats(
            store.list_revenue_transactions(owner),
            store.list_expense_transactions(owner),
        )
        if first <= s.date <= last
    ]

    print(f"Calendar {year:04d}-{month:02d}")
    if not stats:
        print("No transactions this month.")
        return

    for s in sorted(stats, key=lambda s: s.date):
        print(
            f"{s.date.isoformat()}  "
            f"{s.revenue_count} prestation(s) {format_euros(s.total_revenue)} | "
            f"{s.expense_count} expense(s) {format_euros(s.total_expenses)} | "
            f"net {format_euros(s.net_profit, signed=True)}"
        )


def _handle_payments(store: SQLiteTransactionStore, owner: str) -> None:
    stats = payment_method_stats(store.list_revenue_transactions(owner))

    print(
        f"Revenues: {stats.transaction_count} prestation(s), "
        f"{format_euros(stats.total_revenue)}"
    )
    for method in PaymentMethod:
        m = stats.by_method[method]
        print(f"  {method.value:<6} {m.count:>4}  {format_euros(m.total)}")
    print(
        f"Cash: {format_euros(stats.total_cash)} ({stats.cash_percentage:.1f}%) | "
        f"Card: {format_euros(stats.total_card)} ({stats.card_percentage:.1f}%)"
    )


def _handle_summary(store: SQLiteTransactionStore, owner: str) -> None:
    h = dashboard_highlights(
        store.list_revenue_transactions(owner),
        store.list_expense_transactions(owner),
        current_date(),
    )
    print(f"Prestations this week: {h.revenues_this_week}")
    print(
        f"Prestations this month: {h.revenues_this_month} "
        f"(last month: {h.revenues_last_month})"
    )
    print(
        f"Month revenue: {format_euros(h.month_revenue)} | "
        f"expenses: {format_euros(h.month_expenses)} | "
        f"profit: {format_euros(h.month_profit, signed=True)}"
    )
    if h.top_category is not None:
        print(
            f"Top category: {h.top_category.name} "
            f"({format_euros(h.top_category.revenue)}, {h.top_category.count} prestation(s))"
        )


def _handle_import(
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
    store: SQLiteTransactionStore,
    owner: str,
) -> None:
    csv_path = Path(args.csv_path)
    if not csv_path.is_file():
        parser.error(f"CSV file not found: {csv_path}")

    reader = read_revenue_csv if args.kind == "revenue" else read_expense_csv
    print(f"Importing {args.kind} records from {csv_path}...")
    try:
        df = reader(csv_path)
        stats = store.import_frame(owner, df, args.kind)
    except ValueError as exc:
        raise SystemExit(f"Import failed: {exc}") from exc
    print(
        f"Imported {stats.rows_inserted} row(s), "
        f"{stats.duplicates_skipped} duplicate(s) skipped."
    )


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the Salon Ledger CLI.

    Parses the command line, loads the configuration, sets up logging,
    resolves and checks the owner, opens the store and runs the selected
    subcommand.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"salon_ledger version {__version__}")
        return

    if args.command is None:
        parser.error("a command is required (chart, calendar, payments, summary, import)")

    try:
        config = load_app_config(args.config_path)
        configure_logging(args.log_level or config.log_level)
        categories = load_categories(config)
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    owner = _resolve_owner(args, config)
    store = SQLiteTransactionStore(config.database)

    if args.command == "chart":
        _handle_chart(args, config, store, owner, categories)
    elif args.command == "calendar":
        _handle_calendar(args, store, owner)
    elif args.command == "payments":
        _handle_payments(store, owner)
    elif args.command == "summary":
        _handle_summary(store, owner)
    elif args.command == "import":
        _handle_import(args, parser, store, owner)


if __name__ == "__main__":
    main()
