# Salon Ledger - Bookkeeping dashboard for beauty salons
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Salon Ledger
------------

A Python bookkeeping dashboard for a small beauty salon. It records
service transactions ("prestations") and expenses, splits each of them by
payment method (cash / card / mixed) and computes time-bucketed revenue,
expense and profit views.

Main capabilities:
- day / week / month / year reporting windows with page-by-page navigation,
- per-category and per-payment-method aggregation of revenues and expenses,
- chart-ready series (stacked revenue / expense bars and a net profit line),
- calendar daily statistics and payment method breakdowns,
- a SQLite transaction store scoped by owner email,
- CSV import of revenues and expenses,
- a small command-line interface.

Salon Ledger separates computation (periods, engine, series), configuration
(TOML) and presentation (CLI), so the core can be reused by any front-end.


Version: 0.2.0

Usage:
    python -m salon_ledger.cli --help
"""

__all__ = [
    "categories",
    "transactions",
    "periods",
    "engine",
    "series",
    "summaries",
    "dashboard",
    "store",
]

__version__ = "0.2.0"
