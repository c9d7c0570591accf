# Salon Ledger - Bookkeeping dashboard for beauty salons
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for Salon Ledger.

This module reads prestations and expenses from CSV files and normalizes
them into the structure expected by ``SQLiteTransactionStore.import_frame``.

Expected input formats
----------------------

Two input formats are supported (column names are case-insensitive):

1) Split format
   ------------
       date, category, payment_method, cash_amount, card_amount[, text]

   - ``date``:           date of the transaction (YYYY-MM-DD)
   - ``category``:       revenue or expense category name
   - ``payment_method``: cash, card or mixed (empty means cash)
   - ``cash_amount``:    part paid in cash (empty means 0)
   - ``card_amount``:    part paid by card (empty means 0)

2) Legacy single amount format
   ---------------------------
       date, category, amount[, payment_method][, text]

   The amount is assigned to the card side for card payments and to the
   cash side otherwise, exactly like legacy rows read from the database.

The optional text column is ``notes`` for prestations and ``description``
for expenses; ``label`` is accepted as an alias for either.

Output schema
-------------
    - ``date``            (datetime64[ns])
    - ``category``        (str)
    - ``payment_method``  (str: cash | card | mixed)
    - ``cash_amount``     (float)
    - ``card_amount``     (float)
    - ``notes`` / ``description`` (str or None)

Any other columns are ignored. A file matching neither format, an invalid
date, an invalid amount or an unknown payment method raises ValueError.
"""

import logging
import os
from typing import Union

import pandas as pd

from .transactions import normalize_split, parse_payment_method

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def _read_transactions(path: PathLike, text_column: str) -> pd.DataFrame:
    df = pd.read_csv(path)

    df.columns = [c.lower().strip() for c in df.columns]
    cols = set(df.columns)

    if "label" in cols and text_column not in cols:
        df = df.rename(columns={"label": text_column})
        cols = set(df.columns)

    required_split = {"date", "category", "cash_amount", "card_amount"}
    required_legacy = {"date", "category", "amount"}

    if required_split.issubset(cols):
        amount_columns = ["cash_amount", "card_amount"]
        legacy = False
    elif required_legacy.issubset(cols):
        amount_columns = ["amount"]
        legacy = True
    else:
        raise ValueError(
            f"Invalid transactions structure in {path}. Expected either:\n"
            f"  - date, category, payment_method, cash_amount, card_amount[, {text_column}]\n"
            f"  - date, category, amount[, payment_method][, {text_column}]\n"
            "(column names are case-insensitive)."
        )

    d = df.copy()

    try:
        d["date"] = pd.to_datetime(d["date"], format="%Y-%m-%d", errors="raise")
    except Exception as exc:  # noqa: BLE001
        raise ValueError("Invalid values in 'date' column, expected YYYY-MM-DD.") from exc

    for col in amount_columns:
        raw = d[col]
        d[col] = pd.to_numeric(raw, errors="coerce")
        # Empty cells are zero amounts, anything else unparsable is an error.
        if (d[col].isna() & raw.notna()).any():
            raise ValueError(f"Invalid numeric values in '{col}' column.")
        d[col] = d[col].fillna(0.0)

    if "payment_method" not in d.columns:
        d["payment_method"] = ""
    try:
        methods = [
            parse_payment_method(None if pd.isna(v) else str(v))
            for v in d["payment_method"]
        ]
    except ValueError as exc:
        raise ValueError(f"Invalid values in 'payment_method' column: {exc}") from exc
    d["payment_method"] = [m.value for m in methods]

    if legacy:
        splits = [
            normalize_split(method, 0.0, 0.0, amount)
            for method, amount in zip(methods, d["amount"])
        ]
        d["cash_amount"] = [cash for cash, _ in splits]
        d["card_amount"] = [card for _, card in splits]

    if text_column in d.columns:
        d[text_column] = [None if pd.isna(v) else str(v) for v in d[text_column]]
    else:
        d[text_column] = None

    d["category"] = d["category"].astype(str).str.strip()

    out = d[
        ["date", "category", "payment_method", "cash_amount", "card_amount", text_column]
    ].copy()
    logger.debug("Read %d row(s) from %s", len(out), path)
    return out


def read_revenue_csv(path: PathLike) -> pd.DataFrame:
    """
    Read prestations from a CSV file and normalize them.

    Returns
    -------
    pandas.DataFrame
        Columns: date, category, payment_method, cash_amount, card_amount,
        notes.

    Raises
    ------
    ValueError
        If the CSV does not match a supported format or parsing fails.
    """
    return _read_transactions(path, "notes")


def read_expense_csv(path: PathLike) -> pd.DataFrame:
    """Read expenses from a CSV file. Same formats, text column 'description'."""
    return _read_transactions(path, "description")
