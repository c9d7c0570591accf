# Salon Ledger - Bookkeeping dashboard for beauty salons
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Transaction store for Salon Ledger.

The aggregation core never talks to a database: it only needs something
that implements the :class:`TransactionStore` protocol, i.e. that can list
every revenue and expense transaction of an owner. This module defines that
protocol and ships a SQLite implementation with the CRUD operations used by
the CLI.

------------------------------------------------------------------------------
Schema Overview
------------------------------------------------------------------------------

Two tables with the same layout, one per record kind:

1) prestations   (revenue transactions)
2) expenses      (expense transactions)

   Columns:
   - id                 INTEGER PRIMARY KEY AUTOINCREMENT
   - user_email         TEXT    NOT NULL  -- owner of the record
   - category           TEXT    NOT NULL
   - date               TEXT    NOT NULL  -- ISO date "YYYY-MM-DD"
   - notes/description  TEXT              -- "notes" for prestations,
                                             "description" for expenses
   - payment_method     TEXT              -- "cash" | "card" | "mixed"
   - cash_amount_cents  INTEGER NOT NULL DEFAULT 0
   - card_amount_cents  INTEGER NOT NULL DEFAULT 0
   - amount_cents       INTEGER           -- legacy single amount, nullable
   - created_at         TEXT    NOT NULL  -- UTC timestamp
   - updated_at         TEXT              -- UTC timestamp of last change

------------------------------------------------------------------------------
Legacy rows
------------------------------------------------------------------------------

Databases created before the cash / card split only have `amount_cents`
(and, for expenses, no payment method). ``init_database`` adds the missing
columns in place, and every row is normalized when it is read (see
``transactions.normalize_split``). New rows never write `amount_cents`.

------------------------------------------------------------------------------
Owner scoping
------------------------------------------------------------------------------

Every operation takes the owner email and only sees that owner's rows. An
empty owner is not an error: reads return an empty list or None, deletes
return False, and the call is logged at INFO level.
"""

from __future__ import annotations

import logging
import sqlite3
from collections import Counter
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Literal, Optional, Protocol

import pandas as pd

from .transactions import (
    ExpenseTransaction,
    PaymentMethod,
    RevenueTransaction,
    from_cents,
    normalize_split,
    parse_payment_method,
    to_cents,
    validate_split,
)

logger = logging.getLogger(__name__)

RecordKind = Literal["revenue", "expense"]

# ---------------------------------------------------------------------------
# Dataclasses and protocol
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    """
    Database configuration for Salon Ledger.

    Attributes
    ----------
    engine:
        Database engine identifier. Only "sqlite" is supported.
    path:
        Path to the SQLite database file.
    """

    engine: str
    path: Path


@dataclass(frozen=True)
class ImportStats:
    """
    Summary of a bulk import.

    Attributes
    ----------
    rows_inserted:
        Number of new rows written.
    duplicates_skipped:
        Rows identical to a record the owner already had before the import
        (same date, category, split and text), which were not inserted again.
    """

    rows_inserted: int
    duplicates_skipped: int


class TransactionStore(Protocol):
    """Read side of the store, as consumed by the dashboard."""

    def list_revenue_transactions(self, owner_id: str) -> list[RevenueTransaction]:
        ...

    def list_expense_transactions(self, owner_id: str) -> list[ExpenseTransaction]:
        ...


@dataclass(frozen=True)
class _Table:
    name: str
    text_column: str
    allow_mixed: bool


_TABLES: dict[RecordKind, _Table] = {
    "revenue": _Table(name="prestations", text_column="notes", allow_mixed=True),
    "expense": _Table(name="expenses", text_column="description", allow_mixed=False),
}

_SELECT_COLUMNS = (
    "id, user_email, category, date, {text}, payment_method, "
    "cash_amount_cents, card_amount_cents, amount_cents"
)

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _ensure_sqlite(cfg: DatabaseConfig) -> None:
    """Raise if the configuration does not refer to a supported engine."""
    if cfg.engine.lower() != "sqlite":
        msg = (
            f"Unsupported database engine: {cfg.engine!r}. "
            "Only 'sqlite' is supported."
        )
        raise ValueError(msg)


def _connect(cfg: DatabaseConfig) -> sqlite3.Connection:
    """
    Open a SQLite connection.

    The caller is responsible for closing the connection.
    """
    _ensure_sqlite(cfg)
    return sqlite3.connect(cfg.path)


def _get_table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    cur = conn.execute(f"PRAGMA table_info({table});")
    return {row[1] for row in cur.fetchall()}


def _create_table_if_needed(conn: sqlite3.Connection, table: _Table) -> None:
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {table.name} (
            id                 INTEGER PRIMARY KEY AUTOINCREMENT,
            user_email         TEXT    NOT NULL,
            category           TEXT    NOT NULL,
            date               TEXT    NOT NULL,  -- ISO date 'YYYY-MM-DD'
            {table.text_column} TEXT,
            payment_method     TEXT,
            cash_amount_cents  INTEGER NOT NULL DEFAULT 0,
            card_amount_cents  INTEGER NOT NULL DEFAULT 0,
            amount_cents       INTEGER,
            created_at         TEXT    NOT NULL,
            updated_at         TEXT
        );
        """
    )


def _migrate_table_if_needed(conn: sqlite3.Connection, table: _Table) -> None:
    """
    Add the payment split columns to a table created by an older version.

    Idempotent. Existing rows keep their legacy `amount_cents` and get a
    zero split, which the read normalization turns back into an amount.
    """
    columns = _get_table_columns(conn, table.name)
    added = {
        "payment_method": "TEXT",
        "cash_amount_cents": "INTEGER NOT NULL DEFAULT 0",
        "card_amount_cents": "INTEGER NOT NULL DEFAULT 0",
        "amount_cents": "INTEGER",
        table.text_column: "TEXT",
        "updated_at": "TEXT",
    }
    for column, ddl in added.items():
        if column not in columns:
            logger.info("Migrating table %s: adding column %s", table.name, column)
            conn.execute(f"ALTER TABLE {table.name} ADD COLUMN {column} {ddl};")


def _to_iso_date(value) -> str:
    """Convert a date-like value to ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value)).isoformat()


def _now_utc_iso() -> str:
    """Return the current UTC datetime as ISO string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _parse_row_date(raw: str, table: str, row_id: int) -> date:
    try:
        return date.fromisoformat(str(raw))
    except ValueError as exc:
        raise ValueError(
            f"Invalid date {raw!r} in {table} row #{row_id}, expected YYYY-MM-DD."
        ) from exc


def _row_to_revenue(row: tuple) -> RevenueTransaction:
    row_id, owner, category, raw_date, notes, raw_method, cash, card, legacy = row
    method = parse_payment_method(raw_method)
    cash_amount, card_amount = normalize_split(
        method, from_cents(cash), from_cents(card), from_cents(legacy)
    )
    return RevenueTransaction(
        id=row_id,
        owner_id=owner,
        category=category,
        date=_parse_row_date(raw_date, "prestations", row_id),
        payment_method=method,
        cash_amount=cash_amount,
        card_amount=card_amount,
        notes=notes,
    )


def _row_to_expense(row: tuple) -> ExpenseTransaction:
    row_id, owner, category, raw_date, description, raw_method, cash, card, legacy = row
    method = parse_payment_method(raw_method)
    cash_amount, card_amount = normalize_split(
        method, from_cents(cash), from_cents(card), from_cents(legacy)
    )
    return ExpenseTransaction(
        id=row_id,
        owner_id=owner,
        category=category,
        date=_parse_row_date(raw_date, "expenses", row_id),
        payment_method=method,
        cash_amount=cash_amount,
        card_amount=card_amount,
        description=description,
    )


_ROW_READERS = {"revenue": _row_to_revenue, "expense": _row_to_expense}


def init_database(cfg: DatabaseConfig) -> None:
    """
    Initialize the database schema if needed.

    - Creates the SQLite file (and its parent directory) if missing.
    - Creates the `prestations` and `expenses` tables and their indexes.
    - Migrates tables from the single-amount layout.

    This function is idempotent.

    Raises
    ------
    ValueError
        If cfg.engine is not supported.
    sqlite3.Error
        If schema creation fails.
    """
    cfg.path.parent.mkdir(parents=True, exist_ok=True)

    conn = _connect(cfg)
    try:
        for table in _TABLES.values():
            _create_table_if_needed(conn, table)
            _migrate_table_if_needed(conn, table)
            conn.execute(
                f"""
                CREATE INDEX IF NOT EXISTS idx_{table.name}_owner_date
                    ON {table.name}(user_email, date);
                """
            )
        conn.commit()
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# SQLite implementation
# ---------------------------------------------------------------------------


class SQLiteTransactionStore:
    """
    SQLite-backed transaction store.

    Each call opens and closes its own connection. Listing methods return
    records newest first (by date, then by id).
    """

    def __init__(self, cfg: DatabaseConfig) -> None:
        self.cfg = cfg
        init_database(cfg)

    # -- reads --------------------------------------------------------------

    def _select(
        self,
        kind: RecordKind,
        where: str,
        params: tuple,
    ) -> list:
        table = _TABLES[kind]
        columns = _SELECT_COLUMNS.format(text=table.text_column)
        conn = _connect(self.cfg)
        try:
            cur = conn.execute(
                f"""
                SELECT {columns}
                  FROM {table.name}
                 WHERE {where}
                 ORDER BY date DESC, id DESC;
                """,
                params,
            )
            rows = cur.fetchall()
        finally:
            conn.close()

        reader = _ROW_READERS[kind]
        return [reader(row) for row in rows]

    def _list(self, kind: RecordKind, owner_id: str) -> list:
        if not owner_id:
            logger.info("No owner given, returning no %s transactions", kind)
            return []
        return self._select(kind, "user_email = ?", (owner_id,))

    def _list_on(self, kind: RecordKind, owner_id: str, day: date) -> list:
        if not owner_id:
            logger.info("No owner given, returning no %s transactions", kind)
            return []
        return self._select(
            kind, "user_email = ? AND date = ?", (owner_id, _to_iso_date(day))
        )

    def _get(self, kind: RecordKind, owner_id: str, record_id: int):
        if not owner_id:
            logger.info("No owner given, cannot load %s #%s", kind, record_id)
            return None
        found = self._select(kind, "user_email = ? AND id = ?", (owner_id, record_id))
        return found[0] if found else None

    def list_revenue_transactions(self, owner_id: str) -> list[RevenueTransaction]:
        """Every prestation of the owner, newest first."""
        return self._list("revenue", owner_id)

    def list_expense_transactions(self, owner_id: str) -> list[ExpenseTransaction]:
        """Every expense of the owner, newest first."""
        return self._list("expense", owner_id)

    def list_revenues_on(self, owner_id: str, day: date) -> list[RevenueTransaction]:
        return self._list_on("revenue", owner_id, day)

    def list_expenses_on(self, owner_id: str, day: date) -> list[ExpenseTransaction]:
        return self._list_on("expense", owner_id, day)

    def get_revenue(
        self, owner_id: str, record_id: int
    ) -> Optional[RevenueTransaction]:
        return self._get("revenue", owner_id, record_id)

    def get_expense(
        self, owner_id: str, record_id: int
    ) -> Optional[ExpenseTransaction]:
        return self._get("expense", owner_id, record_id)

    # -- writes -------------------------------------------------------------

    def _insert(
        self,
        kind: RecordKind,
        owner_id: str,
        category: str,
        day: date,
        payment_method: PaymentMethod,
        cash_amount: float,
        card_amount: float,
        text: Optional[str],
    ):
        table = _TABLES[kind]
        if not owner_id:
            logger.info("No owner given, %s not recorded", kind)
            return None

        method = parse_payment_method(payment_method)
        validate_split(method, cash_amount, card_amount, allow_mixed=table.allow_mixed)

        conn = _connect(self.cfg)
        try:
            cur = conn.execute(
                f"""
                INSERT INTO {table.name} (
                    user_email,
                    category,
                    date,
                    {table.text_column},
                    payment_method,
                    cash_amount_cents,
                    card_amount_cents,
                    amount_cents,
                    created_at,
                    updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, NULL, ?, NULL);
                """,
                (
                    owner_id,
                    category,
                    _to_iso_date(day),
                    text,
                    method.value,
                    to_cents(cash_amount),
                    to_cents(card_amount),
                    _now_utc_iso(),
                ),
            )
            record_id = cur.lastrowid
            conn.commit()
        finally:
            conn.close()

        logger.debug("Inserted %s #%s for %s", kind, record_id, owner_id)
        result = self._get(kind, owner_id, record_id)
        if result is None:
            msg = f"{kind.capitalize()} #{record_id} was just inserted but could not be reloaded."
            raise RuntimeError(msg)
        return result

    def add_revenue(
        self,
        owner_id: str,
        category: str,
        day: date,
        payment_method: PaymentMethod,
        cash_amount: float,
        card_amount: float,
        notes: Optional[str] = None,
    ) -> Optional[RevenueTransaction]:
        """
        Record a prestation.

        Returns
        -------
        RevenueTransaction | None
            The stored record, or None when no owner is given.

        Raises
        ------
        ValueError
            If the payment split is inconsistent (see ``validate_split``).
        """
        return self._insert(
            "revenue", owner_id, category, day, payment_method, cash_amount, card_amount, notes
        )

    def add_expense(
        self,
        owner_id: str,
        category: str,
        day: date,
        payment_method: PaymentMethod,
        cash_amount: float,
        card_amount: float,
        description: Optional[str] = None,
    ) -> Optional[ExpenseTransaction]:
        """Record an expense. Mixed payments are rejected for expenses."""
        return self._insert(
            "expense",
            owner_id,
            category,
            day,
            payment_method,
            cash_amount,
            card_amount,
            description,
        )

    def _update(self, kind: RecordKind, owner_id: str, record_id: int, changes: dict):
        table = _TABLES[kind]
        current = self._get(kind, owner_id, record_id)
        if current is None:
            return None

        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            raise ValueError(f"No fields to update for {kind} #{record_id}.")
        if "payment_method" in changes:
            changes["payment_method"] = parse_payment_method(changes["payment_method"])

        updated = replace(current, **changes)
        validate_split(
            updated.payment_method,
            updated.cash_amount,
            updated.card_amount,
            allow_mixed=table.allow_mixed,
        )
        text = updated.notes if kind == "revenue" else updated.description

        conn = _connect(self.cfg)
        try:
            conn.execute(
                f"""
                UPDATE {table.name}
                   SET category = ?,
                       date = ?,
                       {table.text_column} = ?,
                       payment_method = ?,
                       cash_amount_cents = ?,
                       card_amount_cents = ?,
                       amount_cents = NULL,
                       updated_at = ?
                 WHERE id = ? AND user_email = ?;
                """,
                (
                    updated.category,
                    _to_iso_date(updated.date),
                    text,
                    updated.payment_method.value,
                    to_cents(updated.cash_amount),
                    to_cents(updated.card_amount),
                    _now_utc_iso(),
                    record_id,
                    owner_id,
                ),
            )
            conn.commit()
        finally:
            conn.close()

        return self._get(kind, owner_id, record_id)

    def update_revenue(
        self,
        owner_id: str,
        record_id: int,
        *,
        category: Optional[str] = None,
        day: Optional[date] = None,
        payment_method: Optional[PaymentMethod] = None,
        cash_amount: Optional[float] = None,
        card_amount: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> Optional[RevenueTransaction]:
        """
        Apply a partial update to a prestation of the owner.

        Only non-None fields are changed. The resulting split is validated
        as a whole, and the legacy amount (if any) is dropped.

        Returns
        -------
        RevenueTransaction | None
            The updated record, or None if the owner has no such record.
        """
        return self._update(
            "revenue",
            owner_id,
            record_id,
            {
                "category": category,
                "date": day,
                "payment_method": payment_method,
                "cash_amount": cash_amount,
                "card_amount": card_amount,
                "notes": notes,
            },
        )

    def update_expense(
        self,
        owner_id: str,
        record_id: int,
        *,
        category: Optional[str] = None,
        day: Optional[date] = None,
        payment_method: Optional[PaymentMethod] = None,
        cash_amount: Optional[float] = None,
        card_amount: Optional[float] = None,
        description: Optional[str] = None,
    ) -> Optional[ExpenseTransaction]:
        return self._update(
            "expense",
            owner_id,
            record_id,
            {
                "category": category,
                "date": day,
                "payment_method": payment_method,
                "cash_amount": cash_amount,
                "card_amount": card_amount,
                "description": description,
            },
        )

    def _delete(self, kind: RecordKind, owner_id: str, record_id: int) -> bool:
        if not owner_id:
            logger.info("No owner given, %s #%s not deleted", kind, record_id)
            return False

        conn = _connect(self.cfg)
        try:
            cur = conn.execute(
                f"DELETE FROM {_TABLES[kind].name} WHERE id = ? AND user_email = ?;",
                (record_id, owner_id),
            )
            conn.commit()
            deleted = cur.rowcount > 0
        finally:
            conn.close()
        return deleted

    def delete_revenue(self, owner_id: str, record_id: int) -> bool:
        """Delete a prestation. Returns False if the owner has no such record."""
        return self._delete("revenue", owner_id, record_id)

    def delete_expense(self, owner_id: str, record_id: int) -> bool:
        return self._delete("expense", owner_id, record_id)

    # -- bulk import --------------------------------------------------------

    def import_frame(
        self,
        owner_id: str,
        df: pd.DataFrame,
        kind: RecordKind,
    ) -> ImportStats:
        """
        Insert a batch of normalized records.

        Parameters
        ----------
        owner_id:
            Owner email every row is recorded for.
        df:
            Output of ``io.read_revenue_csv`` / ``io.read_expense_csv``, with
            columns: date, category, payment_method, cash_amount,
            card_amount and notes (revenues) or description (expenses).
        kind:
            "revenue" or "expense".

        Behavior
        --------
        - Each row is validated like a manual entry. The whole batch is
          rejected (nothing written) if one row is invalid.
        - A row identical to a record the owner already had before this
          import is skipped and counted in `duplicates_skipped`. Each stored
          record absorbs at most one incoming row, so identical rows within
          one batch (two equal sales on the same day) are all inserted.

        Raises
        ------
        ValueError
            If `kind` is unknown, a required column is missing, or a row has
            an inconsistent payment split.
        """
        if kind not in _TABLES:
            raise ValueError(f"Unknown record kind: {kind!r}")
        table = _TABLES[kind]

        required = {"date", "category", "payment_method", "cash_amount", "card_amount"}
        missing = required.difference(df.columns)
        if missing:
            cols = ", ".join(sorted(missing))
            raise ValueError(f"DataFrame is missing required column(s): {cols}")

        if not owner_id:
            logger.info("No owner given, %d %s row(s) not imported", len(df), kind)
            return ImportStats(rows_inserted=0, duplicates_skipped=0)

        records = []
        for position, (_, row) in enumerate(df.iterrows(), start=1):
            method = parse_payment_method(row["payment_method"])
            cash_amount = float(row["cash_amount"])
            card_amount = float(row["card_amount"])
            try:
                validate_split(
                    method, cash_amount, card_amount, allow_mixed=table.allow_mixed
                )
            except ValueError as exc:
                raise ValueError(f"Invalid {kind} at row {position}: {exc}") from exc

            raw_text = row.get(table.text_column)
            text = None if raw_text is None or pd.isna(raw_text) else str(raw_text)
            records.append(
                (
                    owner_id,
                    str(row["category"]),
                    _to_iso_date(row["date"]),
                    text,
                    method.value,
                    to_cents(cash_amount),
                    to_cents(card_amount),
                )
            )

        rows_inserted = 0
        duplicates_skipped = 0
        created_at = _now_utc_iso()

        conn = _connect(self.cfg)
        try:
            # Rows already stored before this import; each one absorbs at most
            # one identical incoming row.
            cur = conn.execute(
                f"""
                SELECT user_email, category, date, COALESCE({table.text_column}, ''),
                       payment_method, cash_amount_cents, card_amount_cents
                  FROM {table.name}
                 WHERE user_email = ?;
                """,
                (owner_id,),
            )
            existing = Counter(tuple(row) for row in cur.fetchall())

            for record in records:
                key = record[:3] + (record[3] or "",) + record[4:]
                if existing[key] > 0:
                    existing[key] -= 1
                    duplicates_skipped += 1
                    continue

                conn.execute(
                    f"""
                    INSERT INTO {table.name} (
                        user_email, category, date, {table.text_column},
                        payment_method, cash_amount_cents, card_amount_cents,
                        amount_cents, created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, NULL, ?, NULL);
                    """,
                    record + (created_at,),
                )
                rows_inserted += 1
            conn.commit()
        finally:
            conn.close()

        logger.info(
            "Imported %d %s row(s) for %s (%d duplicate(s) skipped)",
            rows_inserted,
            kind,
            owner_id,
            duplicates_skipped,
        )
        return ImportStats(
            rows_inserted=rows_inserted, duplicates_skipped=duplicates_skipped
        )
