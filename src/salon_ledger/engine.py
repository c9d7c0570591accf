# Salon Ledger - Bookkeeping dashboard for beauty salons
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core aggregation engine for Salon Ledger.

This module buckets revenue and expense transactions into the intervals of
a reporting window (see ``periods.py``) and produces one PeriodAggregate
per interval.

1. Bucketing
   ---------
   For every interval, each category of the CategorySet starts at 0 in
   every map, so categories with no activity are explicit zero entries.
   A transaction belongs to an interval when its date lies within the
   inclusive [start, end] bounds. It then adds:

   - its derived total (cash + card) to exactly one category bucket,
   - its cash amount to the cash map of the same category,
   - its card amount to the card map of the same category.

   Categories that are not part of the CategorySet are bucketed under the
   fallback category, so the aggregation always preserves totals.
   Transactions outside every interval are ignored.

2. Totals
   ------
   Totals and net profits are never accumulated on their own. They are
   properties computed from the category maps on every access:

       total_revenue = sum(revenue_by_category)
       net_profit    = total_revenue - total_expenses

   and likewise for the cash-only and card-only variants. Net profit may
   be negative and is returned as is.

3. Tabular output
   --------------
   ``aggregates_to_frame`` and ``period_totals_frame`` convert aggregates
   into long-format pandas DataFrames for the CLI and CSV exports.

Sums are kept in integer cents while bucketing and converted to euros
once per interval. Each category total is built as its cash part plus its
card part, so the two always agree exactly. Display formatting is the
caller's job.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

import pandas as pd

from .categories import DEFAULT_CATEGORIES, CategoryKind, CategorySet
from .periods import TimeInterval
from .transactions import ExpenseTransaction, RevenueTransaction, Transaction, to_cents

logger = logging.getLogger(__name__)


class PaymentFilter(str, Enum):
    """Which sub-totals a view reads: everything, cash only or card only."""

    TOTAL = "total"
    CASH = "cash"
    CARD = "card"


@dataclass(frozen=True)
class PeriodAggregate:
    """
    Revenue and expense sub-totals of one interval.

    Attributes
    ----------
    interval :
        The bucket these amounts belong to.
    revenue_by_category, expense_by_category :
        Total amount (cash + card) per category.
    revenue_cash_by_category, revenue_card_by_category :
        Cash and card parts of the revenue per category.
    expense_cash_by_category, expense_card_by_category :
        Cash and card parts of the expenses per category.

    Every map holds every category of the CategorySet used to build it.
    """

    interval: TimeInterval
    revenue_by_category: Mapping[str, float]
    revenue_cash_by_category: Mapping[str, float]
    revenue_card_by_category: Mapping[str, float]
    expense_by_category: Mapping[str, float]
    expense_cash_by_category: Mapping[str, float]
    expense_card_by_category: Mapping[str, float]

    @property
    def total_revenue(self) -> float:
        return sum(self.revenue_by_category.values())

    @property
    def total_cash_revenue(self) -> float:
        return sum(self.revenue_cash_by_category.values())

    @property
    def total_card_revenue(self) -> float:
        return sum(self.revenue_card_by_category.values())

    @property
    def total_expenses(self) -> float:
        return sum(self.expense_by_category.values())

    @property
    def total_cash_expenses(self) -> float:
        return sum(self.expense_cash_by_category.values())

    @property
    def total_card_expenses(self) -> float:
        return sum(self.expense_card_by_category.values())

    @property
    def net_profit(self) -> float:
        return self.total_revenue - self.total_expenses

    @property
    def net_cash_profit(self) -> float:
        return self.total_cash_revenue - self.total_cash_expenses

    @property
    def net_card_profit(self) -> float:
        return self.total_card_revenue - self.total_card_expenses

    # -- payment-filter accessors -------------------------------------------

    def revenue_map(self, payment_filter: PaymentFilter) -> Mapping[str, float]:
        payment_filter = PaymentFilter(payment_filter)
        if payment_filter is PaymentFilter.CASH:
            return self.revenue_cash_by_category
        if payment_filter is PaymentFilter.CARD:
            return self.revenue_card_by_category
        return self.revenue_by_category

    def expense_map(self, payment_filter: PaymentFilter) -> Mapping[str, float]:
        payment_filter = PaymentFilter(payment_filter)
        if payment_filter is PaymentFilter.CASH:
            return self.expense_cash_by_category
        if payment_filter is PaymentFilter.CARD:
            return self.expense_card_by_category
        return self.expense_by_category

    def revenue_for(self, payment_filter: PaymentFilter) -> float:
        return sum(self.revenue_map(payment_filter).values())

    def expenses_for(self, payment_filter: PaymentFilter) -> float:
        return sum(self.expense_map(payment_filter).values())

    def net_profit_for(self, payment_filter: PaymentFilter) -> float:
        return self.revenue_for(payment_filter) - self.expenses_for(payment_filter)


@dataclass(frozen=True)
class WindowTotals:
    """Totals over every interval of a window, for one payment filter."""

    total_revenue: float
    total_expenses: float
    net_profit: float


def _zero_cents(names: Iterable[str]) -> dict[str, int]:
    return {name: 0 for name in names}


def _split_maps(
    cash_cents: Mapping[str, int], card_cents: Mapping[str, int]
) -> tuple[dict[str, float], dict[str, float], dict[str, float]]:
    """Convert cent sums to euros. Each total is cash + card of the same category."""
    cash = {name: cents / 100.0 for name, cents in cash_cents.items()}
    card = {name: cents / 100.0 for name, cents in card_cents.items()}
    total = {name: cash[name] + card[name] for name in cash}
    return total, cash, card


def _resolved(
    transactions: Iterable[Transaction],
    kind: CategoryKind,
    categories: CategorySet,
) -> list[tuple[Transaction, str]]:
    """Pair each transaction with the category bucket it contributes to."""
    out = []
    for t in transactions:
        bucket = categories.resolve(kind, t.category)
        if bucket != t.category:
            logger.debug(
                "Unknown %s category %r (transaction %s), bucketed under %r",
                kind,
                t.category,
                t.id,
                bucket,
            )
        out.append((t, bucket))
    return out


def aggregate(
    revenues: Iterable[RevenueTransaction],
    expenses: Iterable[ExpenseTransaction],
    intervals: Sequence[TimeInterval],
    categories: CategorySet = DEFAULT_CATEGORIES,
) -> list[PeriodAggregate]:
    """Aggregate transactions into one PeriodAggregate per interval.

    Steps:
        1. Resolve the category bucket of every transaction once.
        2. For each interval, initialize every category at 0 in the six
           maps (total / cash / card, for revenues and expenses).
        3. Add the cash and card cents of each transaction dated within the
           interval (inclusive bounds) to its category bucket.
        4. Convert to euros; each category total is its cash + card.

    Args:
        revenues: All revenue transactions of the owner.
        expenses: All expense transactions of the owner.
        intervals: Window buckets, as returned by ``periods.get_intervals``.
        categories: Category set defining the buckets.

    Returns:
        A list with one aggregate per interval, in the order of `intervals`.
        An owner without transactions gets all-zero aggregates.
    """
    revenue_items = _resolved(revenues, "revenue", categories)
    expense_items = _resolved(expenses, "expense", categories)

    out: list[PeriodAggregate] = []
    for interval in intervals:
        rev_cash = _zero_cents(categories.revenue_names)
        rev_card = _zero_cents(categories.revenue_names)
        exp_cash = _zero_cents(categories.expense_names)
        exp_card = _zero_cents(categories.expense_names)

        for t, bucket in revenue_items:
            if interval.contains(t.date):
                rev_cash[bucket] += to_cents(t.cash_amount)
                rev_card[bucket] += to_cents(t.card_amount)

        for t, bucket in expense_items:
            if interval.contains(t.date):
                exp_cash[bucket] += to_cents(t.cash_amount)
                exp_card[bucket] += to_cents(t.card_amount)

        rev_total, rev_cash_eur, rev_card_eur = _split_maps(rev_cash, rev_card)
        exp_total, exp_cash_eur, exp_card_eur = _split_maps(exp_cash, exp_card)

        out.append(
            PeriodAggregate(
                interval=interval,
                revenue_by_category=rev_total,
                revenue_cash_by_category=rev_cash_eur,
                revenue_card_by_category=rev_card_eur,
                expense_by_category=exp_total,
                expense_cash_by_category=exp_cash_eur,
                expense_card_by_category=exp_card_eur,
            )
        )

    return out


def summarize_window(
    aggregates: Iterable[PeriodAggregate],
    payment_filter: PaymentFilter = PaymentFilter.TOTAL,
) -> WindowTotals:
    """Sum revenues, expenses and net profit over a whole window."""
    revenue = 0.0
    expenses = 0.0
    for agg in aggregates:
        revenue += agg.revenue_for(payment_filter)
        expenses += agg.expenses_for(payment_filter)
    return WindowTotals(
        total_revenue=revenue,
        total_expenses=expenses,
        net_profit=revenue - expenses,
    )


def aggregates_to_frame(aggregates: Iterable[PeriodAggregate]) -> pd.DataFrame:
    """
    Convert aggregates into a long-format DataFrame.

    Each row is one category of one kind for one interval.

    Columns:
        - period_label : str
        - start, end   : date (inclusive bounds)
        - kind         : 'revenue' or 'expense'
        - category     : str
        - total        : float (cash + card)
        - cash         : float
        - card         : float
    """
    columns = ["period_label", "start", "end", "kind", "category", "total", "cash", "card"]
    rows = []
    for agg in aggregates:
        for kind, totals, cash, card in (
            (
                "revenue",
                agg.revenue_by_category,
                agg.revenue_cash_by_category,
                agg.revenue_card_by_category,
            ),
            (
                "expense",
                agg.expense_by_category,
                agg.expense_cash_by_category,
                agg.expense_card_by_category,
            ),
        ):
            for category, amount in totals.items():
                rows.append(
                    {
                        "period_label": agg.interval.label,
                        "start": agg.interval.start,
                        "end": agg.interval.end,
                        "kind": kind,
                        "category": category,
                        "total": amount,
                        "cash": cash[category],
                        "card": card[category],
                    }
                )

    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns)


def period_totals_frame(
    aggregates: Iterable[PeriodAggregate],
    payment_filter: PaymentFilter = PaymentFilter.TOTAL,
) -> pd.DataFrame:
    """
    One row per interval with revenue, expenses and net profit.

    Amounts are rounded to 2 decimals for display.
    """
    columns = ["period_label", "start", "end", "revenue", "expenses", "net_profit"]
    rows = [
        {
            "period_label": agg.interval.label,
            "start": agg.interval.start,
            "end": agg.interval.end,
            "revenue": round(agg.revenue_for(payment_filter), 2),
            "expenses": round(agg.expenses_for(payment_filter), 2),
            "net_profit": round(agg.net_profit_for(payment_filter), 2),
        }
        for agg in aggregates
    ]
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns)
