# Salon Ledger - Bookkeeping dashboard for beauty salons
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Summary statistics for the calendar and home views.

Unlike ``engine.aggregate``, which fills the buckets of a reporting window,
these helpers summarize the raw transaction set:

- ``combined_daily_stats``: one entry per active day (calendar view),
- ``payment_method_stats``: cash / card / mixed breakdown of revenues,
- ``monthly_totals``: total amount per 'YYYY-MM' month,
- ``dashboard_highlights``: headline figures for the current week / month,
- ``month_grid``: Monday-first layout of a calendar month.

All amounts are derived from the cash / card split of each transaction.
"""

from calendar import monthrange
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

import pandas as pd

from .periods import TimeInterval, add_months, filter_by_interval
from .transactions import (
    ExpenseTransaction,
    PaymentMethod,
    RevenueTransaction,
    Transaction,
)

# ---------------------------------------------------------------------------
# Calendar: combined daily statistics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DailyStats:
    """Revenues and expenses of a single day."""

    date: date
    revenues: tuple[RevenueTransaction, ...]
    expenses: tuple[ExpenseTransaction, ...]

    @property
    def revenue_count(self) -> int:
        return len(self.revenues)

    @property
    def expense_count(self) -> int:
        return len(self.expenses)

    @property
    def total_revenue(self) -> float:
        return sum(t.total for t in self.revenues)

    @property
    def total_expenses(self) -> float:
        return sum(t.total for t in self.expenses)

    @property
    def net_profit(self) -> float:
        return self.total_revenue - self.total_expenses

    @property
    def total_cash_revenue(self) -> float:
        return sum(t.cash_amount for t in self.revenues)

    @property
    def total_card_revenue(self) -> float:
        return sum(t.card_amount for t in self.revenues)

    @property
    def total_cash_expenses(self) -> float:
        return sum(t.cash_amount for t in self.expenses)

    @property
    def total_card_expenses(self) -> float:
        return sum(t.card_amount for t in self.expenses)


def combined_daily_stats(
    revenues: Iterable[RevenueTransaction],
    expenses: Iterable[ExpenseTransaction],
) -> list[DailyStats]:
    """
    Group transactions by day.

    Returns
    -------
    list[DailyStats]
        One entry per date having at least one transaction, newest first.
    """
    revenues_by_day: dict[date, list[RevenueTransaction]] = defaultdict(list)
    expenses_by_day: dict[date, list[ExpenseTransaction]] = defaultdict(list)

    for r in revenues:
        revenues_by_day[r.date].append(r)
    for e in expenses:
        expenses_by_day[e.date].append(e)

    days = sorted(set(revenues_by_day) | set(expenses_by_day), reverse=True)
    return [
        DailyStats(
            date=day,
            revenues=tuple(revenues_by_day.get(day, ())),
            expenses=tuple(expenses_by_day.get(day, ())),
        )
        for day in days
    ]


def stats_for_day(stats: Sequence[DailyStats], day: date) -> Optional[DailyStats]:
    """Return the DailyStats of `day`, or None if nothing happened that day."""
    for s in stats:
        if s.date == day:
            return s
    return None


# ---------------------------------------------------------------------------
# Payment methods
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MethodStats:
    count: int
    total: float
    cash: float
    card: float


@dataclass(frozen=True)
class PaymentStats:
    """
    Breakdown of revenues by payment method.

    Attributes
    ----------
    by_method :
        Count and amounts for each of cash, card and mixed.
    total_cash, total_card :
        Cash and card amounts over all revenues (mixed included).
    """

    by_method: dict[PaymentMethod, MethodStats]
    total_cash: float
    total_card: float

    @property
    def total_revenue(self) -> float:
        return self.total_cash + self.total_card

    @property
    def transaction_count(self) -> int:
        return sum(s.count for s in self.by_method.values())

    @property
    def cash_percentage(self) -> float:
        if self.total_revenue <= 0:
            return 0.0
        return self.total_cash / self.total_revenue * 100.0

    @property
    def card_percentage(self) -> float:
        if self.total_revenue <= 0:
            return 0.0
        return self.total_card / self.total_revenue * 100.0

    @property
    def mixed_amount(self) -> float:
        """Total of the mixed payments (cash part + card part)."""
        return self.by_method[PaymentMethod.MIXED].total


def payment_method_stats(revenues: Iterable[RevenueTransaction]) -> PaymentStats:
    """Count and sum revenues per payment method."""
    counts = {m: 0 for m in PaymentMethod}
    totals = {m: 0.0 for m in PaymentMethod}
    cash = {m: 0.0 for m in PaymentMethod}
    card = {m: 0.0 for m in PaymentMethod}

    for r in revenues:
        m = r.payment_method
        counts[m] += 1
        totals[m] += r.total
        cash[m] += r.cash_amount
        card[m] += r.card_amount

    by_method = {
        m: MethodStats(count=counts[m], total=totals[m], cash=cash[m], card=card[m])
        for m in PaymentMethod
    }
    return PaymentStats(
        by_method=by_method,
        total_cash=sum(cash.values()),
        total_card=sum(card.values()),
    )


# ---------------------------------------------------------------------------
# Monthly totals
# ---------------------------------------------------------------------------


def monthly_totals(transactions: Iterable[Transaction]) -> dict[str, float]:
    """
    Total amount per calendar month.

    Returns
    -------
    dict[str, float]
        Mapping 'YYYY-MM' -> total, sorted by month. Empty input gives {}.
    """
    rows = [{"date": t.date, "total": t.total} for t in transactions]
    if not rows:
        return {}

    df = pd.DataFrame(rows)
    df["month"] = pd.to_datetime(df["date"]).dt.strftime("%Y-%m")
    grouped = df.groupby("month", sort=True)["total"].sum()
    return {str(month): float(total) for month, total in grouped.items()}


# ---------------------------------------------------------------------------
# Home dashboard highlights
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TopCategory:
    name: str
    revenue: float
    count: int


@dataclass(frozen=True)
class Highlights:
    """Headline figures of the home dashboard."""

    revenues_this_week: int
    revenues_this_month: int
    revenues_last_month: int
    month_revenue: float
    month_expenses: float
    top_category: Optional[TopCategory]

    @property
    def month_profit(self) -> float:
        return self.month_revenue - self.month_expenses


def _month_interval(day: date) -> TimeInterval:
    start = day.replace(day=1)
    end = start.replace(day=monthrange(start.year, start.month)[1])
    return TimeInterval(start=start, end=end, label=start.strftime("%Y-%m"))


def dashboard_highlights(
    revenues: Sequence[RevenueTransaction],
    expenses: Sequence[ExpenseTransaction],
    today: date,
) -> Highlights:
    """
    Compute the home dashboard figures relative to `today`.

    - prestations this week (Monday to Sunday),
    - prestations this month and last month,
    - revenue, expenses and profit of the current month,
    - best revenue category of the month (by revenue; ties keep the first
      category met).
    """
    week_start = today - timedelta(days=today.weekday())
    week = TimeInterval(start=week_start, end=week_start + timedelta(days=6), label="")
    this_month = _month_interval(today)
    last_month = _month_interval(add_months(today.replace(day=1), -1))

    month_revenues = filter_by_interval(revenues, this_month)
    month_expenses = filter_by_interval(expenses, this_month)

    by_category: dict[str, list[float]] = {}
    for r in month_revenues:
        revenue_and_count = by_category.setdefault(r.category, [0.0, 0])
        revenue_and_count[0] += r.total
        revenue_and_count[1] += 1

    top: Optional[TopCategory] = None
    for name, (revenue, count) in by_category.items():
        if top is None or revenue > top.revenue:
            top = TopCategory(name=name, revenue=revenue, count=int(count))

    return Highlights(
        revenues_this_week=len(filter_by_interval(revenues, week)),
        revenues_this_month=len(month_revenues),
        revenues_last_month=len(filter_by_interval(revenues, last_month)),
        month_revenue=sum(r.total for r in month_revenues),
        month_expenses=sum(e.total for e in month_expenses),
        top_category=top,
    )


# ---------------------------------------------------------------------------
# Calendar grid
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MonthGrid:
    """
    Layout of a month in a Monday-first calendar.

    `leading_blanks` is the number of empty cells before the 1st.
    """

    year: int
    month: int
    leading_blanks: int
    days: tuple[date, ...]


def month_grid(year: int, month: int) -> MonthGrid:
    first = date(year, month, 1)
    last_day = monthrange(year, month)[1]
    return MonthGrid(
        year=year,
        month=month,
        leading_blanks=first.weekday(),
        days=tuple(date(year, month, d) for d in range(1, last_day + 1)),
    )
