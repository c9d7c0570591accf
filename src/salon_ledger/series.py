# Salon Ledger - Bookkeeping dashboard for beauty salons
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Chart series projection for Salon Ledger.

This module turns the PeriodAggregate list produced by ``engine.aggregate``
into the flat series a chart renderer needs:

- one stacked bar dataset per revenue category (positive values),
- one stacked bar dataset per expense category (negated values),
- exactly one net profit line, with a sign-dependent marker per point.

Display policy
--------------
- A category dataset is included only if at least one of its values in
  the window is non-zero. An included dataset keeps its zero values at the
  other intervals.
- Expense values are negated and a would-be ``-0.0`` is returned as
  ``0.0``, so no "-0€" can reach the display.
- The profit line is always present, even when every point is zero.

Tooltip detail
--------------
``point_detail`` gathers, for a single interval, the totals under the
active payment filter and the per-category signed values, omitting the
categories that are zero *for that interval*. ``tooltip_lines`` renders
it as text.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, Optional

from .categories import DEFAULT_CATEGORIES, CategorySet
from .engine import PaymentFilter, PeriodAggregate
from .periods import Granularity, interval_title

PROFIT_LABEL = "Bénéfice Net"
PROFIT_LINE_COLOR = "#059669"

# (fill, border) of the profit markers
POSITIVE_POINT = ("#10b981", "#059669")
NEGATIVE_POINT = ("#ef4444", "#dc2626")


@dataclass(frozen=True)
class ChartDataset:
    """One stacked bar dataset (a single category)."""

    label: str
    kind: Literal["revenue", "expense"]
    stack: str
    color: str
    values: tuple[float, ...]


@dataclass(frozen=True)
class ProfitLine:
    """The net profit line, one point per interval."""

    label: str
    color: str
    values: tuple[float, ...]
    point_colors: tuple[str, ...]
    point_border_colors: tuple[str, ...]


@dataclass(frozen=True)
class ChartSeries:
    labels: tuple[str, ...]
    revenue: tuple[ChartDataset, ...]
    expenses: tuple[ChartDataset, ...]
    profit: ProfitLine

    @property
    def datasets(self) -> tuple[ChartDataset, ...]:
        """Bar datasets in render order: revenues first, then expenses."""
        return self.revenue + self.expenses


@dataclass(frozen=True)
class CategoryAmount:
    """Signed amount of one category: positive revenue, negative expense."""

    category: str
    kind: Literal["revenue", "expense"]
    value: float


@dataclass(frozen=True)
class PointDetail:
    label: str
    title: str
    total_revenue: float
    total_expenses: float
    net_profit: float
    categories: tuple[CategoryAmount, ...]


def negate(value: float) -> float:
    """Return -value, never -0.0."""
    result = -value
    return 0.0 if result == 0 else result


def project_series(
    aggregates: Sequence[PeriodAggregate],
    payment_filter: PaymentFilter = PaymentFilter.TOTAL,
    categories: CategorySet = DEFAULT_CATEGORIES,
) -> ChartSeries:
    """
    Build the chart series of a window.

    Parameters
    ----------
    aggregates :
        Output of ``engine.aggregate`` for the window.
    payment_filter :
        Selects total, cash-only or card-only sub-totals.
    categories :
        Category set giving the dataset order and colours.

    Returns
    -------
    ChartSeries
        Labels, non-empty revenue and expense datasets, and the profit line.
    """
    payment_filter = PaymentFilter(payment_filter)
    labels = tuple(agg.interval.label for agg in aggregates)

    revenue: list[ChartDataset] = []
    for category in categories.revenue:
        values = tuple(
            agg.revenue_map(payment_filter).get(category.name, 0.0) for agg in aggregates
        )
        if any(v != 0 for v in values):
            revenue.append(
                ChartDataset(
                    label=category.name,
                    kind="revenue",
                    stack="revenue",
                    color=category.color,
                    values=values,
                )
            )

    expenses: list[ChartDataset] = []
    for category in categories.expense:
        values = tuple(
            negate(agg.expense_map(payment_filter).get(category.name, 0.0))
            for agg in aggregates
        )
        if any(v != 0 for v in values):
            expenses.append(
                ChartDataset(
                    label=category.name,
                    kind="expense",
                    stack="expenses",
                    color=category.color,
                    values=values,
                )
            )

    profits = tuple(agg.net_profit_for(payment_filter) for agg in aggregates)
    markers = [POSITIVE_POINT if p >= 0 else NEGATIVE_POINT for p in profits]
    profit = ProfitLine(
        label=PROFIT_LABEL,
        color=PROFIT_LINE_COLOR,
        values=profits,
        point_colors=tuple(fill for fill, _ in markers),
        point_border_colors=tuple(border for _, border in markers),
    )

    return ChartSeries(
        labels=labels,
        revenue=tuple(revenue),
        expenses=tuple(expenses),
        profit=profit,
    )


def point_detail(
    aggregates: Sequence[PeriodAggregate],
    index: int,
    payment_filter: PaymentFilter = PaymentFilter.TOTAL,
    categories: CategorySet = DEFAULT_CATEGORIES,
    granularity: Optional[Granularity] = None,
) -> PointDetail:
    """
    Tooltip data for the interval at `index`.

    Categories whose value is zero in this interval are left out.

    Raises
    ------
    IndexError
        If `index` does not designate an interval of the window.
    """
    agg = aggregates[index]
    revenue_map = agg.revenue_map(payment_filter)
    expense_map = agg.expense_map(payment_filter)

    entries: list[CategoryAmount] = []
    for name in categories.revenue_names:
        value = revenue_map.get(name, 0.0)
        if value != 0:
            entries.append(CategoryAmount(name, "revenue", value))
    for name in categories.expense_names:
        value = expense_map.get(name, 0.0)
        if value != 0:
            entries.append(CategoryAmount(name, "expense", negate(value)))

    title = (
        interval_title(granularity, agg.interval)
        if granularity is not None
        else agg.interval.label
    )

    return PointDetail(
        label=agg.interval.label,
        title=title,
        total_revenue=agg.revenue_for(payment_filter),
        total_expenses=agg.expenses_for(payment_filter),
        net_profit=agg.net_profit_for(payment_filter),
        categories=tuple(entries),
    )


def format_euros(value: float, signed: bool = False) -> str:
    """
    Format an amount in euros without trailing zeros: 40 -> '40€'.

    With `signed`, non-negative amounts get a leading '+'. Zero is never
    rendered as '-0€'.
    """
    amount = round(value, 2)
    if amount == 0:
        amount = 0.0
    text = f"{amount:.2f}".rstrip("0").rstrip(".")
    if signed and amount >= 0:
        text = "+" + text
    return f"{text}€"


def tooltip_lines(detail: PointDetail) -> list[str]:
    """Tooltip body: the three totals, then one line per non-zero category."""
    lines = [
        f"Revenus: {format_euros(detail.total_revenue, signed=True)}",
        f"Dépenses: {format_euros(negate(detail.total_expenses))}",
        f"Bénéfice: {format_euros(detail.net_profit, signed=True)}",
    ]
    for entry in detail.categories:
        lines.append(f"{entry.category}: {format_euros(entry.value, signed=True)}")
    return lines
