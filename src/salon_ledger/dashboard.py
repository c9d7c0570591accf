# Salon Ledger - Bookkeeping dashboard for beauty salons
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Dashboard orchestration for Salon Ledger.

This module provides the high-level entry point a presentation layer calls
to render the financial chart, plus the immutable selection state that
drives it.

Overview
--------
``DashboardState`` holds the user's selection:

- the granularity (day, week, month, year),
- the anchor date (right edge of the window),
- the compact display mode (fewer buckets on small screens),
- the payment filter (total, cash only, card only).

Every transition (changing granularity, paging backward or forward,
returning to today, switching filter) returns a new state; nothing is
mutated in place.

``build_dashboard()`` performs, for one state and one owner:

1. Loads every revenue and expense transaction of the owner from the
   store (once per call).
2. Computes the window intervals for the selection.
3. Aggregates the transactions into one PeriodAggregate per interval.
4. Projects the chart series under the payment filter.
5. Sums the window totals and builds the window description.

Two calls share no state: the whole window is recomputed from the full
transaction set each time.

Separation of concerns
----------------------
- ``periods.py`` owns the calendar arithmetic.
- ``engine.py`` owns the bucketing and totals.
- ``series.py`` owns the chart shape.
- ``dashboard.py`` only assembles them.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional

import pandas as pd

from .categories import DEFAULT_CATEGORIES, CategorySet
from .engine import (
    PaymentFilter,
    PeriodAggregate,
    WindowTotals,
    aggregate,
    period_totals_frame,
    summarize_window,
)
from .periods import (
    Direction,
    Granularity,
    TimeInterval,
    can_navigate_next,
    describe_window,
    get_intervals,
    navigate,
)
from .series import ChartSeries, PointDetail, point_detail, project_series
from .store import TransactionStore


def current_date() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


@dataclass(frozen=True)
class DashboardState:
    """Current selection of the financial chart."""

    granularity: Granularity
    anchor: date
    compact: bool = False
    payment_filter: PaymentFilter = PaymentFilter.TOTAL

    def __post_init__(self) -> None:
        # Accept plain strings ("week", "cash") from callers
        object.__setattr__(self, "granularity", Granularity(self.granularity))
        object.__setattr__(self, "payment_filter", PaymentFilter(self.payment_filter))

    @classmethod
    def initial(
        cls,
        granularity: Granularity = Granularity.WEEK,
        compact: bool = False,
        payment_filter: PaymentFilter = PaymentFilter.TOTAL,
        today: Optional[date] = None,
    ) -> "DashboardState":
        """State anchored on today."""
        return cls(
            granularity=granularity,
            anchor=today if today is not None else current_date(),
            compact=compact,
            payment_filter=payment_filter,
        )

    def with_granularity(
        self, granularity: Granularity, today: Optional[date] = None
    ) -> "DashboardState":
        """Switch granularity. The anchor goes back to today."""
        return replace(
            self,
            granularity=granularity,
            anchor=today if today is not None else current_date(),
        )

    def with_payment_filter(self, payment_filter: PaymentFilter) -> "DashboardState":
        return replace(self, payment_filter=payment_filter)

    def with_compact(self, compact: bool) -> "DashboardState":
        return replace(self, compact=compact)

    def previous(self) -> "DashboardState":
        """One full window back."""
        anchor = navigate(Direction.PREVIOUS, self.granularity, self.anchor, self.compact)
        return replace(self, anchor=anchor)

    def next(self) -> "DashboardState":
        """
        One full window forward.

        Not clamped: check :meth:`can_go_next` first.
        """
        anchor = navigate(Direction.NEXT, self.granularity, self.anchor, self.compact)
        return replace(self, anchor=anchor)

    def reset_to_today(self, today: Optional[date] = None) -> "DashboardState":
        return replace(self, anchor=today if today is not None else current_date())

    def can_go_next(self, today: Optional[date] = None) -> bool:
        return can_navigate_next(
            self.granularity,
            self.anchor,
            self.compact,
            today=today if today is not None else current_date(),
        )


@dataclass(frozen=True)
class DashboardView:
    """
    Everything needed to render the chart for one state.

    Attributes
    ----------
    state :
        The selection this view was built for.
    intervals :
        Window buckets, oldest first.
    aggregates :
        One PeriodAggregate per interval.
    series :
        Chart datasets and profit line under the payment filter.
    totals :
        Revenue, expenses and net profit over the whole window.
    description :
        Human description of the window, e.g. 'févr. 2024 - janv. 2025'.
    can_go_next :
        Whether forward navigation is allowed.
    """

    state: DashboardState
    intervals: tuple[TimeInterval, ...]
    aggregates: tuple[PeriodAggregate, ...]
    series: ChartSeries
    totals: WindowTotals
    description: str
    can_go_next: bool
    categories: CategorySet = DEFAULT_CATEGORIES

    def point_detail(self, index: int) -> PointDetail:
        """Tooltip detail of the interval at `index`."""
        return point_detail(
            self.aggregates,
            index,
            self.state.payment_filter,
            self.categories,
            granularity=self.state.granularity,
        )

    def totals_frame(self) -> pd.DataFrame:
        """Per-interval revenue / expenses / net profit table."""
        return period_totals_frame(self.aggregates, self.state.payment_filter)


def build_dashboard(
    store: TransactionStore,
    owner_id: str,
    state: DashboardState,
    categories: CategorySet = DEFAULT_CATEGORIES,
    today: Optional[date] = None,
) -> DashboardView:
    """
    Compute the chart view of `owner_id` for `state`.

    Parameters
    ----------
    store :
        Any object implementing the TransactionStore protocol.
    owner_id :
        Owner email. An empty owner yields an all-zero window.
    state :
        Current selection.
    categories :
        Category set defining buckets, order and colours.
    today :
        Reference date for the forward-navigation guard.

    Returns
    -------
    DashboardView
    """
    revenues = store.list_revenue_transactions(owner_id)
    expenses = store.list_expense_transactions(owner_id)

    intervals = get_intervals(state.granularity, state.anchor, state.compact)
    aggregates = aggregate(revenues, expenses, intervals, categories)

    return DashboardView(
        state=state,
        intervals=tuple(intervals),
        aggregates=tuple(aggregates),
        series=project_series(aggregates, state.payment_filter, categories),
        totals=summarize_window(aggregates, state.payment_filter),
        description=describe_window(state.granularity, state.anchor, state.compact),
        can_go_next=state.can_go_next(today),
        categories=categories,
    )
