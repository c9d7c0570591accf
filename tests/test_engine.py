from datetime import date

import pytest

from salon_ledger.categories import DEFAULT_CATEGORIES, Category, CategorySet
from salon_ledger.engine import (
    PaymentFilter,
    aggregate,
    aggregates_to_frame,
    period_totals_frame,
    summarize_window,
)
from salon_ledger.periods import Granularity, TimeInterval, compute_intervals
from salon_ledger.transactions import (
    ExpenseTransaction,
    PaymentMethod,
    RevenueTransaction,
)

SMALL_SET = CategorySet(
    revenue=(Category("Manicure", "#ec4899"), Category("Divers", "#8b5cf6")),
    expense=(Category("Supplies", "#ef4444"), Category("Divers", "#6b7280")),
)

DAY = date(2025, 1, 15)


def revenue(category, cash, card, day=DAY, method=None):
    if method is None:
        method = PaymentMethod.MIXED if cash and card else (
            PaymentMethod.CARD if card else PaymentMethod.CASH
        )
    return RevenueTransaction(
        id=None,
        owner_id="owner@example.com",
        category=category,
        date=day,
        payment_method=method,
        cash_amount=cash,
        card_amount=card,
    )


def expense(category, cash, card, day=DAY):
    return ExpenseTransaction(
        id=None,
        owner_id="owner@example.com",
        category=category,
        date=day,
        payment_method=PaymentMethod.CARD if card else PaymentMethod.CASH,
        cash_amount=cash,
        card_amount=card,
    )


def single_day(day=DAY):
    return [TimeInterval(start=day, end=day, label="15 janv.")]


def test_same_day_cash_and_card_revenues_with_one_expense():
    revenues = [revenue("Manicure", 30, 0), revenue("Manicure", 0, 20)]
    expenses = [expense("Supplies", 10, 0)]

    (agg,) = aggregate(revenues, expenses, single_day(), SMALL_SET)

    assert agg.revenue_by_category["Manicure"] == 50
    assert agg.total_revenue == 50
    assert agg.total_cash_revenue == 30
    assert agg.total_card_revenue == 20
    assert agg.total_expenses == 10
    assert agg.net_profit == 40
    assert agg.net_cash_profit == 20
    assert agg.net_card_profit == 20


def test_every_category_is_an_explicit_zero():
    (agg,) = aggregate([], [], single_day(), DEFAULT_CATEGORIES)

    assert set(agg.revenue_by_category) == set(DEFAULT_CATEGORIES.revenue_names)
    assert set(agg.expense_card_by_category) == set(DEFAULT_CATEGORIES.expense_names)
    assert all(v == 0 for v in agg.revenue_by_category.values())
    assert agg.total_revenue == 0
    assert agg.total_expenses == 0
    assert agg.net_profit == 0


def test_interval_without_transactions_is_all_zero():
    intervals = compute_intervals(Granularity.DAY, date(2025, 1, 17), 3)
    revenues = [revenue("Manicure", 40, 0, day=date(2025, 1, 15))]

    aggs = aggregate(revenues, [], intervals, SMALL_SET)

    assert [a.total_revenue for a in aggs] == [40, 0, 0]
    assert aggs[1].net_profit == 0
    assert aggs[2].total_cash_revenue == 0


def test_unknown_category_goes_to_the_fallback_bucket():
    revenues = [revenue("Balayage", 25, 0)]
    expenses = [expense("Rent", 0, 100)]

    (agg,) = aggregate(revenues, expenses, single_day(), SMALL_SET)

    assert "Balayage" not in agg.revenue_by_category
    assert agg.revenue_by_category["Divers"] == 25
    assert agg.expense_card_by_category["Divers"] == 100
    assert agg.net_profit == -75


def test_transactions_outside_the_window_are_ignored():
    revenues = [
        revenue("Manicure", 10, 0, day=date(2025, 1, 14)),
        revenue("Manicure", 10, 0, day=date(2025, 1, 16)),
    ]

    (agg,) = aggregate(revenues, [], single_day(), SMALL_SET)

    assert agg.total_revenue == 0


def test_aggregate_conservation():
    """Window totals equal the sum of in-window transaction totals."""
    intervals = compute_intervals(Granularity.WEEK, date(2025, 2, 2), 4)
    days = [date(2025, 1, 6), date(2025, 1, 12), date(2025, 1, 20), date(2025, 2, 2)]
    revenues = [
        revenue("Manicure", 12.5, 7.25, day=days[0]),
        revenue("Manicure", 0, 40, day=days[1]),
        revenue("Unknown", 15, 0, day=days[2]),
        revenue("Divers", 3.1, 0, day=days[3]),
        revenue("Manicure", 99, 0, day=date(2025, 2, 3)),  # outside
    ]
    expenses = [
        expense("Supplies", 8.4, 0, day=days[0]),
        expense("Supplies", 0, 19.99, day=days[3]),
    ]

    aggs = aggregate(revenues, expenses, intervals, SMALL_SET)
    totals = summarize_window(aggs)

    assert totals.total_revenue == pytest.approx(12.5 + 7.25 + 40 + 15 + 3.1)
    assert totals.total_expenses == pytest.approx(8.4 + 19.99)
    assert totals.net_profit == pytest.approx(totals.total_revenue - totals.total_expenses)

    for agg in aggs:
        assert agg.net_profit == pytest.approx(agg.total_revenue - agg.total_expenses)
        assert agg.total_revenue == pytest.approx(
            agg.total_cash_revenue + agg.total_card_revenue
        )
        for name, total in agg.revenue_by_category.items():
            assert agg.revenue_cash_by_category[name] + agg.revenue_card_by_category[name] == total
        for name, total in agg.expense_by_category.items():
            assert agg.expense_cash_by_category[name] + agg.expense_card_by_category[name] == total


def test_category_split_matches_category_total_exactly():
    revenues = [
        revenue("Manicure", 0.1, 0.7),
        revenue("Manicure", 0.2, 0.1),
        revenue("Manicure", 0.3, 0.6),
        revenue("Manicure", 12.35, 7.45),
    ]
    expenses = [expense("Supplies", 0.1, 0), expense("Supplies", 0.2, 0)]

    (agg,) = aggregate(revenues, expenses, single_day(), SMALL_SET)

    cash = agg.revenue_cash_by_category["Manicure"]
    card = agg.revenue_card_by_category["Manicure"]
    assert cash == 12.95
    assert card == 8.85
    assert cash + card == agg.revenue_by_category["Manicure"]
    assert agg.expense_cash_by_category["Supplies"] == 0.3
    assert agg.expense_by_category["Supplies"] == 0.3


def test_payment_filter_accessors():
    revenues = [revenue("Manicure", 30, 20)]
    expenses = [expense("Supplies", 0, 5)]

    (agg,) = aggregate(revenues, expenses, single_day(), SMALL_SET)

    assert agg.revenue_for(PaymentFilter.TOTAL) == 50
    assert agg.revenue_for(PaymentFilter.CASH) == 30
    assert agg.revenue_for("card") == 20
    assert agg.expenses_for(PaymentFilter.CASH) == 0
    assert agg.net_profit_for(PaymentFilter.CARD) == 15
    assert agg.revenue_map(PaymentFilter.CASH) is agg.revenue_cash_by_category

    cash_totals = summarize_window([agg], PaymentFilter.CASH)
    assert cash_totals.net_profit == 30


def test_aggregates_to_frame_long_format():
    (agg,) = aggregate([revenue("Manicure", 30, 20)], [], single_day(), SMALL_SET)

    df = aggregates_to_frame([agg])

    assert list(df.columns) == [
        "period_label",
        "start",
        "end",
        "kind",
        "category",
        "total",
        "cash",
        "card",
    ]
    assert len(df) == 4  # 2 revenue + 2 expense categories
    row = df[(df["kind"] == "revenue") & (df["category"] == "Manicure")].iloc[0]
    assert row["total"] == 50
    assert row["cash"] == 30
    assert row["card"] == 20


def test_empty_frames_keep_their_columns():
    assert aggregates_to_frame([]).empty
    df = period_totals_frame([])
    assert df.empty
    assert "net_profit" in df.columns


def test_period_totals_frame_rounds_amounts():
    (agg,) = aggregate(
        [revenue("Manicure", 10.005, 0)], [expense("Supplies", 3.333, 0)], single_day(), SMALL_SET
    )

    df = period_totals_frame([agg])

    assert df.loc[0, "expenses"] == pytest.approx(3.33)
    assert df.loc[0, "net_profit"] == pytest.approx(round(10.005 - 3.333, 2))
