from datetime import date

import pytest

from salon_ledger.summaries import (
    combined_daily_stats,
    dashboard_highlights,
    month_grid,
    monthly_totals,
    payment_method_stats,
    stats_for_day,
)
from salon_ledger.transactions import (
    ExpenseTransaction,
    PaymentMethod,
    RevenueTransaction,
)


def revenue(day, cash=0.0, card=0.0, category="Divers", method=None):
    if method is None:
        if cash and card:
            method = PaymentMethod.MIXED
        elif card:
            method = PaymentMethod.CARD
        else:
            method = PaymentMethod.CASH
    return RevenueTransaction(None, "o@x.fr", category, day, method, cash, card)


def expense(day, cash=0.0, card=0.0, category="Divers"):
    method = PaymentMethod.CARD if card else PaymentMethod.CASH
    return ExpenseTransaction(None, "o@x.fr", category, day, method, cash, card)


def test_combined_daily_stats_newest_first():
    revenues = [
        revenue(date(2025, 1, 2), cash=30),
        revenue(date(2025, 1, 2), card=20),
        revenue(date(2025, 1, 1), cash=10),
    ]
    expenses = [expense(date(2025, 1, 3), card=15), expense(date(2025, 1, 2), cash=5)]

    stats = combined_daily_stats(revenues, expenses)

    assert [s.date for s in stats] == [date(2025, 1, 3), date(2025, 1, 2), date(2025, 1, 1)]
    day = stats[1]
    assert day.revenue_count == 2
    assert day.expense_count == 1
    assert day.total_revenue == 50
    assert day.total_cash_revenue == 30
    assert day.total_card_revenue == 20
    assert day.total_expenses == 5
    assert day.net_profit == 45
    assert stats[0].net_profit == -15
    assert stats[0].total_card_expenses == 15


def test_stats_for_day():
    stats = combined_daily_stats([revenue(date(2025, 1, 2), cash=30)], [])

    assert stats_for_day(stats, date(2025, 1, 2)).total_revenue == 30
    assert stats_for_day(stats, date(2025, 1, 3)) is None


def test_payment_method_stats():
    revenues = [
        revenue(date(2025, 1, 1), cash=30),
        revenue(date(2025, 1, 1), card=50),
        revenue(date(2025, 1, 1), cash=10, card=10),
    ]

    stats = payment_method_stats(revenues)

    assert stats.transaction_count == 3
    assert stats.by_method[PaymentMethod.CASH].count == 1
    assert stats.by_method[PaymentMethod.CARD].total == 50
    assert stats.mixed_amount == 20
    assert stats.total_cash == 40
    assert stats.total_card == 60
    assert stats.total_revenue == 100
    assert stats.cash_percentage == pytest.approx(40.0)
    assert stats.card_percentage == pytest.approx(60.0)


def test_payment_method_stats_without_revenue():
    stats = payment_method_stats([])

    assert stats.transaction_count == 0
    assert stats.cash_percentage == 0
    assert stats.card_percentage == 0
    assert stats.mixed_amount == 0


def test_monthly_totals():
    transactions = [
        revenue(date(2025, 1, 31), cash=10),
        revenue(date(2025, 1, 1), card=5.5),
        revenue(date(2024, 12, 15), cash=7),
    ]

    assert monthly_totals(transactions) == {
        "2024-12": pytest.approx(7.0),
        "2025-01": pytest.approx(15.5),
    }
    assert list(monthly_totals(transactions)) == ["2024-12", "2025-01"]
    assert monthly_totals([]) == {}


def test_dashboard_highlights():
    today = date(2025, 3, 12)  # Wednesday
    revenues = [
        revenue(date(2025, 3, 10), cash=40, category="Spray-Tanning"),
        revenue(date(2025, 3, 16), card=30, category="Produits"),
        revenue(date(2025, 3, 2), card=25, category="Produits"),
        revenue(date(2025, 3, 9), cash=10, category="Produits"),
        revenue(date(2025, 2, 28), cash=100, category="Spray-Tanning"),
    ]
    expenses = [expense(date(2025, 3, 1), cash=20), expense(date(2025, 2, 1), cash=500)]

    h = dashboard_highlights(revenues, expenses, today)

    # Monday 10 to Sunday 16 March
    assert h.revenues_this_week == 2
    assert h.revenues_this_month == 4
    assert h.revenues_last_month == 1
    assert h.month_revenue == 105
    assert h.month_expenses == 20
    assert h.month_profit == 85
    assert h.top_category.name == "Produits"
    assert h.top_category.revenue == 65
    assert h.top_category.count == 3


def test_dashboard_highlights_without_data():
    h = dashboard_highlights([], [], date(2025, 1, 1))

    assert h.top_category is None
    assert h.month_profit == 0
    assert h.revenues_last_month == 0


def test_month_grid_is_monday_first():
    grid = month_grid(2025, 6)  # June 1st 2025 is a Sunday

    assert grid.leading_blanks == 6
    assert len(grid.days) == 30
    assert grid.days[0] == date(2025, 6, 1)

    feb = month_grid(2024, 2)  # Thursday
    assert feb.leading_blanks == 3
    assert feb.days[-1] == date(2024, 2, 29)
