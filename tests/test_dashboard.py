from datetime import date, timedelta
from types import SimpleNamespace

import pytest

import salon_ledger.dashboard as dashboard
from salon_ledger.dashboard import DashboardState, build_dashboard
from salon_ledger.engine import PaymentFilter
from salon_ledger.periods import Granularity
from salon_ledger.store import DatabaseConfig, SQLiteTransactionStore
from salon_ledger.transactions import (
    ExpenseTransaction,
    PaymentMethod,
    RevenueTransaction,
)

TODAY = date(2025, 1, 15)  # Wednesday


def stub_store(revenues=(), expenses=()):
    """Minimal TransactionStore returning fixed lists, recording the owner asked."""
    calls = []

    def list_revenues(owner_id):
        calls.append(owner_id)
        return list(revenues) if owner_id else []

    def list_expenses(owner_id):
        return list(expenses) if owner_id else []

    return SimpleNamespace(
        list_revenue_transactions=list_revenues,
        list_expense_transactions=list_expenses,
        calls=calls,
    )


def revenue(day, cash=0.0, card=0.0, category="Manucure & Pédicure"):
    method = PaymentMethod.CARD if card and not cash else PaymentMethod.CASH
    return RevenueTransaction(None, "o@x.fr", category, day, method, cash, card)


def expense(day, cash=0.0, card=0.0, category="Fournisseur ongle"):
    method = PaymentMethod.CARD if card else PaymentMethod.CASH
    return ExpenseTransaction(None, "o@x.fr", category, day, method, cash, card)


def test_initial_state_uses_today(monkeypatch):
    monkeypatch.setattr(dashboard, "current_date", lambda: TODAY)

    state = DashboardState.initial(Granularity.MONTH)

    assert state.anchor == TODAY
    assert state.granularity is Granularity.MONTH
    assert state.payment_filter is PaymentFilter.TOTAL


def test_state_transitions_are_immutable():
    state = DashboardState(Granularity.WEEK, TODAY)

    back = state.previous()

    assert state.anchor == TODAY
    assert back.anchor == TODAY - timedelta(weeks=8)
    assert back.next().anchor == TODAY
    assert back.with_payment_filter("card").payment_filter is PaymentFilter.CARD
    assert back.with_compact(True).compact is True


def test_changing_granularity_resets_the_anchor():
    state = DashboardState(Granularity.WEEK, date(2024, 5, 1))

    switched = state.with_granularity(Granularity.DAY, today=TODAY)

    assert switched.granularity is Granularity.DAY
    assert switched.anchor == TODAY


def test_reset_to_today(monkeypatch):
    monkeypatch.setattr(dashboard, "current_date", lambda: TODAY)
    state = DashboardState(Granularity.YEAR, date(2010, 1, 1))

    assert state.reset_to_today().anchor == TODAY


def test_next_is_refused_from_today_but_not_clamped():
    state = DashboardState(Granularity.WEEK, TODAY)

    assert state.can_go_next(today=TODAY) is False
    ahead = state.next()
    assert ahead.anchor == TODAY + timedelta(weeks=8)
    assert ahead.can_go_next(today=TODAY) is False
    assert state.previous().can_go_next(today=TODAY) is True


def test_build_dashboard():
    store = stub_store(
        revenues=[
            revenue(date(2025, 1, 13), cash=40),
            revenue(date(2025, 1, 15), card=60),
            revenue(date(2024, 10, 1), cash=999),  # outside the window
        ],
        expenses=[expense(date(2025, 1, 6), card=30)],
    )
    state = DashboardState(Granularity.WEEK, TODAY)

    view = build_dashboard(store, "o@x.fr", state, today=TODAY)

    assert store.calls == ["o@x.fr"]
    assert len(view.intervals) == 8
    assert view.intervals[-1].start == date(2025, 1, 13)
    assert view.totals.total_revenue == 100
    assert view.totals.total_expenses == 30
    assert view.totals.net_profit == 70
    assert view.can_go_next is False
    assert view.description == "25 nov. - 19 janv. 2025"
    assert [d.label for d in view.series.revenue] == ["Manucure & Pédicure"]
    assert view.series.profit.values[-2:] == (-30, 100)

    detail = view.point_detail(7)
    assert detail.title == "Semaine du 13 janv."
    assert detail.total_revenue == 100

    table = view.totals_frame()
    assert len(table) == 8
    assert table["net_profit"].iloc[-1] == 100


def test_build_dashboard_with_payment_filter_and_compact():
    store = stub_store(
        revenues=[revenue(date(2025, 1, 15), cash=10), revenue(date(2025, 1, 14), card=25)]
    )
    state = DashboardState(Granularity.DAY, TODAY, compact=True, payment_filter="card")

    view = build_dashboard(store, "o@x.fr", state, today=TODAY)

    assert len(view.intervals) == 7
    assert view.totals.total_revenue == 25
    assert view.series.revenue[0].values[-2:] == (25, 0)


def test_build_dashboard_without_owner_is_all_zero():
    view = build_dashboard(
        stub_store(revenues=[revenue(TODAY, cash=10)]),
        "",
        DashboardState(Granularity.MONTH, TODAY),
        today=TODAY,
    )

    assert view.totals.total_revenue == 0
    assert view.series.revenue == ()
    assert all(v == 0 for v in view.series.profit.values)


def test_build_dashboard_calls_share_no_state():
    store = stub_store(revenues=[revenue(TODAY, cash=10)])
    state = DashboardState(Granularity.DAY, TODAY)

    first = build_dashboard(store, "o@x.fr", state, today=TODAY)
    second = build_dashboard(store, "o@x.fr", state, today=TODAY)

    assert first == second
    assert first is not second


def test_build_dashboard_on_sqlite_store(tmp_path):
    store = SQLiteTransactionStore(DatabaseConfig("sqlite", tmp_path / "ledger.sqlite"))
    store.add_revenue("o@x.fr", "Spray-Tanning", date(2025, 1, 5), "mixed", 10.0, 15.0)
    store.add_expense("o@x.fr", "Produits", date(2025, 1, 20), "cash", 4.0, 0.0)

    view = build_dashboard(
        store, "o@x.fr", DashboardState(Granularity.MONTH, date(2025, 1, 31)), today=TODAY
    )

    january = view.aggregates[-1]
    assert january.revenue_cash_by_category["Spray-Tanning"] == pytest.approx(10.0)
    assert january.revenue_card_by_category["Spray-Tanning"] == pytest.approx(15.0)
    assert january.net_profit == pytest.approx(21.0)
