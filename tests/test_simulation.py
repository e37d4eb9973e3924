"""Tests for the scenario engine: A/B/C simulators, chart table, comparator."""
import pytest

from amortization import calculate_minimum_payment
from cashflow import Inflow
from simulation import (
    ScenarioResult,
    best_scenario,
    build_chart_table,
    compare_scenarios,
    net_positions,
    simulate_scenario_a,
    simulate_scenario_b,
    simulate_scenario_c,
)

PRINCIPAL = 100_000.0
RATE = 5.5
PAYMENT = calculate_minimum_payment(PRINCIPAL, RATE, 360)


def _make_inflow(**overrides) -> Inflow:
    defaults = dict(
        kind="one-time",
        frequency="monthly",
        amount=10_000.0,
        apr=7.0,
        from_month=0,
        to_month=360,
    )
    defaults.update(overrides)
    return Inflow(**defaults)


def _make_result(name="A", **overrides) -> ScenarioResult:
    defaults = dict(name=name, total_paid=0.0, total_interest=0.0,
                    months_to_payoff=0, ledger=[])
    defaults.update(overrides)
    return ScenarioResult(**defaults)


# --- Shared loan schedule ---


def test_minimum_schedule_retires_loan_in_term():
    a = simulate_scenario_a(PRINCIPAL, RATE, PAYMENT)
    assert a.months_to_payoff == 360
    assert a.amortizes
    assert a.ledger[-1].loan_balance == pytest.approx(0.0, abs=0.01)
    assert a.total_interest == pytest.approx(PAYMENT * 360 - PRINCIPAL, abs=1.0)


def test_ledger_months_sequential_and_balance_non_increasing():
    for simulate in (simulate_scenario_a, simulate_scenario_b, simulate_scenario_c):
        res = simulate(PRINCIPAL, RATE, PAYMENT, [_make_inflow(kind="recurring", amount=200)])
        assert [row.month for row in res.ledger] == list(range(1, 361))
        balances = res.series("loan_balance")
        assert (balances >= 0).all()
        assert (balances[1:] <= balances[:-1]).all()


def test_zero_rate_loan():
    a = simulate_scenario_a(1_200, 0, 100, month_ceiling=24)
    assert a.months_to_payoff == 12
    assert a.total_interest == 0
    assert a.total_paid == 1_200
    assert len(a.ledger) == 24
    assert all(row.loan_balance == 0 for row in a.ledger[12:])


def test_payment_below_interest_stops_early():
    # 12% on 100k is 1,000/month interest; a 500 payment never amortizes
    inflows = [_make_inflow(kind="recurring", amount=100, apr=0, from_month=0, to_month=11)]
    a = simulate_scenario_a(100_000, 12.0, 500, inflows, month_ceiling=36)

    assert not a.amortizes
    assert a.months_to_payoff == 0
    assert a.total_paid == 0
    assert a.total_interest == 0
    assert len(a.ledger) == 36
    assert a.savings_balance == 1_200


def test_ceiling_bounds_ledger():
    for simulate in (simulate_scenario_a, simulate_scenario_b, simulate_scenario_c):
        res = simulate(PRINCIPAL, RATE, PAYMENT, month_ceiling=12)
        assert len(res.ledger) == 12
        assert res.months_to_payoff == 12
        assert res.ledger[-1].loan_balance > 0


def test_simulations_are_pure():
    inflows = [
        _make_inflow(),
        _make_inflow(kind="recurring", frequency="yearly", amount=1_500, apr=5.0),
    ]
    first = compare_scenarios(PRINCIPAL, RATE, PAYMENT, inflows, savings_rate=2.0)
    second = compare_scenarios(PRINCIPAL, RATE, PAYMENT, inflows, savings_rate=2.0)
    for name in ("A", "B", "C"):
        assert first.results[name].ledger == second.results[name].ledger
    assert first.best == second.best


# --- Scenario A ---


def test_a_one_time_saved_exactly_once():
    a = simulate_scenario_a(PRINCIPAL, RATE, PAYMENT, [_make_inflow(from_month=5)])
    saved = a.series("saved")
    assert saved.sum() == 10_000.0
    assert saved[5] == 10_000.0
    assert a.total_saved == 10_000.0
    assert a.savings_balance == 10_000.0


def test_a_recurring_monthly_and_yearly_counts():
    monthly = simulate_scenario_a(PRINCIPAL, RATE, PAYMENT,
                                  [_make_inflow(kind="recurring", amount=50, to_month=11)])
    yearly = simulate_scenario_a(PRINCIPAL, RATE, PAYMENT,
                                 [_make_inflow(kind="recurring", frequency="yearly",
                                               amount=50, to_month=11)])
    assert (monthly.series("saved") > 0).sum() == 12
    assert (yearly.series("saved") > 0).sum() == 1
    assert yearly.ledger[0].saved == 50


def test_a_savings_compound_monthly():
    a = simulate_scenario_a(0, 5.0, 0, [_make_inflow(amount=1_000)],
                            savings_rate=12.0, month_ceiling=2)
    assert a.savings_balance == pytest.approx(1_000 * 1.01 ** 2)


def test_a_deposits_continue_after_payoff():
    inflows = [_make_inflow(amount=500, apr=0, from_month=20)]
    a = simulate_scenario_a(1_200, 0, 100, inflows, month_ceiling=24)
    assert a.months_to_payoff == 12
    assert a.ledger[20].saved == 500
    assert a.savings_balance == 500


# --- Scenario B ---


def test_b_extra_principal_counted_once():
    b = simulate_scenario_b(PRINCIPAL, RATE, PAYMENT, [_make_inflow(amount=5_000, from_month=3)])
    assert b.series("extra_paid").sum() == 5_000.0
    assert b.ledger[3].extra_paid == 5_000.0


def test_b_extra_capped_at_remaining_balance():
    b = simulate_scenario_b(1_000, 0, 100, [_make_inflow(amount=5_000, from_month=0)],
                            month_ceiling=12)
    assert b.months_to_payoff == 1
    assert b.ledger[0].extra_paid == 900
    assert b.total_paid == 1_000
    assert b.total_interest == 0
    assert len(b.ledger) == 12
    assert all(row.loan_balance == 0 for row in b.ledger)


def test_b_caps_each_inflow_separately():
    # 900 left after the base payment; both inflows are capped at 900
    inflows = [_make_inflow(amount=5_000, from_month=0), _make_inflow(amount=3_000, from_month=0)]
    b = simulate_scenario_b(1_000, 0, 100, inflows, month_ceiling=6)

    assert b.ledger[0].extra_paid == 2 * 900
    assert b.total_paid == 100 + 2 * 900
    assert b.ledger[0].loan_balance == 0
    assert b.months_to_payoff == 1
    assert (b.series("loan_balance") == 0).all()


def test_b_cheaper_and_faster_than_a():
    inflows = [
        _make_inflow(amount=10_000),
        _make_inflow(kind="recurring", amount=150, from_month=12, to_month=120),
    ]
    a = simulate_scenario_a(PRINCIPAL, RATE, PAYMENT, inflows)
    b = simulate_scenario_b(PRINCIPAL, RATE, PAYMENT, inflows)
    assert b.total_interest < a.total_interest
    assert b.months_to_payoff < a.months_to_payoff


def test_b_without_inflows_matches_a_loan_side():
    a = simulate_scenario_a(PRINCIPAL, RATE, PAYMENT)
    b = simulate_scenario_b(PRINCIPAL, RATE, PAYMENT)
    assert b.total_interest == a.total_interest
    assert b.months_to_payoff == a.months_to_payoff


# --- Scenario C ---


def test_c_one_time_compounds_monthly():
    c = simulate_scenario_c(PRINCIPAL, RATE, PAYMENT, [_make_inflow(to_month=12)])
    expected = 10_000 * (1 + 0.07 / 12) ** 12
    assert c.investment_value == pytest.approx(expected, rel=1e-9)
    assert round(c.investment_value) == 10_723


def test_c_value_frozen_after_window():
    c = simulate_scenario_c(0, 0, 0, [_make_inflow(apr=12.0, to_month=1)], month_ceiling=10)
    assert c.investment_value == pytest.approx(10_100.0)
    assert c.ledger[-1].investment_value == pytest.approx(10_100.0)


def test_c_recurring_contributions():
    inflows = [
        _make_inflow(kind="recurring", amount=100, apr=0, to_month=11),
        _make_inflow(kind="recurring", frequency="yearly", amount=1_000, apr=0, to_month=35),
    ]
    c = simulate_scenario_c(PRINCIPAL, RATE, PAYMENT, inflows, month_ceiling=48)
    monthly, yearly = c.investment_details

    assert monthly.final_value == 1_200
    assert monthly.contributed == 1_200
    assert monthly.profit == 1_100
    assert yearly.final_value == 3_000
    assert c.investment_value == 4_200
    assert c.series("invested").sum() == 4_200


def test_c_inflows_compound_independently():
    inflows = [
        _make_inflow(amount=1_000, apr=12.0, to_month=2),
        _make_inflow(amount=1_000, apr=0.0, to_month=2),
    ]
    c = simulate_scenario_c(0, 0, 0, inflows, month_ceiling=3)
    fast, flat = c.investment_details
    assert fast.final_value == pytest.approx(1_000 * 1.01 ** 2)
    assert flat.final_value == 1_000
    assert fast.from_month == 0 and fast.to_month == 2


def test_c_loan_side_matches_a():
    inflows = [_make_inflow()]
    a = simulate_scenario_a(PRINCIPAL, RATE, PAYMENT, inflows)
    c = simulate_scenario_c(PRINCIPAL, RATE, PAYMENT, inflows)
    assert c.total_interest == a.total_interest
    assert c.total_paid == a.total_paid
    assert list(c.series("loan_balance")) == list(a.series("loan_balance"))


def test_inert_inflow_does_nothing():
    inflows = [_make_inflow(from_month=10, to_month=4)]
    res = compare_scenarios(PRINCIPAL, RATE, PAYMENT, inflows, month_ceiling=24)
    assert res.a.savings_balance == 0
    assert res.c.investment_value == 0
    assert res.b.series("extra_paid").sum() == 0


# --- Chart table ---


def test_chart_table_pads_shorter_ledgers():
    a = simulate_scenario_a(PRINCIPAL, RATE, PAYMENT, [_make_inflow()], month_ceiling=12)
    b = simulate_scenario_b(PRINCIPAL, RATE, PAYMENT, month_ceiling=6)
    c = simulate_scenario_c(PRINCIPAL, RATE, PAYMENT, [_make_inflow()], month_ceiling=12)
    chart = build_chart_table(a, b, c)

    assert len(chart) == 12
    assert list(chart.month) == list(range(1, 13))
    assert (chart.b_loan_balance[:6] > 0).all()
    assert (chart.b_loan_balance[6:] == 0).all()
    assert chart.a_savings[-1] == 10_000


def test_chart_rows():
    comp = compare_scenarios(PRINCIPAL, RATE, PAYMENT, [_make_inflow()], month_ceiling=3)
    rows = list(comp.chart.rows())
    assert [r["month"] for r in rows] == [1, 2, 3]
    assert rows[0]["a_savings"] == 10_000
    assert rows[0]["c_investment"] == 10_000
    assert set(rows[0]) == {"month", "a_loan_balance", "a_savings", "b_loan_balance",
                            "c_loan_balance", "c_investment"}


# --- Comparator ---


def test_net_positions():
    a = _make_result("A", savings_balance=1_000, total_interest=400)
    b = _make_result("B", total_interest=300)
    c = _make_result("C", investment_value=2_000, total_interest=400)
    assert net_positions(a, b, c) == {"A": 600, "B": -300, "C": 1_600}


def test_tie_goes_to_c():
    a, b, c = _make_result("A"), _make_result("B"), _make_result("C")
    assert best_scenario(a, b, c) == "C"


def test_b_beats_a_on_tie():
    a = _make_result("A", savings_balance=100, total_interest=400)
    b = _make_result("B", total_interest=300)
    c = _make_result("C", total_interest=500)
    assert best_scenario(a, b, c) == "B"


def test_a_wins_when_savings_dominate():
    a = _make_result("A", savings_balance=1_000, total_interest=500)
    b = _make_result("B", total_interest=300)
    c = _make_result("C", total_interest=500)
    assert best_scenario(a, b, c) == "A"


def test_compare_default_case_prefers_investing():
    comp = compare_scenarios(PRINCIPAL, RATE, PAYMENT, [_make_inflow()])
    assert comp.best == "C"
    assert comp.net_c > comp.net_b > comp.net_a
    assert len(comp.chart) == 360
