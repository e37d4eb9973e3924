"""
Month-by-month simulation engine for the loan surplus planner.

Compares three ways of using surplus cash while repaying a loan:
  A) Pay the minimum, bank the surplus (optionally at a savings rate)
  B) Pay the minimum, put the surplus towards principal
  C) Pay the minimum, invest the surplus (each inflow at its own APR)

All three share one month-stepping core. Each scenario plugs in a
strategy with its own per-month side effects, so the interest formula,
the early-stop rule and the ledger shape are identical across scenarios.
The engine is a pure function of its inputs; nothing is cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Sequence

import numpy as np

import config as cfg
from cashflow import Inflow, total_contribution

logger = logging.getLogger(__name__)


# ─── Data Classes ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class LedgerRow:
    """One simulated month. Fields a scenario doesn't use stay at 0."""

    month: int                   # 1-based
    loan_balance: float          # after this month's payment
    interest_paid: float
    principal_paid: float

    # Scenario A
    saved: float = 0.0
    savings_balance: float = 0.0
    # Scenario B
    extra_paid: float = 0.0
    # Scenario C
    invested: float = 0.0
    investment_value: float = 0.0


@dataclass(frozen=True)
class InvestmentDetail:
    """Terminal breakdown of one inflow in Scenario C."""

    amount: float
    from_month: int
    to_month: int
    final_value: float
    profit: float                # final_value - amount
    contributed: float           # all principal paid in over the window


@dataclass
class ScenarioResult:
    """Totals and monthly ledger for one scenario."""

    name: str
    total_paid: float
    total_interest: float
    months_to_payoff: int
    ledger: List[LedgerRow] = field(repr=False)
    amortizes: bool = True       # False if the payment never covered interest

    # Scenario A
    savings_balance: float = 0.0
    total_saved: float = 0.0
    # Scenario C
    investment_value: float = 0.0
    investment_details: List[InvestmentDetail] = field(default_factory=list, repr=False)

    def series(self, attr: str) -> np.ndarray:
        """Ledger column *attr* as a float array."""
        return np.array([getattr(row, attr) for row in self.ledger], dtype=float)


@dataclass
class ChartTable:
    """All three ledgers aligned on month, for time-series charts."""

    month: np.ndarray = field(repr=False)
    a_loan_balance: np.ndarray = field(repr=False)
    a_savings: np.ndarray = field(repr=False)
    b_loan_balance: np.ndarray = field(repr=False)
    c_loan_balance: np.ndarray = field(repr=False)
    c_investment: np.ndarray = field(repr=False)

    def __len__(self) -> int:
        return len(self.month)

    def rows(self) -> Iterator[Dict[str, float]]:
        for i in range(len(self.month)):
            yield {
                "month": int(self.month[i]),
                "a_loan_balance": float(self.a_loan_balance[i]),
                "a_savings": float(self.a_savings[i]),
                "b_loan_balance": float(self.b_loan_balance[i]),
                "c_loan_balance": float(self.c_loan_balance[i]),
                "c_investment": float(self.c_investment[i]),
            }


@dataclass
class Comparison:
    """Output of a full three-scenario run."""

    a: ScenarioResult
    b: ScenarioResult
    c: ScenarioResult
    chart: ChartTable
    net_a: float
    net_b: float
    net_c: float
    best: str                    # 'A', 'B' or 'C'

    @property
    def results(self) -> Dict[str, ScenarioResult]:
        return {"A": self.a, "B": self.b, "C": self.c}

    @property
    def net_positions(self) -> Dict[str, float]:
        return {"A": self.net_a, "B": self.net_b, "C": self.net_c}


# ─── Per-scenario strategies ─────────────────────────────────────────

class _Strategy:
    """Per-month side effects layered on the shared amortization loop."""

    def extra_payment(self, month: int, remaining: float) -> float:
        """Principal paid on top of the minimum; *remaining* is the
        balance left after the base principal payment."""
        return 0.0

    def advance(self, month: int) -> Dict[str, float]:
        """Apply this month's inflows; return scenario ledger fields."""
        return {}


class _BankSurplus(_Strategy):
    def __init__(self, inflows: Sequence[Inflow], savings_rate: float) -> None:
        self.inflows = inflows
        self.monthly_rate = savings_rate / 1200
        self.balance = 0.0
        self.total_saved = 0.0

    def advance(self, month: int) -> Dict[str, float]:
        deposit = total_contribution(self.inflows, month)
        self.total_saved += deposit
        self.balance = (self.balance + deposit) * (1 + self.monthly_rate)
        return {"saved": deposit, "savings_balance": self.balance}


class _PayDownPrincipal(_Strategy):
    def __init__(self, inflows: Sequence[Inflow]) -> None:
        self.inflows = inflows

    def extra_payment(self, month: int, remaining: float) -> float:
        # Each inflow is capped on its own; anything above the cap is dropped.
        return sum(min(inflow.contribution(month), remaining) for inflow in self.inflows)


class _Holding:
    """One inflow's independently compounding sub-account."""

    def __init__(self, inflow: Inflow) -> None:
        self.inflow = inflow
        self.value = 0.0
        self.contributed = 0.0

    def advance(self, month: int) -> float:
        """Step one month; return the principal paid in this month."""
        inflow = self.inflow
        if not inflow.is_active(month):
            return 0.0

        paid_in = 0.0
        if inflow.is_recurring:
            if inflow.is_contribution_due(month):
                self.value += inflow.amount
                paid_in = inflow.amount
            self.value *= 1 + inflow.monthly_rate
        elif month == inflow.from_month:
            self.value = inflow.amount
            paid_in = inflow.amount
        else:
            self.value *= 1 + inflow.monthly_rate

        self.contributed += paid_in
        return paid_in

    def detail(self) -> InvestmentDetail:
        return InvestmentDetail(
            amount=self.inflow.amount,
            from_month=self.inflow.from_month,
            to_month=self.inflow.to_month,
            final_value=self.value,
            profit=self.value - self.inflow.amount,
            contributed=self.contributed,
        )


class _InvestSurplus(_Strategy):
    def __init__(self, inflows: Sequence[Inflow]) -> None:
        self.holdings = [_Holding(inflow) for inflow in inflows]

    @property
    def value(self) -> float:
        return sum(h.value for h in self.holdings)

    def advance(self, month: int) -> Dict[str, float]:
        invested = sum(h.advance(month) for h in self.holdings)
        return {"invested": invested, "investment_value": self.value}


# ─── Core Simulation ─────────────────────────────────────────────────

@dataclass
class _Schedule:
    total_paid: float
    total_interest: float
    months_to_payoff: int
    amortizes: bool
    ledger: List[LedgerRow]


def _run_schedule(
    principal: float,
    annual_rate: float,
    minimum_payment: float,
    strategy: _Strategy,
    month_ceiling: int,
) -> _Schedule:
    """Step the loan month by month, then run on to *month_ceiling*.

    Phase 1 amortizes the loan at *minimum_payment* (plus any extra
    principal from the strategy) until the balance is within
    ``PAYOFF_EPSILON`` of zero. If the payment does not cover the month's
    interest the phase ends early and the loan is treated as never
    amortizing. Phase 2 pins the balance at 0 and keeps applying the
    strategy so every ledger reaches the same length.
    """
    monthly_rate = annual_rate / 1200
    balance = principal
    total_interest = 0.0
    total_paid = 0.0
    amortizes = True
    month = 0
    ledger: List[LedgerRow] = []

    while balance > cfg.PAYOFF_EPSILON and month < month_ceiling:
        interest = balance * monthly_rate
        principal_paid = min(minimum_payment - interest, balance)
        if principal_paid <= 0:
            logger.debug(
                "Payment %.2f does not cover interest %.2f in month %d; stopping",
                minimum_payment, interest, month,
            )
            amortizes = False
            break

        extra = strategy.extra_payment(month, balance - principal_paid)
        balance -= principal_paid + extra
        total_interest += interest
        total_paid += minimum_payment + extra

        fields = strategy.advance(month)
        month += 1
        ledger.append(LedgerRow(
            month=month,
            loan_balance=max(0.0, balance),
            interest_paid=interest,
            principal_paid=principal_paid,
            extra_paid=extra,
            **fields,
        ))

    months_to_payoff = month

    while month < month_ceiling:
        fields = strategy.advance(month)
        month += 1
        ledger.append(LedgerRow(
            month=month,
            loan_balance=0.0,
            interest_paid=0.0,
            principal_paid=0.0,
            **fields,
        ))

    return _Schedule(
        total_paid=total_paid,
        total_interest=total_interest,
        months_to_payoff=months_to_payoff,
        amortizes=amortizes,
        ledger=ledger,
    )


def simulate_scenario_a(
    principal: float,
    annual_rate: float,
    minimum_payment: float,
    inflows: Iterable[Inflow] = (),
    savings_rate: float = cfg.DEFAULT_SAVINGS_RATE,
    month_ceiling: int = cfg.DEFAULT_MONTH_CEILING,
) -> ScenarioResult:
    """Scenario A: minimum payment, surplus deposited in a savings account."""
    strategy = _BankSurplus(tuple(inflows), savings_rate)
    s = _run_schedule(principal, annual_rate, minimum_payment, strategy, month_ceiling)
    return ScenarioResult(
        name="A",
        total_paid=s.total_paid,
        total_interest=s.total_interest,
        months_to_payoff=s.months_to_payoff,
        ledger=s.ledger,
        amortizes=s.amortizes,
        savings_balance=strategy.balance,
        total_saved=strategy.total_saved,
    )


def simulate_scenario_b(
    principal: float,
    annual_rate: float,
    minimum_payment: float,
    inflows: Iterable[Inflow] = (),
    month_ceiling: int = cfg.DEFAULT_MONTH_CEILING,
) -> ScenarioResult:
    """Scenario B: minimum payment, surplus paid straight off the principal."""
    strategy = _PayDownPrincipal(tuple(inflows))
    s = _run_schedule(principal, annual_rate, minimum_payment, strategy, month_ceiling)
    return ScenarioResult(
        name="B",
        total_paid=s.total_paid,
        total_interest=s.total_interest,
        months_to_payoff=s.months_to_payoff,
        ledger=s.ledger,
        amortizes=s.amortizes,
    )


def simulate_scenario_c(
    principal: float,
    annual_rate: float,
    minimum_payment: float,
    inflows: Iterable[Inflow] = (),
    month_ceiling: int = cfg.DEFAULT_MONTH_CEILING,
) -> ScenarioResult:
    """Scenario C: minimum payment, each inflow invested at its own APR."""
    strategy = _InvestSurplus(tuple(inflows))
    s = _run_schedule(principal, annual_rate, minimum_payment, strategy, month_ceiling)
    return ScenarioResult(
        name="C",
        total_paid=s.total_paid,
        total_interest=s.total_interest,
        months_to_payoff=s.months_to_payoff,
        ledger=s.ledger,
        amortizes=s.amortizes,
        investment_value=strategy.value,
        investment_details=[h.detail() for h in strategy.holdings],
    )


# ─── Aggregation & Comparison ────────────────────────────────────────

def _pad(values: np.ndarray, length: int) -> np.ndarray:
    out = np.zeros(length)
    out[:len(values)] = values
    return out


def build_chart_table(a: ScenarioResult, b: ScenarioResult, c: ScenarioResult) -> ChartTable:
    """Align the three ledgers on month 1..max(length).

    Shorter ledgers are padded with zeros.
    """
    n = max(len(a.ledger), len(b.ledger), len(c.ledger))
    return ChartTable(
        month=np.arange(1, n + 1),
        a_loan_balance=_pad(a.series("loan_balance"), n),
        a_savings=_pad(a.series("savings_balance"), n),
        b_loan_balance=_pad(b.series("loan_balance"), n),
        c_loan_balance=_pad(c.series("loan_balance"), n),
        c_investment=_pad(c.series("investment_value"), n),
    )


def net_positions(a: ScenarioResult, b: ScenarioResult, c: ScenarioResult) -> Dict[str, float]:
    """Terminal asset value minus total interest for each scenario.

    B holds no asset, so its net position is just the (negative) interest
    cost.
    """
    return {
        "A": a.savings_balance - a.total_interest,
        "B": -b.total_interest,
        "C": c.investment_value - c.total_interest,
    }


def best_scenario(a: ScenarioResult, b: ScenarioResult, c: ScenarioResult) -> str:
    """Scenario with the highest net position; ties go C, then B, then A."""
    net = net_positions(a, b, c)
    if net["C"] >= net["A"] and net["C"] >= net["B"]:
        return "C"
    if net["B"] >= net["A"] and net["B"] >= net["C"]:
        return "B"
    return "A"


def compare_scenarios(
    principal: float,
    annual_rate: float,
    minimum_payment: float,
    inflows: Iterable[Inflow] = (),
    month_ceiling: int = cfg.DEFAULT_MONTH_CEILING,
    savings_rate: float = cfg.DEFAULT_SAVINGS_RATE,
) -> Comparison:
    """Run all three scenarios on the same inputs and pick the best."""
    inflows = tuple(inflows)
    logger.debug(
        "Comparing scenarios: principal=%.2f rate=%.3f%% payment=%.2f inflows=%d ceiling=%d",
        principal, annual_rate, minimum_payment, len(inflows), month_ceiling,
    )

    a = simulate_scenario_a(principal, annual_rate, minimum_payment, inflows,
                            savings_rate, month_ceiling)
    b = simulate_scenario_b(principal, annual_rate, minimum_payment, inflows, month_ceiling)
    c = simulate_scenario_c(principal, annual_rate, minimum_payment, inflows, month_ceiling)

    net = net_positions(a, b, c)
    return Comparison(
        a=a,
        b=b,
        c=c,
        chart=build_chart_table(a, b, c),
        net_a=net["A"],
        net_b=net["B"],
        net_c=net["C"],
        best=best_scenario(a, b, c),
    )


# ─── Smoke run ────────────────────────────────────────────────────────

if __name__ == "__main__":
    from amortization import calculate_minimum_payment

    payment = calculate_minimum_payment(100_000, 5.5, 360)
    inflows = [Inflow(kind=cfg.ONE_TIME, frequency=cfg.MONTHLY, amount=10_000,
                      apr=7.0, from_month=0, to_month=360)]
    comp = compare_scenarios(100_000, 5.5, payment, inflows)

    print(f"Minimum payment: {payment:,.2f}/month")
    for name, res in comp.results.items():
        print(
            f"  {name}: paid {res.total_paid:>12,.0f}  interest {res.total_interest:>10,.0f}  "
            f"payoff {res.months_to_payoff:>3} mo  net {comp.net_positions[name]:>12,.0f}"
        )
    print(f"Best scenario: {comp.best}")
