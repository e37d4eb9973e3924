"""
Calculator state: the ordered loan and investment lists the user edits.

Every command returns a new immutable snapshot; the old one is never
touched. ``compute`` turns a snapshot into a full scenario comparison.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Optional, Tuple

import config as cfg
from amortization import Loan, LoanSummary, summarize_loans
from cashflow import Investment
from dates import add_years, normalize_investments
from simulation import Comparison, compare_scenarios

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalculatorState:
    loans: Tuple[Loan, ...] = ()
    investments: Tuple[Investment, ...] = ()
    next_loan_id: int = 1
    next_investment_id: int = 1

    def summary(self, today: Optional[date] = None) -> LoanSummary:
        return summarize_loans(self.loans, today)


def initial_state(today: Optional[date] = None) -> CalculatorState:
    """One default loan and one default one-time investment."""
    today = today or date.today()
    loan = Loan(
        id=1,
        amount=cfg.DEFAULT_LOAN_AMOUNT,
        interest_rate=cfg.DEFAULT_LOAN_RATE,
        loan_term=cfg.DEFAULT_LOAN_TERM,
        term_unit=cfg.DEFAULT_TERM_UNIT,
        start_date=today,
    )
    investment = Investment(
        id=1,
        kind=cfg.ONE_TIME,
        frequency=cfg.MONTHLY,
        from_date=today,
        to_date=add_years(today, cfg.DEFAULT_WINDOW_YEARS),
        amount=cfg.DEFAULT_INVESTMENT_AMOUNT,
        apr=cfg.DEFAULT_INVESTMENT_APR,
    )
    return CalculatorState(
        loans=(loan,),
        investments=(investment,),
        next_loan_id=2,
        next_investment_id=2,
    )


# ─── Loan commands ───────────────────────────────────────────────────

def add_loan(state: CalculatorState, today: Optional[date] = None, **fields: Any) -> CalculatorState:
    """Append a new loan (zero principal unless *fields* say otherwise)."""
    values = dict(
        amount=0,
        interest_rate=cfg.DEFAULT_LOAN_RATE,
        loan_term=cfg.DEFAULT_LOAN_TERM,
        term_unit=cfg.DEFAULT_TERM_UNIT,
        start_date=today or date.today(),
    )
    values.update(fields)
    loan = Loan(id=state.next_loan_id, **values)
    return replace(state, loans=state.loans + (loan,), next_loan_id=state.next_loan_id + 1)


def update_loan(state: CalculatorState, loan_id: int, **updates: Any) -> CalculatorState:
    if not any(loan.id == loan_id for loan in state.loans):
        raise KeyError(f"No loan with id {loan_id}")
    loans = tuple(replace(loan, **updates) if loan.id == loan_id else loan for loan in state.loans)
    return replace(state, loans=loans)


def remove_loan(state: CalculatorState, loan_id: int) -> CalculatorState:
    if not any(loan.id == loan_id for loan in state.loans):
        raise KeyError(f"No loan with id {loan_id}")
    return replace(state, loans=tuple(loan for loan in state.loans if loan.id != loan_id))


# ─── Investment commands ─────────────────────────────────────────────

def add_investment(state: CalculatorState, today: Optional[date] = None, **fields: Any) -> CalculatorState:
    """Append a new investment.

    The window defaults to the earliest loan start date through the same
    date plus ``DEFAULT_WINDOW_YEARS``.
    """
    start = state.summary(today).earliest_start_date
    values = dict(
        kind=cfg.ONE_TIME,
        frequency=cfg.MONTHLY,
        from_date=start,
        to_date=add_years(start, cfg.DEFAULT_WINDOW_YEARS),
        amount=0,
        apr=cfg.DEFAULT_INVESTMENT_APR,
    )
    values.update(fields)
    inv = Investment(id=state.next_investment_id, **values)
    return replace(
        state,
        investments=state.investments + (inv,),
        next_investment_id=state.next_investment_id + 1,
    )


def update_investment(state: CalculatorState, investment_id: int, **updates: Any) -> CalculatorState:
    if not any(inv.id == investment_id for inv in state.investments):
        raise KeyError(f"No investment with id {investment_id}")
    investments = tuple(
        replace(inv, **updates) if inv.id == investment_id else inv
        for inv in state.investments
    )
    return replace(state, investments=investments)


def remove_investment(state: CalculatorState, investment_id: int) -> CalculatorState:
    if not any(inv.id == investment_id for inv in state.investments):
        raise KeyError(f"No investment with id {investment_id}")
    return replace(
        state,
        investments=tuple(inv for inv in state.investments if inv.id != investment_id),
    )


# ─── Computation ─────────────────────────────────────────────────────

def compute(
    state: CalculatorState,
    savings_rate: float = cfg.DEFAULT_SAVINGS_RATE,
    month_ceiling: Optional[int] = None,
    today: Optional[date] = None,
) -> Optional[Comparison]:
    """Run all three scenarios for *state*.

    Returns None when the loans need no payment (no principal or no
    term). The month ceiling defaults to the longest loan term.
    """
    summary = state.summary(today)
    if summary.total_minimum_payment <= 0:
        logger.debug("No positive minimum payment; nothing to compute")
        return None

    inflows = normalize_investments(state.investments, summary.earliest_start_date)
    return compare_scenarios(
        summary.total_principal,
        summary.weighted_rate,
        summary.total_minimum_payment,
        inflows,
        month_ceiling=month_ceiling if month_ceiling is not None else summary.max_term_months,
        savings_rate=savings_rate,
    )
