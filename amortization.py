"""
Amortization maths and loan aggregation for the loan surplus planner.

A set of loans is reduced to a single equivalent loan before simulation:
total principal, principal-weighted rate, summed minimum payments, the
longest term and the earliest start date (month zero of the simulation).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

import config as cfg


# ─── Records ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Loan:
    """One loan as entered by the user."""

    id: int
    amount: float                # principal
    interest_rate: float         # annual %, e.g. 5.5
    loan_term: int               # count of term_unit
    term_unit: str               # 'months' or 'years'
    start_date: date

    def __post_init__(self) -> None:
        if self.term_unit not in cfg.TERM_UNITS:
            raise ValueError(f"Term unit must be one of {cfg.TERM_UNITS}, got {self.term_unit!r}")
        if self.amount < 0:
            raise ValueError("Loan amount cannot be negative")
        if self.interest_rate < 0:
            raise ValueError("Interest rate cannot be negative")

    @property
    def term_months(self) -> int:
        if self.term_unit == "years":
            return self.loan_term * 12
        return self.loan_term

    @property
    def minimum_payment(self) -> float:
        return calculate_minimum_payment(self.amount, self.interest_rate, self.term_months)


@dataclass(frozen=True)
class LoanSummary:
    """Aggregate view of several loans, fed to the scenario engine."""

    total_principal: float
    weighted_rate: float          # principal-weighted annual %
    total_minimum_payment: float
    max_term_months: int
    earliest_start_date: date


# ─── Payment formula ─────────────────────────────────────────────────

def calculate_minimum_payment(principal: float, annual_rate: float, term_months: int) -> float:
    """Fixed monthly payment that retires *principal* in *term_months*.

    Uses the standard annuity formula::

        M = P * i(1+i)^n / ((1+i)^n - 1),   i = annual_rate / 1200

    Parameters
    ----------
    principal : float
        Amount borrowed. Non-positive values give a payment of 0.
    annual_rate : float
        Annual interest rate as a percentage (5.5 for 5.5%).
    term_months : int
        Number of monthly payments. Non-positive values give 0.

    Returns
    -------
    float
        Monthly payment. Never raises; degenerate input degrades to 0.
    """
    if principal <= 0 or term_months <= 0:
        return 0.0

    if annual_rate == 0:
        return principal / term_months

    i = annual_rate / 1200
    growth = (1 + i) ** term_months
    return principal * (i * growth) / (growth - 1)


# ─── Aggregation ─────────────────────────────────────────────────────

def weighted_rate(loans: Iterable[Loan]) -> float:
    """Principal-weighted average annual rate (0 for no principal)."""
    loans = list(loans)
    total = sum(loan.amount for loan in loans)
    return sum(loan.interest_rate * loan.amount for loan in loans) / (total or 1)


def summarize_loans(loans: Iterable[Loan], today: Optional[date] = None) -> LoanSummary:
    """Reduce *loans* to the single equivalent loan used by the engine.

    The minimum payment is the sum of each loan's own payment, not the
    payment on the pooled principal, so loans with different terms keep
    their own schedules' cost. With no loans, *today* (default: the
    current date) is the month-zero reference.
    """
    loans = list(loans)
    if today is None:
        today = date.today()

    return LoanSummary(
        total_principal=sum(loan.amount for loan in loans),
        weighted_rate=weighted_rate(loans),
        total_minimum_payment=sum(loan.minimum_payment for loan in loans),
        max_term_months=max((loan.term_months for loan in loans), default=0),
        earliest_start_date=min((loan.start_date for loan in loans), default=today),
    )
