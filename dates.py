"""
Calendar-date to month-offset conversion.

The simulation runs on integer month indices. Dates are mapped onto them
with a fixed 30.44-day average month, rounded half up.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Iterable, List, Union

import config as cfg
from cashflow import Inflow, Investment

DateLike = Union[date, str]


def parse_date(value: DateLike) -> date:
    """Accept a ``date`` or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def months_between(start: DateLike, end: DateLike) -> int:
    """Whole months from *start* to *end* (negative if *end* is earlier)."""
    days = (parse_date(end) - parse_date(start)).days
    return math.floor(days / cfg.AVG_DAYS_PER_MONTH + 0.5)


def add_years(d: date, years: int) -> date:
    """Shift *d* by whole calendar years; Feb 29 falls back to Feb 28."""
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        return d.replace(year=d.year + years, day=28)


def to_inflow(investment: Investment, reference: DateLike) -> Inflow:
    return Inflow(
        kind=investment.kind,
        frequency=investment.frequency,
        amount=investment.amount,
        apr=investment.apr,
        from_month=months_between(reference, investment.from_date),
        to_month=months_between(reference, investment.to_date),
    )


def normalize_investments(investments: Iterable[Investment], reference: DateLike) -> List[Inflow]:
    """Convert date-windowed investments to month-windowed inflows.

    *reference* is month zero, normally the earliest loan start date.
    """
    return [to_inflow(inv, reference) for inv in investments]
