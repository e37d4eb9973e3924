"""
Cash-inflow records and the per-month contribution schedule.

An inflow is money that becomes available for saving, paying down the
loan or investing. Month indices are offsets from the earliest loan start
date; month 0 is the first simulated month.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable

import config as cfg


def _validate(kind: str, frequency: str, amount: float, apr: float) -> None:
    if kind not in cfg.INFLOW_KINDS:
        raise ValueError(f"Investment type must be one of {cfg.INFLOW_KINDS}, got {kind!r}")
    if frequency not in cfg.MONTHS_PER_CONTRIBUTION:
        raise ValueError(
            f"Frequency must be one of {tuple(cfg.MONTHS_PER_CONTRIBUTION)}, got {frequency!r}"
        )
    if amount < 0:
        raise ValueError("Investment amount cannot be negative")
    if apr < 0:
        raise ValueError("Investment APR cannot be negative")


# ─── Date-based record (user input) ──────────────────────────────────

@dataclass(frozen=True)
class Investment:
    """One investment as entered by the user, windowed by calendar dates."""

    id: int
    kind: str                    # 'one-time' or 'recurring'
    frequency: str               # 'monthly' or 'yearly' (recurring only)
    from_date: date
    to_date: date
    amount: float
    apr: float                   # annual %, e.g. 7.0

    def __post_init__(self) -> None:
        _validate(self.kind, self.frequency, self.amount, self.apr)


# ─── Month-based record (engine input) ───────────────────────────────

@dataclass(frozen=True)
class Inflow:
    """An investment normalised to month offsets for the engine.

    ``to_month < from_month`` is allowed and makes the inflow inert.
    """

    kind: str
    frequency: str
    amount: float
    apr: float
    from_month: int
    to_month: int

    def __post_init__(self) -> None:
        _validate(self.kind, self.frequency, self.amount, self.apr)

    @property
    def is_recurring(self) -> bool:
        return self.kind == cfg.RECURRING

    @property
    def monthly_rate(self) -> float:
        return self.apr / 1200

    @property
    def months_per_contribution(self) -> int:
        return cfg.MONTHS_PER_CONTRIBUTION[self.frequency]

    def is_active(self, month: int) -> bool:
        return self.from_month <= month <= self.to_month

    def is_contribution_due(self, month: int) -> bool:
        """Whether this inflow pays in during *month*.

        One-time inflows pay once, at ``from_month``. Recurring inflows
        pay at ``from_month`` and every 1 (monthly) or 12 (yearly) months
        after it while the window is open.
        """
        if not self.is_active(month):
            return False
        if not self.is_recurring:
            return month == self.from_month
        return (month - self.from_month) % self.months_per_contribution == 0

    def contribution(self, month: int) -> float:
        return self.amount if self.is_contribution_due(month) else 0.0


def total_contribution(inflows: Iterable[Inflow], month: int) -> float:
    """Sum of every inflow's contribution in *month*."""
    return sum(inflow.contribution(month) for inflow in inflows)
