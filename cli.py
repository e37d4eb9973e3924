"""
CLI interface and shared display-data computation for the
loan surplus planner (bank vs pay down vs invest).
"""

from __future__ import annotations

import sys
from datetime import date
from typing import Any, Dict, List, Optional

import config as cfg
from amortization import LoanSummary
from dates import add_years, parse_date
from simulation import Comparison
from state import CalculatorState, add_investment, add_loan, compute
import report


# ═══════════════════════════════════════════════════════════════════
# Formatting helpers
# ═══════════════════════════════════════════════════════════════════

def fmt(val: float) -> str:
    """Format a money amount as X,XXX (currency-agnostic, no decimals)."""
    return f"{val:,.0f}"


def pct(val: float, decimals: int = 2) -> str:
    return f"{val:.{decimals}f}%"


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def fmt_months(months: int) -> str:
    """Readable duration, e.g. '5 years, 3 months'."""
    years, rest = divmod(months, 12)
    if years == 0:
        return _plural(rest, "month")
    if rest == 0:
        return _plural(years, "year")
    return f"{_plural(years, 'year')}, {_plural(rest, 'month')}"


def fmt_payoff(months: int, amortizes: bool = True) -> str:
    """Payoff time, or a note that the payment never covers interest."""
    if not amortizes:
        return cfg.NEVER_PAYS_OFF
    return fmt_months(months)


# ═══════════════════════════════════════════════════════════════════
# Input collection (CLI)
# ═══════════════════════════════════════════════════════════════════

def _strip_number(s: str) -> str:
    """Remove thousands separators, spaces and percent signs."""
    return s.replace(",", "").replace(" ", "").replace("%", "")


def _prompt_float(
    label: str,
    default: float,
    min_val: float | None = None,
    max_val: float | None = None,
) -> float:
    while True:
        raw = input(f"  {label} [{default}]: ").strip()
        if not raw:
            return float(default)
        try:
            val = float(_strip_number(raw))
            if min_val is not None and val < min_val:
                print(f"    Must be at least {min_val}")
                continue
            if max_val is not None and val > max_val:
                print(f"    Must be at most {max_val}")
                continue
            return val
        except ValueError:
            print("    Invalid number, try again.")


def _prompt_int(
    label: str,
    default: int,
    min_val: int | None = None,
    max_val: int | None = None,
) -> int:
    while True:
        raw = input(f"  {label} [{default}]: ").strip()
        if not raw:
            return default
        try:
            val = int(float(_strip_number(raw)))
            if min_val is not None and val < min_val:
                print(f"    Must be at least {min_val}")
                continue
            if max_val is not None and val > max_val:
                print(f"    Must be at most {max_val}")
                continue
            return val
        except ValueError:
            print("    Invalid number, try again.")


def _prompt_choice(label: str, options: list[str], default: str) -> str:
    opts = "/".join(options)
    while True:
        raw = input(f"  {label} ({opts}) [{default}]: ").strip().lower()
        if not raw:
            return default
        if raw in options:
            return raw
        print(f"    Choose from: {opts}")


def _prompt_date(label: str, default: date) -> date:
    while True:
        raw = input(f"  {label} [{default.isoformat()}]: ").strip()
        if not raw:
            return default
        try:
            return parse_date(raw)
        except ValueError:
            print("    Use YYYY-MM-DD, try again.")


def collect_inputs(today: Optional[date] = None) -> tuple[CalculatorState, float]:
    """Prompt for loans, investments and the savings rate."""
    today = today or date.today()
    state = CalculatorState()

    print("\n  Enter your loans (press Enter for defaults):\n")
    n_loans = _prompt_int("Number of loans", 1, 1, 20)
    for i in range(n_loans):
        print(f"\n  Loan {i + 1}")
        state = add_loan(
            state,
            amount=_prompt_float("Amount", cfg.DEFAULT_LOAN_AMOUNT, 0),
            interest_rate=_prompt_float("Interest rate %", cfg.DEFAULT_LOAN_RATE, 0, 100),
            loan_term=_prompt_int("Term", cfg.DEFAULT_LOAN_TERM, 1, 1200),
            term_unit=_prompt_choice("Term unit", list(cfg.TERM_UNITS), cfg.DEFAULT_TERM_UNIT),
            start_date=_prompt_date("Start date", today),
        )

    start = state.summary(today).earliest_start_date

    print("\n  Enter your surplus cash / investments:\n")
    n_inv = _prompt_int("Number of investments", 1, 0, 20)
    for i in range(n_inv):
        print(f"\n  Investment {i + 1}")
        kind = _prompt_choice("Type", list(cfg.INFLOW_KINDS), cfg.ONE_TIME)
        frequency = cfg.MONTHLY
        if kind == cfg.RECURRING:
            frequency = _prompt_choice("Frequency", list(cfg.MONTHS_PER_CONTRIBUTION), cfg.MONTHLY)
        from_date = _prompt_date("From date", start)
        state = add_investment(
            state,
            today=today,
            kind=kind,
            frequency=frequency,
            from_date=from_date,
            to_date=_prompt_date("To date", add_years(from_date, cfg.DEFAULT_WINDOW_YEARS)),
            amount=_prompt_float("Amount", cfg.DEFAULT_INVESTMENT_AMOUNT, 0),
            apr=_prompt_float("Expected annual return %", cfg.DEFAULT_INVESTMENT_APR, 0, 100),
        )

    print()
    savings_rate = _prompt_float("Bank savings rate % (Scenario A)", cfg.DEFAULT_SAVINGS_RATE, 0, 100)
    return state, savings_rate


# ═══════════════════════════════════════════════════════════════════
# Shared display-data computation (used by CLI and web app)
# ═══════════════════════════════════════════════════════════════════

def compute_display_data(summary: LoanSummary, comp: Comparison) -> Dict[str, Any]:
    """Extract every metric needed for the output sections."""
    a, b, c = comp.a, comp.b, comp.c

    ranked = sorted(comp.net_positions.items(), key=lambda kv: kv[1], reverse=True)
    runner_up = next(name for name, _ in ranked if name != comp.best)
    adv_abs = comp.net_positions[comp.best] - comp.net_positions[runner_up]

    return {
        # Loans
        "total_principal": summary.total_principal,
        "weighted_rate": summary.weighted_rate,
        "minimum_payment": summary.total_minimum_payment,
        "max_term_months": summary.max_term_months,
        "start_date": summary.earliest_start_date,
        "amortizes": a.amortizes,
        # Scenario A
        "a_paid": a.total_paid,
        "a_interest": a.total_interest,
        "a_payoff": a.months_to_payoff,
        "a_savings": a.savings_balance,
        "a_saved": a.total_saved,
        # Scenario B
        "b_paid": b.total_paid,
        "b_interest": b.total_interest,
        "b_payoff": b.months_to_payoff,
        "b_interest_saved": a.total_interest - b.total_interest,
        "b_months_saved": a.months_to_payoff - b.months_to_payoff,
        # Scenario C
        "c_paid": c.total_paid,
        "c_interest": c.total_interest,
        "c_payoff": c.months_to_payoff,
        "c_value": c.investment_value,
        "c_details": c.investment_details,
        # Verdict
        "net": comp.net_positions,
        "best": comp.best,
        "best_label": cfg.SCENARIO_LABELS[comp.best],
        "runner_up": runner_up,
        "adv_abs": adv_abs,
    }


def generate_verdict_text(d: Dict[str, Any]) -> str:
    """Build a 2-3 sentence plain-English verdict."""
    net = d["net"]
    lead = (
        f"Scenario {d['best']} ({d['best_label'].lower()}) comes out ahead by "
        f"{fmt(d['adv_abs'])} over Scenario {d['runner_up']}."
    )

    if d["best"] == "C":
        detail = (
            f"Investing grows to {fmt(d['c_value'])}, which outweighs the "
            f"{fmt(d['c_interest'])} of interest paid on the minimum schedule "
            f"(net {fmt(net['C'])})."
        )
    elif d["best"] == "B":
        detail = (
            f"Paying down principal saves {fmt(d['b_interest_saved'])} of interest "
            f"and clears the loan {fmt_months(max(d['b_months_saved'], 0))} sooner."
        )
    else:
        detail = (
            f"Banking the surplus leaves {fmt(d['a_savings'])} in savings against "
            f"{fmt(d['a_interest'])} of interest (net {fmt(net['A'])})."
        )

    text = f"{lead} {detail}"
    if not d["amortizes"]:
        text += (
            " Warning: the minimum payment does not cover the monthly interest, "
            "so the loan never pays off on this schedule."
        )
    return text


# ═══════════════════════════════════════════════════════════════════
# Box-drawing CLI output
# ═══════════════════════════════════════════════════════════════════

W = 78  # box width (characters)
_H = "═"


def _box_top(title: str) -> str:
    inner = W - 2
    return (
        f"╔{_H * inner}╗\n"
        f"║  {title:<{inner - 2}}║\n"
        f"╠{_H * inner}╣"
    )


def _box_line(text: str = "") -> str:
    inner = W - 4
    if len(text) > inner:
        text = text[:inner]
    return f"║  {text:<{inner}}║"


def _box_row(label: str, value: str, lw: int = 38) -> str:
    return _box_line(f"{label:<{lw}}{value}")


def _box_bottom() -> str:
    return f"╚{_H * (W - 2)}╝"


def _wrap(text: str) -> List[str]:
    line_len = W - 6
    rows: List[str] = []
    line = ""
    for word in text.split():
        if len(line) + len(word) + 1 <= line_len:
            line = f"{line} {word}" if line else word
        else:
            rows.append(_box_line(line))
            line = word
    if line:
        rows.append(_box_line(line))
    return rows


def _print_section(title: str, rows: List[str]) -> None:
    """Print a titled box with content rows."""
    print(_box_top(title))
    for r in rows:
        print(r)
    print(_box_bottom())
    print()


# ═══════════════════════════════════════════════════════════════════
# CLI Section Printers
# ═══════════════════════════════════════════════════════════════════

def _print_loans(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Total principal", fmt(d["total_principal"])),
        _box_row("Weighted interest rate", pct(d["weighted_rate"])),
        _box_row("Total minimum payment", f"{fmt(d['minimum_payment'])}/mo"),
        _box_row("Longest term", fmt_months(d["max_term_months"])),
        _box_row("Month zero", d["start_date"].isoformat()),
    ]
    _print_section("YOUR LOANS", rows)


def _print_scenario_a(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Total paid", fmt(d["a_paid"])),
        _box_row("Total interest", fmt(d["a_interest"])),
        _box_row("Loan paid off in", fmt_payoff(d["a_payoff"], d["amortizes"])),
        _box_line(),
        _box_row("Total deposited", fmt(d["a_saved"])),
        _box_row("Final savings balance", fmt(d["a_savings"])),
        _box_row("Net position", fmt(d["net"]["A"])),
    ]
    _print_section(f"SCENARIO A — {cfg.SCENARIO_LABELS['A'].upper()}", rows)


def _print_scenario_b(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Total paid", fmt(d["b_paid"])),
        _box_row("Total interest", fmt(d["b_interest"])),
        _box_row("Loan paid off in", fmt_payoff(d["b_payoff"], d["amortizes"])),
        _box_line(),
        _box_row("Interest saved vs A", fmt(d["b_interest_saved"])),
        _box_row("Net position", fmt(d["net"]["B"])),
    ]
    _print_section(f"SCENARIO B — {cfg.SCENARIO_LABELS['B'].upper()}", rows)


def _print_scenario_c(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Total paid", fmt(d["c_paid"])),
        _box_row("Total interest", fmt(d["c_interest"])),
        _box_row("Loan paid off in", fmt_payoff(d["c_payoff"], d["amortizes"])),
        _box_line(),
        _box_row("Final investment value", fmt(d["c_value"])),
        _box_row("Net position", fmt(d["net"]["C"])),
    ]
    if d["c_details"]:
        rows.append(_box_line())
        h1 = f"{'Amount':>10}  {'Months':>9}  {'Final':>12}  {'Profit':>12}"
        rows.append(_box_line(h1))
        rows.append(_box_line("─" * (W - 6)))
        for det in d["c_details"]:
            window = f"{det.from_month}-{det.to_month}"
            rows.append(_box_line(
                f"{fmt(det.amount):>10}  {window:>9}  "
                f"{fmt(det.final_value):>12}  {fmt(det.profit):>12}"
            ))
    _print_section(f"SCENARIO C — {cfg.SCENARIO_LABELS['C'].upper()}", rows)


def _print_verdict(d: Dict[str, Any]) -> None:
    rows = [
        _box_row("Best scenario", d["best"]),
        _box_row("Advantage over next best", fmt(d["adv_abs"])),
        _box_line(),
    ]
    rows.extend(_wrap(generate_verdict_text(d)))
    _print_section("THE VERDICT", rows)


# ═══════════════════════════════════════════════════════════════════
# Main CLI entry point
# ═══════════════════════════════════════════════════════════════════

def run_cli(pdf_path: Optional[str] = cfg.PDF_PATH) -> None:
    """Run the full CLI workflow."""
    # Ensure box-drawing characters render on Windows
    try:
        sys.stdout.reconfigure(encoding="utf-8")
    except (AttributeError, OSError, ValueError):
        pass
    print()
    print("=" * W)
    print("  Loan Surplus Planner: Bank vs Pay Down vs Invest")
    print("=" * W)

    state, savings_rate = collect_inputs()

    print("\n  Running scenarios...")
    comp = compute(state, savings_rate=savings_rate)
    if comp is None:
        print("  Nothing to simulate: the loans need no monthly payment.\n")
        return
    print("  Done.")

    d = compute_display_data(state.summary(), comp)

    print()
    _print_loans(d)
    _print_scenario_a(d)
    _print_scenario_b(d)
    _print_scenario_c(d)
    _print_verdict(d)

    if pdf_path:
        print("  Generating PDF report...")
        path = report.generate_pdf(comp, d, generate_verdict_text(d), pdf_path)
        print(f"  Saved to {path}\n")


if __name__ == "__main__":
    run_cli()
