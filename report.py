"""
PDF report generation and reusable chart rendering for the
loan surplus planner.

Provides:
  - Four-page PDF report (generate_pdf)
  - Base64-encoded chart images for web embedding (get_web_charts)
  - Individual page renderers reusable by both CLI and web
"""

from __future__ import annotations

import base64
import io
from typing import Any, Dict, List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.ticker import FuncFormatter
import numpy as np

import config as cfg
from simulation import ChartTable, Comparison

# ═══════════════════════════════════════════════════════════════════
# Style constants
# ═══════════════════════════════════════════════════════════════════

BG = "#0a101f"
CARD = "#131b2e"
TEXT = "#f1f5f9"
TEXT2 = "#cbd5e1"
INDIGO = "#818cf8"
EMERALD = "#34d399"
AMBER = "#fbbf24"
RED = "#f87171"
SLATE = "#94a3b8"
BORDER = "#1e293b"

SCENARIO_COLORS = {"A": AMBER, "B": INDIGO, "C": EMERALD}

A4W, A4H = 8.27, 11.69
WEB_W, WEB_H = 10, 6


# ═══════════════════════════════════════════════════════════════════
# Axis formatters
# ═══════════════════════════════════════════════════════════════════

def _money_fmt(x, _):
    if abs(x) >= 1e6:
        return f"{x / 1e6:.1f}M"
    if abs(x) >= 1e3:
        return f"{x / 1e3:.0f}k"
    return f"{x:.0f}"


def _year_fmt(x, _):
    return f"{x / 12:.0f}"


MONEY_FMT = FuncFormatter(_money_fmt)
YEAR_FMT = FuncFormatter(_year_fmt)


# ═══════════════════════════════════════════════════════════════════
# Style helpers
# ═══════════════════════════════════════════════════════════════════

def _style(fig, *axes):
    """Apply dark theme to figure and all axes."""
    fig.patch.set_facecolor(BG)
    for ax in axes:
        ax.set_facecolor(CARD)
        ax.tick_params(colors=TEXT, labelsize=8)
        ax.xaxis.label.set_color(TEXT)
        ax.yaxis.label.set_color(TEXT)
        ax.title.set_color(TEXT)
        for spine in ax.spines.values():
            spine.set_color(BORDER)
        ax.grid(True, alpha=0.15, color=SLATE)


def _legend(ax, loc="upper right"):
    ax.legend(loc=loc, fontsize=8, facecolor=CARD, edgecolor=BORDER, labelcolor=TEXT)


def _month_axis(ax, chart: ChartTable):
    ax.xaxis.set_major_formatter(YEAR_FMT)
    ax.set_xticks(np.arange(0, len(chart) + 1, 60))
    ax.set_xlabel("Year")


# ═══════════════════════════════════════════════════════════════════
# Page 1: summary (text only, dark background)
# ═══════════════════════════════════════════════════════════════════

def _payoff(d: Dict[str, Any], scenario: str) -> str:
    if not d["amortizes"]:
        return cfg.NEVER_PAYS_OFF
    return f"{d[f'{scenario}_payoff']} months"


def _page_summary(d: Dict[str, Any], verdict_text: str) -> plt.Figure:
    fig = plt.figure(figsize=(A4W, A4H))
    fig.patch.set_facecolor(BG)

    fig.text(0.50, 0.93, "Loan Surplus Planner",
             ha="center", fontsize=18, color=TEXT, fontweight="bold")
    fig.text(0.50, 0.91, "Bank vs Pay Down vs Invest",
             ha="center", fontsize=11, color=TEXT2)

    y = 0.86
    fig.text(0.08, y, "Your Loans", fontsize=13, color=TEXT, fontweight="bold")
    y -= 0.028
    params = [
        f"Principal: {d['total_principal']:,.0f}  |  "
        f"Weighted rate: {d['weighted_rate']:.2f}%  |  "
        f"Minimum payment: {d['minimum_payment']:,.0f}/mo",
        f"Longest term: {d['max_term_months']} months  |  "
        f"Month zero: {d['start_date'].isoformat()}",
    ]
    for p in params:
        fig.text(0.10, y, p, fontsize=9, color=TEXT2)
        y -= 0.024

    sections = [
        ("A", [
            f"Total interest: {d['a_interest']:,.0f}",
            f"Paid off in: {_payoff(d, 'a')}",
            f"Final savings: {d['a_savings']:,.0f} (deposited {d['a_saved']:,.0f})",
            f"Net position: {d['net']['A']:,.0f}",
        ]),
        ("B", [
            f"Total interest: {d['b_interest']:,.0f}",
            f"Paid off in: {_payoff(d, 'b')}",
            f"Interest saved vs A: {d['b_interest_saved']:,.0f}",
            f"Net position: {d['net']['B']:,.0f}",
        ]),
        ("C", [
            f"Total interest: {d['c_interest']:,.0f}",
            f"Paid off in: {_payoff(d, 'c')}",
            f"Final investment value: {d['c_value']:,.0f}",
            f"Net position: {d['net']['C']:,.0f}",
        ]),
    ]
    for name, lines in sections:
        y -= 0.025
        fig.text(0.08, y, f"Scenario {name}: {cfg.SCENARIO_LABELS[name]}",
                 fontsize=13, color=SCENARIO_COLORS[name], fontweight="bold")
        y -= 0.028
        for line in lines:
            fig.text(0.10, y, line, fontsize=9.5, color=TEXT2)
            y -= 0.024

    y -= 0.03
    fig.text(0.08, y, f"Verdict: Scenario {d['best']}",
             fontsize=13, color=SCENARIO_COLORS[d["best"]], fontweight="bold")
    y -= 0.03
    fig.text(0.10, y, verdict_text, fontsize=9.5, color=TEXT2, wrap=True, va="top")

    return fig


# ═══════════════════════════════════════════════════════════════════
# Charts
# ═══════════════════════════════════════════════════════════════════

def _chart_balances(chart: ChartTable, figsize=(A4W, A4H / 2)) -> plt.Figure:
    """Loan balance per scenario over time."""
    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    ax.plot(chart.month, chart.a_loan_balance, color=AMBER, linewidth=2.2,
            label="A: Bank surplus")
    ax.plot(chart.month, chart.b_loan_balance, color=INDIGO, linewidth=2.2,
            label="B: Pay down principal")
    ax.plot(chart.month, chart.c_loan_balance, color=EMERALD, linewidth=1.4,
            linestyle="--", label="C: Invest surplus")

    ax.yaxis.set_major_formatter(MONEY_FMT)
    _month_axis(ax, chart)
    ax.set_ylabel("Loan Balance")
    ax.set_title("Loan Balance Over Time", fontsize=13, pad=12)
    _legend(ax)
    return fig


def _chart_assets(chart: ChartTable, figsize=(A4W, A4H / 2)) -> plt.Figure:
    """Savings (A) against investment value (C)."""
    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    ax.fill_between(chart.month, chart.c_investment, color=EMERALD, alpha=0.15)
    ax.plot(chart.month, chart.c_investment, color=EMERALD, linewidth=2.2,
            label="C: Investment value")
    ax.plot(chart.month, chart.a_savings, color=AMBER, linewidth=2.2,
            label="A: Savings balance")

    if len(chart) > 0:
        gap = chart.c_investment[-1] - chart.a_savings[-1]
        color = EMERALD if gap >= 0 else AMBER
        ax.annotate(
            f"{abs(gap):,.0f} difference",
            xy=(chart.month[-1], (chart.c_investment[-1] + chart.a_savings[-1]) / 2),
            fontsize=10, color=color, fontweight="bold", ha="right",
            xytext=(-15, 0), textcoords="offset points",
            bbox=dict(boxstyle="round,pad=0.3", facecolor=BG,
                      edgecolor=color, alpha=0.9),
        )

    ax.yaxis.set_major_formatter(MONEY_FMT)
    _month_axis(ax, chart)
    ax.set_ylabel("Value")
    ax.set_title("Savings vs Investment Growth", fontsize=13, pad=12)
    _legend(ax, loc="upper left")
    return fig


def _chart_totals(d: Dict[str, Any], figsize=(A4W, A4H / 2)) -> plt.Figure:
    """Grouped bar: total interest and net position per scenario."""
    fig, ax = plt.subplots(figsize=figsize, constrained_layout=True)
    _style(fig, ax)

    names = ["A", "B", "C"]
    interest = [d["a_interest"], d["b_interest"], d["c_interest"]]
    net = [d["net"][n] for n in names]

    x = np.arange(len(names))
    w = 0.35
    ax.bar(x - w / 2, interest, w, color=RED, label="Total interest")
    ax.bar(x + w / 2, net, w, color=[SCENARIO_COLORS[n] for n in names],
           label="Net position")
    ax.axhline(0, color=SLATE, linewidth=0.8)
    ax.set_xticks(x)
    ax.set_xticklabels([f"Scenario {n}" for n in names], fontsize=9)
    ax.yaxis.set_major_formatter(MONEY_FMT)
    ax.set_title("Interest Cost and Net Position", fontsize=13, pad=12)

    best_idx = names.index(d["best"])
    ax.annotate(
        "Best", xy=(best_idx + w / 2, max(net[best_idx], 0)),
        fontsize=9, color=TEXT, fontweight="bold",
        xytext=(0, 15), textcoords="offset points", ha="center",
        arrowprops=dict(arrowstyle="->", color=TEXT, lw=1.5),
    )
    _legend(ax)
    return fig


# ═══════════════════════════════════════════════════════════════════
# Public API
# ═══════════════════════════════════════════════════════════════════

def figure_to_base64(fig: plt.Figure) -> str:
    """Convert a matplotlib figure to a base64-encoded PNG string."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", facecolor=fig.get_facecolor(),
                dpi=120, bbox_inches="tight")
    buf.seek(0)
    b64 = base64.b64encode(buf.read()).decode()
    buf.close()
    return b64


def generate_pdf(
    comp: Comparison,
    d: Dict[str, Any],
    verdict_text: str,
    path: str = cfg.PDF_PATH,
) -> str:
    """Generate the full PDF report. Returns the file path."""
    pages = [
        _page_summary(d, verdict_text),
        _chart_balances(comp.chart),
        _chart_assets(comp.chart),
        _chart_totals(d),
    ]

    with PdfPages(path) as pdf:
        for fig in pages:
            pdf.savefig(fig, facecolor=fig.get_facecolor())
    for fig in pages:
        plt.close(fig)
    return path


def get_web_charts(comp: Comparison, d: Dict[str, Any]) -> List[str]:
    """Return base64-encoded PNG chart images for web embedding.

    Returns 3 charts:
      [0] Loan balance per scenario
      [1] Savings vs investment value
      [2] Interest cost and net position
    """
    chart_figs = [
        _chart_balances(comp.chart, figsize=(WEB_W, WEB_H)),
        _chart_assets(comp.chart, figsize=(WEB_W, WEB_H)),
        _chart_totals(d, figsize=(WEB_W, WEB_H)),
    ]

    images = [figure_to_base64(f) for f in chart_figs]
    for f in chart_figs:
        plt.close(f)
    return images
