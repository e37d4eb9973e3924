"""
Flask web application for the loan surplus planner.

Single-file app using render_template_string. Run via ``python main.py``
which starts the dev server on localhost:5000. The form posts the full
loan and investment lists on every change; add/remove buttons are
applied as state commands before the scenarios are recomputed.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Tuple

from flask import Flask, render_template_string, request, send_file

import config as cfg
from dates import parse_date
from state import (
    CalculatorState,
    add_investment,
    add_loan,
    compute,
    initial_state,
    remove_investment,
    remove_loan,
)
from cli import (
    compute_display_data,
    generate_verdict_text,
    fmt,
    fmt_months,
    fmt_payoff,
    pct,
)
import report

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["PDF_PATH"] = cfg.PDF_PATH

# ═══════════════════════════════════════════════════════════════════
# Form parsing
# ═══════════════════════════════════════════════════════════════════

def _parse_number(s: str) -> float:
    return float(s.replace(",", "").replace(" ", "").replace("%", ""))


def _parse_savings_rate(form) -> float:
    rate = _parse_number(form.get("savings_rate", "0") or "0")
    if rate < 0:
        raise ValueError("Savings rate cannot be negative")
    return rate


def parse_form(form, strict: bool = True) -> Tuple[CalculatorState, float]:
    """Rebuild the calculator state from the posted lists.

    *form* is a multi-valued mapping (``request.form``). Ids are
    reassigned 1..n in form order. Raises ValueError on bad input
    unless *strict* is False, in which case rows that fail to parse
    are skipped and a bad savings rate falls back to the default.
    """
    state = CalculatorState()

    loan_fields = zip(
        form.getlist("loan_amount"),
        form.getlist("loan_rate"),
        form.getlist("loan_term"),
        form.getlist("loan_unit"),
        form.getlist("loan_start"),
    )
    for amount, rate, term, unit, start in loan_fields:
        try:
            state = add_loan(
                state,
                amount=_parse_number(amount),
                interest_rate=_parse_number(rate),
                loan_term=int(_parse_number(term)),
                term_unit=unit,
                start_date=parse_date(start),
            )
        except ValueError as exc:
            if strict:
                raise
            logger.debug("Skipping loan row: %s", exc)

    inv_fields = zip(
        form.getlist("inv_kind"),
        form.getlist("inv_frequency"),
        form.getlist("inv_from"),
        form.getlist("inv_to"),
        form.getlist("inv_amount"),
        form.getlist("inv_apr"),
    )
    for kind, frequency, from_date, to_date, amount, apr in inv_fields:
        try:
            state = add_investment(
                state,
                kind=kind,
                frequency=frequency,
                from_date=parse_date(from_date),
                to_date=parse_date(to_date),
                amount=_parse_number(amount),
                apr=_parse_number(apr),
            )
        except ValueError as exc:
            if strict:
                raise
            logger.debug("Skipping investment row: %s", exc)

    try:
        savings_rate = _parse_savings_rate(form)
    except ValueError:
        if strict:
            raise
        savings_rate = cfg.DEFAULT_SAVINGS_RATE
    return state, savings_rate


def apply_action(state: CalculatorState, action: str) -> CalculatorState:
    """Apply an add/remove button press, e.g. ``remove_loan:2``."""
    name, _, arg = action.partition(":")
    if name == "add_loan":
        return add_loan(state)
    if name == "add_investment":
        return add_investment(state)
    if name == "remove_loan":
        return remove_loan(state, int(arg))
    if name == "remove_investment":
        return remove_investment(state, int(arg))
    return state


# ═══════════════════════════════════════════════════════════════════
# HTML Template
# ═══════════════════════════════════════════════════════════════════

HTML_TEMPLATE = r"""
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Loan Surplus Planner</title>
<style>
  *{margin:0;padding:0;box-sizing:border-box}
  :root{
    --bg-deep:#050816;
    --bg-surface:rgba(15,23,42,0.55);
    --bg-input:rgba(8,11,22,0.85);
    --border-subtle:rgba(99,102,241,0.1);
    --text-primary:#f1f5f9;
    --text-secondary:#94a3b8;
    --indigo:#818cf8;
    --emerald:#34d399;
    --amber:#fbbf24;
    --red:#f87171;
    --radius-lg:16px;
    --radius-md:10px;
  }
  body{
    background:var(--bg-deep);color:var(--text-primary);
    font-family:system-ui,-apple-system,sans-serif;line-height:1.6;
  }
  .container{max-width:1140px;margin:0 auto;padding:2rem 1.5rem}
  .hero{text-align:center;padding:1rem 0 2rem}
  .hero h1{font-size:2rem;font-weight:800}
  .hero-sub{color:var(--text-secondary);font-size:.92rem}
  .card{
    background:var(--bg-surface);border:1px solid var(--border-subtle);
    border-radius:var(--radius-lg);padding:1.6rem;margin-bottom:1.4rem;
  }
  .winner{border-color:rgba(52,211,153,.45);box-shadow:0 0 40px rgba(16,185,129,.08)}
  h2{font-size:1.1rem;font-weight:700;margin-bottom:1rem}
  .row{display:grid;grid-template-columns:repeat(6,1fr) auto;gap:.6rem;margin-bottom:.6rem;align-items:end}
  .field{display:flex;flex-direction:column}
  .field label{font-size:.75rem;color:var(--text-secondary)}
  .field input,.field select{
    background:var(--bg-input);border:1px solid rgba(71,85,105,.35);
    border-radius:var(--radius-md);color:var(--text-primary);padding:.5rem .7rem;
  }
  .btn{
    padding:.6rem 1.4rem;border:none;border-radius:var(--radius-md);
    font-weight:600;cursor:pointer;color:#fff;background:#6366f1;
  }
  .btn-ghost{background:transparent;border:1px solid rgba(71,85,105,.5);color:var(--text-secondary)}
  .btn-danger{background:transparent;border:1px solid var(--red);color:var(--red)}
  .scenarios{display:grid;grid-template-columns:repeat(3,1fr);gap:1.2rem}
  @media(max-width:900px){.scenarios{grid-template-columns:1fr}.row{grid-template-columns:1fr 1fr}}
  .stat-row{display:flex;justify-content:space-between;padding:.4rem 0;border-bottom:1px solid rgba(51,65,85,.3)}
  .stat-label{color:var(--text-secondary);font-size:.86rem}
  .stat-value{font-weight:600;font-size:.86rem;font-variant-numeric:tabular-nums}
  .tag-A{color:var(--amber)} .tag-B{color:var(--indigo)} .tag-C{color:var(--emerald)}
  .error,.warning{
    border-radius:var(--radius-md);padding:.75rem 1rem;margin-bottom:1rem;font-size:.88rem;
  }
  .error{background:rgba(248,113,113,.08);border:1px solid rgba(248,113,113,.3);color:var(--red)}
  .warning{background:rgba(245,158,11,.06);border:1px solid rgba(245,158,11,.18);color:#fcd34d}
  table{width:100%;border-collapse:collapse;font-size:.85rem}
  th,td{text-align:right;padding:.35rem .5rem;border-bottom:1px solid rgba(51,65,85,.3)}
  th{color:var(--text-secondary);font-weight:500}
  .chart img{width:100%;border-radius:var(--radius-md);margin-bottom:1rem}
</style>
</head>
<body>
<div class="container">

<div class="hero">
  <h1>Loan Surplus Planner</h1>
  <p class="hero-sub">Bank it, pay down the loan, or invest it? Three scenarios, month by month.</p>
</div>

{% if error %}<div class="error">{{ error }}</div>{% endif %}

<form method="POST">
<button type="submit" name="action" value="calculate" hidden></button>
<div class="card">
  <h2>Loans</h2>
  {% for loan in state.loans %}
  <div class="row">
    <div class="field"><label>Amount</label>
      <input type="text" name="loan_amount" value="{{ loan.amount }}"></div>
    <div class="field"><label>Interest rate %</label>
      <input type="number" step="0.01" name="loan_rate" value="{{ loan.interest_rate }}"></div>
    <div class="field"><label>Term</label>
      <input type="number" name="loan_term" value="{{ loan.loan_term }}"></div>
    <div class="field"><label>Unit</label>
      <select name="loan_unit">
        <option value="years" {{ 'selected' if loan.term_unit == 'years' }}>Years</option>
        <option value="months" {{ 'selected' if loan.term_unit == 'months' }}>Months</option>
      </select></div>
    <div class="field"><label>Start date</label>
      <input type="date" name="loan_start" value="{{ loan.start_date.isoformat() }}"></div>
    <div class="field"><label>Payment</label>
      <input type="text" value="{{ fmt(loan.minimum_payment) }}/mo" disabled></div>
    <button class="btn btn-danger" name="action" value="remove_loan:{{ loop.index }}">Remove</button>
  </div>
  {% endfor %}
  <button class="btn btn-ghost" name="action" value="add_loan">+ Add loan</button>
</div>

<div class="card">
  <h2>Surplus cash / investments</h2>
  {% for inv in state.investments %}
  <div class="row">
    <div class="field"><label>Type</label>
      <select name="inv_kind">
        <option value="one-time" {{ 'selected' if inv.kind == 'one-time' }}>One-time</option>
        <option value="recurring" {{ 'selected' if inv.kind == 'recurring' }}>Recurring</option>
      </select></div>
    <div class="field"><label>Frequency</label>
      <select name="inv_frequency">
        <option value="monthly" {{ 'selected' if inv.frequency == 'monthly' }}>Monthly</option>
        <option value="yearly" {{ 'selected' if inv.frequency == 'yearly' }}>Yearly</option>
      </select></div>
    <div class="field"><label>From</label>
      <input type="date" name="inv_from" value="{{ inv.from_date.isoformat() }}"></div>
    <div class="field"><label>To</label>
      <input type="date" name="inv_to" value="{{ inv.to_date.isoformat() }}"></div>
    <div class="field"><label>Amount</label>
      <input type="text" name="inv_amount" value="{{ inv.amount }}"></div>
    <div class="field"><label>APR %</label>
      <input type="number" step="0.01" name="inv_apr" value="{{ inv.apr }}"></div>
    <button class="btn btn-danger" name="action" value="remove_investment:{{ loop.index }}">Remove</button>
  </div>
  {% endfor %}
  <button class="btn btn-ghost" name="action" value="add_investment">+ Add investment</button>
  <div class="row" style="margin-top:1rem">
    <div class="field"><label>Bank savings rate % (Scenario A)</label>
      <input type="number" step="0.01" name="savings_rate" value="{{ savings_rate }}"></div>
  </div>
</div>

<button type="submit" class="btn" name="action" value="calculate">Calculate</button>
</form>

{% if d %}
<div class="card" style="margin-top:1.4rem">
  <h2>Your loans</h2>
  <div class="stat-row"><span class="stat-label">Total principal</span><span class="stat-value">{{ fmt(d.total_principal) }}</span></div>
  <div class="stat-row"><span class="stat-label">Weighted interest rate</span><span class="stat-value">{{ pct(d.weighted_rate) }}</span></div>
  <div class="stat-row"><span class="stat-label">Total minimum payment</span><span class="stat-value">{{ fmt(d.minimum_payment) }}/mo</span></div>
  <div class="stat-row"><span class="stat-label">Longest term</span><span class="stat-value">{{ fmt_months(d.max_term_months) }}</span></div>
</div>

{% if not d.amortizes %}
<div class="warning">The minimum payment does not cover the monthly interest, so the loan never pays off on this schedule.</div>
{% endif %}

<div class="scenarios">
  <div class="card {{ 'winner' if d.best == 'A' }}">
    <h2 class="tag-A">A: {{ labels.A }}</h2>
    <div class="stat-row"><span class="stat-label">Total paid</span><span class="stat-value">{{ fmt(d.a_paid) }}</span></div>
    <div class="stat-row"><span class="stat-label">Total interest</span><span class="stat-value">{{ fmt(d.a_interest) }}</span></div>
    <div class="stat-row"><span class="stat-label">Paid off in</span><span class="stat-value">{{ fmt_payoff(d.a_payoff, d.amortizes) }}</span></div>
    <div class="stat-row"><span class="stat-label">Final savings</span><span class="stat-value">{{ fmt(d.a_savings) }}</span></div>
    <div class="stat-row"><span class="stat-label">Net position</span><span class="stat-value">{{ fmt(d.net.A) }}</span></div>
  </div>
  <div class="card {{ 'winner' if d.best == 'B' }}">
    <h2 class="tag-B">B: {{ labels.B }}</h2>
    <div class="stat-row"><span class="stat-label">Total paid</span><span class="stat-value">{{ fmt(d.b_paid) }}</span></div>
    <div class="stat-row"><span class="stat-label">Total interest</span><span class="stat-value">{{ fmt(d.b_interest) }}</span></div>
    <div class="stat-row"><span class="stat-label">Paid off in</span><span class="stat-value">{{ fmt_payoff(d.b_payoff, d.amortizes) }}</span></div>
    <div class="stat-row"><span class="stat-label">Interest saved vs A</span><span class="stat-value">{{ fmt(d.b_interest_saved) }}</span></div>
    <div class="stat-row"><span class="stat-label">Net position</span><span class="stat-value">{{ fmt(d.net.B) }}</span></div>
  </div>
  <div class="card {{ 'winner' if d.best == 'C' }}">
    <h2 class="tag-C">C: {{ labels.C }}</h2>
    <div class="stat-row"><span class="stat-label">Total paid</span><span class="stat-value">{{ fmt(d.c_paid) }}</span></div>
    <div class="stat-row"><span class="stat-label">Total interest</span><span class="stat-value">{{ fmt(d.c_interest) }}</span></div>
    <div class="stat-row"><span class="stat-label">Paid off in</span><span class="stat-value">{{ fmt_payoff(d.c_payoff, d.amortizes) }}</span></div>
    <div class="stat-row"><span class="stat-label">Investment value</span><span class="stat-value">{{ fmt(d.c_value) }}</span></div>
    <div class="stat-row"><span class="stat-label">Net position</span><span class="stat-value">{{ fmt(d.net.C) }}</span></div>
  </div>
</div>

{% if d.c_details %}
<div class="card">
  <h2>Investment breakdown (Scenario C)</h2>
  <table>
    <tr><th>Amount</th><th>Months</th><th>Contributed</th><th>Final value</th><th>Profit</th></tr>
    {% for det in d.c_details %}
    <tr>
      <td>{{ fmt(det.amount) }}</td>
      <td>{{ det.from_month }}&ndash;{{ det.to_month }}</td>
      <td>{{ fmt(det.contributed) }}</td>
      <td>{{ fmt(det.final_value) }}</td>
      <td>{{ fmt(det.profit) }}</td>
    </tr>
    {% endfor %}
  </table>
</div>
{% endif %}

<div class="card">
  <h2 class="tag-{{ d.best }}">Scenario {{ d.best }} wins</h2>
  <p style="color:var(--text-secondary)">{{ verdict_text }}</p>
  <p style="margin-top:1rem"><a class="btn" href="/download-pdf">Download PDF report</a></p>
</div>

<div class="card chart">
  {% for img in charts %}
  <img src="data:image/png;base64,{{ img }}" alt="chart {{ loop.index }}">
  {% endfor %}
</div>
{% endif %}

<p style="color:var(--text-secondary);font-size:.8rem;text-align:center">
  For educational/illustrative purposes only. Not financial advice.
</p>
</div>
</body>
</html>
"""


def _render(state: CalculatorState, savings_rate: float, status: int = 200, **ctx: Any):
    context: Dict[str, Any] = dict(
        state=state,
        savings_rate=savings_rate,
        d=None,
        charts=[],
        verdict_text="",
        error=None,
        labels=cfg.SCENARIO_LABELS,
        fmt=fmt,
        pct=pct,
        fmt_months=fmt_months,
        fmt_payoff=fmt_payoff,
    )
    context.update(ctx)
    return render_template_string(HTML_TEMPLATE, **context), status


# ═══════════════════════════════════════════════════════════════════
# Routes
# ═══════════════════════════════════════════════════════════════════

@app.route("/", methods=["GET", "POST"])
def index():
    if request.method == "GET":
        return _render(initial_state(), cfg.DEFAULT_SAVINGS_RATE)

    try:
        state, savings_rate = parse_form(request.form)
        state = apply_action(state, request.form.get("action", "calculate"))
    except (ValueError, KeyError) as exc:
        logger.info("Rejected form input: %s", exc)
        state, savings_rate = parse_form(request.form, strict=False)
        return _render(state, savings_rate, status=400,
                       error=f"Invalid input: {exc}")

    comp = compute(state, savings_rate=savings_rate)
    if comp is None:
        return _render(state, savings_rate,
                       error="Add a loan with a positive amount and term to see results.")

    d = compute_display_data(state.summary(), comp)
    verdict_text = generate_verdict_text(d)
    chart_images = report.get_web_charts(comp, d)

    # Save PDF for download
    report.generate_pdf(comp, d, verdict_text, app.config["PDF_PATH"])

    return _render(state, savings_rate, d=d, charts=chart_images,
                   verdict_text=verdict_text)


@app.route("/download-pdf")
def download_pdf():
    path = app.config["PDF_PATH"]
    if os.path.exists(path):
        return send_file(os.path.abspath(path), as_attachment=True,
                         download_name=os.path.basename(cfg.PDF_PATH))
    return "No report generated yet. Run a calculation first.", 404


# ═══════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════

def run_web(debug: bool = True) -> None:
    """Start the Flask development server and open browser."""
    import webbrowser
    import threading

    url = f"http://{cfg.WEB_HOST}:{cfg.WEB_PORT}"
    print(f"Starting web app at {url}")
    threading.Timer(1.0, lambda: webbrowser.open(url)).start()
    app.run(host=cfg.WEB_HOST, port=cfg.WEB_PORT, debug=debug)


if __name__ == "__main__":
    run_web()
