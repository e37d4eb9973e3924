"""
Constants for the loan surplus planner.

All money values are currency-agnostic. Rates are annual percentages
(5.5 means 5.5%), converted to monthly rates by dividing by 1200.
"""

# ── Simulation ──────────────────────────────────────────────────────
DEFAULT_MONTH_CEILING = 360   # 30 years; safety bound on every simulation
PAYOFF_EPSILON = 0.01         # balance at or below this counts as paid off
DEFAULT_SAVINGS_RATE = 0.0    # bank savings APR used by Scenario A

# ── Inflow scheduling ───────────────────────────────────────────────
ONE_TIME = "one-time"
RECURRING = "recurring"
INFLOW_KINDS = (ONE_TIME, RECURRING)

MONTHLY = "monthly"
YEARLY = "yearly"
MONTHS_PER_CONTRIBUTION = {
    MONTHLY: 1,
    YEARLY: 12,
}

# ── Dates ───────────────────────────────────────────────────────────
AVG_DAYS_PER_MONTH = 30.44
TERM_UNITS = ("months", "years")

# ── Defaults for new records ────────────────────────────────────────
DEFAULT_LOAN_AMOUNT = 100_000
DEFAULT_LOAN_RATE = 5.5
DEFAULT_LOAN_TERM = 30
DEFAULT_TERM_UNIT = "years"

DEFAULT_INVESTMENT_AMOUNT = 10_000
DEFAULT_INVESTMENT_APR = 7.0
DEFAULT_WINDOW_YEARS = 30     # investment to-date = from-date + 30 years

# ── Scenario labels ─────────────────────────────────────────────────
SCENARIO_LABELS = {
    "A": "Minimum payment + bank the surplus",
    "B": "Minimum payment + surplus to principal",
    "C": "Minimum payment + invest the surplus",
}

# ── Web / report ────────────────────────────────────────────────────
WEB_HOST = "127.0.0.1"
WEB_PORT = 5000
PDF_PATH = "loan_surplus_report.pdf"
NEVER_PAYS_OFF = "never (payment below interest)"
