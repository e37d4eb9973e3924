"""Tests for the Flask web front end."""
import os

import pytest
from werkzeug.datastructures import MultiDict

from app import app, apply_action, parse_form

DEFAULT_FORM = {
    "loan_amount": ["100,000"],
    "loan_rate": ["5.5"],
    "loan_term": ["30"],
    "loan_unit": ["years"],
    "loan_start": ["2024-01-01"],
    "inv_kind": ["one-time"],
    "inv_frequency": ["monthly"],
    "inv_from": ["2024-01-01"],
    "inv_to": ["2054-01-01"],
    "inv_amount": ["10000"],
    "inv_apr": ["7"],
    "savings_rate": "0",
}


def _form(**overrides):
    form = dict(DEFAULT_FORM)
    form.update(overrides)
    return form


def test_parse_form_rebuilds_state():
    state, savings_rate = parse_form(MultiDict(_form(savings_rate="1.5")))
    assert savings_rate == 1.5
    assert state.loans[0].amount == 100_000
    assert state.loans[0].term_months == 360
    assert state.investments[0].apr == 7
    assert state.next_loan_id == 2


def test_apply_action_remove_by_position():
    state, _ = parse_form(MultiDict(_form()))
    state = apply_action(state, "add_loan")
    state = apply_action(state, "remove_loan:1")
    assert [loan.id for loan in state.loans] == [2]
    assert apply_action(state, "calculate") is state


def test_get_renders_form(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"Loan Surplus Planner" in resp.data
    assert resp.data.count(b'name="loan_amount"') == 1


def test_calculate_shows_verdict_and_writes_pdf(client):
    resp = client.post("/", data=_form(action="calculate"))
    assert resp.status_code == 200
    assert b"Scenario C wins" in resp.data
    assert b"data:image/png;base64," in resp.data
    assert os.path.exists(app.config["PDF_PATH"])

    pdf = client.get("/download-pdf")
    assert pdf.status_code == 200
    assert pdf.data.startswith(b"%PDF")


def test_add_loan_row(client):
    resp = client.post("/", data=_form(action="add_loan"))
    assert resp.status_code == 200
    assert resp.data.count(b'name="loan_amount"') == 2


def test_remove_only_loan(client):
    resp = client.post("/", data=_form(action="remove_loan:1"))
    assert resp.status_code == 200
    assert b"Add a loan with a positive amount" in resp.data
    assert b'name="loan_amount"' not in resp.data


def test_bad_input_rejected(client):
    resp = client.post("/", data=_form(loan_amount=["lots"]))
    assert resp.status_code == 400
    assert b"Invalid input" in resp.data


def test_negative_rate_rejected(client):
    resp = client.post("/", data=_form(loan_rate=["-2"]))
    assert resp.status_code == 400


def test_negative_savings_rate_rejected(client):
    with pytest.raises(ValueError):
        parse_form(MultiDict(_form(savings_rate="-1200")))

    resp = client.post("/", data=_form(savings_rate="-1200"))
    assert resp.status_code == 400
    assert b"Savings rate cannot be negative" in resp.data


def test_rejected_form_keeps_valid_rows(client):
    resp = client.post("/", data=_form(loan_amount=["777"], inv_apr=["lots"]))
    assert resp.status_code == 400
    assert b'value="777.0"' in resp.data
    assert b'name="inv_amount"' not in resp.data


def test_lenient_parse_skips_bad_rows():
    form = MultiDict(_form(loan_amount=["5000", "oops"], loan_rate=["4", "4"],
                           loan_term=["10", "10"], loan_unit=["years", "years"],
                           loan_start=["2024-01-01", "2024-01-01"], savings_rate="-3"))
    state, savings_rate = parse_form(form, strict=False)
    assert [loan.amount for loan in state.loans] == [5_000]
    assert savings_rate == 0.0


def test_non_amortizing_loan_shows_never(client):
    # the second loan has no term, so it adds interest but no payment
    resp = client.post("/", data=_form(loan_amount=["100000", "1000000"], loan_rate=["5.5", "10"],
                                       loan_term=["30", "0"], loan_unit=["years", "months"],
                                       loan_start=["2024-01-01", "2024-01-01"],
                                       action="calculate"))
    assert resp.status_code == 200
    assert b"never (payment below interest)" in resp.data


def test_download_before_calculation(client):
    resp = client.get("/download-pdf")
    assert resp.status_code == 404
