from decimal import Decimal

import pytest
from werkzeug.datastructures import MultiDict

from loan_schedule_web.app import app, form_to_params

MORTGAGE_FORM = {
    "principal": "300000",
    "rate": "6",
    "years": "30",
    "payments_per_year": "12",
    "start_date": "2025-01-01",
}


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def test_form_coerces_blank_fields_to_zero():
    params = form_to_params(MultiDict({"principal": "", "rate": "abc", "years": "30"}))
    assert params.principal == 0
    assert params.annual_rate_percent == 0
    assert params.term_years == 30
    assert params.payments_per_year == 12
    assert params.balloon_payment is None


def test_form_parses_override_lists_and_drops_malformed_entries():
    form = MultiDict(
        {
            **MORTGAGE_FORM,
            "one_time_extras": "12:5000\nbogus\n24:1k",
            "rate_changes": "61:7, 61:8",
            "balloon_period": "120",
            "balloon_amount": "50000",
        }
    )
    params = form_to_params(form)
    assert params.one_time_extras == {12: Decimal("5000"), 24: Decimal("1000")}
    assert params.rate_changes == {61: Decimal("7")}
    assert params.balloon_payment.period == 120
    assert params.balloon_payment.amount == Decimal("50000")


def test_index_renders_form(client):
    response = client.get("/")
    assert response.status_code == 200
    assert b"Amortization Calculator" in response.data


def test_index_shows_summary_and_preview(client):
    response = client.post("/", data=MORTGAGE_FORM)
    assert response.status_code == 200
    assert b"1798.65" in response.data
    assert b"240 more payments not shown" in response.data
    assert b'id="schedule-data"' in response.data


def test_index_reports_invalid_term(client):
    response = client.post("/", data={**MORTGAGE_FORM, "years": ""})
    assert response.status_code == 200
    assert b"term must be at least one year" in response.data


def test_index_reports_term_beyond_fifty_years(client):
    response = client.post("/", data={**MORTGAGE_FORM, "years": "8000"})
    assert response.status_code == 200
    assert b"term must not exceed 50 years" in response.data


def test_export_csv_download(client):
    response = client.post("/export.csv", data=MORTGAGE_FORM)
    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    assert "amortization_schedule.csv" in response.headers["Content-Disposition"]
    lines = response.get_data(as_text=True).splitlines()
    assert lines[0] == "Payment #,Date,Principal,Interest,Total Payment,Balance"
    assert len(lines) == 361


def test_export_csv_rejects_invalid_input(client):
    response = client.post("/export.csv", data={**MORTGAGE_FORM, "principal": "0"})
    assert response.status_code == 400


def test_export_csv_rejects_term_beyond_fifty_years(client):
    response = client.post("/export.csv", data={**MORTGAGE_FORM, "years": "8000"})
    assert response.status_code == 400


def test_save_and_clear_scenarios(client):
    response = client.post("/", data={**MORTGAGE_FORM, "action": "save", "scenario_name": "Thirty year"})
    assert b"Saved scenarios" in response.data
    assert b"Thirty year" in response.data
    response = client.post("/comparison/clear", follow_redirects=True)
    assert b"Thirty year" not in response.data


def test_refinance_page(client):
    assert client.get("/refinance").status_code == 200
    form = {
        "current_amount": "300000",
        "current_rate": "6.5",
        "current_years": "30",
        "remaining_balance": "275000",
        "months_remaining": "324",
        "new_amount": "275000",
        "new_rate": "5.5",
        "new_years": "30",
        "closing_costs": "5500",
        "include_closing_costs": "1",
        "start_date": "2025-01",
    }
    response = client.post("/refinance", data=form)
    assert response.status_code == 200
    assert b"1896.20" in response.data
    assert b"months" in response.data


def test_refinance_reports_invalid_input(client):
    response = client.post("/refinance", data={"current_years": "30", "new_years": "30"})
    assert response.status_code == 200
    assert b"months remaining must be positive" in response.data
