import io
import json
import logging
import os
from datetime import date
from uuid import uuid4

from flask import Flask, Response, redirect, render_template, request, session, url_for

from loan_schedule.data_models import BalloonPayment, LoanParameters, RefinanceInputs
from loan_schedule.engine import compare_with_baseline, generate_schedule
from loan_schedule.export import serialize_schedule, write_csv
from loan_schedule.refinance import compare_refinance
from loan_schedule.utils import coerce_decimal, coerce_int, parse_date, parse_period_pair
from loan_schedule_web.comparison_store import create_store_from_env

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
comparison_store = create_store_from_env(
    os.environ.get("COMPARISON_DATABASE_URL"), os.environ.get("SCENARIO_LIMIT")
)

PREVIEW_ROWS = 120
PAYMENT_FREQUENCIES = {
    12: "Monthly",
    26: "Bi-weekly",
    52: "Weekly",
    4: "Quarterly",
    1: "Annually",
}


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def parse_form_list(value: str) -> list[str]:
    """Parse a comma or newline separated list of entries from a form field.

    Returns a list of trimmed strings, skipping any empty entries.
    """
    if not value:
        return []
    parts = [p.strip() for p in value.replace("\n", ",").split(",")]
    return [p for p in parts if p]


def _period_table(value: str) -> dict:
    """Build a period table from ``PERIOD:AMOUNT`` entries.

    Malformed entries are dropped and the first entry for a period wins,
    matching how blank numeric fields are treated as zero.
    """
    table = {}
    for item in parse_form_list(value):
        try:
            period, amount = parse_period_pair(item)
        except ValueError:
            logger.warning("Ignoring malformed schedule override %r", item)
            continue
        table.setdefault(period, amount)
    return table


def _form_start_date(form) -> date:
    raw = form.get("start_date", "").strip()
    if raw:
        try:
            return parse_date(raw)
        except ValueError:
            logger.warning("Ignoring malformed start date %r", raw)
    return date.today().replace(day=1)


def form_to_params(form) -> LoanParameters:
    """Rebuild ``LoanParameters`` from submitted form state.

    Blank or non-numeric fields are coerced to zero here; the engine then
    rejects values that cannot form a loan (such as a zero term).
    """
    balloon = None
    balloon_amount = coerce_decimal(form.get("balloon_amount"))
    if balloon_amount:
        balloon = BalloonPayment(period=coerce_int(form.get("balloon_period")), amount=balloon_amount)
    payments_per_year = coerce_int(form.get("payments_per_year")) if form.get("payments_per_year") else 12

    return LoanParameters(
        principal=coerce_decimal(form.get("principal")),
        annual_rate_percent=coerce_decimal(form.get("rate")),
        term_years=coerce_int(form.get("years")),
        start_date=_form_start_date(form),
        payments_per_year=payments_per_year,
        extra_monthly=coerce_decimal(form.get("extra_monthly")),
        extra_yearly=coerce_decimal(form.get("extra_yearly")),
        one_time_extras=_period_table(form.get("one_time_extras", "")),
        rate_changes=_period_table(form.get("rate_changes", "")),
        interest_only_periods=coerce_int(form.get("interest_only")),
        balloon_payment=balloon,
    )


def form_to_refinance(form) -> RefinanceInputs:
    balance = coerce_decimal(form.get("remaining_balance"))
    new_amount = form.get("new_amount", "").strip()
    return RefinanceInputs(
        current_loan_amount=coerce_decimal(form.get("current_amount")),
        current_rate_percent=coerce_decimal(form.get("current_rate")),
        current_term_years=coerce_int(form.get("current_years")),
        remaining_balance=balance,
        months_remaining=coerce_int(form.get("months_remaining")),
        new_loan_amount=coerce_decimal(new_amount) if new_amount else balance,
        new_rate_percent=coerce_decimal(form.get("new_rate")),
        new_term_years=coerce_int(form.get("new_years")),
        closing_costs=coerce_decimal(form.get("closing_costs")),
        include_closing_costs=form.get("include_closing_costs") == "1",
        cash_out=coerce_decimal(form.get("cash_out")),
        start_date=_form_start_date(form),
    )


def _save_scenario(user_token: str, form, calculator_type: str, summary: dict) -> None:
    scenario_name = form.get("scenario_name", "").strip() or "Scenario"
    inputs = {key: value for key, value in form.items() if key not in {"action", "scenario_name"}}
    comparison_store.add_scenario(user_token, uuid4().hex, calculator_type, scenario_name, inputs, summary)


@app.route("/", methods=["GET", "POST"])
def index():
    summary = None
    preview = None
    truncated = 0
    error = None
    chart_payload = "null"

    user_token = _ensure_user_token()

    if request.method == "POST":
        action = request.form.get("action", "run")
        try:
            params = form_to_params(request.form)
            result = generate_schedule(params)
            summary = result.summary()
            summary["comparison"] = compare_with_baseline(params, result)
            preview = result.schedule[:PREVIEW_ROWS]
            truncated = result.periods - len(preview)
            chart_payload = json.dumps(serialize_schedule(result))
            if action == "save":
                _save_scenario(user_token, request.form, "amortization", summary)
        except ValueError as exc:
            logger.warning("Rejected amortization input: %s", exc)
            error = str(exc)

    return render_template(
        "index.html",
        form=request.form,
        summary=summary,
        schedule=preview,
        truncated=truncated,
        error=error,
        frequencies=PAYMENT_FREQUENCIES,
        chart_payload=chart_payload,
        comparison_scenarios=comparison_store.list_scenarios(user_token, "amortization"),
    )


@app.post("/export.csv")
def export_csv():
    try:
        result = generate_schedule(form_to_params(request.form))
    except ValueError as exc:
        logger.warning("Rejected export input: %s", exc)
        return Response(str(exc), status=400, mimetype="text/plain")
    buffer = io.StringIO()
    write_csv(buffer, result)
    return Response(
        buffer.getvalue(),
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=amortization_schedule.csv"},
    )


@app.route("/refinance", methods=["GET", "POST"])
def refinance():
    summary = None
    error = None

    user_token = _ensure_user_token()

    if request.method == "POST":
        try:
            summary = compare_refinance(form_to_refinance(request.form)).summary()
            if request.form.get("action") == "save":
                _save_scenario(user_token, request.form, "refinance", summary)
        except ValueError as exc:
            logger.warning("Rejected refinance input: %s", exc)
            error = str(exc)

    return render_template(
        "refinance.html",
        form=request.form,
        summary=summary,
        error=error,
        comparison_scenarios=comparison_store.list_scenarios(user_token, "refinance"),
    )


def _redirect_back():
    if request.form.get("next") == "refinance":
        return redirect(url_for("refinance"))
    return redirect(url_for("index"))


@app.post("/comparison/remove")
def remove_comparison():
    scenario_id = request.form.get("scenario_id")
    user_token = session.get("user_token")
    comparison_store.remove_scenario(user_token, scenario_id)
    return _redirect_back()


@app.post("/comparison/clear")
def clear_comparisons():
    user_token = session.get("user_token")
    comparison_store.clear_scenarios(user_token)
    return _redirect_back()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    logger.info("Starting loan schedule web app")
    app.run(host="0.0.0.0", port=8710, debug=True)
