"""Command-line interface for the loan schedule calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules, view summaries,
compare two loan scenarios or evaluate a refinance. Results can be printed to
the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import json
import logging
import shlex
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import click

from .data_models import BalloonPayment, LoanParameters, RefinanceInputs
from .engine import InvalidLoanParameters, compare_with_baseline, generate_schedule
from .export import export_to_csv, export_to_json
from .formatter import print_comparison, print_refinance, print_schedule, print_summary
from .refinance import compare_refinance
from .utils import parse_amount, parse_date, parse_period_pair

logger = logging.getLogger(__name__)

MAX_PRINTED_ROWS = 120


def _amount(value: Optional[str], name: str) -> Decimal:
    if not value:
        return Decimal("0")
    try:
        return parse_amount(value.strip().rstrip("%"))
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint=name)


def _period_table(values: Tuple[str, ...], name: str) -> Dict[int, Decimal]:
    table: Dict[int, Decimal] = {}
    for item in values:
        try:
            period, amount = parse_period_pair(item)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint=name)
        if period in table:
            raise click.BadParameter(f"Period {period} given more than once", param_hint=name)
        table[period] = amount
    return table


def build_params_from_options(
    principal: str,
    rate: str,
    years: int,
    payments_per_year: int = 12,
    start_date: Optional[str] = None,
    extra_monthly: Optional[str] = None,
    extra_yearly: Optional[str] = None,
    one_time: Tuple[str, ...] = (),
    rate_change: Tuple[str, ...] = (),
    interest_only: int = 0,
    balloon: Optional[str] = None,
) -> LoanParameters:
    """Turn raw option strings into ``LoanParameters``.

    Parsing problems are reported as ``click.BadParameter``; range checks are
    left to the engine.
    """
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--start-date")
    else:
        start = date.today().replace(day=1)

    balloon_payment = None
    if balloon:
        try:
            period, amount = parse_period_pair(balloon)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--balloon")
        balloon_payment = BalloonPayment(period=period, amount=amount)

    return LoanParameters(
        principal=_amount(principal, "--principal"),
        annual_rate_percent=_amount(rate, "--rate"),
        term_years=years,
        start_date=start,
        payments_per_year=payments_per_year,
        extra_monthly=_amount(extra_monthly, "--extra-monthly"),
        extra_yearly=_amount(extra_yearly, "--extra-yearly"),
        one_time_extras=_period_table(one_time, "--one-time"),
        rate_changes=_period_table(rate_change, "--rate-change"),
        interest_only_periods=interest_only,
        balloon_payment=balloon_payment,
    )


def loan_options(func: Callable) -> Callable:
    """Attach the loan parameter options shared by several commands."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (accepts 300k, 1.2m)"),
        click.option("--rate", "-r", "rate", required=True, help="Annual interest rate (percent)"),
        click.option("--years", "-t", "years", required=True, type=int, help="Loan term in years"),
        click.option("--payments-per-year", "-n", "payments_per_year", type=int, default=12, show_default=True, help="Payment frequency, e.g. 12, 26, 52"),
        click.option("--start-date", "-s", "start_date", help="First payment date (YYYY-MM or YYYY-MM-DD); defaults to this month"),
        click.option("--extra-monthly", "extra_monthly", help="Extra principal paid every period"),
        click.option("--extra-yearly", "extra_yearly", help="Extra principal paid once a year"),
        click.option("--one-time", "one_time", multiple=True, help="One-time extra payment in PERIOD:AMOUNT format"),
        click.option("--rate-change", "rate_change", multiple=True, help="Rate change in PERIOD:RATE format"),
        click.option("--interest-only", "interest_only", type=int, default=0, help="Number of leading interest-only periods"),
        click.option("--balloon", "balloon", help="Balloon payment in PERIOD:AMOUNT format"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _compute(params: LoanParameters):
    try:
        result = generate_schedule(params)
        comparison = compare_with_baseline(params, result)
    except InvalidLoanParameters as exc:
        raise click.ClickException(str(exc))
    summary_data: Dict[str, Any] = result.summary()
    summary_data["comparison"] = comparison
    return result, summary_data


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """A command-line loan amortization calculator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(output: Optional[str], **options: Any) -> None:
    """Compute and print the full amortization schedule."""
    params = build_params_from_options(**options)
    result, summary_data = _compute(params)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result, summary_data)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv", param_hint="--output")
        logger.info("Exported %d periods to %s", result.periods, path)
        click.echo(f"Schedule exported to {path}")
    else:
        print_summary(summary_data)
        # Limit schedule length printed to avoid flooding the terminal
        if result.periods > MAX_PRINTED_ROWS:
            click.echo(f"Schedule has {result.periods} rows; showing first {MAX_PRINTED_ROWS} rows.")
            print_schedule(result.schedule[:MAX_PRINTED_ROWS])
        else:
            print_schedule(result.schedule)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(output: Optional[str], **options: Any) -> None:
    """Compute and print only the summary metrics for a loan."""
    params = build_params_from_options(**options)
    _, summary_data = _compute(params)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension", param_hint="--output")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


@cli.command()
@click.option("--scenario1", "scenario1", required=True, help="First scenario options quoted string")
@click.option("--scenario2", "scenario2", required=True, help="Second scenario options quoted string")
def compare(scenario1: str, scenario2: str) -> None:
    """Compare two loan scenarios.

    Scenarios are provided as quoted option strings, for example:

        loan-schedule compare --scenario1 "-p 300k -r 6 -t 30" --scenario2 "-p 300k -r 6 -t 30 --extra-monthly 100"
    """

    def parse_scenario_opts(opts: str) -> Dict[str, Any]:
        # Reuse the summary command's parser so scenarios accept the same options.
        try:
            ctx = summary.make_context("scenario", shlex.split(opts))
        except click.UsageError as exc:
            raise click.BadParameter(exc.format_message(), param_hint="scenario")
        params = dict(ctx.params)
        params.pop("output", None)
        return params

    summaries = []
    for opts in (scenario1, scenario2):
        params = build_params_from_options(**parse_scenario_opts(opts))
        _, summary_data = _compute(params)
        summaries.append(summary_data)
    print_comparison(summaries[0], summaries[1])


@cli.command()
@click.option("--current-amount", "current_amount", required=True, help="Original amount of the current loan")
@click.option("--current-rate", "current_rate", required=True, help="Current annual rate (percent)")
@click.option("--current-years", "current_years", required=True, type=int, help="Original term of the current loan in years")
@click.option("--remaining-balance", "remaining_balance", required=True, help="Balance still owed on the current loan")
@click.option("--months-remaining", "months_remaining", required=True, type=int, help="Payments left on the current loan")
@click.option("--new-amount", "new_amount", help="New loan amount; defaults to the remaining balance")
@click.option("--new-rate", "new_rate", required=True, help="New annual rate (percent)")
@click.option("--new-years", "new_years", required=True, type=int, help="New loan term in years")
@click.option("--closing-costs", "closing_costs", help="Closing costs of the refinance")
@click.option("--roll-in-costs/--pay-costs", "roll_in_costs", default=True, show_default=True, help="Add closing costs to the new loan")
@click.option("--cash-out", "cash_out", help="Cash taken out when refinancing")
@click.option("--start-date", "-s", "start_date", help="First payment date of the new loan (YYYY-MM)")
def refinance(
    current_amount: str,
    current_rate: str,
    current_years: int,
    remaining_balance: str,
    months_remaining: int,
    new_amount: Optional[str],
    new_rate: str,
    new_years: int,
    closing_costs: Optional[str],
    roll_in_costs: bool,
    cash_out: Optional[str],
    start_date: Optional[str],
) -> None:
    """Compare the current mortgage with a refinanced one."""
    start = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--start-date")
    balance = _amount(remaining_balance, "--remaining-balance")
    inputs = RefinanceInputs(
        current_loan_amount=_amount(current_amount, "--current-amount"),
        current_rate_percent=_amount(current_rate, "--current-rate"),
        current_term_years=current_years,
        remaining_balance=balance,
        months_remaining=months_remaining,
        new_loan_amount=_amount(new_amount, "--new-amount") if new_amount else balance,
        new_rate_percent=_amount(new_rate, "--new-rate"),
        new_term_years=new_years,
        closing_costs=_amount(closing_costs, "--closing-costs"),
        include_closing_costs=roll_in_costs,
        cash_out=_amount(cash_out, "--cash-out"),
        start_date=start,
    )
    try:
        result = compare_refinance(inputs)
    except InvalidLoanParameters as exc:
        raise click.ClickException(str(exc))
    print_refinance(result.summary())


if __name__ == "__main__":
    cli()
