"""Refinance comparison built on top of the schedule engine.

Compares the payment on an existing mortgage with the payment on a proposed
replacement loan and reports the monthly savings, how many months it takes
for those savings to cover the closing costs, and both remaining schedules.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from .data_models import LoanParameters, RefinanceInputs, RefinanceResult
from .engine import MAX_TERM_YEARS, InvalidLoanParameters, calculate_payment, generate_schedule

MONTHS_PER_YEAR = 12


def _monthly_rate(rate_percent: Decimal) -> Decimal:
    return rate_percent / Decimal(100) / Decimal(MONTHS_PER_YEAR)


def new_loan_principal(inputs: RefinanceInputs) -> Decimal:
    """Return the balance of the new loan, including cash out and any rolled-in costs."""
    principal = inputs.new_loan_amount + inputs.cash_out
    if inputs.include_closing_costs:
        principal += inputs.closing_costs
    return principal


def compare_refinance(inputs: RefinanceInputs) -> RefinanceResult:
    """Compare the current loan against the proposed refinance.

    The current payment is the level payment of the original loan. The
    break-even point is ``closing_costs / monthly_savings`` and is ``None``
    when the new payment is not lower than the current one.
    """
    if inputs.current_term_years <= 0 or inputs.new_term_years <= 0:
        raise InvalidLoanParameters("loan terms must be at least one year")
    if max(inputs.current_term_years, inputs.new_term_years) > MAX_TERM_YEARS:
        raise InvalidLoanParameters(f"loan terms must not exceed {MAX_TERM_YEARS} years")
    if inputs.months_remaining <= 0:
        raise InvalidLoanParameters("months remaining must be positive")
    if inputs.months_remaining > MAX_TERM_YEARS * MONTHS_PER_YEAR:
        raise InvalidLoanParameters(f"months remaining must not exceed {MAX_TERM_YEARS * MONTHS_PER_YEAR}")
    if inputs.closing_costs < 0 or inputs.cash_out < 0:
        raise InvalidLoanParameters("closing costs and cash out must not be negative")

    start = inputs.start_date or date.today().replace(day=1)
    current_payment = calculate_payment(
        inputs.current_loan_amount,
        _monthly_rate(inputs.current_rate_percent),
        inputs.current_term_years * MONTHS_PER_YEAR,
    )
    principal = new_loan_principal(inputs)
    new_payment = calculate_payment(
        principal,
        _monthly_rate(inputs.new_rate_percent),
        inputs.new_term_years * MONTHS_PER_YEAR,
    )

    monthly_savings = current_payment - new_payment
    break_even = inputs.closing_costs / monthly_savings if monthly_savings > 0 else None
    total_savings = current_payment * inputs.months_remaining - new_payment * (
        inputs.new_term_years * MONTHS_PER_YEAR
    )

    current_schedule = generate_schedule(
        LoanParameters(
            principal=inputs.remaining_balance,
            annual_rate_percent=inputs.current_rate_percent,
            term_years=inputs.current_term_years,
            start_date=start,
            payments_per_year=MONTHS_PER_YEAR,
            term_periods=inputs.months_remaining,
        )
    )
    new_schedule = generate_schedule(
        LoanParameters(
            principal=principal,
            annual_rate_percent=inputs.new_rate_percent,
            term_years=inputs.new_term_years,
            start_date=start,
            payments_per_year=MONTHS_PER_YEAR,
        )
    )

    return RefinanceResult(
        current_payment=current_payment,
        new_payment=new_payment,
        new_principal=principal,
        monthly_savings=monthly_savings,
        break_even_months=break_even,
        total_savings=total_savings,
        current_schedule=current_schedule,
        new_schedule=new_schedule,
    )
