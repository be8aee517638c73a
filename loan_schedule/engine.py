"""Core calculation engine for the loan schedule calculator.

This module implements the financial logic required to build amortization
schedules. It supports recurring and one-time extra payments, scheduled rate
changes, a leading interest-only window and a balloon payment. Results are
returned as a ``ScheduleResult`` holding one ``PeriodRecord`` per period
along with the summary totals.

Every function here is pure: the same ``LoanParameters`` always produce the
same result and nothing is cached between calls.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal, getcontext
from typing import Dict, List, Optional

from .data_models import LoanParameters, PeriodRecord, ScheduleResult
from .utils import period_date

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
# A payment that leaves less than half a cent owing pays the loan off.
_RESIDUAL = Decimal("0.005")

# Longest term the calculator accepts, and the highest payment frequency (daily).
MAX_TERM_YEARS = 50
MAX_PAYMENTS_PER_YEAR = 365


class InvalidLoanParameters(ValueError):
    """Raised when loan parameters cannot produce a meaningful schedule."""


def calculate_payment(balance: Decimal, periodic_rate: Decimal, remaining_periods: int) -> Decimal:
    """Return the fixed payment that amortizes ``balance`` over the remaining periods.

    The formula is:

        payment = B * r / (1 - (1 + r)^-n)

    where ``B`` is the balance, ``r`` is the periodic interest rate and ``n``
    is the number of remaining payments. When the interest rate is zero, the
    payment simplifies to ``B / n``.
    """
    if remaining_periods < 1:
        raise ValueError("remaining_periods must be positive")
    if periodic_rate == 0:
        return balance / Decimal(remaining_periods)
    return balance * periodic_rate / (1 - (1 + periodic_rate) ** -remaining_periods)


def validate_parameters(params: LoanParameters) -> None:
    """Reject parameters that would produce a nonsensical schedule.

    Zero rates, an interest-only window longer than the term and extras
    that overpay the balance are valid and handled by the simulator.
    """
    errors: List[str] = []
    if params.principal <= 0:
        errors.append("principal must be positive")
    if params.annual_rate_percent < 0:
        errors.append("annual rate must not be negative")
    if params.term_years <= 0:
        errors.append("term must be at least one year")
    elif params.term_years > MAX_TERM_YEARS:
        errors.append(f"term must not exceed {MAX_TERM_YEARS} years")
    if params.payments_per_year <= 0:
        errors.append("payments per year must be positive")
    elif params.payments_per_year > MAX_PAYMENTS_PER_YEAR:
        errors.append(f"payments per year must not exceed {MAX_PAYMENTS_PER_YEAR}")
    if params.term_periods is not None:
        if params.term_periods <= 0:
            errors.append("term periods must be positive")
        elif params.payments_per_year > 0 and params.term_periods > MAX_TERM_YEARS * params.payments_per_year:
            errors.append(f"term must not exceed {MAX_TERM_YEARS} years")
    if params.extra_monthly < 0 or params.extra_yearly < 0:
        errors.append("extra payments must not be negative")
    if params.interest_only_periods < 0:
        errors.append("interest-only periods must not be negative")
    if any(amount < 0 for amount in params.one_time_extras.values()):
        errors.append("one-time extra payments must not be negative")
    if any(rate < 0 for rate in params.rate_changes.values()):
        errors.append("changed rates must not be negative")
    if params.balloon_payment is not None and params.balloon_payment.amount < 0:
        errors.append("balloon payment must not be negative")
    if errors:
        raise InvalidLoanParameters("; ".join(errors))
    try:
        period_date(params.start_date, params.total_periods - 1, params.payments_per_year)
    except (OverflowError, ValueError) as exc:
        raise InvalidLoanParameters("schedule would end after the last supported date") from exc


def _extra_principal(params: LoanParameters, period: int) -> Decimal:
    """Sum every extra payment source due in ``period``; sources are additive."""
    extra = params.extra_monthly
    if params.extra_yearly and period % params.payments_per_year == 0:
        extra += params.extra_yearly
    extra += params.one_time_extras.get(period, ZERO)
    balloon = params.balloon_payment
    if balloon is not None and balloon.period == period:
        extra += balloon.amount
    return extra


def simulate_periods(params: LoanParameters) -> List[PeriodRecord]:
    """Step through the loan period by period and return the schedule.

    The loop stops as soon as the balance reaches zero, so early payoff
    yields fewer records than ``params.total_periods``.
    """
    total_periods = params.total_periods
    payments_per_year = Decimal(params.payments_per_year)

    balance = params.principal
    annual_rate = params.annual_rate_percent
    rate = params.periodic_rate
    interest_only = params.interest_only_periods > 0
    payment = ZERO if interest_only else calculate_payment(balance, rate, total_periods)

    cumulative_principal = ZERO
    cumulative_interest = ZERO
    schedule: List[PeriodRecord] = []
    period = 1
    while balance > 0 and period <= total_periods:
        # A rate change re-amortizes over the remaining term rather than
        # extending it.
        if period in params.rate_changes:
            annual_rate = params.rate_changes[period]
            rate = annual_rate / Decimal(100) / payments_per_year
            if not interest_only:
                payment = calculate_payment(balance, rate, total_periods - period + 1)

        interest = balance * rate
        scheduled_principal = ZERO if interest_only else payment - interest
        extra = _extra_principal(params, period)

        opening_balance = balance
        balance -= scheduled_principal + extra
        if balance < 0 or (balance < _RESIDUAL <= opening_balance):
            balance = ZERO

        cumulative_principal += scheduled_principal + extra
        cumulative_interest += interest
        schedule.append(
            PeriodRecord(
                period=period,
                date=period_date(params.start_date, period - 1, params.payments_per_year),
                scheduled_payment=interest + scheduled_principal,
                interest=interest,
                scheduled_principal=scheduled_principal,
                extra_principal=extra,
                ending_balance=balance,
                cumulative_principal=cumulative_principal,
                cumulative_interest=cumulative_interest,
                annual_rate_percent=annual_rate,
            )
        )

        # Principal amortization begins once the interest-only window ends.
        if interest_only and period == params.interest_only_periods:
            interest_only = False
            if period < total_periods:
                payment = calculate_payment(balance, rate, total_periods - period)

        period += 1
    return schedule


def summarize_schedule(schedule: List[PeriodRecord], params: LoanParameters) -> ScheduleResult:
    """Derive the summary figures from a completed schedule."""
    original_end_date = period_date(
        params.start_date, params.total_periods - 1, params.payments_per_year
    )
    if not schedule:
        return ScheduleResult(
            schedule=[],
            total_interest=ZERO,
            total_principal_paid=ZERO,
            payoff_date=None,
            initial_payment=ZERO,
            total_extra_paid=ZERO,
            original_end_date=original_end_date,
        )
    last = schedule[-1]
    return ScheduleResult(
        schedule=schedule,
        total_interest=last.cumulative_interest,
        total_principal_paid=last.cumulative_principal,
        payoff_date=last.date,
        initial_payment=schedule[0].scheduled_payment,
        total_extra_paid=sum((r.extra_principal for r in schedule), ZERO),
        original_end_date=original_end_date,
    )


def generate_schedule(params: LoanParameters) -> ScheduleResult:
    """Validate ``params``, simulate the loan and aggregate the result.

    Raises
    ------
    InvalidLoanParameters
        If the parameters are out of range (see ``validate_parameters``).
    """
    validate_parameters(params)
    schedule = simulate_periods(params)
    result = summarize_schedule(schedule, params)
    logger.debug(
        "Generated %d of %d periods for principal %s at %s%%",
        result.periods,
        params.total_periods,
        params.principal,
        params.annual_rate_percent,
    )
    return result


def without_extras(params: LoanParameters) -> LoanParameters:
    """Return a copy of ``params`` with every extra payment removed."""
    return replace(
        params,
        extra_monthly=ZERO,
        extra_yearly=ZERO,
        one_time_extras={},
        balloon_payment=None,
    )


def compare_with_baseline(params: LoanParameters, result: Optional[ScheduleResult] = None) -> Dict[str, object]:
    """Compare a schedule with extras against the same loan without them.

    Returns the baseline totals and how much interest and how many periods
    the extra payments save. Both savings are zero when ``params`` carries
    no extras. Pass ``result`` when the schedule for ``params`` has already
    been generated.
    """
    if result is None:
        result = generate_schedule(params)
    baseline = generate_schedule(without_extras(params)) if params.has_extras() else result
    baseline_end: date = baseline.payoff_date or baseline.original_end_date
    return {
        "baseline_total_interest": float(baseline.total_interest),
        "baseline_periods": baseline.periods,
        "baseline_payoff_date": baseline_end.strftime("%Y-%m"),
        "interest_saved": float(baseline.total_interest - result.total_interest),
        "periods_saved": baseline.periods - result.periods,
    }
