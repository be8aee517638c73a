"""Data models for the loan schedule calculator.

This module defines dataclasses for the inputs of a schedule run (loan
parameters and the balloon payment override), the per-period records the
simulator produces and the aggregate result returned to callers. Inputs are
frozen so a single run can never mutate what the caller handed in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional


@dataclass(frozen=True)
class BalloonPayment:
    """A lump principal payment due at a specific period.

    Attributes
    ----------
    period: int
        The 1-based period number at which the balloon is paid.
    amount: Decimal
        Extra principal paid on top of the scheduled payment.
    """

    period: int
    amount: Decimal


@dataclass(frozen=True)
class LoanParameters:
    """All inputs for one schedule run.

    Rates are annual percentages (``Decimal("6")`` means 6 %). The override
    tables ``one_time_extras`` and ``rate_changes`` are keyed by 1-based
    period number; entries outside the loan's period range are never matched.
    """

    principal: Decimal
    annual_rate_percent: Decimal
    term_years: int
    start_date: date
    payments_per_year: int = 12
    extra_monthly: Decimal = Decimal("0")
    extra_yearly: Decimal = Decimal("0")
    one_time_extras: Dict[int, Decimal] = field(default_factory=dict)
    rate_changes: Dict[int, Decimal] = field(default_factory=dict)
    interest_only_periods: int = 0
    balloon_payment: Optional[BalloonPayment] = None

    # Explicit number of periods, overriding term_years * payments_per_year.
    # Used for loans that are already part-way through their term.
    term_periods: Optional[int] = None

    @property
    def total_periods(self) -> int:
        if self.term_periods is not None:
            return self.term_periods
        return self.term_years * self.payments_per_year

    @property
    def periodic_rate(self) -> Decimal:
        return self.annual_rate_percent / Decimal(100) / Decimal(self.payments_per_year)

    def has_extras(self) -> bool:
        return bool(
            self.extra_monthly
            or self.extra_yearly
            or any(self.one_time_extras.values())
            or (self.balloon_payment is not None and self.balloon_payment.amount)
        )


@dataclass(frozen=True)
class PeriodRecord:
    """One row of the amortization schedule.

    ``scheduled_payment`` is interest plus scheduled principal and excludes
    any extra payment. During interest-only periods it equals ``interest``.
    """

    period: int
    date: date
    scheduled_payment: Decimal
    interest: Decimal
    scheduled_principal: Decimal
    extra_principal: Decimal
    ending_balance: Decimal
    cumulative_principal: Decimal
    cumulative_interest: Decimal
    annual_rate_percent: Decimal

    @property
    def principal(self) -> Decimal:
        return self.scheduled_principal + self.extra_principal

    @property
    def total_payment(self) -> Decimal:
        return self.scheduled_payment + self.extra_principal


@dataclass
class ScheduleResult:
    """The simulated schedule together with its summary figures."""

    schedule: List[PeriodRecord]
    total_interest: Decimal
    total_principal_paid: Decimal
    payoff_date: Optional[date]
    initial_payment: Decimal
    total_extra_paid: Decimal
    original_end_date: date

    @property
    def periods(self) -> int:
        return len(self.schedule)

    @property
    def total_cost(self) -> Decimal:
        return self.total_principal_paid + self.total_interest

    def summary(self) -> Dict[str, object]:
        """Return the summary as plain JSON-serialisable values."""
        return {
            "initial_payment": float(self.initial_payment),
            "total_interest": float(self.total_interest),
            "total_principal": float(self.total_principal_paid),
            "total_extra": float(self.total_extra_paid),
            "total_cost": float(self.total_cost),
            "payments_made": self.periods,
            "original_end_date": self.original_end_date.strftime("%Y-%m"),
            "payoff_date": self.payoff_date.strftime("%Y-%m") if self.payoff_date else None,
        }


@dataclass(frozen=True)
class RefinanceInputs:
    """Inputs comparing an existing mortgage with a proposed refinance.

    ``include_closing_costs`` rolls the closing costs into the new loan
    balance instead of paying them up front.
    """

    current_loan_amount: Decimal
    current_rate_percent: Decimal
    current_term_years: int
    remaining_balance: Decimal
    months_remaining: int
    new_loan_amount: Decimal
    new_rate_percent: Decimal
    new_term_years: int
    closing_costs: Decimal = Decimal("0")
    include_closing_costs: bool = True
    cash_out: Decimal = Decimal("0")
    start_date: Optional[date] = None


@dataclass
class RefinanceResult:
    current_payment: Decimal
    new_payment: Decimal
    new_principal: Decimal
    monthly_savings: Decimal
    break_even_months: Optional[Decimal]
    total_savings: Decimal
    current_schedule: ScheduleResult
    new_schedule: ScheduleResult

    def summary(self) -> Dict[str, object]:
        return {
            "current_payment": float(self.current_payment),
            "new_payment": float(self.new_payment),
            "new_principal": float(self.new_principal),
            "monthly_savings": float(self.monthly_savings),
            "break_even_months": (
                float(self.break_even_months) if self.break_even_months is not None else None
            ),
            "total_savings": float(self.total_savings),
            "current_total_interest": float(self.current_schedule.total_interest),
            "new_total_interest": float(self.new_schedule.total_interest),
        }
