"""Output helpers for the loan schedule calculator.

This module provides simple functions to render amortization schedules and
summaries in a tabular text format using built-in printing and string
formatting.
"""

from __future__ import annotations

from typing import Dict, Iterable

from .data_models import PeriodRecord


def print_summary(summary: Dict[str, object]) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Initial payment    : {summary['initial_payment']:.2f}")
    print(f"Total interest     : {summary['total_interest']:.2f}")
    print(f"Total principal    : {summary['total_principal']:.2f}")
    if summary.get("total_extra"):
        print(f"Total extra paid   : {summary['total_extra']:.2f}")
    print(f"Total cost         : {summary['total_cost']:.2f}")
    print(f"Original end date  : {summary['original_end_date']}")
    print(f"Payoff date        : {summary['payoff_date']}")
    print(f"Payments made      : {summary['payments_made']}")
    comparison = summary.get("comparison")
    if comparison and comparison.get("periods_saved"):
        print(f"Baseline interest  : {comparison['baseline_total_interest']:.2f}")
        print(f"Interest saved     : {comparison['interest_saved']:.2f}")
        print(f"Term reduction     : {int(comparison['periods_saved'])} payments")
    print("-" * 72)


def print_schedule(schedule: Iterable[PeriodRecord]) -> None:
    """Print the amortization schedule as a simple table."""
    headers = [
        "Period",
        "Date",
        "Payment",
        "Principal",
        "Extra",
        "Interest",
        "Balance",
        "Rate",
    ]
    print("\t".join(headers))
    for record in schedule:
        row = [
            str(record.period),
            record.date.strftime("%Y-%m-%d"),
            f"{record.scheduled_payment:.2f}",
            f"{record.scheduled_principal:.2f}",
            f"{record.extra_principal:.2f}",
            f"{record.interest:.2f}",
            f"{record.ending_balance:.2f}",
            f"{record.annual_rate_percent:.3f}%",
        ]
        print("\t".join(row))


def print_comparison(s1: Dict[str, object], s2: Dict[str, object]) -> None:
    """Print a comparison of two loan summaries side by side.

    The difference column is scenario2 - scenario1, so a negative difference
    means the second scenario is cheaper or shorter.
    """
    print("Comparison")
    print("=" * 72)
    keys = [
        "initial_payment",
        "total_cost",
        "total_interest",
        "payments_made",
    ]
    print(f"{'Metric':20s} {'Scenario1':>15s} {'Scenario2':>15s} {'Difference':>15s}")
    for key in keys:
        v1 = s1.get(key)
        v2 = s2.get(key)
        diff = v2 - v1
        print(f"{key:20s} {v1:15.2f} {v2:15.2f} {diff:15.2f}")
    print("=" * 72)


def print_refinance(summary: Dict[str, object]) -> None:
    """Print the outcome of a refinance comparison."""
    print("Refinance")
    print("-" * 72)
    print(f"Current payment    : {summary['current_payment']:.2f}")
    print(f"New payment        : {summary['new_payment']:.2f}")
    print(f"New loan amount    : {summary['new_principal']:.2f}")
    print(f"Monthly savings    : {summary['monthly_savings']:.2f}")
    break_even = summary.get("break_even_months")
    if break_even is None:
        print("Break-even         : N/A")
    else:
        print(f"Break-even         : {break_even:.1f} months")
    print(f"Total savings      : {summary['total_savings']:.2f}")
    print(f"Current interest   : {summary['current_total_interest']:.2f}")
    print(f"New interest       : {summary['new_total_interest']:.2f}")
    print("-" * 72)
