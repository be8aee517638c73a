from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from loan_schedule.data_models import RefinanceInputs
from loan_schedule.engine import InvalidLoanParameters
from loan_schedule.refinance import compare_refinance, new_loan_principal


@pytest.fixture
def inputs() -> RefinanceInputs:
    return RefinanceInputs(
        current_loan_amount=Decimal("300000"),
        current_rate_percent=Decimal("6.5"),
        current_term_years=30,
        remaining_balance=Decimal("275000"),
        months_remaining=324,
        new_loan_amount=Decimal("275000"),
        new_rate_percent=Decimal("5.5"),
        new_term_years=30,
        closing_costs=Decimal("5500"),
        include_closing_costs=True,
        start_date=date(2025, 1, 1),
    )


def test_refinance_to_lower_rate(inputs):
    result = compare_refinance(inputs)
    assert result.current_payment.quantize(Decimal("0.01")) == Decimal("1896.20")
    assert result.new_principal == Decimal("280500")
    assert result.monthly_savings == result.current_payment - result.new_payment
    assert result.monthly_savings > 0
    assert result.break_even_months == Decimal("5500") / result.monthly_savings
    assert result.current_schedule.periods == 324
    assert result.new_schedule.periods == 360
    assert result.current_schedule.schedule[-1].ending_balance < Decimal("0.01")


def test_closing_costs_paid_up_front(inputs):
    assert new_loan_principal(replace(inputs, include_closing_costs=False)) == Decimal("275000")
    assert new_loan_principal(replace(inputs, cash_out=Decimal("20000"))) == Decimal("300500")


def test_no_break_even_when_payment_rises(inputs):
    result = compare_refinance(replace(inputs, new_rate_percent=Decimal("8")))
    assert result.monthly_savings < 0
    assert result.break_even_months is None
    assert result.summary()["break_even_months"] is None


def test_total_savings(inputs):
    result = compare_refinance(inputs)
    expected = result.current_payment * 324 - result.new_payment * 360
    assert result.total_savings == expected


@pytest.mark.parametrize(
    "changes",
    [
        {"months_remaining": 0},
        {"new_term_years": 0},
        {"current_term_years": 0},
        {"new_term_years": 8000},
        {"current_term_years": 51},
        {"months_remaining": 601},
        {"closing_costs": Decimal("-1")},
        {"remaining_balance": Decimal("0")},
    ],
)
def test_invalid_refinance_inputs(inputs, changes):
    with pytest.raises(InvalidLoanParameters):
        compare_refinance(replace(inputs, **changes))
