import os
from datetime import date
from decimal import Decimal

import pytest

# The web app builds its store at import time.
os.environ.setdefault("COMPARISON_DATABASE_URL", "sqlite://")

from loan_schedule.data_models import LoanParameters


@pytest.fixture
def mortgage() -> LoanParameters:
    """300k at 6 % over 30 years, paid monthly from January 2025."""
    return LoanParameters(
        principal=Decimal("300000"),
        annual_rate_percent=Decimal("6"),
        term_years=30,
        start_date=date(2025, 1, 1),
        payments_per_year=12,
    )
