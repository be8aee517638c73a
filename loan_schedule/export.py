"""Export helpers for computed schedules.

CSV output keeps the column order of the original calculator downloads:
payment number, month, principal, interest, total payment and balance.
JSON output carries the summary plus every period record.
"""

from __future__ import annotations

import csv
import json
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any, Dict, List, TextIO

from .data_models import PeriodRecord, ScheduleResult

CSV_HEADER = ["Payment #", "Date", "Principal", "Interest", "Total Payment", "Balance"]

_CENT = Decimal("0.01")


def _money(value: Decimal) -> str:
    return str(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def schedule_rows(result: ScheduleResult) -> List[List[str]]:
    """Return one CSV row per period, amounts rounded to cents."""
    return [
        [
            str(index),
            record.date.strftime("%b %Y"),
            _money(record.principal),
            _money(record.interest),
            _money(record.total_payment),
            _money(record.ending_balance),
        ]
        for index, record in enumerate(result.schedule, start=1)
    ]


def write_csv(stream: TextIO, result: ScheduleResult) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    writer.writerows(schedule_rows(result))


def export_to_csv(path: Path, result: ScheduleResult) -> None:
    """Export the schedule to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        write_csv(f, result)


def serialize_record(record: PeriodRecord) -> Dict[str, Any]:
    """Convert a period record into a JSON-serialisable dictionary."""
    return {
        "period": record.period,
        "date": record.date.isoformat(),
        "scheduled_payment": float(record.scheduled_payment),
        "scheduled_principal": float(record.scheduled_principal),
        "extra_principal": float(record.extra_principal),
        "interest": float(record.interest),
        "balance": float(record.ending_balance),
        "cumulative_principal": float(record.cumulative_principal),
        "cumulative_interest": float(record.cumulative_interest),
        "annual_rate": float(record.annual_rate_percent),
    }


def serialize_schedule(result: ScheduleResult) -> List[Dict[str, Any]]:
    return [serialize_record(record) for record in result.schedule]


def export_to_json(path: Path, result: ScheduleResult, summary: Dict[str, Any] | None = None) -> None:
    """Export the summary and schedule to a JSON file.

    ``summary`` defaults to ``result.summary()``; callers pass an extended
    summary when they have extra figures such as a baseline comparison.
    """
    data = {
        "summary": summary if summary is not None else result.summary(),
        "schedule": serialize_schedule(result),
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
