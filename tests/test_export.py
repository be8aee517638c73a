import io
import json
from dataclasses import replace
from decimal import Decimal

from loan_schedule.engine import generate_schedule
from loan_schedule.export import (
    CSV_HEADER,
    export_to_csv,
    export_to_json,
    schedule_rows,
    serialize_schedule,
    write_csv,
)


def test_csv_header_and_first_row(mortgage):
    buffer = io.StringIO()
    write_csv(buffer, generate_schedule(mortgage))
    lines = buffer.getvalue().splitlines()
    assert lines[0] == "Payment #,Date,Principal,Interest,Total Payment,Balance"
    assert lines[1] == "1,Jan 2025,298.65,1500.00,1798.65,299701.35"
    assert lines[-1].startswith("360,Dec 2054,")
    assert lines[-1].endswith(",0.00")
    assert len(lines) == 361


def test_rows_include_extra_principal_in_payment(mortgage):
    result = generate_schedule(replace(mortgage, extra_monthly=Decimal("100")))
    first = schedule_rows(result)[0]
    assert first[2] == "398.65"
    assert first[4] == "1898.65"


def test_export_to_csv_file(tmp_path, mortgage):
    path = tmp_path / "schedule.csv"
    export_to_csv(path, generate_schedule(mortgage))
    with path.open(encoding="utf-8") as f:
        assert f.readline().strip().split(",") == CSV_HEADER


def test_export_to_json_file(tmp_path, mortgage):
    path = tmp_path / "schedule.json"
    export_to_json(path, generate_schedule(mortgage))
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["summary"]["payments_made"] == 360
    assert len(data["schedule"]) == 360
    first = data["schedule"][0]
    assert first["date"] == "2025-01-01"
    assert first["interest"] == 1500.0
    assert first["annual_rate"] == 6.0


def test_json_records_separate_scheduled_and_extra_principal(mortgage):
    params = replace(mortgage, extra_monthly=Decimal("100"))
    record = serialize_schedule(generate_schedule(params))[0]
    assert round(record["scheduled_principal"], 2) == 298.65
    assert record["extra_principal"] == 100.0
    assert "principal" not in record
