import json

from click.testing import CliRunner

from loan_schedule.main import cli

MORTGAGE = ["-p", "300k", "-r", "6", "-t", "30", "-s", "2025-01"]


def test_schedule_prints_summary_and_truncates():
    result = CliRunner().invoke(cli, ["schedule", *MORTGAGE])
    assert result.exit_code == 0, result.output
    assert "Initial payment    : 1798.65" in result.output
    assert "Schedule has 360 rows; showing first 120 rows." in result.output
    assert "\n120\t2034-12-01\t" in result.output
    assert "\n121\t" not in result.output


def test_summary_reports_interest_saved():
    result = CliRunner().invoke(cli, ["summary", *MORTGAGE, "--extra-monthly", "100"])
    assert result.exit_code == 0, result.output
    assert "Interest saved" in result.output
    assert "Term reduction" in result.output


def test_schedule_exports_csv(tmp_path):
    path = tmp_path / "out.csv"
    result = CliRunner().invoke(cli, ["schedule", *MORTGAGE, "--output", str(path)])
    assert result.exit_code == 0, result.output
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Payment #,Date,Principal,Interest,Total Payment,Balance"
    assert len(lines) == 361


def test_schedule_exports_json_with_overrides(tmp_path):
    path = tmp_path / "out.json"
    args = [
        "schedule",
        *MORTGAGE,
        "--rate-change",
        "61:7",
        "--one-time",
        "12:10k",
        "--balloon",
        "120:50000",
        "--interest-only",
        "6",
        "--output",
        str(path),
    ]
    result = CliRunner().invoke(cli, args)
    assert result.exit_code == 0, result.output
    data = json.loads(path.read_text(encoding="utf-8"))
    schedule = data["schedule"]
    assert schedule[0]["scheduled_principal"] == 0
    assert "principal" not in schedule[0]
    assert schedule[11]["extra_principal"] == 10000
    assert schedule[60]["annual_rate"] == 7
    assert data["summary"]["comparison"]["interest_saved"] > 0


def test_unsupported_output_format(tmp_path):
    result = CliRunner().invoke(cli, ["schedule", *MORTGAGE, "--output", str(tmp_path / "out.txt")])
    assert result.exit_code == 2


def test_invalid_term_is_reported():
    result = CliRunner().invoke(cli, ["summary", "-p", "300k", "-r", "6", "-t", "0"])
    assert result.exit_code == 1
    assert "term must be at least one year" in result.output


def test_malformed_override_is_a_usage_error():
    result = CliRunner().invoke(cli, ["summary", *MORTGAGE, "--one-time", "twelve:100"])
    assert result.exit_code == 2


def test_duplicate_override_period_is_rejected():
    result = CliRunner().invoke(cli, ["summary", *MORTGAGE, "--one-time", "12:100", "--one-time", "12:200"])
    assert result.exit_code == 2
    assert "more than once" in result.output


def test_compare_two_scenarios():
    result = CliRunner().invoke(
        cli,
        [
            "compare",
            "--scenario1",
            "-p 300k -r 6 -t 30",
            "--scenario2",
            "-p 300k -r 6 -t 30 --extra-monthly 100",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "Comparison" in result.output
    assert "total_interest" in result.output


def test_compare_rejects_incomplete_scenario():
    result = CliRunner().invoke(cli, ["compare", "--scenario1", "-p 300k", "--scenario2", "-p 300k -r 6 -t 30"])
    assert result.exit_code == 2


def test_refinance_command():
    args = [
        "refinance",
        "--current-amount", "300000",
        "--current-rate", "6.5",
        "--current-years", "30",
        "--remaining-balance", "275000",
        "--months-remaining", "324",
        "--new-rate", "5.5",
        "--new-years", "30",
        "--closing-costs", "5500",
    ]
    result = CliRunner().invoke(cli, args)
    assert result.exit_code == 0, result.output
    assert "Current payment    : 1896.20" in result.output
    assert "Break-even         :" in result.output
    assert "months" in result.output


def test_term_beyond_fifty_years_is_reported():
    result = CliRunner().invoke(cli, ["summary", "-p", "300k", "-r", "6", "-t", "8000", "-s", "2025-01"])
    assert result.exit_code == 1
    assert "term must not exceed 50 years" in result.output
    assert "Traceback" not in result.output
