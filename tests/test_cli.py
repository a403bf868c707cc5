"""Tests for the click command-line interface."""

from __future__ import annotations

import json
import logging
from datetime import date, timedelta

import pytest
from click.testing import CliRunner

from debtpilot.cli import cli
from debtpilot.logging_config import ROOT_LOGGER_NAME


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def _reset_logging(monkeypatch):
    """Keep INFO logs off the console and drop the handlers setup_logging attaches."""
    monkeypatch.setenv("DEBTPILOT_DEV_MODE", "0")
    yield
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()


def _table_rows(output: str) -> list[str]:
    lines = output.splitlines()
    header = next(i for i, line in enumerate(lines) if line.split()[:2] == ["extra", "months"])
    return [line for line in lines[header + 1 :] if line.strip() and line.split()[0][0].isdigit()]


class TestSimulateCommand:
    def test_reference_debt(self, runner):
        result = runner.invoke(cli, ["simulate", "--balance", "1000", "--installment", "100", "--rate", "12"])

        assert result.exit_code == 0, result.output
        assert "Months: 11" in result.output
        assert "Total interest: 58.98" in result.output
        assert "Payoff date:" in result.output

    def test_schedule(self, runner):
        result = runner.invoke(
            cli, ["simulate", "--balance", "300", "--installment", "100", "--schedule"]
        )

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0].split() == ["month", "payment", "interest", "principal", "remaining"]
        assert lines[3].split() == ["3", "100.00", "0.00", "100.00", "0.00"]
        assert lines[4] == "Months: 3"

    def test_horizon_exceeded(self, runner):
        result = runner.invoke(cli, ["simulate", "--balance", "100000", "--installment", "10"])

        assert result.exit_code == 0, result.output
        assert "Months: 360" in result.output
        assert "Not paid off within 360 months; 96,400.00 would still be owed." in result.output

    def test_horizon_from_environment(self, runner, monkeypatch):
        monkeypatch.setenv("DEBTPILOT_MAX_HORIZON_MONTHS", "12")

        result = runner.invoke(cli, ["simulate", "--balance", "5000", "--installment", "100"])

        assert "Months: 12" in result.output
        assert "Not paid off within 12 months" in result.output

    def test_invalid_installment(self, runner):
        result = runner.invoke(cli, ["simulate", "--balance", "1000", "--installment", "0", "--rate", "5"])

        assert result.exit_code == 1
        assert "payment too small" in result.output

    def test_failure_is_logged(self, runner, tmp_path):
        runner.invoke(cli, ["simulate", "--balance", "1000", "--installment", "0"])

        log_file = tmp_path / "instance" / "logs" / "debtpilot.log"
        entries = [json.loads(line) for line in log_file.read_text().splitlines() if line.strip()]
        failure = entries[-1]
        assert failure["logger"] == "debtpilot.cli"
        assert failure["level"] == "WARNING"
        assert "payment too small" in failure["message"]
        assert failure["extra"] == {"command": "simulate"}


class TestCompareCommand:
    def test_default_scenarios(self, runner):
        result = runner.invoke(cli, ["compare", "--balance", "5000", "--installment", "150", "--rate", "18"])

        assert result.exit_code == 0, result.output
        rows = _table_rows(result.output)
        assert [row.split()[0] for row in rows] == ["0.00", "100.00", "200.00", "500.00"]
        assert rows[0].split()[-1] == "0"

    def test_marks_scenarios_past_horizon(self, runner):
        result = runner.invoke(
            cli, ["compare", "--balance", "100000", "--installment", "10", "--extra", "0", "--extra", "1000"]
        )

        # the horizon warning may be interleaved on stderr
        rows = _table_rows(result.output)
        assert len(rows) == 2
        assert rows[0].endswith(" *")
        assert not rows[1].endswith(" *")


class TestPrioritizeCommand:
    @pytest.fixture
    def debts_csv(self, tmp_path):
        path = tmp_path / "debts.csv"
        path.write_text(
            "name,balance,minimum_payment,apr,status\n"
            "Credit card,5000,150,18,\n"
            "Store card,800,50,10,\n"
            "Phone plan,1200,40,29,\n"
            "Old loan,0,100,35,paid\n",
            encoding="utf-8",
        )
        return path

    def test_snowball(self, runner, debts_csv):
        result = runner.invoke(cli, ["prioritize", str(debts_csv)])

        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines[0].split()[:3] == ["1st", "Store", "card"]
        assert lines[1].split()[:3] == ["2nd", "Phone", "plan"]
        assert "Old loan" not in result.output
        assert lines[-1].startswith("Monthly interest:")

    def test_avalanche_with_insights(self, runner, debts_csv):
        result = runner.invoke(cli, ["prioritize", str(debts_csv), "--method", "avalanche", "--insights"])

        assert result.exit_code == 0, result.output
        assert result.output.splitlines()[0].split()[:3] == ["1st", "Phone", "plan"]
        assert "Concentrate on paying off" in result.output

    def test_only_paid_debts(self, runner, tmp_path):
        path = tmp_path / "paid.csv"
        path.write_text("name,balance,minimum_payment,apr\nOld,0,10,5\n", encoding="utf-8")

        result = runner.invoke(cli, ["prioritize", str(path)])

        assert "No active debts." in result.output


class TestImportCommand:
    def test_second_import_reports_duplicates(self, runner, tmp_path):
        recent = date.today() - timedelta(days=2)
        statement = tmp_path / "statement.csv"
        statement.write_text(
            "date,category,title,amount\n"
            f"{recent.isoformat()},food,Bakery,-12.40\n"
            f"{recent.isoformat()},income,Salary,3000\n",
            encoding="utf-8",
        )

        first = runner.invoke(cli, ["import", str(statement), "--user-id", "u1"])
        second = runner.invoke(cli, ["import", str(statement), "--user-id", "u1"])

        assert first.exit_code == 0, first.output
        assert "Imported 2 transaction(s); skipped 0." in first.output
        assert second.exit_code == 0, second.output
        assert "Imported 0 transaction(s); skipped 2." in second.output
        assert "duplicate:" in second.output
        assert "Bakery" in second.output

    def test_generic_csv_column_options(self, runner, tmp_path):
        statement = tmp_path / "generic.csv"
        statement.write_text("when,what,how much\n2024-06-01,Coffee,-4.50\n", encoding="utf-8")
        db_url = f"sqlite:///{tmp_path / 'cli.db'}"

        missing = runner.invoke(cli, ["import", str(statement), "--user-id", "u1", "--database-url", db_url])
        partial = runner.invoke(
            cli, ["import", str(statement), "--user-id", "u1", "--date-column", "when"]
        )
        mapped = runner.invoke(
            cli,
            [
                "import",
                str(statement),
                "--user-id",
                "u1",
                "--database-url",
                db_url,
                "--date-column",
                "when",
                "--description-column",
                "what",
                "--amount-column",
                "how much",
            ],
        )

        assert missing.exit_code == 1
        assert "Column mapping required" in missing.output
        assert partial.exit_code == 2
        assert mapped.exit_code == 0, mapped.output
        assert "Imported 1 transaction(s)" in mapped.output
