"""Tests for the command-line interface."""

import argparse
import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import pytest

from expense_insights.cli import create_parser, dashboard_command, get_log_level, main
from expense_insights.service import ExpenseService
from expense_insights.storage.memory import InMemoryExpenseStore

from conftest import make_expense


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run each CLI test in its own directory so the log file lands there."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    return tmp_path


def run(workdir: Path, *args: str) -> int:
    db_url = f"sqlite:///{workdir / 'expenses.db'}"
    return main(["--config-dir", str(workdir), "--database-url", db_url, *args])


class TestCommands:
    """End-to-end command tests against a SQLite file."""

    def test_no_command_prints_help(self, workdir: Path) -> None:
        assert main([]) == 1

    def test_add_and_list(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(workdir, "add", "--date", "05/03/2024", "--amount", "450", "--vendor", "Swiggy") == 0
        assert "Food" in capsys.readouterr().out

        assert run(workdir, "list", "--json") == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data) == 1
        assert data[0]["date"] == "2024-03-05"
        assert data[0]["amount"] == "450.00"
        assert data[0]["category"] == "Food"

    @pytest.mark.parametrize(
        "date_arg,amount",
        [("2024/03/05", "10"), ("2024-03-05", "ten"), ("2024-03-05", "0"), ("2024-03-05", "1e40")],
    )
    def test_add_rejects_bad_input(
        self, workdir: Path, capsys: pytest.CaptureFixture[str], date_arg: str, amount: str
    ) -> None:
        result = run(workdir, "add", "--date", date_arg, "--amount", amount, "--vendor", "Swiggy")
        assert result == 1
        assert "Error" in capsys.readouterr().out

    def test_delete(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        run(workdir, "add", "--date", "2024-03-05", "--amount", "10", "--vendor", "Uber")
        assert run(workdir, "delete", "1") == 0
        assert run(workdir, "delete", "1") == 1
        assert "not found" in capsys.readouterr().out

    def test_import(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        csv_path = workdir / "upload.csv"
        csv_path.write_text(
            "date,amount,vendor_name,description\n"
            "2024-03-01,450,Swiggy,Dinner\n"
            "2024-03-02,oops,Uber,\n"
        )

        assert run(workdir, "-v", "import", str(csv_path)) == 0

        out = capsys.readouterr().out
        assert "Imported 1 expenses" in out
        assert "line 3" in out

    def test_import_missing_file(self, workdir: Path) -> None:
        assert run(workdir, "import", str(workdir / "missing.csv")) == 1

    def test_anomalies_json(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        for amount in ("100", "100", "100", "1000"):
            run(workdir, "add", "--date", "2024-03-05", "--amount", amount, "--vendor", "Zomato")
        capsys.readouterr()

        assert run(workdir, "anomalies", "--json") == 0
        data = json.loads(capsys.readouterr().out)
        assert [e["amount"] for e in data] == ["1000.00"]

    def test_dashboard_json_and_xlsx(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        run(workdir, "add", "--date", "2024-03-05", "--amount", "75", "--vendor", "Uber")
        capsys.readouterr()
        xlsx = workdir / "dashboard.xlsx"

        assert run(workdir, "dashboard", "--year", "2024", "--month", "3", "--json", "--xlsx", str(xlsx)) == 0

        out = capsys.readouterr().out
        data = json.loads(out[: out.rindex("}") + 1])
        assert data["monthly_category_totals"] == {"Transport": "75.00"}
        assert xlsx.exists()

    def test_dashboard_invalid_month(self, workdir: Path) -> None:
        assert run(workdir, "dashboard", "--year", "2024", "--month", "13") == 1

    def test_rules(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(workdir, "rules", "--category", "Education") == 0
        out = capsys.readouterr().out
        assert "udemy" in out
        assert "swiggy" not in out

    def test_export(self, workdir: Path) -> None:
        run(workdir, "add", "--date", "2024-03-05", "--amount", "10", "--vendor", "Uber")
        out_path = workdir / "export.csv"

        assert run(workdir, "export", str(out_path)) == 0
        assert out_path.read_text().splitlines()[1] == "2024-03-05,10.00,Uber,,Transport,no"

    def test_invalid_config(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        (workdir / "settings.yaml").write_text("anomaly:\n  multiplier: 0\n")
        assert run(workdir, "list") == 1
        assert "Configuration error" in capsys.readouterr().out


class TestDashboardCommand:
    """Tests for dashboard_command with an in-memory service."""

    @pytest.fixture
    def service(self) -> ExpenseService:
        store = InMemoryExpenseStore()
        store.insert(make_expense("40", "Uber", "Transport", date(2024, 6, 3)))
        store.insert(make_expense("60", "Uber", "Transport", date(2024, 5, 3)))
        return ExpenseService(store)

    def test_defaults_to_current_month(self, service: ExpenseService) -> None:
        args = argparse.Namespace(year=None, month=None, json=False, xlsx=None)
        with patch.object(service, "get_dashboard", wraps=service.get_dashboard) as mock_get:
            result = dashboard_command(args, service, today=date(2024, 6, 15))

        assert result == 0
        mock_get.assert_called_once_with(2024, 6)

    def test_explicit_month(self, service: ExpenseService, capsys: pytest.CaptureFixture[str]) -> None:
        args = argparse.Namespace(year=2024, month=5, json=True, xlsx=None)
        assert dashboard_command(args, service, today=date(2024, 6, 15)) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["monthly_category_totals"] == {"Transport": "60.00"}

    def test_main_uses_built_service(self, service: ExpenseService, workdir: Path) -> None:
        with patch("expense_insights.cli.build_service", return_value=service) as mock_build:
            assert main(["--config-dir", str(workdir), "list"]) == 0
        mock_build.assert_called_once()


class TestParser:
    def test_verbosity_levels(self) -> None:
        assert get_log_level(0) == "WARNING"
        assert get_log_level(1) == "INFO"
        assert get_log_level(3) == "DEBUG"

    def test_delete_requires_integer_id(self) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["delete", "abc"])

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            create_parser().parse_args(["--version"])
        assert "0.1.0" in capsys.readouterr().out
