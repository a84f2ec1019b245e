# Copyright (c) Syntropy Systems
"""Tests for forecastview CLI commands."""

import re
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from forecastview.cli.main import app
from forecastview.client import RunClient

runner = CliRunner()


def strip_ansi(text: str) -> str:
    """Strip ANSI escape codes from text."""
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


@pytest.fixture
def use_backend(monkeypatch: pytest.MonkeyPatch):
    """Route every CLI command's RunClient through a mock transport."""

    def install(transport) -> None:
        def factory(api_url: str, timeout: float | None = None) -> RunClient:
            return RunClient(api_url, timeout, transport=transport)

        for module in ("run_cmd", "show", "doctor"):
            monkeypatch.setattr(f"forecastview.cli.{module}.RunClient", factory)

    return install


class TestInitCommand:
    """Tests for forecastview init command."""

    def test_init_creates_config(self, isolated_cwd: Path) -> None:
        """Test that init writes a config file."""
        result = runner.invoke(app, ["init", "--api-url", "http://forecast:8000/"])

        assert result.exit_code == 0
        config_path = isolated_cwd / ".forecastview" / "config.yaml"
        assert config_path.exists()
        data = yaml.safe_load(config_path.read_text())
        assert data["api_url"] == "http://forecast:8000"
        assert data["fast_mode"] is True

    def test_init_already_initialized(self, isolated_cwd: Path) -> None:
        """Test init when already initialized."""
        (isolated_cwd / ".forecastview").mkdir()

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert "Already initialized" in result.stdout


class TestRunCommand:
    """Tests for forecastview run command."""

    def test_run_renders_results(
        self, isolated_cwd: Path, use_backend, make_backend, sample_run_payload, sample_summary
    ) -> None:
        """Test a successful run prints every section."""
        _ = isolated_cwd
        transport = make_backend(run_payload=sample_run_payload, summary_payload=sample_summary)
        use_backend(transport)

        result = runner.invoke(app, ["run", "--full", "--log", "--api-url", "http://backend.test"])

        assert result.exit_code == 0, result.output
        output = strip_ansi(result.stdout)
        assert "Run finished" in output
        assert "fig_02_forecast.png" in output
        assert "12.30" in output
        assert "ret_5d" in output
        assert "DATA_LAST = 2025-06-30" in output
        assert b'"fast_mode":false' in transport.requests[0].content.replace(b" ", b"")

    def test_run_hard_failure(self, isolated_cwd: Path, use_backend, make_backend) -> None:
        """Test a failed run request exits with an error."""
        _ = isolated_cwd
        use_backend(make_backend(run_status=500))

        result = runner.invoke(app, ["run"])

        assert result.exit_code == 1
        assert "run exploded" in result.stdout

    def test_run_backend_not_ok(
        self, isolated_cwd: Path, use_backend, make_backend, sample_run_payload
    ) -> None:
        """Test ok=false shows results and exits non-zero."""
        _ = isolated_cwd
        payload = {**sample_run_payload, "ok": False}
        use_backend(make_backend(run_payload=payload, summary_status=404))

        result = runner.invoke(app, ["run"])

        assert result.exit_code == 1
        assert "Backend reported a failed run" in result.stdout
        assert "RMSE (1M)" in strip_ansi(result.stdout)

    def test_run_without_data(self, isolated_cwd: Path, use_backend, make_backend) -> None:
        """Test empty states when the backend returns nothing useful."""
        _ = isolated_cwd
        use_backend(make_backend(run_payload={"ok": True}, summary_status=404))

        result = runner.invoke(app, ["run"])

        assert result.exit_code == 0
        assert "No figures yet" in result.stdout
        assert "No summary yet" in result.stdout
        assert "No feature importance yet" in result.stdout


class TestShowCommand:
    """Tests for forecastview show command."""

    def test_show_persisted_summary(
        self, isolated_cwd: Path, use_backend, make_backend, sample_summary
    ) -> None:
        """Test show renders the last summary.json."""
        _ = isolated_cwd
        use_backend(make_backend(summary_payload=sample_summary))

        result = runner.invoke(app, ["show", "--raw"])

        assert result.exit_code == 0, result.output
        output = strip_ansi(result.stdout)
        assert "Monthly extrema" in output
        assert "1,105.50" in output
        assert '"anchor_eval"' in output

    def test_show_without_summary(self, isolated_cwd: Path, use_backend, make_backend) -> None:
        """Test show fails cleanly when no run has been persisted."""
        _ = isolated_cwd
        use_backend(make_backend(summary_status=404))

        result = runner.invoke(app, ["show"])

        assert result.exit_code == 1
        assert "Error:" in result.stdout


class TestDoctorCommand:
    """Tests for forecastview doctor command."""

    def test_doctor_all_good(
        self, isolated_cwd: Path, use_backend, make_backend, sample_summary
    ) -> None:
        """Test doctor with a healthy backend."""
        _ = isolated_cwd
        use_backend(make_backend(summary_payload=sample_summary))

        result = runner.invoke(app, ["doctor"])

        assert result.exit_code == 0
        assert "Backend reachable" in result.stdout
        assert "All checks passed" in result.stdout

    def test_doctor_missing_summary(self, isolated_cwd: Path, use_backend, make_backend) -> None:
        """Test doctor warns when no summary has been written yet."""
        _ = isolated_cwd
        use_backend(make_backend(summary_status=404))

        result = runner.invoke(app, ["doctor"])

        assert result.exit_code == 0
        assert "warning" in result.stdout


def test_help_lists_commands() -> None:
    """Test the top-level help lists every command."""
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    output = strip_ansi(result.output)
    for command in ("init", "run", "show", "doctor"):
        assert command in output
