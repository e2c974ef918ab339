"""Tests for the kubehealth CLI."""

from pathlib import Path
from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from kubehealth.application.collector import MetricsUnavailableError
from kubehealth.cli.main import app
from kubehealth.config import ConfigError

runner = CliRunner()
_EXECUTE = "kubehealth.cli.main.execute_health_check"
_LOGGING = "kubehealth.cli.main.setup_logging"


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "kubehealth" in result.output


def test_check_passes_options() -> None:
    execute = MagicMock(return_value=MagicMock(run=None))
    with patch(_EXECUTE, new=execute), patch(_LOGGING) as logging_mock:
        result = runner.invoke(
            app,
            [
                "check",
                "--dry-run",
                "--report",
                "out",
                "--env-file",
                "custom.env",
                "--log-level",
                "DEBUG",
            ],
        )
    assert result.exit_code == 0
    logging_mock.assert_called_once_with("DEBUG")
    kwargs = execute.call_args.kwargs
    assert kwargs["dry_run"] is True
    assert kwargs["reports_root"] == "out"
    assert kwargs["env_path"] == Path("custom.env")


def test_config_error_exit_code() -> None:
    with (
        patch(_EXECUTE, side_effect=ConfigError("NAMESPACES env var must be set")),
        patch(_LOGGING),
    ):
        result = runner.invoke(app, ["check"])
    assert result.exit_code == 1
    assert "NAMESPACES" in result.output


def test_collaborator_error_exit_code() -> None:
    with (
        patch(_EXECUTE, side_effect=MetricsUnavailableError("Metrics API unavailable")),
        patch(_LOGGING),
    ):
        result = runner.invoke(app, ["check"])
    assert result.exit_code == 2
