"""Tests for the health-check use-case."""

from io import StringIO
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from fakes import NOW, FakeProvider
from rich.console import Console

from kubehealth.application import MetricsUnavailableError, execute_health_check
from kubehealth.config import ConfigError, MappingEnvironment

_SEND = "kubehealth.application.health_check_use_case.send_notification"
ENV = MappingEnvironment(
    {"NAMESPACES": "prod,staging", "SLACK_WEBHOOK_URL": "https://hooks.slack.com/x"}
)


def _console() -> Console:
    return Console(file=StringIO(), width=120)


def test_issues_trigger_notification(unhealthy_provider: FakeProvider) -> None:
    send = AsyncMock()
    with patch(_SEND, new=send):
        result = execute_health_check(
            env=ENV, provider=unhealthy_provider, now=NOW, console=_console()
        )
    assert result.notified
    assert result.summary.total_issues == 3
    webhook, payload = send.await_args.args
    assert webhook == "https://hooks.slack.com/x"
    assert len(payload["blocks"]) == 13


def test_healthy_cluster_skips_notification() -> None:
    send = AsyncMock()
    with patch(_SEND, new=send):
        result = execute_health_check(
            env=ENV, provider=FakeProvider(), now=NOW, console=_console()
        )
    assert not result.notified
    assert not result.summary.has_issues()
    send.assert_not_awaited()


def test_dry_run_never_notifies_and_needs_no_webhook(
    unhealthy_provider: FakeProvider,
) -> None:
    send = AsyncMock()
    env = MappingEnvironment({"NAMESPACES": "prod"})
    with patch(_SEND, new=send):
        result = execute_health_check(
            dry_run=True,
            env=env,
            provider=unhealthy_provider,
            now=NOW,
            console=_console(),
        )
    assert result.summary.has_issues()
    assert not result.notified
    send.assert_not_awaited()


def test_missing_webhook_is_config_error(unhealthy_provider: FakeProvider) -> None:
    with pytest.raises(ConfigError):
        execute_health_check(
            env=MappingEnvironment({"NAMESPACES": "prod"}),
            provider=unhealthy_provider,
        )


def test_fail_fast_when_metrics_unavailable(unhealthy_provider: FakeProvider) -> None:
    unhealthy_provider.metrics_down = True
    with pytest.raises(MetricsUnavailableError):
        execute_health_check(
            dry_run=True, env=ENV, provider=unhealthy_provider, console=_console()
        )


def test_metrics_probe_disabled(unhealthy_provider: FakeProvider) -> None:
    unhealthy_provider.metrics_down = True
    env = ENV.with_var("FAIL_IF_NO_METRICS", "false")
    result = execute_health_check(
        dry_run=True, env=env, provider=unhealthy_provider, now=NOW, console=_console()
    )
    assert result.summary.total_issues == 3


def test_report_artifacts_written(
    unhealthy_provider: FakeProvider, tmp_path: Path
) -> None:
    console = _console()
    result = execute_health_check(
        dry_run=True,
        reports_root=str(tmp_path),
        env=ENV,
        provider=unhealthy_provider,
        now=NOW,
        console=console,
    )
    assert result.run is not None
    names = {p.name for p in result.run.output_files}
    assert {"pending.csv", "failed_jobs.csv", "problematic_nodes.csv"} <= names
    assert {"summary.md", "manifest.json"} <= names
    assert "Pending pods" in console.file.getvalue()
