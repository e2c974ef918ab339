"""Health-check use-case: collect, render, notify and optionally persist."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from rich.console import Console

from kubehealth.application.collector import (
    SnapshotProvider,
    collect_report,
    ensure_metrics_available,
)
from kubehealth.application.health_report import HealthReport, ReportSummary
from kubehealth.application.notification import build_slack_payload
from kubehealth.application.report_export import export_issue_csvs
from kubehealth.application.run_writer import (
    RunResult,
    SummaryContent,
    create_run,
    finalize_run,
)
from kubehealth.application.stdout_renderer import render_health_report
from kubehealth.config import EnvironmentProvider, HealthConfig, load_config
from kubehealth.infrastructure.cluster_provider import KubectlSnapshotProvider
from kubehealth.infrastructure.slack_client import SlackWebhookClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HealthCheckResult:
    """Outcome of one health-check run."""

    config: HealthConfig
    report: HealthReport
    summary: ReportSummary
    notified: bool
    run: RunResult | None = None


async def send_notification(webhook_url: str, payload: dict[str, Any]) -> None:
    """Post one payload to the Slack webhook."""
    async with SlackWebhookClient(webhook_url) as client:
        await client.send(payload)


def _config_inputs(config: HealthConfig, *, dry_run: bool) -> dict[str, Any]:
    inputs = asdict(config)
    inputs["namespaces"] = ",".join(config.namespaces)
    inputs["slack_webhook_url"] = "set" if config.has_slack else None
    inputs["dry_run"] = dry_run
    return inputs


def run_status(report: HealthReport) -> str:
    """Manifest status: issues first, then partial coverage, then healthy."""
    if report.has_issues():
        return "issues_found"
    if report.skipped_scopes:
        return "partial"
    return "healthy"


def _skipped_scopes_error(report: HealthReport) -> str | None:
    if not report.skipped_scopes:
        return None
    return "; ".join(
        f"{scope}: {error}" for scope, error in report.skipped_scopes.items()
    )


def write_report_artifacts(
    config: HealthConfig,
    report: HealthReport,
    *,
    reports_root: str | Path,
    dry_run: bool = False,
    notified: bool = False,
) -> RunResult:
    """Persist CSVs, summary.md and manifest.json under a fresh run directory."""
    ctx = create_run(_config_inputs(config, dry_run=dry_run), reports_root=reports_root)
    output_files = export_issue_csvs(report, ctx.output_dir)
    notes = ["Slack notification sent."] if notified else []
    return finalize_run(
        ctx,
        status=run_status(report),
        output_files=output_files,
        error=_skipped_scopes_error(report),
        summary=SummaryContent(
            title=config.title,
            counts={name: len(issues) for name, issues in report.categories().items()},
            skipped_scopes=dict(report.skipped_scopes),
            notes=notes,
            inputs=ctx.inputs,
        ),
    )


def execute_health_check(
    *,
    dry_run: bool = False,
    reports_root: str | None = None,
    env_path: Path = Path(".env"),
    env: EnvironmentProvider | None = None,
    provider: SnapshotProvider | None = None,
    now: datetime | None = None,
    console: Console | None = None,
) -> HealthCheckResult:
    """Run one health check.

    Slack is notified only when the report has issues and `dry_run` is off.
    Config errors raise `ConfigError`; an unreachable usage API raises
    `MetricsUnavailableError` when fail-fast is configured.
    """
    config = load_config(env, env_path=env_path, require_webhook=not dry_run)
    logger.info("namespaces = %s", list(config.namespaces))
    provider = provider or KubectlSnapshotProvider(context=config.kube_context)

    if config.fail_if_no_metrics:
        ensure_metrics_available(provider, config.namespaces)

    report = collect_report(provider, config, now=now)
    summary = report.summary()
    logger.info("Health report summary: %d total issues found", summary.total_issues)
    render_health_report(report, config, console=console)

    notified = False
    if not summary.has_issues():
        logger.info("No issues detected, skipping Slack notification")
    elif dry_run or not config.slack_webhook_url:
        logger.info("Dry run, Slack notification not sent")
    else:
        logger.info("Issues detected, sending notification to Slack")
        payload = build_slack_payload(config, report)
        asyncio.run(send_notification(config.slack_webhook_url, payload))
        notified = True

    run = None
    if reports_root is not None:
        run = write_report_artifacts(
            config,
            report,
            reports_root=reports_root,
            dry_run=dry_run,
            notified=notified,
        )
        logger.info("Report written to %s", run.output_dir)

    return HealthCheckResult(
        config=config,
        report=report,
        summary=summary,
        notified=notified,
        run=run,
    )


__all__ = [
    "HealthCheckResult",
    "execute_health_check",
    "run_status",
    "send_notification",
    "write_report_artifacts",
]
