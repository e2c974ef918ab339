"""Build the Slack notification for a health report."""

from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any, TypeVar

from kubehealth.application.health_report import HealthReport
from kubehealth.config import HealthConfig
from kubehealth.domain.issues import (
    MOUNT_FAILURE,
    Failed,
    FailedJob,
    HeavyUsage,
    MissedSchedule,
    NodeUtilization,
    OomKilled,
    Pending,
    ProblematicNode,
    Restart,
    Unready,
    VolumeIssue,
)

T = TypeVar("T")


def format_timestamp(value: datetime) -> str:
    """Format as RFC 3339 UTC with second precision."""
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_pct(value: float | None) -> str:
    return f"{value:.0f}%" if value is not None else "-"


def heavy_usage_line(issue: HeavyUsage) -> str:
    return (
        f"• `{issue.namespace}/{issue.name}:` "
        f"CPU {format_pct(issue.cpu_pct)} | MEM {format_pct(issue.mem_pct)}"
    )


def restart_lines(issue: Restart) -> list[str]:
    reason = issue.reason or "unknown"
    code = f" (exit {issue.exit_code})" if issue.exit_code is not None else ""
    last = format_timestamp(issue.last_time) if issue.last_time else "-"
    return [
        f"• `{issue.namespace}/{issue.pod}` [{issue.container}] "
        f"{reason}{code} - {issue.message or ''}",
        f"  last: {last}",
    ]


def pending_line(issue: Pending) -> str:
    return (
        f"• `{issue.namespace}/{issue.pod}` pending for {issue.duration_minutes}m "
        f"(since {format_timestamp(issue.since)})"
    )


def failed_line(issue: Failed) -> str:
    message = f" - {issue.message}" if issue.message else ""
    return (
        f"• `{issue.namespace}/{issue.pod}` failed for {issue.duration_minutes}m "
        f"({issue.reason or 'Unknown'}{message})"
    )


def unready_line(issue: Unready) -> str:
    conditions = ", ".join(issue.failed_conditions) or "Unknown conditions"
    return (
        f"• `{issue.namespace}/{issue.pod}` unready for {issue.duration_minutes}m "
        f"({conditions})"
    )


def oom_line(issue: OomKilled) -> str:
    last = format_timestamp(issue.last_oom_time) if issue.last_oom_time else "recent"
    return (
        f"• `{issue.namespace}/{issue.pod}` [{issue.container}] OOMKilled "
        f"(restarts: {issue.restart_count}, last: {last})"
    )


def problematic_node_line(issue: ProblematicNode) -> str:
    return (
        f"• `{issue.name}` {', '.join(issue.conditions)} "
        f"(since {format_timestamp(issue.since)})"
    )


def node_utilization_line(issue: NodeUtilization) -> str:
    return (
        f"• `{issue.name}` CPU {format_pct(issue.cpu_pct)} | "
        f"MEM {format_pct(issue.mem_pct)} | "
        f"Pods {issue.unit_count}/{issue.unit_capacity} "
        f"({format_pct(issue.density_pct)})"
    )


def volume_line(issue: VolumeIssue) -> str:
    kind = "Mount failure" if issue.issue_kind == MOUNT_FAILURE else issue.issue_kind
    return (
        f"• `{issue.namespace}/{issue.pod}` volume '{issue.volume_name}': "
        f"{kind} - {issue.message}"
    )


def failed_job_line(issue: FailedJob) -> str:
    last = (
        format_timestamp(issue.last_failure_time)
        if issue.last_failure_time
        else "unknown"
    )
    return (
        f"• `{issue.namespace}/{issue.job}` failed pods: {issue.failed_count} "
        f"(reason: {issue.reason or 'Unknown'}, last failure: {last})"
    )


def missed_schedule_line(issue: MissedSchedule) -> str:
    return (
        f"• `{issue.namespace}/{issue.name}` missed {issue.missed_count} runs "
        f"(last scheduled: {format_timestamp(issue.last_schedule_time)})"
    )


def _section(text: str) -> dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _issue_section(
    title: str,
    issues: Sequence[T],
    render: Callable[[T], str | list[str]],
    empty: str,
) -> dict[str, Any]:
    lines: list[str] = []
    for issue in issues:
        rendered = render(issue)
        lines.extend(rendered if isinstance(rendered, list) else [rendered])
    body = "\n".join(lines) if lines else empty
    return _section(f"*{title}*\n{body}")


def build_slack_payload(config: HealthConfig, report: HealthReport) -> dict[str, Any]:
    """Build a Block Kit message: header, run context, one section per category."""
    context = (
        f"Namespaces: {', '.join(config.namespaces)}\n"
        f"Threshold: {config.threshold_percent:g}%\n"
        f"Grace: restarts {config.restart_grace_minutes}m, "
        f"pending {config.pending_grace_minutes}m"
    )
    blocks: list[dict[str, Any]] = [
        {"type": "header", "text": {"type": "plain_text", "text": config.title}},
        _section(context),
        _issue_section(
            "High resource usage",
            report.heavy_usage,
            heavy_usage_line,
            "No pods exceeding threshold.",
        ),
        _issue_section(
            "Container restarts",
            report.restarts,
            restart_lines,
            "No container restarts beyond grace.",
        ),
        _issue_section(
            "Pending pods", report.pending, pending_line, "No pending pods beyond grace."
        ),
        _issue_section(
            "Failed pods", report.failed, failed_line, "No failed pods beyond grace."
        ),
        _issue_section(
            "Unready pods", report.unready, unready_line, "No unready pods beyond grace."
        ),
        _issue_section(
            "OOMKilled containers",
            report.oom_killed,
            oom_line,
            "No OOMKilled containers beyond grace.",
        ),
        _issue_section(
            "Problematic nodes",
            report.problematic_nodes,
            problematic_node_line,
            "No problematic nodes.",
        ),
        _issue_section(
            "High utilization nodes",
            report.high_utilization_nodes,
            node_utilization_line,
            "No high utilization nodes.",
        ),
        _issue_section(
            "Volume issues", report.volume_issues, volume_line, "No volume issues."
        ),
        _issue_section(
            "Failed jobs", report.failed_jobs, failed_job_line, "No failed jobs."
        ),
        _issue_section(
            "Missed CronJobs",
            report.missed_schedules,
            missed_schedule_line,
            "No missed CronJobs.",
        ),
    ]
    if report.skipped_scopes:
        skipped = "\n".join(
            f"• `{scope}`: {error}" for scope, error in report.skipped_scopes.items()
        )
        blocks.append(_section(f"*Skipped scopes*\n{skipped}"))
    return {"blocks": blocks}
