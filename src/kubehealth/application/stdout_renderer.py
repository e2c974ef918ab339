"""Render a health report to the terminal using rich."""

from collections.abc import Iterable
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from kubehealth.application.health_report import HealthReport
from kubehealth.application.report_export import issue_rows
from kubehealth.config import HealthConfig

_MAX_PREVIEW_ROWS = 20

_CATEGORY_TITLES: dict[str, str] = {
    "heavy_usage": "High resource usage",
    "restarts": "Container restarts",
    "pending": "Pending pods",
    "failed": "Failed pods",
    "unready": "Unready pods",
    "oom_killed": "OOMKilled containers",
    "problematic_nodes": "Problematic nodes",
    "high_utilization_nodes": "High utilization nodes",
    "volume_issues": "Volume issues",
    "failed_jobs": "Failed jobs",
    "missed_schedules": "Missed CronJobs",
}


def _is_numeric_column(values: Iterable[Any]) -> bool:
    seen = False
    for value in values:
        if value == "":
            continue
        seen = True
        if not isinstance(value, int | float):
            return False
    return seen


def _build_table(title: str, rows: list[dict[str, Any]]) -> Table:
    table = Table(title=title, show_lines=False, expand=True, box=box.SIMPLE_HEAVY)
    headers = list(rows[0])
    for header in headers:
        column = [row.get(header, "") for row in rows]
        justify = "right" if _is_numeric_column(column) else "left"
        table.add_column(header, overflow="fold", no_wrap=False, justify=justify)
    for row in rows[:_MAX_PREVIEW_ROWS]:
        table.add_row(*(str(row.get(header, "")) for header in headers))
    return table


def _summary_table(report: HealthReport) -> Table:
    table = Table(title="Summary", box=box.SIMPLE_HEAVY)
    table.add_column("category")
    table.add_column("issues", justify="right")
    for category, issues in report.categories().items():
        style = "red" if issues else "green"
        table.add_row(_CATEGORY_TITLES[category], f"[{style}]{len(issues)}[/{style}]")
    return table


def render_health_report(
    report: HealthReport,
    config: HealthConfig,
    *,
    console: Console | None = None,
) -> None:
    """Print summary counts, one table per non-empty category and skipped scopes."""
    console = console or Console()
    console.print(f"[bold cyan]{config.title}[/bold cyan]")
    console.print(
        f"[dim]Namespaces: {', '.join(config.namespaces)} | "
        f"threshold {config.threshold_percent:g}% | "
        f"grace restarts {config.restart_grace_minutes}m, "
        f"pending {config.pending_grace_minutes}m[/dim]"
    )
    console.print(_summary_table(report))

    for category, issues in report.categories().items():
        if not issues:
            continue
        console.print(_build_table(_CATEGORY_TITLES[category], issue_rows(issues)))
        if len(issues) > _MAX_PREVIEW_ROWS:
            console.print(
                f"[dim]Showing first {_MAX_PREVIEW_ROWS} of {len(issues)} rows.[/dim]"
            )

    if report.skipped_scopes:
        body = "\n".join(
            f"{scope}: {error}" for scope, error in report.skipped_scopes.items()
        )
        console.print(Panel(body, title="Skipped scopes", border_style="yellow"))

    if not report.has_issues():
        console.print("[green]No issues detected.[/green]")
