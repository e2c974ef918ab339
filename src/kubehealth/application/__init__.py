"""Application facade exports for stable use-case API."""

from kubehealth.application.collector import (
    MetricsUnavailableError,
    collect_report,
    collect_report_async,
)
from kubehealth.application.health_check_use_case import (
    HealthCheckResult,
    execute_health_check,
)
from kubehealth.application.health_report import HealthReport, ReportSummary
from kubehealth.application.notification import build_slack_payload
from kubehealth.application.run_writer import RunResult

__all__ = [
    "build_slack_payload",
    "collect_report",
    "collect_report_async",
    "execute_health_check",
    "HealthCheckResult",
    "HealthReport",
    "MetricsUnavailableError",
    "ReportSummary",
    "RunResult",
]
