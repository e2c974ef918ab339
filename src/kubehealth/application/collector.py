"""Collect snapshots per scope and run the analyzers over them."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from kubehealth.analyzers.batch import analyze_failed_jobs, analyze_missed_schedules
from kubehealth.analyzers.nodes import (
    analyze_node_utilization,
    analyze_problematic_nodes,
    count_scheduled_units,
)
from kubehealth.analyzers.volumes import analyze_volume_issues
from kubehealth.analyzers.workloads import (
    analyze_failed,
    analyze_heavy_usage,
    analyze_oom_killed,
    analyze_pending,
    analyze_restarts,
    analyze_unready,
)
from kubehealth.application.health_report import (
    BatchIssues,
    HealthReport,
    NodeIssues,
    WorkloadIssues,
)
from kubehealth.config import HealthConfig
from kubehealth.domain.issues import VolumeIssue
from kubehealth.domain.snapshots import (
    CronJobSnapshot,
    JobSnapshot,
    NodeSnapshot,
    WorkloadSnapshot,
)
from kubehealth.domain.utilization import UsageTotals

logger = logging.getLogger(__name__)

CLUSTER_SCOPE = "cluster"


class SnapshotProvider(Protocol):
    """Source of cluster object and usage snapshots."""

    def list_workloads(self, namespace: str) -> list[WorkloadSnapshot]: ...

    def list_nodes(self) -> list[NodeSnapshot]: ...

    def list_jobs(self, namespace: str) -> list[JobSnapshot]: ...

    def list_recurring_jobs(self, namespace: str) -> list[CronJobSnapshot]: ...

    def fetch_workload_usage(self, namespace: str) -> dict[str, UsageTotals]: ...

    def fetch_node_usage(self) -> dict[str, dict[str, str]]: ...


class MetricsUnavailableError(RuntimeError):
    """Raised when the usage API cannot be reached at startup."""


@dataclass(frozen=True)
class NamespaceSnapshot:
    """Everything fetched for one namespace."""

    namespace: str
    workloads: list[WorkloadSnapshot]
    jobs: list[JobSnapshot]
    cronjobs: list[CronJobSnapshot]
    usage: dict[str, UsageTotals] = field(default_factory=dict)


@dataclass(frozen=True)
class ScopeResult:
    """Analyzer output for one namespace, or the reason it was skipped."""

    namespace: str
    workload_issues: WorkloadIssues | None = None
    batch_issues: BatchIssues | None = None
    volume_issues: list[VolumeIssue] = field(default_factory=list)
    workloads: list[WorkloadSnapshot] = field(default_factory=list)
    error: str | None = None


def ensure_metrics_available(
    provider: SnapshotProvider, namespaces: Sequence[str]
) -> None:
    """Probe the usage API once, for the first namespace."""
    if not namespaces:
        raise MetricsUnavailableError("No namespaces provided")
    try:
        provider.fetch_workload_usage(namespaces[0])
    except RuntimeError as exc:
        raise MetricsUnavailableError(f"Metrics API unavailable: {exc}") from exc


def fetch_namespace(provider: SnapshotProvider, namespace: str) -> NamespaceSnapshot:
    """Fetch all snapshots for a namespace.

    A usage failure degrades to an empty usage map; listing failures propagate.
    """
    workloads = provider.list_workloads(namespace)
    jobs = provider.list_jobs(namespace)
    cronjobs = provider.list_recurring_jobs(namespace)
    try:
        usage = provider.fetch_workload_usage(namespace)
    except RuntimeError as exc:
        logger.warning("Usage metrics unavailable for %s: %s", namespace, exc)
        usage = {}
    return NamespaceSnapshot(
        namespace=namespace,
        workloads=workloads,
        jobs=jobs,
        cronjobs=cronjobs,
        usage=usage,
    )


def analyze_namespace(
    snapshot: NamespaceSnapshot, config: HealthConfig, *, now: datetime
) -> ScopeResult:
    """Run every namespace-scoped analyzer over one snapshot."""
    workloads = snapshot.workloads
    restart_grace = config.restart_grace_minutes
    pending_grace = config.pending_grace_minutes
    return ScopeResult(
        namespace=snapshot.namespace,
        workload_issues=WorkloadIssues(
            heavy_usage=analyze_heavy_usage(
                workloads, snapshot.usage, threshold=config.threshold_percent
            ),
            restarts=analyze_restarts(workloads, grace_minutes=restart_grace, now=now),
            pending=analyze_pending(workloads, grace_minutes=pending_grace, now=now),
            failed=analyze_failed(workloads, grace_minutes=pending_grace, now=now),
            unready=analyze_unready(workloads, grace_minutes=pending_grace, now=now),
            oom_killed=analyze_oom_killed(
                workloads, grace_minutes=restart_grace, now=now
            ),
        ),
        batch_issues=BatchIssues(
            failed_jobs=analyze_failed_jobs(
                snapshot.jobs, grace_minutes=pending_grace, now=now
            ),
            missed_schedules=analyze_missed_schedules(
                snapshot.cronjobs, grace_minutes=pending_grace, now=now
            ),
        ),
        volume_issues=analyze_volume_issues(workloads),
        workloads=workloads,
    )


def collect_namespace(
    provider: SnapshotProvider, namespace: str, config: HealthConfig, *, now: datetime
) -> ScopeResult:
    """Fetch and analyze one namespace; collaborator failures skip the scope."""
    logger.info("Collecting metrics for namespace: %s", namespace)
    try:
        snapshot = fetch_namespace(provider, namespace)
    except RuntimeError as exc:
        logger.error("Skipping namespace %s: %s", namespace, exc)
        return ScopeResult(namespace=namespace, error=str(exc))
    return analyze_namespace(snapshot, config, now=now)


def collect_cluster(
    provider: SnapshotProvider,
    config: HealthConfig,
    workloads: Sequence[WorkloadSnapshot],
    *,
    now: datetime,
) -> NodeIssues:
    """Fetch nodes once and run the node analyzers.

    Raises the provider error when nodes cannot be listed.
    """
    logger.info("Collecting cluster-wide metrics")
    nodes = provider.list_nodes()
    try:
        node_usage = provider.fetch_node_usage()
    except RuntimeError as exc:
        logger.warning("Node usage metrics unavailable: %s", exc)
        node_usage = {}
    return NodeIssues(
        problematic_nodes=analyze_problematic_nodes(nodes, now=now),
        high_utilization_nodes=analyze_node_utilization(
            nodes,
            node_usage,
            count_scheduled_units(workloads),
            threshold=config.threshold_percent,
        ),
    )


async def collect_report_async(
    provider: SnapshotProvider,
    config: HealthConfig,
    *,
    now: datetime | None = None,
) -> HealthReport:
    """Collect all namespaces concurrently, then merge into one report.

    Merging happens in a single pass after every scope finished, in
    configured namespace order.
    """
    now = now or datetime.now(UTC)
    results = await asyncio.gather(
        *(
            asyncio.to_thread(collect_namespace, provider, ns, config, now=now)
            for ns in config.namespaces
        )
    )

    report = HealthReport()
    scheduled: list[WorkloadSnapshot] = []
    for result in results:
        if result.error is not None:
            report.record_skipped_scope(result.namespace, result.error)
            continue
        if result.workload_issues is not None:
            report.add_workload_issues(result.workload_issues)
        if result.batch_issues is not None:
            report.add_batch_issues(result.batch_issues)
        report.add_volume_issues(result.volume_issues)
        scheduled.extend(result.workloads)

    try:
        node_issues = await asyncio.to_thread(
            collect_cluster, provider, config, scheduled, now=now
        )
    except RuntimeError as exc:
        logger.error("Skipping cluster-wide checks: %s", exc)
        report.record_skipped_scope(CLUSTER_SCOPE, str(exc))
    else:
        report.add_node_issues(node_issues)
    return report


def collect_report(
    provider: SnapshotProvider,
    config: HealthConfig,
    *,
    now: datetime | None = None,
) -> HealthReport:
    """Synchronous wrapper around `collect_report_async`."""
    return asyncio.run(collect_report_async(provider, config, now=now))
