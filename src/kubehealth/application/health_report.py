"""Report aggregation across scopes."""

from dataclasses import dataclass, field, fields

from kubehealth.domain.issues import (
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


@dataclass(frozen=True)
class WorkloadIssues:
    """Workload analyzer output for one namespace."""

    heavy_usage: list[HeavyUsage] = field(default_factory=list)
    restarts: list[Restart] = field(default_factory=list)
    pending: list[Pending] = field(default_factory=list)
    failed: list[Failed] = field(default_factory=list)
    unready: list[Unready] = field(default_factory=list)
    oom_killed: list[OomKilled] = field(default_factory=list)


@dataclass(frozen=True)
class BatchIssues:
    """Batch analyzer output for one namespace."""

    failed_jobs: list[FailedJob] = field(default_factory=list)
    missed_schedules: list[MissedSchedule] = field(default_factory=list)


@dataclass(frozen=True)
class NodeIssues:
    """Cluster-wide node analyzer output."""

    problematic_nodes: list[ProblematicNode] = field(default_factory=list)
    high_utilization_nodes: list[NodeUtilization] = field(default_factory=list)


@dataclass(frozen=True)
class ReportSummary:
    """Issue counts per category."""

    heavy_usage_count: int = 0
    restart_count: int = 0
    pending_count: int = 0
    failed_pod_count: int = 0
    unready_count: int = 0
    oom_killed_count: int = 0
    failed_job_count: int = 0
    missed_schedule_count: int = 0
    volume_issue_count: int = 0
    problematic_node_count: int = 0
    high_util_node_count: int = 0

    @property
    def total_issues(self) -> int:
        """Return the sum of all counts."""
        return sum(getattr(self, f.name) for f in fields(self))

    def has_issues(self) -> bool:
        return self.total_issues > 0


@dataclass
class HealthReport:
    """Mutable accumulator filled once per scope during collection.

    Each ``add_*`` call appends; calling twice for a scope duplicates entries.
    """

    heavy_usage: list[HeavyUsage] = field(default_factory=list)
    restarts: list[Restart] = field(default_factory=list)
    pending: list[Pending] = field(default_factory=list)
    failed: list[Failed] = field(default_factory=list)
    unready: list[Unready] = field(default_factory=list)
    oom_killed: list[OomKilled] = field(default_factory=list)
    failed_jobs: list[FailedJob] = field(default_factory=list)
    missed_schedules: list[MissedSchedule] = field(default_factory=list)
    volume_issues: list[VolumeIssue] = field(default_factory=list)
    problematic_nodes: list[ProblematicNode] = field(default_factory=list)
    high_utilization_nodes: list[NodeUtilization] = field(default_factory=list)
    skipped_scopes: dict[str, str] = field(default_factory=dict)

    def add_workload_issues(self, issues: WorkloadIssues) -> None:
        self.heavy_usage.extend(issues.heavy_usage)
        self.restarts.extend(issues.restarts)
        self.pending.extend(issues.pending)
        self.failed.extend(issues.failed)
        self.unready.extend(issues.unready)
        self.oom_killed.extend(issues.oom_killed)

    def add_batch_issues(self, issues: BatchIssues) -> None:
        self.failed_jobs.extend(issues.failed_jobs)
        self.missed_schedules.extend(issues.missed_schedules)

    def add_volume_issues(self, issues: list[VolumeIssue]) -> None:
        self.volume_issues.extend(issues)

    def add_node_issues(self, issues: NodeIssues) -> None:
        self.problematic_nodes.extend(issues.problematic_nodes)
        self.high_utilization_nodes.extend(issues.high_utilization_nodes)

    def record_skipped_scope(self, scope: str, error: str) -> None:
        """Remember a scope whose snapshots could not be fetched."""
        self.skipped_scopes[scope] = error

    def categories(self) -> dict[str, list]:
        """Return issue lists keyed by category name, in report order."""
        return {
            "heavy_usage": self.heavy_usage,
            "restarts": self.restarts,
            "pending": self.pending,
            "failed": self.failed,
            "unready": self.unready,
            "oom_killed": self.oom_killed,
            "problematic_nodes": self.problematic_nodes,
            "high_utilization_nodes": self.high_utilization_nodes,
            "volume_issues": self.volume_issues,
            "failed_jobs": self.failed_jobs,
            "missed_schedules": self.missed_schedules,
        }

    def has_issues(self) -> bool:
        """Return whether any issue list is non-empty."""
        return any(self.categories().values())

    def summary(self) -> ReportSummary:
        return ReportSummary(
            heavy_usage_count=len(self.heavy_usage),
            restart_count=len(self.restarts),
            pending_count=len(self.pending),
            failed_pod_count=len(self.failed),
            unready_count=len(self.unready),
            oom_killed_count=len(self.oom_killed),
            failed_job_count=len(self.failed_jobs),
            missed_schedule_count=len(self.missed_schedules),
            volume_issue_count=len(self.volume_issues),
            problematic_node_count=len(self.problematic_nodes),
            high_util_node_count=len(self.high_utilization_nodes),
        )
