"""Issue records emitted by the analyzers.

All records are immutable and created fresh on every run.
"""

from dataclasses import dataclass
from datetime import datetime

from kubehealth.domain.utilization import ThresholdSignal

MOUNT_FAILURE = "MountFailure"


@dataclass(frozen=True)
class HeavyUsage:
    """Workload consuming more than the threshold of its requests."""

    namespace: str
    name: str
    cpu_pct: float | None
    mem_pct: float | None


@dataclass(frozen=True)
class Restart:
    """Container restart observed after the startup grace period."""

    namespace: str
    pod: str
    container: str
    last_time: datetime | None = None
    reason: str | None = None
    message: str | None = None
    exit_code: int | None = None


@dataclass(frozen=True)
class Pending:
    """Workload stuck in the Pending phase beyond grace."""

    namespace: str
    pod: str
    since: datetime
    duration_minutes: int


@dataclass(frozen=True)
class Failed:
    """Workload in the Failed phase beyond grace."""

    namespace: str
    pod: str
    since: datetime
    duration_minutes: int
    reason: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class Unready:
    """Running workload without a true Ready condition beyond grace."""

    namespace: str
    pod: str
    since: datetime
    duration_minutes: int
    failed_conditions: tuple[str, ...] = ()


@dataclass(frozen=True)
class OomKilled:
    """Container whose last termination was an OOM kill."""

    namespace: str
    pod: str
    container: str
    last_oom_time: datetime | None
    restart_count: int


@dataclass(frozen=True)
class ProblematicNode:
    """Node that is not ready or reports resource pressure."""

    name: str
    conditions: tuple[str, ...]
    since: datetime


@dataclass(frozen=True)
class NodeUtilization:
    """Node above the utilization threshold on at least one signal."""

    name: str
    cpu_pct: float | None
    mem_pct: float | None
    unit_count: int
    unit_capacity: int
    breaches: tuple[ThresholdSignal, ...] = ()

    @property
    def density_pct(self) -> float | None:
        """Return scheduled pods as a percentage of pod capacity."""
        if self.unit_capacity <= 0:
            return None
        return self.unit_count / self.unit_capacity * 100.0


@dataclass(frozen=True)
class VolumeIssue:
    """Volume problem surfaced through a container status."""

    namespace: str
    pod: str
    volume_name: str
    issue_kind: str
    message: str


@dataclass(frozen=True)
class FailedJob:
    """Batch job carrying a true Failed condition beyond grace."""

    namespace: str
    job: str
    failed_count: int
    last_failure_time: datetime | None = None
    reason: str | None = None


@dataclass(frozen=True)
class MissedSchedule:
    """Recurring job that appears to have missed scheduled runs."""

    namespace: str
    name: str
    last_schedule_time: datetime
    missed_count: int
