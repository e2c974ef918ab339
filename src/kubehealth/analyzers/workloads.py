"""Workload (pod) analyzers.

Every analyzer is pure: it receives snapshots, policy values and a single
captured ``now`` and returns fresh issue records. Workloads without a name
are skipped.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta

from kubehealth.domain.issues import (
    Failed,
    HeavyUsage,
    OomKilled,
    Pending,
    Restart,
    Unready,
)
from kubehealth.domain.snapshots import (
    TerminatedWithTime,
    TerminatedWithoutTime,
    Waiting,
    WorkloadSnapshot,
)
from kubehealth.domain.utilization import (
    UsageTotals,
    compute_utilization,
    exceeds_threshold,
)

PHASE_PENDING = "Pending"
PHASE_FAILED = "Failed"
PHASE_RUNNING = "Running"
OOM_KILLED = "OOMKilled"


def _named(workloads: Iterable[WorkloadSnapshot]) -> Iterable[WorkloadSnapshot]:
    return (w for w in workloads if w.name)


def workload_since(workload: WorkloadSnapshot, now: datetime) -> datetime:
    """Return workload start time, or ``now`` when it is unknown."""
    return workload.start_time or now


def elapsed_minutes(since: datetime, now: datetime) -> int:
    """Return whole minutes elapsed, truncated toward zero."""
    seconds = (now - since).total_seconds()
    minutes = int(abs(seconds) // 60)
    return -minutes if seconds < 0 else minutes


def restart_cutoff(
    workload: WorkloadSnapshot, *, grace_minutes: int, now: datetime
) -> datetime:
    """Return the instant before which restarts count as startup noise."""
    return workload_since(workload, now) + timedelta(minutes=grace_minutes)


def is_over_grace(
    workload: WorkloadSnapshot, phase: str, *, grace_minutes: int, now: datetime
) -> bool:
    """Return whether workload is in phase for strictly longer than grace."""
    if workload.phase != phase:
        return False
    return now - workload_since(workload, now) > timedelta(minutes=grace_minutes)


def is_ready(workload: WorkloadSnapshot) -> bool:
    return any(c.type == "Ready" and c.status == "True" for c in workload.conditions)


def failed_conditions(workload: WorkloadSnapshot) -> tuple[str, ...]:
    """Format every False condition as ``"<type>: <message>"``."""
    return tuple(
        f"{c.type}: {c.message if c.message is not None else 'Unknown'}"
        for c in workload.conditions
        if c.status == "False"
    )


def analyze_heavy_usage(
    workloads: Iterable[WorkloadSnapshot],
    usage_by_name: Mapping[str, UsageTotals],
    *,
    threshold: float,
) -> list[HeavyUsage]:
    """Report workloads whose usage exceeds threshold percent of requests.

    Workloads without a usage sample, or without any declared request,
    are never reported.
    """
    heavy: list[HeavyUsage] = []
    for workload in _named(workloads):
        usage = usage_by_name.get(workload.name)
        if usage is None:
            continue
        cpu_pct, mem_pct = compute_utilization(usage, workload.requested_totals())
        if exceeds_threshold(cpu_pct, mem_pct, threshold):
            heavy.append(
                HeavyUsage(
                    namespace=workload.namespace,
                    name=workload.name,
                    cpu_pct=cpu_pct,
                    mem_pct=mem_pct,
                )
            )
    return heavy


def analyze_restarts(
    workloads: Iterable[WorkloadSnapshot],
    *,
    grace_minutes: int,
    now: datetime,
) -> list[Restart]:
    """Report restarted containers whose last restart falls after the grace cutoff.

    Containers without a known restart time are reported once the
    workload itself is past the cutoff.
    """
    restarts: list[Restart] = []
    for workload in _named(workloads):
        cutoff = restart_cutoff(workload, grace_minutes=grace_minutes, now=now)
        for status in workload.container_statuses:
            if status.restart_count <= 0:
                continue
            evidence = status.restart_evidence()
            last_time: datetime | None = None
            reason = message = None
            exit_code: int | None = None
            if isinstance(evidence, TerminatedWithTime):
                last_time = evidence.finished_at
                reason, message = evidence.reason, evidence.message
                exit_code = evidence.exit_code
            elif isinstance(evidence, TerminatedWithoutTime):
                reason, message = evidence.reason, evidence.message
                exit_code = evidence.exit_code
            elif isinstance(evidence, Waiting):
                reason, message = evidence.reason, evidence.message

            include = last_time > cutoff if last_time is not None else now > cutoff
            if include:
                restarts.append(
                    Restart(
                        namespace=workload.namespace,
                        pod=workload.name,
                        container=status.name,
                        last_time=last_time,
                        reason=reason,
                        message=message,
                        exit_code=exit_code,
                    )
                )
    return restarts


def analyze_pending(
    workloads: Iterable[WorkloadSnapshot],
    *,
    grace_minutes: int,
    now: datetime,
) -> list[Pending]:
    """Report workloads pending for longer than grace."""
    return [
        Pending(
            namespace=w.namespace,
            pod=w.name,
            since=workload_since(w, now),
            duration_minutes=elapsed_minutes(workload_since(w, now), now),
        )
        for w in _named(workloads)
        if is_over_grace(w, PHASE_PENDING, grace_minutes=grace_minutes, now=now)
    ]


def analyze_failed(
    workloads: Iterable[WorkloadSnapshot],
    *,
    grace_minutes: int,
    now: datetime,
) -> list[Failed]:
    """Report workloads failed for longer than grace."""
    return [
        Failed(
            namespace=w.namespace,
            pod=w.name,
            since=workload_since(w, now),
            duration_minutes=elapsed_minutes(workload_since(w, now), now),
            reason=w.reason,
            message=w.message,
        )
        for w in _named(workloads)
        if is_over_grace(w, PHASE_FAILED, grace_minutes=grace_minutes, now=now)
    ]


def analyze_unready(
    workloads: Iterable[WorkloadSnapshot],
    *,
    grace_minutes: int,
    now: datetime,
) -> list[Unready]:
    """Report running workloads that are not Ready for longer than grace."""
    unready: list[Unready] = []
    for workload in _named(workloads):
        if is_ready(workload):
            continue
        if not is_over_grace(
            workload, PHASE_RUNNING, grace_minutes=grace_minutes, now=now
        ):
            continue
        since = workload_since(workload, now)
        unready.append(
            Unready(
                namespace=workload.namespace,
                pod=workload.name,
                since=since,
                duration_minutes=elapsed_minutes(since, now),
                failed_conditions=failed_conditions(workload),
            )
        )
    return unready


def analyze_oom_killed(
    workloads: Iterable[WorkloadSnapshot],
    *,
    grace_minutes: int,
    now: datetime,
) -> list[OomKilled]:
    """Report containers whose last termination was OOMKilled after the cutoff."""
    oom_killed: list[OomKilled] = []
    for workload in _named(workloads):
        cutoff = restart_cutoff(workload, grace_minutes=grace_minutes, now=now)
        for status in workload.container_statuses:
            term = status.last_terminated
            if term is None or term.reason != OOM_KILLED:
                continue
            if term.finished_at is not None:
                include = term.finished_at > cutoff
            else:
                include = now > cutoff
            if include:
                oom_killed.append(
                    OomKilled(
                        namespace=workload.namespace,
                        pod=workload.name,
                        container=status.name,
                        last_oom_time=term.finished_at,
                        restart_count=status.restart_count,
                    )
                )
    return oom_killed
