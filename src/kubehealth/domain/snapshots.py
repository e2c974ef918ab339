"""Typed snapshots of Kubernetes objects consumed by the analyzers.

Each snapshot is built from the JSON shape returned by the Kubernetes API
(`kubectl get ... -o json` items). Missing fields map to ``None`` or empty
collections; constructors never raise on partial objects.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from kubehealth.domain.quantity_parser import parse_cpu, parse_memory
from kubehealth.domain.utilization import RequestTotals, UsageTotals


def parse_timestamp(raw: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp into an aware UTC datetime."""
    if not raw or not isinstance(raw, str):
        return None
    try:
        parsed = datetime.fromisoformat(raw.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def _name_of(obj: Mapping[str, Any]) -> str:
    return str((obj.get("metadata") or {}).get("name") or "")


def _int_or(raw: Any, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Condition:
    """Status condition shared by pods, nodes and jobs."""

    type: str
    status: str
    reason: str | None = None
    message: str | None = None
    last_transition_time: datetime | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Condition:
        return cls(
            type=str(raw.get("type") or ""),
            status=str(raw.get("status") or ""),
            reason=raw.get("reason"),
            message=raw.get("message"),
            last_transition_time=parse_timestamp(raw.get("lastTransitionTime")),
        )


def _conditions(status: Mapping[str, Any]) -> tuple[Condition, ...]:
    return tuple(Condition.from_dict(c) for c in status.get("conditions") or [])


def find_condition(conditions: Iterable[Condition], type_: str) -> Condition | None:
    """Return the first condition of the given type."""
    return next((c for c in conditions if c.type == type_), None)


# Restart evidence: what a container status says about its last restart.


@dataclass(frozen=True)
class NoLastState:
    """Container has neither a terminated last state nor a waiting state."""


@dataclass(frozen=True)
class TerminatedWithTime:
    """Last state is terminated and carries a finish time."""

    finished_at: datetime
    reason: str | None = None
    message: str | None = None
    exit_code: int | None = None


@dataclass(frozen=True)
class TerminatedWithoutTime:
    """Last state is terminated but the finish time is unknown."""

    reason: str | None = None
    message: str | None = None
    exit_code: int | None = None


@dataclass(frozen=True)
class Waiting:
    """No terminated last state; the container is currently waiting."""

    reason: str | None = None
    message: str | None = None


RestartEvidence = NoLastState | TerminatedWithTime | TerminatedWithoutTime | Waiting


@dataclass(frozen=True)
class TerminatedState:
    """Terminated container state as reported by the kubelet."""

    reason: str | None = None
    message: str | None = None
    exit_code: int | None = None
    finished_at: datetime | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> TerminatedState:
        exit_code = raw.get("exitCode")
        return cls(
            reason=raw.get("reason"),
            message=raw.get("message"),
            exit_code=_int_or(exit_code, 0) if exit_code is not None else None,
            finished_at=parse_timestamp(raw.get("finishedAt")),
        )


@dataclass(frozen=True)
class WaitingState:
    """Waiting container state (CrashLoopBackOff, ContainerCreating, ...)."""

    reason: str | None = None
    message: str | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> WaitingState:
        return cls(reason=raw.get("reason"), message=raw.get("message"))


@dataclass(frozen=True)
class ContainerStatusSnapshot:
    """Runtime status of one container."""

    name: str
    restart_count: int = 0
    waiting: WaitingState | None = None
    last_terminated: TerminatedState | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> ContainerStatusSnapshot:
        state = raw.get("state") or {}
        last_state = raw.get("lastState") or {}
        waiting = state.get("waiting")
        terminated = last_state.get("terminated")
        return cls(
            name=str(raw.get("name") or ""),
            restart_count=_int_or(raw.get("restartCount"), 0),
            waiting=WaitingState.from_dict(waiting) if waiting is not None else None,
            last_terminated=(
                TerminatedState.from_dict(terminated) if terminated is not None else None
            ),
        )

    def restart_evidence(self) -> RestartEvidence:
        """Resolve restart evidence: last terminated state, then waiting state."""
        term = self.last_terminated
        if term is not None:
            if term.finished_at is not None:
                return TerminatedWithTime(
                    finished_at=term.finished_at,
                    reason=term.reason,
                    message=term.message,
                    exit_code=term.exit_code,
                )
            return TerminatedWithoutTime(
                reason=term.reason, message=term.message, exit_code=term.exit_code
            )
        if self.waiting is not None:
            return Waiting(reason=self.waiting.reason, message=self.waiting.message)
        return NoLastState()


@dataclass(frozen=True)
class ContainerSpecSnapshot:
    """Declared container resources as raw quantity strings."""

    name: str
    requests: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> ContainerSpecSnapshot:
        resources = raw.get("resources") or {}
        requests = resources.get("requests") or {}
        return cls(
            name=str(raw.get("name") or ""),
            requests={str(k): str(v) for k, v in requests.items()},
        )


@dataclass(frozen=True)
class WorkloadSnapshot:
    """Point-in-time view of a pod."""

    name: str
    namespace: str
    phase: str = ""
    start_time: datetime | None = None
    node_name: str | None = None
    reason: str | None = None
    message: str | None = None
    conditions: tuple[Condition, ...] = ()
    containers: tuple[ContainerSpecSnapshot, ...] = ()
    container_statuses: tuple[ContainerStatusSnapshot, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> WorkloadSnapshot:
        metadata = raw.get("metadata") or {}
        spec = raw.get("spec") or {}
        status = raw.get("status") or {}
        start_time = parse_timestamp(status.get("startTime")) or parse_timestamp(
            metadata.get("creationTimestamp")
        )
        return cls(
            name=_name_of(raw),
            namespace=str(metadata.get("namespace") or ""),
            phase=str(status.get("phase") or ""),
            start_time=start_time,
            node_name=spec.get("nodeName"),
            reason=status.get("reason"),
            message=status.get("message"),
            conditions=_conditions(status),
            containers=tuple(
                ContainerSpecSnapshot.from_dict(c) for c in spec.get("containers") or []
            ),
            container_statuses=tuple(
                ContainerStatusSnapshot.from_dict(c)
                for c in status.get("containerStatuses") or []
            ),
        )

    def requested_totals(self) -> RequestTotals:
        """Sum declared requests across containers.

        A resource no container declares (or declares unparseably) stays
        ``None`` rather than zero.
        """
        cpu_values = [parse_cpu(c.requests.get("cpu")) for c in self.containers]
        mem_values = [parse_memory(c.requests.get("memory")) for c in self.containers]
        cpu_known = [v for v in cpu_values if v is not None]
        mem_known = [v for v in mem_values if v is not None]
        return RequestTotals(
            cpu_millicores=sum(cpu_known) if cpu_known else None,
            memory_bytes=sum(mem_known) if mem_known else None,
        )


@dataclass(frozen=True)
class NodeSnapshot:
    """Point-in-time view of a node."""

    name: str
    conditions: tuple[Condition, ...] = ()
    capacity: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> NodeSnapshot:
        status = raw.get("status") or {}
        capacity = status.get("capacity") or {}
        return cls(
            name=_name_of(raw),
            conditions=_conditions(status),
            capacity={str(k): str(v) for k, v in capacity.items()},
        )

    @property
    def pod_capacity(self) -> int:
        """Return pod capacity, 0 when absent or not an integer."""
        return _int_or(self.capacity.get("pods"), 0)


@dataclass(frozen=True)
class JobSnapshot:
    """Point-in-time view of a batch job."""

    name: str
    namespace: str
    creation_time: datetime | None = None
    failed: int = 0
    conditions: tuple[Condition, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> JobSnapshot:
        metadata = raw.get("metadata") or {}
        status = raw.get("status") or {}
        return cls(
            name=_name_of(raw),
            namespace=str(metadata.get("namespace") or ""),
            creation_time=parse_timestamp(metadata.get("creationTimestamp")),
            failed=_int_or(status.get("failed"), 0),
            conditions=_conditions(status),
        )


@dataclass(frozen=True)
class CronJobSnapshot:
    """Point-in-time view of a recurring job."""

    name: str
    namespace: str
    last_schedule_time: datetime | None = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> CronJobSnapshot:
        metadata = raw.get("metadata") or {}
        status = raw.get("status") or {}
        return cls(
            name=_name_of(raw),
            namespace=str(metadata.get("namespace") or ""),
            last_schedule_time=parse_timestamp(status.get("lastScheduleTime")),
        )


def _usage_from(usage: Mapping[str, Any]) -> UsageTotals:
    cpu = parse_cpu(usage.get("cpu")) or 0
    memory = parse_memory(usage.get("memory")) or 0
    return UsageTotals(cpu_millicores=max(cpu, 0), memory_bytes=max(memory, 0))


def build_usage_map(items: Iterable[Mapping[str, Any]]) -> dict[str, UsageTotals]:
    """Sum container usage of `PodMetrics` items by pod name."""
    usage_by_pod: dict[str, UsageTotals] = {}
    for item in items:
        name = _name_of(item)
        if not name:
            continue
        cpu_total = 0
        memory_total = 0
        for container in item.get("containers") or []:
            totals = _usage_from(container.get("usage") or {})
            cpu_total += totals.cpu_millicores
            memory_total += totals.memory_bytes
        usage_by_pod[name] = UsageTotals(
            cpu_millicores=cpu_total, memory_bytes=memory_total
        )
    return usage_by_pod


def build_node_usage_map(
    items: Iterable[Mapping[str, Any]],
) -> dict[str, dict[str, str]]:
    """Map `NodeMetrics` items to their raw usage quantities by node name."""
    usage_by_node: dict[str, dict[str, str]] = {}
    for item in items:
        name = _name_of(item)
        if name:
            usage = item.get("usage") or {}
            usage_by_node[name] = {str(k): str(v) for k, v in usage.items()}
    return usage_by_node
