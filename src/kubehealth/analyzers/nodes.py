"""Node analyzers."""

from collections import Counter
from collections.abc import Iterable, Mapping
from datetime import datetime

from kubehealth.domain.issues import NodeUtilization, ProblematicNode
from kubehealth.domain.quantity_parser import parse_cpu, parse_memory
from kubehealth.domain.snapshots import NodeSnapshot, WorkloadSnapshot, find_condition
from kubehealth.domain.utilization import percentage, threshold_breaches

NOT_READY = "NotReady"
PRESSURE_CONDITIONS = frozenset({"MemoryPressure", "DiskPressure", "PIDPressure"})


def problematic_conditions(node: NodeSnapshot) -> tuple[str, ...]:
    """Return NotReady / pressure markers in condition order."""
    markers: list[str] = []
    for condition in node.conditions:
        if condition.type == "Ready" and condition.status != "True":
            markers.append(NOT_READY)
        elif condition.type in PRESSURE_CONDITIONS and condition.status == "True":
            markers.append(condition.type)
    return tuple(markers)


def analyze_problematic_nodes(
    nodes: Iterable[NodeSnapshot], *, now: datetime
) -> list[ProblematicNode]:
    """Report nodes with at least one problematic condition."""
    problematic: list[ProblematicNode] = []
    for node in nodes:
        if not node.name:
            continue
        markers = problematic_conditions(node)
        if not markers:
            continue
        ready = find_condition(node.conditions, "Ready")
        since = ready.last_transition_time if ready is not None else None
        problematic.append(
            ProblematicNode(name=node.name, conditions=markers, since=since or now)
        )
    return problematic


def count_scheduled_units(workloads: Iterable[WorkloadSnapshot]) -> dict[str, int]:
    """Count workloads per node name; unscheduled workloads are ignored."""
    return dict(Counter(w.node_name for w in workloads if w.node_name))


def node_utilization(
    node: NodeSnapshot, usage: Mapping[str, str] | None
) -> tuple[float | None, float | None]:
    """Return (cpu%, memory%) of node usage against node capacity."""
    if usage is None:
        return None, None
    cpu_usage = parse_cpu(usage.get("cpu"))
    mem_usage = parse_memory(usage.get("memory"))
    cpu_pct = (
        percentage(cpu_usage, parse_cpu(node.capacity.get("cpu")))
        if cpu_usage is not None
        else None
    )
    mem_pct = (
        percentage(mem_usage, parse_memory(node.capacity.get("memory")))
        if mem_usage is not None
        else None
    )
    return cpu_pct, mem_pct


def analyze_node_utilization(
    nodes: Iterable[NodeSnapshot],
    usage_by_node: Mapping[str, Mapping[str, str]],
    scheduled_units: Mapping[str, int],
    *,
    threshold: float,
) -> list[NodeUtilization]:
    """Report nodes above threshold on CPU, memory or pod density.

    Pod density only counts workloads from the monitored namespaces, as
    provided in ``scheduled_units``.
    """
    high: list[NodeUtilization] = []
    for node in nodes:
        if not node.name:
            continue
        cpu_pct, mem_pct = node_utilization(node, usage_by_node.get(node.name))
        unit_count = scheduled_units.get(node.name, 0)
        unit_capacity = node.pod_capacity
        breaches = threshold_breaches(
            threshold,
            cpu_pct=cpu_pct,
            mem_pct=mem_pct,
            pods_pct=percentage(unit_count, unit_capacity),
        )
        if breaches:
            high.append(
                NodeUtilization(
                    name=node.name,
                    cpu_pct=cpu_pct,
                    mem_pct=mem_pct,
                    unit_count=unit_count,
                    unit_capacity=unit_capacity,
                    breaches=breaches,
                )
            )
    return high
