"""Utilization percentages and threshold evaluation."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class UsageTotals:
    """Summed measured consumption for a workload or node."""

    cpu_millicores: int = 0
    memory_bytes: int = 0


@dataclass(frozen=True)
class RequestTotals:
    """Summed declared requests; ``None`` when nothing declares the resource."""

    cpu_millicores: int | None = None
    memory_bytes: int | None = None


class ThresholdSignal(str, Enum):
    """Signal that crossed the utilization threshold."""

    CPU = "cpu"
    MEMORY = "memory"
    PODS = "pods"


def percentage(used: int, total: int | None) -> float | None:
    """Return ``used / total * 100`` or ``None`` when total is unknown or not positive."""
    if total is None or total <= 0:
        return None
    return used / total * 100.0


def compute_utilization(
    usage: UsageTotals, requests: RequestTotals
) -> tuple[float | None, float | None]:
    """Return (cpu%, memory%) of usage against declared requests."""
    return (
        percentage(usage.cpu_millicores, requests.cpu_millicores),
        percentage(usage.memory_bytes, requests.memory_bytes),
    )


def exceeds_threshold(
    cpu_pct: float | None, mem_pct: float | None, threshold: float
) -> bool | None:
    """Return whether either percentage is strictly above threshold.

    ``None`` only when both percentages are undefined. An undefined
    component never counts as exceeding.
    """
    if cpu_pct is None and mem_pct is None:
        return None
    return (cpu_pct is not None and cpu_pct > threshold) or (
        mem_pct is not None and mem_pct > threshold
    )


def threshold_breaches(
    threshold: float,
    *,
    cpu_pct: float | None = None,
    mem_pct: float | None = None,
    pods_pct: float | None = None,
) -> tuple[ThresholdSignal, ...]:
    """Return the signals strictly above threshold, in cpu/memory/pods order."""
    signals = (
        (ThresholdSignal.CPU, cpu_pct),
        (ThresholdSignal.MEMORY, mem_pct),
        (ThresholdSignal.PODS, pods_pct),
    )
    return tuple(
        signal for signal, value in signals if value is not None and value > threshold
    )
