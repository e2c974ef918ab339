"""In-memory snapshot provider used across tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from kubehealth.domain.snapshots import (
    CronJobSnapshot,
    JobSnapshot,
    NodeSnapshot,
    WorkloadSnapshot,
)
from kubehealth.domain.utilization import UsageTotals
from kubehealth.infrastructure.kubectl_client import KubectlError

NOW = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


@dataclass
class FakeProvider:
    """Snapshot provider serving canned data; listed scopes fail on demand."""

    workloads: dict[str, list[WorkloadSnapshot]] = field(default_factory=dict)
    jobs: dict[str, list[JobSnapshot]] = field(default_factory=dict)
    cronjobs: dict[str, list[CronJobSnapshot]] = field(default_factory=dict)
    usage: dict[str, dict[str, UsageTotals]] = field(default_factory=dict)
    nodes: list[NodeSnapshot] = field(default_factory=list)
    node_usage: dict[str, dict[str, str]] = field(default_factory=dict)
    failing_namespaces: set[str] = field(default_factory=set)
    metrics_down: bool = False
    nodes_down: bool = False

    def list_workloads(self, namespace: str) -> list[WorkloadSnapshot]:
        if namespace in self.failing_namespaces:
            raise KubectlError(f"forbidden: {namespace}")
        return self.workloads.get(namespace, [])

    def list_nodes(self) -> list[NodeSnapshot]:
        if self.nodes_down:
            raise KubectlError("nodes is forbidden")
        return self.nodes

    def list_jobs(self, namespace: str) -> list[JobSnapshot]:
        return self.jobs.get(namespace, [])

    def list_recurring_jobs(self, namespace: str) -> list[CronJobSnapshot]:
        return self.cronjobs.get(namespace, [])

    def fetch_workload_usage(self, namespace: str) -> dict[str, UsageTotals]:
        if self.metrics_down:
            raise KubectlError("metrics.k8s.io not served")
        return self.usage.get(namespace, {})

    def fetch_node_usage(self) -> dict[str, dict[str, str]]:
        if self.metrics_down:
            raise KubectlError("metrics.k8s.io not served")
        return self.node_usage

