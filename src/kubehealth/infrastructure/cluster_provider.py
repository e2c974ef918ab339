"""Cluster snapshot provider backed by kubectl."""

import logging
import shlex

from kubehealth.domain.snapshots import (
    CronJobSnapshot,
    JobSnapshot,
    NodeSnapshot,
    WorkloadSnapshot,
    build_node_usage_map,
    build_usage_map,
)
from kubehealth.domain.utilization import UsageTotals
from kubehealth.infrastructure.kubectl_client import kubectl_items, kubectl_raw_json

logger = logging.getLogger(__name__)

_METRICS_API = "/apis/metrics.k8s.io/v1beta1"


class KubectlSnapshotProvider:
    """List objects and usage samples through the kubectl CLI.

    Every method raises `KubectlError` when kubectl fails.
    """

    def __init__(self, context: str | None = None) -> None:
        self.context = context

    def _items(self, command: str) -> list[dict]:
        logger.debug("kubectl %s", command)
        return kubectl_items(command, context=self.context)

    def list_workloads(self, namespace: str) -> list[WorkloadSnapshot]:
        items = self._items(f"get pods -n {shlex.quote(namespace)}")
        return [WorkloadSnapshot.from_dict(item) for item in items]

    def list_nodes(self) -> list[NodeSnapshot]:
        return [NodeSnapshot.from_dict(item) for item in self._items("get nodes")]

    def list_jobs(self, namespace: str) -> list[JobSnapshot]:
        items = self._items(f"get jobs -n {shlex.quote(namespace)}")
        return [JobSnapshot.from_dict(item) for item in items]

    def list_recurring_jobs(self, namespace: str) -> list[CronJobSnapshot]:
        items = self._items(f"get cronjobs -n {shlex.quote(namespace)}")
        return [CronJobSnapshot.from_dict(item) for item in items]

    def fetch_workload_usage(self, namespace: str) -> dict[str, UsageTotals]:
        payload = kubectl_raw_json(
            f"{_METRICS_API}/namespaces/{namespace}/pods", context=self.context
        )
        return build_usage_map(payload.get("items") or [])

    def fetch_node_usage(self) -> dict[str, dict[str, str]]:
        payload = kubectl_raw_json(f"{_METRICS_API}/nodes", context=self.context)
        return build_node_usage_map(payload.get("items") or [])
