"""Tests for the kubectl-backed snapshot provider."""

from unittest.mock import patch

from kubehealth.domain.utilization import UsageTotals
from kubehealth.infrastructure.cluster_provider import KubectlSnapshotProvider

_MODULE = "kubehealth.infrastructure.cluster_provider"


def test_list_workloads_parses_items() -> None:
    items = [{"metadata": {"name": "api", "namespace": "prod"}, "status": {}}]
    with patch(f"{_MODULE}.kubectl_items", return_value=items) as items_mock:
        workloads = KubectlSnapshotProvider(context="ctx").list_workloads("prod")
    assert [w.name for w in workloads] == ["api"]
    items_mock.assert_called_once_with("get pods -n prod", context="ctx")


def test_fetch_workload_usage_reads_metrics_api() -> None:
    payload = {
        "items": [
            {"metadata": {"name": "api"}, "containers": [{"usage": {"cpu": "5m"}}]}
        ]
    }
    with patch(f"{_MODULE}.kubectl_raw_json", return_value=payload) as raw:
        usage = KubectlSnapshotProvider().fetch_workload_usage("prod")
    assert usage == {"api": UsageTotals(cpu_millicores=5)}
    raw.assert_called_once_with(
        "/apis/metrics.k8s.io/v1beta1/namespaces/prod/pods", context=None
    )


def test_fetch_node_usage() -> None:
    payload = {"items": [{"metadata": {"name": "n1"}, "usage": {"cpu": "1"}}]}
    with patch(f"{_MODULE}.kubectl_raw_json", return_value=payload):
        assert KubectlSnapshotProvider().fetch_node_usage() == {"n1": {"cpu": "1"}}
