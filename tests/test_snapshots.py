"""Tests for snapshot parsing from Kubernetes JSON objects."""

from __future__ import annotations

from datetime import UTC, datetime

from kubehealth.domain.snapshots import (
    ContainerStatusSnapshot,
    CronJobSnapshot,
    JobSnapshot,
    NodeSnapshot,
    NoLastState,
    TerminatedWithoutTime,
    TerminatedWithTime,
    Waiting,
    WorkloadSnapshot,
    build_node_usage_map,
    build_usage_map,
    parse_timestamp,
)
from kubehealth.domain.utilization import UsageTotals


def _pod() -> dict:
    return {
        "metadata": {
            "name": "api-7f9",
            "namespace": "prod",
            "creationTimestamp": "2024-01-01T09:00:00Z",
        },
        "spec": {
            "nodeName": "node-a",
            "containers": [
                {"name": "api", "resources": {"requests": {"cpu": "200m"}}},
                {
                    "name": "sidecar",
                    "resources": {"requests": {"cpu": "50m", "memory": "64Mi"}},
                },
            ],
        },
        "status": {
            "phase": "Running",
            "startTime": "2024-01-01T10:00:00Z",
            "conditions": [
                {"type": "Ready", "status": "False", "message": "containers not ready"}
            ],
            "containerStatuses": [
                {
                    "name": "api",
                    "restartCount": 3,
                    "state": {"waiting": {"reason": "CrashLoopBackOff"}},
                    "lastState": {
                        "terminated": {
                            "reason": "Error",
                            "exitCode": 1,
                            "finishedAt": "2024-01-01T10:20:00Z",
                        }
                    },
                }
            ],
        },
    }


def test_parse_timestamp() -> None:
    assert parse_timestamp("2024-01-01T10:00:00Z") == datetime(
        2024, 1, 1, 10, 0, tzinfo=UTC
    )
    assert parse_timestamp("not a time") is None
    assert parse_timestamp(None) is None


def test_workload_from_dict() -> None:
    workload = WorkloadSnapshot.from_dict(_pod())
    assert workload.name == "api-7f9"
    assert workload.namespace == "prod"
    assert workload.phase == "Running"
    assert workload.node_name == "node-a"
    assert workload.start_time == datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
    assert workload.conditions[0].status == "False"
    assert workload.container_statuses[0].restart_count == 3


def test_workload_start_time_falls_back_to_creation() -> None:
    raw = _pod()
    del raw["status"]["startTime"]
    workload = WorkloadSnapshot.from_dict(raw)
    assert workload.start_time == datetime(2024, 1, 1, 9, 0, tzinfo=UTC)


def test_requested_totals_sums_declared_values_only() -> None:
    totals = WorkloadSnapshot.from_dict(_pod()).requested_totals()
    assert totals.cpu_millicores == 250
    assert totals.memory_bytes == 64 * 1024 * 1024


def test_requested_totals_without_requests_is_none() -> None:
    workload = WorkloadSnapshot(name="w", namespace="ns")
    totals = workload.requested_totals()
    assert totals.cpu_millicores is None
    assert totals.memory_bytes is None


def test_restart_evidence_prefers_terminated_state() -> None:
    status = WorkloadSnapshot.from_dict(_pod()).container_statuses[0]
    evidence = status.restart_evidence()
    assert isinstance(evidence, TerminatedWithTime)
    assert evidence.reason == "Error"
    assert evidence.exit_code == 1


def test_restart_evidence_variants() -> None:
    no_time = ContainerStatusSnapshot.from_dict(
        {"name": "c", "lastState": {"terminated": {"reason": "Error"}}}
    )
    waiting = ContainerStatusSnapshot.from_dict(
        {"name": "c", "state": {"waiting": {"reason": "ImagePullBackOff"}}}
    )
    nothing = ContainerStatusSnapshot.from_dict({"name": "c"})
    assert isinstance(no_time.restart_evidence(), TerminatedWithoutTime)
    assert waiting.restart_evidence() == Waiting(reason="ImagePullBackOff")
    assert nothing.restart_evidence() == NoLastState()


def test_node_from_dict() -> None:
    node = NodeSnapshot.from_dict(
        {
            "metadata": {"name": "node-a"},
            "status": {
                "capacity": {"cpu": "4", "memory": "16Gi", "pods": "110"},
                "conditions": [{"type": "Ready", "status": "True"}],
            },
        }
    )
    assert node.pod_capacity == 110
    assert node.capacity["memory"] == "16Gi"


def test_node_pod_capacity_defaults_to_zero() -> None:
    assert NodeSnapshot(name="n", capacity={"pods": "many"}).pod_capacity == 0


def test_job_and_cronjob_from_dict() -> None:
    job = JobSnapshot.from_dict(
        {
            "metadata": {
                "name": "backup",
                "namespace": "ops",
                "creationTimestamp": "2024-01-01T00:00:00Z",
            },
            "status": {"failed": 2, "conditions": [{"type": "Failed", "status": "True"}]},
        }
    )
    cronjob = CronJobSnapshot.from_dict(
        {"metadata": {"name": "nightly", "namespace": "ops"}, "status": {}}
    )
    assert job.failed == 2
    assert job.conditions[0].type == "Failed"
    assert cronjob.last_schedule_time is None


def test_build_usage_map_sums_containers() -> None:
    usage = build_usage_map(
        [
            {
                "metadata": {"name": "api"},
                "containers": [
                    {"usage": {"cpu": "150000000n", "memory": "100Mi"}},
                    {"usage": {"cpu": "50m", "memory": "garbage"}},
                ],
            },
            {"metadata": {}, "containers": []},
        ]
    )
    assert usage == {
        "api": UsageTotals(cpu_millicores=200, memory_bytes=100 * 1024 * 1024)
    }


def test_build_node_usage_map_keeps_raw_quantities() -> None:
    usage = build_node_usage_map(
        [{"metadata": {"name": "node-a"}, "usage": {"cpu": "1500m", "memory": "2Gi"}}]
    )
    assert usage == {"node-a": {"cpu": "1500m", "memory": "2Gi"}}
