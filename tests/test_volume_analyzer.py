"""Tests for the volume analyzer."""

from kubehealth.analyzers.volumes import analyze_volume_issues
from kubehealth.domain.issues import MOUNT_FAILURE
from kubehealth.domain.snapshots import (
    ContainerStatusSnapshot,
    WaitingState,
    WorkloadSnapshot,
)


def _workload(*statuses: ContainerStatusSnapshot) -> WorkloadSnapshot:
    return WorkloadSnapshot(name="db-0", namespace="data", container_statuses=statuses)


def test_mount_failures_reported() -> None:
    workload = _workload(
        ContainerStatusSnapshot(
            name="postgres",
            waiting=WaitingState(reason="FailedMount", message="pvc not bound"),
        ),
        ContainerStatusSnapshot(
            name="init", waiting=WaitingState(reason="VolumeAttachTimeout")
        ),
    )
    issues = analyze_volume_issues([workload])
    assert [i.volume_name for i in issues] == ["container-postgres", "container-init"]
    assert issues[0].issue_kind == MOUNT_FAILURE
    assert issues[0].message == "pvc not bound"
    assert issues[1].message == "VolumeAttachTimeout"


def test_other_waiting_reasons_ignored() -> None:
    workload = _workload(
        ContainerStatusSnapshot(
            name="app", waiting=WaitingState(reason="CrashLoopBackOff")
        ),
        ContainerStatusSnapshot(name="idle"),
    )
    assert analyze_volume_issues([workload]) == []
