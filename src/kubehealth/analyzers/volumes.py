"""Volume analyzer."""

from collections.abc import Iterable

from kubehealth.domain.issues import MOUNT_FAILURE, VolumeIssue
from kubehealth.domain.snapshots import WorkloadSnapshot

_MOUNT_MARKERS = ("Mount", "Volume")


def analyze_volume_issues(workloads: Iterable[WorkloadSnapshot]) -> list[VolumeIssue]:
    """Report containers waiting on a mount or volume related reason."""
    issues: list[VolumeIssue] = []
    for workload in workloads:
        if not workload.name:
            continue
        for status in workload.container_statuses:
            waiting = status.waiting
            if waiting is None or not waiting.reason:
                continue
            if not any(marker in waiting.reason for marker in _MOUNT_MARKERS):
                continue
            issues.append(
                VolumeIssue(
                    namespace=workload.namespace,
                    pod=workload.name,
                    volume_name=f"container-{status.name}",
                    issue_kind=MOUNT_FAILURE,
                    message=(
                        waiting.message
                        if waiting.message is not None
                        else waiting.reason
                    ),
                )
            )
    return issues
