"""Shared fixtures."""

from __future__ import annotations

from datetime import timedelta

import pytest
from fakes import NOW, FakeProvider

from kubehealth.domain.snapshots import (
    Condition,
    JobSnapshot,
    NodeSnapshot,
    WorkloadSnapshot,
)


@pytest.fixture
def unhealthy_provider() -> FakeProvider:
    """Two namespaces with a pending pod, a failed job and a NotReady node."""
    pending = WorkloadSnapshot(
        name="worker-1",
        namespace="prod",
        phase="Pending",
        start_time=NOW - timedelta(minutes=30),
        node_name="node-a",
    )
    healthy = WorkloadSnapshot(
        name="api-1",
        namespace="staging",
        phase="Running",
        start_time=NOW - timedelta(hours=2),
        node_name="node-a",
        conditions=(Condition(type="Ready", status="True"),),
    )
    failed_job = JobSnapshot(
        name="backup",
        namespace="staging",
        creation_time=NOW - timedelta(hours=1),
        failed=1,
        conditions=(
            Condition(type="Failed", status="True", reason="DeadlineExceeded"),
        ),
    )
    node = NodeSnapshot(
        name="node-a",
        conditions=(Condition(type="Ready", status="False"),),
        capacity={"cpu": "4", "memory": "8Gi", "pods": "110"},
    )
    return FakeProvider(
        workloads={"prod": [pending], "staging": [healthy]},
        jobs={"staging": [failed_job]},
        nodes=[node],
    )
