"""Tests for kubectl helper functions."""

from __future__ import annotations

import json
import subprocess
from unittest.mock import patch

import pytest

from kubehealth.infrastructure.kubectl_client import (
    KubectlError,
    kubectl_items,
    kubectl_json,
    kubectl_raw_json,
)

_RUN = "kubehealth.infrastructure.kubectl_client.subprocess.run"


def _completed(stdout: str) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(
        args=["kubectl"], returncode=0, stdout=stdout, stderr=""
    )


def test_kubectl_json_success() -> None:
    with patch(_RUN, return_value=_completed(json.dumps({"items": []}))) as run:
        assert kubectl_json("get pods -n prod") == {"items": []}
    expected = ["kubectl", "get", "pods", "-n", "prod", "-o", "json"]
    assert run.call_args.args[0] == expected


def test_kubectl_json_with_context() -> None:
    with patch(_RUN, return_value=_completed("{}")) as run:
        kubectl_json("get nodes", context="staging")
    assert run.call_args.args[0][:3] == ["kubectl", "--context", "staging"]


def test_kubectl_raw_json_skips_output_flag() -> None:
    path = "/apis/metrics.k8s.io/v1beta1/nodes"
    with patch(_RUN, return_value=_completed('{"items": [1]}')) as run:
        assert kubectl_raw_json(path) == {"items": [1]}
    assert run.call_args.args[0] == ["kubectl", "get", "--raw", path]


def test_kubectl_items_missing_items() -> None:
    with patch(_RUN, return_value=_completed("{}")):
        assert kubectl_items("get jobs -n ops") == []


def test_kubectl_json_invalid_json() -> None:
    with (
        patch(_RUN, return_value=_completed("{invalid}")),
        pytest.raises(KubectlError),
    ):
        kubectl_json("get pods")


def test_kubectl_command_failure() -> None:
    with (
        patch(
            _RUN,
            side_effect=subprocess.CalledProcessError(
                1,
                ["kubectl", "get", "pods"],
                stderr="cluster unavailable",
            ),
        ),
        pytest.raises(KubectlError, match="cluster unavailable"),
    ):
        kubectl_json("get pods")


def test_kubectl_missing_binary() -> None:
    with (
        patch(_RUN, side_effect=FileNotFoundError("kubectl")),
        pytest.raises(KubectlError, match="not found"),
    ):
        kubectl_json("get pods")
