"""Shared kubectl execution helpers."""

import json
import shlex
import subprocess
from typing import Any, cast


class KubectlError(RuntimeError):
    """Raised when kubectl command execution fails."""


def _run_kubectl(
    command: str, *, append_json_output: bool, context: str | None = None
) -> subprocess.CompletedProcess[str]:
    args = ["kubectl"]
    if context:
        args.extend(["--context", context])
    args.extend(shlex.split(command))
    if append_json_output:
        args.extend(["-o", "json"])
    try:
        return subprocess.run(
            args,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as exc:
        raise KubectlError("kubectl executable not found in PATH") from exc
    except subprocess.CalledProcessError as exc:
        stderr = exc.stderr.strip() if exc.stderr else str(exc)
        raise KubectlError(f"kubectl command failed: {stderr}") from exc


def kubectl_json(
    command: str, *, append_json_output: bool = True, context: str | None = None
) -> dict[str, Any]:
    """Execute kubectl command and parse JSON output."""
    result = _run_kubectl(
        command, append_json_output=append_json_output, context=context
    )
    try:
        return cast(dict[str, Any], json.loads(result.stdout) if result.stdout else {})
    except json.JSONDecodeError as exc:
        raise KubectlError(f"kubectl returned invalid JSON: {exc}") from exc


def kubectl_raw_json(path: str, *, context: str | None = None) -> dict[str, Any]:
    """GET a raw API path (e.g. metrics.k8s.io) through kubectl."""
    return kubectl_json(
        f"get --raw {shlex.quote(path)}", append_json_output=False, context=context
    )


def kubectl_items(command: str, *, context: str | None = None) -> list[dict[str, Any]]:
    """Execute a kubectl list command and return its items."""
    return list(kubectl_json(command, context=context).get("items") or [])
