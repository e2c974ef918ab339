"""Run configuration and environment loading."""

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from dotenv import load_dotenv

DEFAULT_THRESHOLD_PERCENT = 85.0
DEFAULT_GRACE_MINUTES = 5
_TRUTHY = frozenset({"1", "true", "TRUE", "True"})


class ConfigError(ValueError):
    """Raised when required settings are missing or invalid."""


class EnvironmentProvider(Protocol):
    """Key-value lookup used to read settings."""

    def get_var(self, key: str) -> str | None: ...


class SystemEnvironment:
    """Environment provider backed by the process environment."""

    def get_var(self, key: str) -> str | None:
        return os.environ.get(key)


class MappingEnvironment:
    """Environment provider backed by an in-memory mapping."""

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    def with_var(self, key: str, value: str) -> "MappingEnvironment":
        """Return a copy with one more variable set."""
        return MappingEnvironment({**self._values, key: value})

    def get_var(self, key: str) -> str | None:
        return self._values.get(key)


@dataclass(frozen=True)
class HealthConfig:
    """Immutable policy for one health-check run."""

    namespaces: tuple[str, ...]
    threshold_percent: float = DEFAULT_THRESHOLD_PERCENT
    restart_grace_minutes: int = DEFAULT_GRACE_MINUTES
    pending_grace_minutes: int = DEFAULT_GRACE_MINUTES
    cluster_name: str | None = None
    datacenter_name: str | None = None
    fail_if_no_metrics: bool = True
    slack_webhook_url: str | None = None
    kube_context: str | None = None

    @property
    def has_slack(self) -> bool:
        """Return whether Slack delivery is configured."""
        return bool(self.slack_webhook_url)

    @property
    def title(self) -> str:
        """Return report title including cluster/datacenter labels."""
        base = "Kubernetes Health Report"
        if self.cluster_name and self.datacenter_name:
            return f"{base} - {self.cluster_name} ({self.datacenter_name})"
        label = self.cluster_name or self.datacenter_name
        return f"{base} - {label}" if label else base


def _optional(env: EnvironmentProvider, key: str) -> str | None:
    value = env.get_var(key)
    if value is None:
        return None
    return value.strip() or None


def _parse_namespaces(raw: str | None) -> tuple[str, ...]:
    namespaces = tuple(ns.strip() for ns in (raw or "").split(",") if ns.strip())
    if not namespaces:
        raise ConfigError("NAMESPACES env var must be set (comma-separated)")
    return namespaces


def _parse_threshold(raw: str | None) -> float:
    if raw is None:
        return DEFAULT_THRESHOLD_PERCENT
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"Invalid THRESHOLD_PERCENT: {raw!r}") from exc
    if not math.isfinite(value):
        raise ConfigError(f"Invalid THRESHOLD_PERCENT: {raw!r} is not finite")
    return value


def _parse_grace(env: EnvironmentProvider, key: str) -> int:
    raw = env.get_var(key)
    try:
        value = int(raw) if raw is not None else DEFAULT_GRACE_MINUTES
    except ValueError:
        value = DEFAULT_GRACE_MINUTES
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {value}")
    return value


def load_config(
    env: EnvironmentProvider | None = None,
    *,
    env_path: Path = Path(".env"),
    require_webhook: bool = True,
) -> HealthConfig:
    """Load config from an environment provider.

    Without an explicit provider, an optional .env file is loaded into the
    process environment (never overriding) and the process environment is read.
    """
    if env is None:
        load_dotenv(env_path, override=False)
        env = SystemEnvironment()

    namespaces = _parse_namespaces(env.get_var("NAMESPACES"))
    threshold = _parse_threshold(env.get_var("THRESHOLD_PERCENT"))
    webhook = _optional(env, "SLACK_WEBHOOK_URL")
    if require_webhook and not webhook:
        raise ConfigError("SLACK_WEBHOOK_URL must be provided")

    fail_raw = env.get_var("FAIL_IF_NO_METRICS")
    return HealthConfig(
        namespaces=namespaces,
        threshold_percent=threshold,
        restart_grace_minutes=_parse_grace(env, "RESTART_GRACE_MINUTES"),
        pending_grace_minutes=_parse_grace(env, "PENDING_GRACE_MINUTES"),
        cluster_name=_optional(env, "CLUSTER_NAME"),
        datacenter_name=_optional(env, "DATACENTER_NAME"),
        fail_if_no_metrics=fail_raw in _TRUTHY if fail_raw is not None else True,
        slack_webhook_url=webhook,
        kube_context=_optional(env, "KUBE_CONTEXT"),
    )
