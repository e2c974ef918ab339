"""Parsers for Kubernetes resource quantity strings.

Both parsers return ``None`` for empty or unparseable input. Callers treat
``None`` as "unknown", never as zero.
"""

import math
import re

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_DECIMAL_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

# Binary suffixes are matched first so that "Ki" never falls through to "K".
_BINARY_UNITS: tuple[tuple[str, int], ...] = (
    ("Ki", 1024),
    ("Mi", 1024**2),
    ("Gi", 1024**3),
    ("Ti", 1024**4),
    ("Pi", 1024**5),
    ("Ei", 1024**6),
)
_DECIMAL_UNITS: tuple[tuple[str, int], ...] = (
    ("K", 1000),
    ("M", 1000**2),
    ("G", 1000**3),
    ("T", 1000**4),
    ("P", 1000**5),
    ("E", 1000**6),
    ("k", 1000),
)


def _parse_int(text: str) -> int | None:
    if not _INTEGER_RE.match(text):
        return None
    return int(text)


def _parse_float(text: str) -> float | None:
    if not _DECIMAL_RE.match(text):
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def _truncating_div(value: int, divisor: int) -> int:
    quotient = abs(value) // divisor
    return -quotient if value < 0 else quotient


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""
    magnitude = abs(value)
    whole = math.floor(magnitude)
    # magnitude - whole is exact for floats, unlike magnitude + 0.5
    rounded = whole + (1 if magnitude - whole >= 0.5 else 0)
    return -rounded if value < 0 else rounded


def parse_cpu(cpu_str: str | None) -> int | None:
    """Parse CPU quantity and return millicores."""
    if cpu_str is None:
        return None
    value = str(cpu_str).strip()
    if not value:
        return None

    if value.endswith("n"):
        nanos = _parse_int(value[:-1])
        return None if nanos is None else _truncating_div(nanos, 1_000_000)
    if value.endswith("u"):
        micros = _parse_int(value[:-1])
        return None if micros is None else _truncating_div(micros, 1_000)
    if value.endswith("m"):
        return _parse_int(value[:-1])

    cores = _parse_float(value)
    return None if cores is None else round_half_away(cores * 1000)


def parse_memory(memory_str: str | None) -> int | None:
    """Parse memory quantity and return bytes."""
    if memory_str is None:
        return None
    value = str(memory_str).strip()
    if not value:
        return None

    for suffix, multiplier in _BINARY_UNITS + _DECIMAL_UNITS:
        if not value.endswith(suffix):
            continue
        magnitude = _parse_float(value[: -len(suffix)])
        if magnitude is not None:
            return round_half_away(magnitude * multiplier)

    return _parse_int(value)


def format_millicores(millicores: int) -> str:
    """Format millicores as a Kubernetes quantity string."""
    return f"{millicores}m"
