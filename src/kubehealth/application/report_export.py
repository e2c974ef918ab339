"""Flatten issue records into table rows and CSV files."""

from collections.abc import Sequence
from dataclasses import fields, is_dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

import pandas as pd

from kubehealth.application.health_report import HealthReport


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return "; ".join(str(_cell(v)) for v in value)
    if isinstance(value, float):
        return round(value, 1)
    return value


def issue_row(issue: Any) -> dict[str, Any]:
    """Return one issue record as a flat dict of printable cells."""
    if not is_dataclass(issue):
        raise TypeError(f"Expected an issue record, got {type(issue).__name__}")
    row = {f.name: _cell(getattr(issue, f.name)) for f in fields(issue)}
    density = getattr(issue, "density_pct", None)
    if density is not None:
        row["density_pct"] = _cell(density)
    return row


def issue_rows(issues: Sequence[Any]) -> list[dict[str, Any]]:
    return [issue_row(issue) for issue in issues]


def export_issue_csvs(report: HealthReport, output_dir: Path) -> tuple[Path, ...]:
    """Write `<category>.csv` for every non-empty category.

    Returns
    -------
    tuple[Path, ...]
        Written files, in report category order.
    """
    written: list[Path] = []
    for category, issues in report.categories().items():
        if not issues:
            continue
        path = output_dir / f"{category}.csv"
        pd.DataFrame(issue_rows(issues)).to_csv(path, index=False)
        written.append(path)
    return tuple(written)
