"""Run directory, summary.md and manifest.json for persisted health checks."""

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

CAPABILITY = "health-check"


@dataclass(frozen=True)
class RunResult:
    """Paths produced by a persisted health-check run."""

    run_id: str
    capability: str
    output_dir: Path
    manifest_path: Path
    summary_path: Path
    output_files: tuple[Path, ...]


@dataclass(frozen=True)
class RunContext:
    """Context of an in-progress run."""

    run_id: str
    capability: str
    output_dir: Path
    started_at: str
    inputs: dict[str, Any]


@dataclass(frozen=True)
class SummaryContent:
    """Data rendered into summary.md."""

    title: str
    counts: dict[str, int] = field(default_factory=dict)
    skipped_scopes: dict[str, str] = field(default_factory=dict)
    notes: list[str] = field(default_factory=list)
    inputs: dict[str, Any] | None = None


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


def create_run(
    inputs: dict[str, Any],
    *,
    reports_root: str | Path = "reports",
    capability: str = CAPABILITY,
) -> RunContext:
    """Create `<reports_root>/<capability>/<run_id>/` and return its context."""
    while True:
        run_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        output_dir = Path(reports_root) / capability / run_id
        try:
            output_dir.mkdir(parents=True, exist_ok=False)
        except FileExistsError:
            continue
        break
    return RunContext(
        run_id=run_id,
        capability=capability,
        output_dir=output_dir,
        started_at=_utc_now_iso(),
        inputs=inputs,
    )


def build_summary_lines(
    content: SummaryContent, output_files: tuple[Path, ...]
) -> list[str]:
    """Build summary markdown: inputs, issue counts, skipped scopes, artifacts."""
    inputs = content.inputs or {}
    lines = [f"# {content.title}", "", "## Inputs"]
    if inputs:
        lines.extend(f"- `{key}`: `{inputs[key]}`" for key in sorted(inputs))
    else:
        lines.append("- (none)")

    total = sum(content.counts.values())
    lines.extend(["", "## Issues", f"- `total`: `{total}`"])
    lines.extend(f"- `{name}`: `{count}`" for name, count in content.counts.items())

    lines.extend(["", "## Skipped Scopes"])
    if content.skipped_scopes:
        lines.extend(
            f"- `{scope}`: {error}" for scope, error in content.skipped_scopes.items()
        )
    else:
        lines.append("- None.")

    lines.extend(["", "## Artifacts"])
    if output_files:
        lines.extend(f"- `{p.name}`" for p in output_files)
    else:
        lines.append("- (none)")

    if content.notes:
        lines.extend(["", "## Notes"])
        lines.extend(f"- {note}" for note in content.notes)
    return lines


def finalize_run(
    ctx: RunContext,
    *,
    status: str,
    output_files: tuple[Path, ...],
    summary: SummaryContent,
    error: str | None = None,
) -> RunResult:
    """Write summary.md and manifest.json and return run result."""
    summary_path = ctx.output_dir / "summary.md"
    summary_lines = build_summary_lines(summary, output_files)
    summary_path.write_text("\n".join(summary_lines) + "\n", encoding="utf-8")

    manifest_path = ctx.output_dir / "manifest.json"
    all_outputs = tuple(output_files) + (summary_path,)
    manifest_payload = {
        "run_id": ctx.run_id,
        "capability": ctx.capability,
        "started_at": ctx.started_at,
        "finished_at": _utc_now_iso(),
        "status": status,
        "inputs": ctx.inputs,
        "issue_counts": summary.counts,
        "skipped_scopes": summary.skipped_scopes,
        "outputs": [str(p.relative_to(ctx.output_dir)) for p in all_outputs]
        + ["manifest.json"],
        "error": error,
    }
    manifest_path.write_text(
        json.dumps(manifest_payload, ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )

    return RunResult(
        run_id=ctx.run_id,
        capability=ctx.capability,
        output_dir=ctx.output_dir,
        manifest_path=manifest_path,
        summary_path=summary_path,
        output_files=all_outputs + (manifest_path,),
    )
