"""CLI entrypoint for kubehealth."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version
from pathlib import Path

import typer
from rich.console import Console

from kubehealth.application import execute_health_check
from kubehealth.logging_setup import setup_logging

app = typer.Typer(
    name="kubehealth",
    help="Kubernetes cluster health checks with Slack notifications",
    no_args_is_help=True,
    add_completion=False,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


def _resolve_version() -> str:
    """Return installed package version or local fallback."""
    try:
        return package_version("kubehealth")
    except PackageNotFoundError:
        return "0.1.0"


@app.callback()
def callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
    ),
) -> None:
    """Handle global CLI options."""
    if version:
        console.print(f"kubehealth {_resolve_version()}")
        raise typer.Exit(code=0)
    if ctx.invoked_subcommand is None:
        raise typer.Exit(code=0)


def _handle_error(exc: Exception) -> None:
    """Convert domain exceptions to CLI exit codes."""
    if isinstance(exc, ValueError):
        console.print(f"[red]ERROR:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    if isinstance(exc, RuntimeError):
        console.print(f"[red]ERROR:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    raise exc


@app.command("check")
def check_command(
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Collect and render the report without sending to Slack.",
    ),
    report: str | None = typer.Option(
        None,
        "--report",
        "-r",
        help=(
            "Persist report files under this directory. "
            "If omitted, prints stdout preview only."
        ),
    ),
    env_file: Path = typer.Option(
        Path(".env"),
        "--env-file",
        help="Optional dotenv file loaded before reading the environment.",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to LOG_LEVEL or INFO).",
    ),
) -> None:
    """Check monitored namespaces and nodes, then notify Slack on issues.

    Prints rich preview by default; use `--report/-r` to persist artifacts.
    """
    setup_logging(log_level)
    try:
        result = execute_health_check(
            dry_run=dry_run,
            reports_root=report,
            env_path=env_file,
            console=console,
        )
        if result.run is not None:
            console.print(f"[green]Run:[/green] {result.run.output_dir}")
            console.print(f"[green]Manifest:[/green] {result.run.manifest_path}")
    except (ValueError, RuntimeError) as exc:
        _handle_error(exc)


def main() -> None:
    """Project entrypoint for `kubehealth` script."""
    app()


if __name__ == "__main__":
    main()
