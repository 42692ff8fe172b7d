"""``assetseal seal INPUT...`` — compress, encrypt, and name a batch of assets.

Exit codes: 0 when every file was sealed (or none were found), 1 when some
files failed, 2 when the key could not be provisioned.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from assetseal.config import SealConfig
from assetseal.core.discovery import discover_many
from assetseal.core.pipeline import SealPipeline
from assetseal.errors import KeyProvisioningError
from assetseal.models.reports import RunReport

console = Console()

EXIT_PARTIAL_FAILURE = 1
EXIT_FATAL = 2


def _print_report(report: RunReport) -> None:
    if report.total == 0:
        console.print("[dim]No input files found. Nothing was sealed.[/dim]")
        return

    table = Table(title=f"Run {report.run_id}")
    table.add_column("Original", style="cyan")
    table.add_column("CDN path", style="green")
    table.add_column("Size", justify="right")
    table.add_column("Sealed", justify="right")
    for record in report.manifest.files:
        table.add_row(
            record.original_name,
            record.cdn_path,
            str(record.original_size_bytes),
            str(record.size_bytes),
        )
    for failure in report.failure_report.failures:
        table.add_row(
            failure.original_name,
            f"[red]failed during {failure.stage.value}[/red]",
            "-",
            "-",
        )
    console.print(table)

    colour = "green" if report.ok else "yellow"
    console.print(
        f"[bold {colour}]{report.succeeded} succeeded, {report.failed} failed[/bold {colour}]"
    )
    if report.manifest_path:
        console.print(f"[bold]Manifest:[/bold] {report.manifest_path}")
    if report.failure_report_path:
        console.print(f"[bold]Failures:[/bold] {report.failure_report_path}")


def seal_cmd(
    inputs: list[Path] = typer.Argument(
        ...,
        help="Files or directories to seal.",
    ),
    key: Optional[Path] = typer.Option(
        None, "--key", "-k", help="Path to the 32-byte key file."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Directory the encrypted blobs are written to."
    ),
    manifest: Optional[Path] = typer.Option(
        None, "--manifest", "-m", help="Where to write the manifest JSON."
    ),
    failures: Optional[Path] = typer.Option(
        None, "--failures", help="Where to write the failure report JSON."
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Number of worker threads."
    ),
    pattern: list[str] = typer.Option(
        ["*"], "--pattern", "-p", help="Glob pattern(s) for files inside directories."
    ),
    recursive: bool = typer.Option(
        True, "--recursive/--no-recursive", help="Descend into subdirectories."
    ),
) -> None:
    """Seal every matching file and write the manifest."""
    overrides = {
        "key_path": key,
        "output_dir": output,
        "manifest_path": manifest,
        "failure_report_path": failures,
        "workers": workers,
    }
    config = SealConfig(**{k: v for k, v in overrides.items() if v is not None})

    try:
        sources = discover_many(
            inputs, pattern, recursive=recursive, exclude=config.excluded_paths
        )
    except FileNotFoundError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=EXIT_FATAL)

    pipeline = SealPipeline(config)
    try:
        report = pipeline.run(sources)
    except KeyProvisioningError as exc:
        console.print(f"[bold red]Key error:[/bold red] {exc}")
        console.print("[dim]No files were processed.[/dim]")
        raise typer.Exit(code=EXIT_FATAL)

    _print_report(report)
    if not report.ok:
        raise typer.Exit(code=EXIT_PARTIAL_FAILURE)
