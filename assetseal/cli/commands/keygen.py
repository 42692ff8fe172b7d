"""``assetseal keygen PATH`` — write a fresh 32-byte key file."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from assetseal.core import key_guardian
from assetseal.errors import KeyProvisioningError

console = Console()


def keygen_cmd(
    path: Path = typer.Argument(..., help="Where to write the key file."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing key file."
    ),
) -> None:
    """Generate a random AES-256 key with owner-only permissions."""
    try:
        written = key_guardian.generate(path, overwrite=force)
    except KeyProvisioningError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=1)
    console.print(f"[bold green]Key written:[/bold green] {written}")
    console.print("[dim]Distribute it to the consuming application out of band.[/dim]")
