"""``assetseal inspect BLOB`` — show the layout of a sealed blob."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from assetseal.core import aead
from assetseal.core.hasher import hash_file
from assetseal.errors import BlobFormatError

console = Console()


def inspect_cmd(
    blob_path: Path = typer.Argument(..., help="Path to a .bin blob."),
) -> None:
    """Print nonce, tag, and ciphertext length without decrypting."""
    if not blob_path.is_file():
        console.print(f"[bold red]Blob not found:[/bold red] {blob_path}")
        raise typer.Exit(code=1)

    try:
        payload = aead.split_blob(blob_path.read_bytes())
    except BlobFormatError as exc:
        console.print(f"[bold red]Not a sealed blob:[/bold red] {exc}")
        raise typer.Exit(code=1)

    console.print(
        Panel(
            "\n".join([
                f"[bold]Nonce:[/bold]       {payload.nonce.hex()}",
                f"[bold]Ciphertext:[/bold]  {len(payload.ciphertext)} bytes",
                f"[bold]Tag:[/bold]         {payload.tag.hex()}",
                f"[bold]Total:[/bold]       {payload.blob_size} bytes",
                f"[bold]SHA-256:[/bold]     {hash_file(blob_path)}",
            ]),
            title=f"[bold]{blob_path.name}[/bold]",
            border_style="cyan",
            padding=(1, 2),
        )
    )
