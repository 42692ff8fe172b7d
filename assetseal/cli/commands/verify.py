"""``assetseal verify MANIFEST`` — re-check sealed blobs against a manifest.

Always re-hashes every blob and checks its size.  With ``--decrypt`` it also
authenticates each blob under the key and checks that the inflated plaintext
has the recorded original size.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from assetseal.core import aead
from assetseal.core.blob_store import BlobStore
from assetseal.core.compressor import decompress
from assetseal.core.key_guardian import SecretKey, guarded_key
from assetseal.core.manifest import read_manifest
from assetseal.errors import AssetSealError, KeyProvisioningError
from assetseal.models.manifest import ManifestRecord

console = Console()


def _check_record(
    store: BlobStore, record: ManifestRecord, key: SecretKey | None
) -> str | None:
    """Return a problem description, or None if the record checks out."""
    name = record.obfuscated_name
    if not store.exists(name):
        return "missing"
    if not store.verify(name, record.checksum, record.size_bytes):
        return "checksum/size mismatch"
    if key is None:
        return None
    try:
        compressed = aead.decrypt(key.material, store.retrieve(name))
        plaintext = decompress(compressed)
    except AssetSealError as exc:
        return str(exc)
    if len(plaintext) != record.original_size_bytes:
        return "original size mismatch"
    return None


def verify_cmd(
    manifest_path: Path = typer.Argument(..., help="Manifest JSON to verify."),
    blobs: Path = typer.Option(
        Path("dist/assets"), "--blobs", "-b", help="Directory holding the blobs."
    ),
    key: Optional[Path] = typer.Option(
        None, "--key", "-k", help="Key file (required with --decrypt)."
    ),
    decrypt: bool = typer.Option(
        False, "--decrypt", help="Also authenticate and inflate every blob."
    ),
) -> None:
    """Verify every record in a manifest."""
    if not manifest_path.exists():
        console.print(f"[bold red]Manifest not found:[/bold red] {manifest_path}")
        raise typer.Exit(code=2)
    if decrypt and key is None:
        console.print("[bold red]--decrypt requires --key[/bold red]")
        raise typer.Exit(code=2)

    manifest = read_manifest(manifest_path)
    try:
        store = BlobStore(blobs, create=False)
    except FileNotFoundError as exc:
        console.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=2)

    table = Table(title=f"Manifest v{manifest.version} ({manifest.files_count} files)")
    table.add_column("CDN path", style="cyan")
    table.add_column("Original")
    table.add_column("Status", justify="center")

    problems = 0
    try:
        if decrypt:
            with guarded_key(key) as secret:
                results = [(r, _check_record(store, r, secret)) for r in manifest.files]
        else:
            results = [(r, _check_record(store, r, None)) for r in manifest.files]
    except KeyProvisioningError as exc:
        console.print(f"[bold red]Key error:[/bold red] {exc}")
        raise typer.Exit(code=2)

    for record, problem in results:
        if problem is None:
            status = "[green]OK[/green]"
        else:
            problems += 1
            status = f"[red]{problem}[/red]"
        table.add_row(record.cdn_path, record.original_name, status)

    console.print(table)
    if problems:
        console.print(f"[bold red]{problems} of {manifest.files_count} blobs failed verification[/bold red]")
        raise typer.Exit(code=1)
    console.print("[bold green]All blobs verified.[/bold green]")
