"""Main Typer application — imports and registers all CLI commands.

Entry point: ``assetseal`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from assetseal.cli.commands.inspect_cmd import inspect_cmd
from assetseal.cli.commands.keygen import keygen_cmd
from assetseal.cli.commands.seal import seal_cmd
from assetseal.cli.commands.verify import verify_cmd
from assetseal.config import SealConfig

app = typer.Typer(
    name="assetseal",
    help="assetseal: compress, encrypt, and content-address assets for CDN delivery.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="seal", help="Seal files into encrypted blobs and write a manifest.")(seal_cmd)
app.command(name="keygen", help="Generate a new 32-byte key file.")(keygen_cmd)
app.command(name="verify", help="Verify blobs against a manifest.")(verify_cmd)
app.command(name="inspect", help="Show the layout of a sealed blob.")(inspect_cmd)


def configure_logging(level: str) -> None:
    """Route assetseal loggers through Rich at *level*."""
    handler = RichHandler(show_path=False, rich_tracebacks=False)
    root = logging.getLogger("assetseal")
    root.handlers[:] = [handler]
    root.setLevel(level.upper())
    root.propagate = False


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        "-L",
        help="Logging level (defaults to ASSETSEAL_LOG_LEVEL or INFO).",
    ),
) -> None:
    """assetseal command-line interface."""
    configure_logging(log_level or SealConfig().log_level)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
