"""assetseal CLI — Typer-based command-line interface.

Provides the ``assetseal`` command with subcommands for sealing a batch of
assets, generating a key, verifying a manifest, and inspecting a blob.

All output uses Rich for formatted terminal display.
"""
