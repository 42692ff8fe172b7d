"""Runtime configuration — env-driven.

Centralized config using pydantic-settings for environment variable
support.  Reads from a .env file and ASSETSEAL_* environment variables;
CLI options override both.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from assetseal.models.manifest import CDN_PREFIX, FORMAT_VERSION, MANIFEST_VERSION


class SealConfig(BaseSettings):
    """Settings for one sealing run.

    Examples
    --------
    Override via environment::

        export ASSETSEAL_KEY_PATH=/run/secrets/cdn.key
        export ASSETSEAL_OUTPUT_DIR=dist/assets
        export ASSETSEAL_WORKERS=4

    Or via .env file::

        ASSETSEAL_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ASSETSEAL_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"

    # Key provisioning
    key_path: Path = Path("keys/asset.key")

    # Outputs
    output_dir: Path = Path("dist/assets")
    manifest_path: Path = Path("dist/manifest.json")
    failure_report_path: Path = Path("dist/failures.json")
    write_empty_manifest: bool = False

    # Format
    cdn_prefix: str = CDN_PREFIX
    manifest_version: str = MANIFEST_VERSION
    format_version: int = FORMAT_VERSION
    compression_level: int = Field(default=9, ge=0, le=9)

    # Execution
    workers: int = Field(default=1, ge=1)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def excluded_paths(self) -> list[Path]:
        """Paths input discovery must never pick up.

        The key file and everything a run writes.
        """
        return [
            self.output_dir,
            self.key_path,
            self.manifest_path,
            self.failure_report_path,
        ]
