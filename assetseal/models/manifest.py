"""Manifest and failure-report models (all frozen)."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, model_validator

from assetseal.models.stages import TransformStage

MANIFEST_VERSION = "1.0"
FORMAT_VERSION = 1
CDN_PREFIX = "assets/"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ManifestRecord(BaseModel):
    """One successfully sealed asset.

    ``cdn_path`` is ``"assets/" + obfuscated_name``; ``checksum`` is the
    SHA-256 of the encrypted blob, not of the plaintext.
    """

    model_config = ConfigDict(frozen=True)

    original_name: str
    cdn_path: str
    checksum: str = Field(pattern=r"^[0-9a-f]{64}$")
    size_bytes: int = Field(ge=0)
    original_size_bytes: int = Field(ge=0)
    version: int = FORMAT_VERSION
    encrypted_at: datetime = Field(default_factory=_utcnow)

    @property
    def obfuscated_name(self) -> str:
        return self.cdn_path.rsplit("/", 1)[-1]


class Manifest(BaseModel):
    """The write-once summary of a run.  Lists usable assets only."""

    model_config = ConfigDict(frozen=True)

    version: str = MANIFEST_VERSION
    generated_at: datetime = Field(default_factory=_utcnow)
    files_count: int = 0
    files: tuple[ManifestRecord, ...] = ()

    @model_validator(mode="after")
    def _count_matches(self) -> Manifest:
        if self.files_count != len(self.files):
            raise ValueError(
                f"files_count={self.files_count} but {len(self.files)} records present"
            )
        return self


class FailureRecord(BaseModel):
    """One file that did not make it into the manifest."""

    model_config = ConfigDict(frozen=True)

    original_name: str
    source_path: str
    stage: TransformStage
    error: str
    failed_at: datetime = Field(default_factory=_utcnow)


class FailureReport(BaseModel):
    """Machine-readable list of failures, written beside the manifest."""

    model_config = ConfigDict(frozen=True)

    generated_at: datetime = Field(default_factory=_utcnow)
    failures_count: int = 0
    failures: tuple[FailureRecord, ...] = ()

    @model_validator(mode="after")
    def _count_matches(self) -> FailureReport:
        if self.failures_count != len(self.failures):
            raise ValueError(
                f"failures_count={self.failures_count} but "
                f"{len(self.failures)} failures present"
            )
        return self
