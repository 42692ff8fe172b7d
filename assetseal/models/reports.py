"""Run report — the outcome of one batch."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from assetseal.models.manifest import FailureReport, Manifest


class RunReport(BaseModel):
    """Counts and artifacts produced by ``SealPipeline.run``."""

    model_config = ConfigDict(frozen=True)

    run_id: str
    manifest: Manifest
    failure_report: FailureReport
    manifest_path: Path | None = None
    failure_report_path: Path | None = None

    @property
    def succeeded(self) -> int:
        return self.manifest.files_count

    @property
    def failed(self) -> int:
        return self.failure_report.failures_count

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    @property
    def ok(self) -> bool:
        """True when no file failed (an empty batch counts as ok)."""
        return self.failed == 0
