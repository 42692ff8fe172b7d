"""Manifest Aggregator — collects per-file records into one manifest.

Records keep the order files were processed in.  Failed files go to a
separate failure list and never appear in the manifest.  Once ``build()``
has been called the aggregator is sealed and refuses further records.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from assetseal.errors import ManifestSealedError
from assetseal.models.manifest import (
    MANIFEST_VERSION,
    FailureRecord,
    FailureReport,
    Manifest,
    ManifestRecord,
)

logger = logging.getLogger(__name__)


class ManifestAggregator:
    """Accumulates records for one run.

    Parameters
    ----------
    version:
        Manifest-level version string.
    """

    def __init__(self, version: str = MANIFEST_VERSION) -> None:
        self.version = version
        self._records: list[ManifestRecord] = []
        self._failures: list[FailureRecord] = []
        self._lock = threading.Lock()
        self._manifest: Manifest | None = None

    @property
    def sealed(self) -> bool:
        return self._manifest is not None

    def _check_open(self) -> None:
        if self._manifest is not None:
            raise ManifestSealedError("Manifest already built; no more records accepted")

    # ------------------------------------------------------------------
    # Accumulate
    # ------------------------------------------------------------------

    def add(self, record: ManifestRecord) -> None:
        with self._lock:
            self._check_open()
            self._records.append(record)

    def add_failure(self, failure: FailureRecord) -> None:
        with self._lock:
            self._check_open()
            self._failures.append(failure)

    def merge(
        self, results: Iterable[tuple[int, ManifestRecord | FailureRecord]]
    ) -> None:
        """Append results from parallel workers in submission order.

        Each item is ``(submission_index, record_or_failure)``.
        """
        ordered = sorted(results, key=lambda item: item[0])
        with self._lock:
            self._check_open()
            for _, item in ordered:
                if isinstance(item, ManifestRecord):
                    self._records.append(item)
                else:
                    self._failures.append(item)

    @property
    def records(self) -> list[ManifestRecord]:
        with self._lock:
            return list(self._records)

    @property
    def failures(self) -> list[FailureRecord]:
        with self._lock:
            return list(self._failures)

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def build(self, generated_at: datetime | None = None) -> Manifest:
        """Produce the manifest and seal the aggregator.

        Calling ``build()`` again returns the same manifest.
        """
        with self._lock:
            if self._manifest is None:
                self._manifest = Manifest(
                    version=self.version,
                    generated_at=generated_at or datetime.now(timezone.utc),
                    files_count=len(self._records),
                    files=tuple(self._records),
                )
                logger.info(
                    "Manifest built: %d files, %d failures excluded",
                    len(self._records),
                    len(self._failures),
                )
            return self._manifest

    def build_failure_report(self) -> FailureReport:
        with self._lock:
            return FailureReport(
                failures_count=len(self._failures),
                failures=tuple(self._failures),
            )


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def _write_json(data: dict, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp")
    tmp.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    tmp.replace(path)
    return path


def write_manifest(manifest: Manifest, path: Path | str) -> Path:
    """Serialize the manifest to JSON at *path*."""
    out = _write_json(manifest.model_dump(mode="json"), Path(path))
    logger.info("Wrote manifest with %d files to %s", manifest.files_count, out)
    return out


def read_manifest(path: Path | str) -> Manifest:
    """Load and validate a manifest written by :func:`write_manifest`."""
    return Manifest.model_validate_json(Path(path).read_bytes())


def write_failure_report(report: FailureReport, path: Path | str) -> Path:
    out = _write_json(report.model_dump(mode="json"), Path(path))
    logger.info("Wrote failure report with %d entries to %s", report.failures_count, out)
    return out


def read_failure_report(path: Path | str) -> FailureReport:
    return FailureReport.model_validate_json(Path(path).read_bytes())
