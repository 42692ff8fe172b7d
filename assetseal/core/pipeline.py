"""Batch pipeline — the central coordinator for a sealing run.

The SealPipeline wires together the Key Guardian, BlobStore,
AssetTransformer, and ManifestAggregator into a single run:

1. Load and validate the key.  Failure here is fatal and no file is tried.
2. Seal each input, sequentially or on a thread pool.
3. Merge results in submission order.
4. Erase the key (exactly once, after every worker is done).
5. Write the manifest and, if anything failed, the failure report.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path

from assetseal.config import SealConfig
from assetseal.core import key_guardian
from assetseal.core.aead import NonceRegistry
from assetseal.core.blob_store import BlobStore
from assetseal.core.key_guardian import SecretKey
from assetseal.core.manifest import (
    ManifestAggregator,
    write_failure_report,
    write_manifest,
)
from assetseal.core.transformer import AssetTransformer
from assetseal.errors import AssetTransformError
from assetseal.models.manifest import FailureRecord, ManifestRecord
from assetseal.models.reports import RunReport
from assetseal.models.stages import TransformStage

logger = logging.getLogger(__name__)

Outcome = tuple[int, ManifestRecord | FailureRecord]


def _failure_from(source: Path, exc: AssetTransformError) -> FailureRecord:
    return FailureRecord(
        original_name=source.name,
        source_path=str(source),
        stage=TransformStage(exc.stage),
        error=f"{type(exc.cause).__name__}: {exc.cause}",
    )


class SealPipeline:
    """Runs one batch of files through the transformer.

    Parameters
    ----------
    config:
        Run settings.  Uses environment-derived defaults if not provided.
    run_id:
        Identifier used in log lines.  Generated if None.
    """

    def __init__(
        self,
        config: SealConfig | None = None,
        run_id: str | None = None,
    ) -> None:
        self.config = config or SealConfig()
        ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        self.run_id = run_id or f"seal-{ts}-{uuid.uuid4().hex[:4]}"
        self.nonces: NonceRegistry | None = None
        self.aggregator: ManifestAggregator | None = None
        self._key: SecretKey | None = None

    @property
    def key(self) -> SecretKey | None:
        """The key handle of the current or last run (test inspection)."""
        return self._key

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def run(self, sources: Sequence[Path | str]) -> RunReport:
        """Seal *sources* and return the run report.

        Raises
        ------
        KeyProvisioningError
            If the key is missing or malformed.  No file is processed.
        """
        sources = [Path(s) for s in sources]
        logger.info("Run %s: %d input files", self.run_id, len(sources))

        # Fresh per-run state; a pipeline may be run more than once.
        self.nonces = NonceRegistry()
        self.aggregator = ManifestAggregator(version=self.config.manifest_version)
        self._key = None

        # Fatal before anything else: no key, no run.
        self._key = key_guardian.load(self.config.key_path)
        try:
            if sources:
                store = BlobStore(self.config.output_dir)
                store.sweep_partials()
                transformer = AssetTransformer(
                    store,
                    compression_level=self.config.compression_level,
                    format_version=self.config.format_version,
                    cdn_prefix=self.config.cdn_prefix,
                    nonces=self.nonces,
                )
                self.aggregator.merge(self._seal_all(transformer, self._key, sources))
        finally:
            self._key.erase()

        manifest = self.aggregator.build()
        failure_report = self.aggregator.build_failure_report()

        manifest_path = None
        failure_path = None
        if (
            manifest.files_count
            or failure_report.failures_count
            or self.config.write_empty_manifest
        ):
            manifest_path = write_manifest(manifest, self.config.manifest_path)
        else:
            logger.info("Run %s: no input files found; nothing to do", self.run_id)
        if failure_report.failures_count:
            failure_path = write_failure_report(
                failure_report, self.config.failure_report_path
            )

        report = RunReport(
            run_id=self.run_id,
            manifest=manifest,
            failure_report=failure_report,
            manifest_path=manifest_path,
            failure_report_path=failure_path,
        )
        logger.info(
            "Run %s finished: %d succeeded, %d failed",
            self.run_id,
            report.succeeded,
            report.failed,
        )
        return report

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _seal_one(
        self, transformer: AssetTransformer, key: SecretKey, index: int, source: Path
    ) -> Outcome:
        try:
            return index, transformer.transform(source, key)
        except AssetTransformError as exc:
            return index, _failure_from(source, exc)

    def _seal_all(
        self, transformer: AssetTransformer, key: SecretKey, sources: list[Path]
    ) -> list[Outcome]:
        workers = min(self.config.workers, len(sources))
        if workers <= 1:
            return [
                self._seal_one(transformer, key, i, src) for i, src in enumerate(sources)
            ]

        logger.info("Run %s: sealing on %d worker threads", self.run_id, workers)
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="assetseal"
        ) as pool:
            futures = [
                pool.submit(self._seal_one, transformer, key, i, src)
                for i, src in enumerate(sources)
            ]
            return [f.result() for f in futures]
