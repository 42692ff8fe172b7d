"""Tests for the frozen pydantic models."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from assetseal.models import (
    FailureRecord,
    FailureReport,
    Manifest,
    ManifestRecord,
    RunReport,
    TransformStage,
)

CHECKSUM = "ab" * 32


def _record(name: str = "doc.txt") -> ManifestRecord:
    return ManifestRecord(
        original_name=name,
        cdn_path="assets/0123456789abcdef.bin",
        checksum=CHECKSUM,
        size_bytes=128,
        original_size_bytes=4096,
    )


def _failure(name: str = "bad.pdf") -> FailureRecord:
    return FailureRecord(
        original_name=name,
        source_path=f"src/{name}",
        stage=TransformStage.READING,
        error="PermissionError: denied",
    )


class TestManifestRecord:
    def test_defaults(self):
        record = _record()
        assert record.version == 1
        assert record.encrypted_at.tzinfo is not None
        assert record.obfuscated_name == "0123456789abcdef.bin"

    def test_frozen(self):
        record = _record()
        with pytest.raises(ValidationError):
            record.original_name = "other.txt"

    @pytest.mark.parametrize("checksum", ["", "AB" * 32, "ab" * 31, "zz" * 32])
    def test_checksum_must_be_lowercase_sha256_hex(self, checksum: str):
        with pytest.raises(ValidationError):
            ManifestRecord(
                original_name="doc.txt",
                cdn_path="assets/x.bin",
                checksum=checksum,
                size_bytes=1,
                original_size_bytes=1,
            )

    def test_negative_size_rejected(self):
        with pytest.raises(ValidationError):
            ManifestRecord(
                original_name="doc.txt",
                cdn_path="assets/x.bin",
                checksum=CHECKSUM,
                size_bytes=-1,
                original_size_bytes=1,
            )


class TestManifest:
    def test_empty(self):
        manifest = Manifest()
        assert manifest.version == "1.0"
        assert manifest.files_count == 0
        assert manifest.files == ()

    def test_count_must_match(self):
        with pytest.raises(ValidationError):
            Manifest(files_count=2, files=(_record(),))

    def test_json_shape(self):
        stamp = datetime(2026, 1, 1, tzinfo=timezone.utc)
        manifest = Manifest(generated_at=stamp, files_count=1, files=(_record(),))
        data = manifest.model_dump(mode="json")
        assert set(data) == {"version", "generated_at", "files_count", "files"}
        assert set(data["files"][0]) == {
            "original_name",
            "cdn_path",
            "checksum",
            "size_bytes",
            "original_size_bytes",
            "version",
            "encrypted_at",
        }


class TestFailureReport:
    def test_stage_serializes_as_value(self):
        data = _failure().model_dump(mode="json")
        assert data["stage"] == "reading"

    def test_count_must_match(self):
        with pytest.raises(ValidationError):
            FailureReport(failures_count=0, failures=(_failure(),))


class TestRunReport:
    def test_counts(self):
        report = RunReport(
            run_id="seal-test",
            manifest=Manifest(files_count=2, files=(_record("a"), _record("b"))),
            failure_report=FailureReport(failures_count=1, failures=(_failure(),)),
            manifest_path=Path("dist/manifest.json"),
        )
        assert report.succeeded == 2
        assert report.failed == 1
        assert report.total == 3
        assert report.ok is False

    def test_empty_run_is_ok(self):
        report = RunReport(
            run_id="seal-empty", manifest=Manifest(), failure_report=FailureReport()
        )
        assert report.total == 0
        assert report.ok is True
        assert report.manifest_path is None
