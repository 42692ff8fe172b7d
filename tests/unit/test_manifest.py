"""Tests for the ManifestAggregator and manifest serialization."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from assetseal.core.manifest import (
    ManifestAggregator,
    read_failure_report,
    read_manifest,
    write_failure_report,
    write_manifest,
)
from assetseal.errors import ManifestSealedError
from assetseal.models.manifest import FailureRecord, ManifestRecord
from assetseal.models.stages import TransformStage


def _record(name: str) -> ManifestRecord:
    return ManifestRecord(
        original_name=name,
        cdn_path=f"assets/{name[:1] * 16}.bin",
        checksum="cd" * 32,
        size_bytes=60,
        original_size_bytes=100,
    )


def _failure(name: str) -> FailureRecord:
    return FailureRecord(
        original_name=name,
        source_path=f"src/{name}",
        stage=TransformStage.ENCRYPTING,
        error="EncryptionError: rejected",
    )


class TestAggregator:
    def test_add_keeps_order(self):
        agg = ManifestAggregator()
        for name in ("c.txt", "a.txt", "b.txt"):
            agg.add(_record(name))
        manifest = agg.build()
        assert [r.original_name for r in manifest.files] == ["c.txt", "a.txt", "b.txt"]
        assert manifest.files_count == 3

    def test_failures_excluded_from_manifest(self):
        agg = ManifestAggregator()
        agg.add(_record("a.txt"))
        agg.add_failure(_failure("bad.txt"))
        manifest = agg.build()
        report = agg.build_failure_report()
        assert [r.original_name for r in manifest.files] == ["a.txt"]
        assert report.failures_count == 1
        assert report.failures[0].original_name == "bad.txt"

    def test_merge_orders_by_submission_index(self):
        agg = ManifestAggregator()
        agg.merge(
            [
                (2, _record("c.txt")),
                (0, _record("a.txt")),
                (1, _failure("b.txt")),
                (3, _record("d.txt")),
            ]
        )
        assert [r.original_name for r in agg.records] == ["a.txt", "c.txt", "d.txt"]
        assert [f.original_name for f in agg.failures] == ["b.txt"]

    def test_build_seals(self):
        agg = ManifestAggregator()
        agg.build()
        assert agg.sealed
        with pytest.raises(ManifestSealedError):
            agg.add(_record("late.txt"))
        with pytest.raises(ManifestSealedError):
            agg.add_failure(_failure("late.txt"))
        with pytest.raises(ManifestSealedError):
            agg.merge([(0, _record("late.txt"))])

    def test_build_is_idempotent(self):
        agg = ManifestAggregator()
        agg.add(_record("a.txt"))
        assert agg.build() is agg.build()

    def test_empty_manifest(self):
        manifest = ManifestAggregator().build()
        assert manifest.files_count == 0
        assert manifest.files == ()

    def test_version_and_timestamp(self):
        stamp = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
        manifest = ManifestAggregator(version="2.0").build(generated_at=stamp)
        assert manifest.version == "2.0"
        assert manifest.generated_at == stamp

    def test_records_property_is_a_copy(self):
        agg = ManifestAggregator()
        agg.add(_record("a.txt"))
        agg.records.clear()
        assert len(agg.records) == 1


class TestSerialization:
    def test_write_and_read_manifest(self, tmp_path: Path):
        agg = ManifestAggregator()
        agg.add(_record("a.txt"))
        agg.add(_record("b.txt"))
        manifest = agg.build()

        path = write_manifest(manifest, tmp_path / "nested" / "manifest.json")
        assert path.exists()
        assert read_manifest(path) == manifest

    def test_manifest_json_layout(self, tmp_path: Path):
        agg = ManifestAggregator()
        agg.add(_record("a.txt"))
        path = write_manifest(agg.build(), tmp_path / "manifest.json")
        data = json.loads(path.read_text())
        assert data["version"] == "1.0"
        assert data["files_count"] == 1
        assert data["files"][0]["cdn_path"] == "assets/aaaaaaaaaaaaaaaa.bin"
        assert data["files"][0]["version"] == 1

    def test_no_temp_file_left(self, tmp_path: Path):
        write_manifest(ManifestAggregator().build(), tmp_path / "manifest.json")
        assert [p.name for p in tmp_path.iterdir()] == ["manifest.json"]

    def test_failure_report_round_trip(self, tmp_path: Path):
        agg = ManifestAggregator()
        agg.add_failure(_failure("bad.txt"))
        report = agg.build_failure_report()
        path = write_failure_report(report, tmp_path / "failures.json")
        loaded = read_failure_report(path)
        assert loaded == report
        assert json.loads(path.read_text())["failures"][0]["stage"] == "encrypting"
