"""Tests for run config — env-driven settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from assetseal.config import SealConfig


class TestSealConfig:
    def test_defaults(self):
        config = SealConfig()
        assert config.log_level == "INFO"
        assert config.workers == 1
        assert config.compression_level == 9

    def test_default_paths(self):
        config = SealConfig()
        assert config.key_path == Path("keys/asset.key")
        assert config.output_dir == Path("dist/assets")
        assert config.manifest_path == Path("dist/manifest.json")
        assert config.failure_report_path == Path("dist/failures.json")

    def test_format_defaults(self):
        config = SealConfig()
        assert config.cdn_prefix == "assets/"
        assert config.manifest_version == "1.0"
        assert config.format_version == 1
        assert config.write_empty_manifest is False

    def test_excluded_paths_cover_key_and_outputs(self):
        config = SealConfig(key_path=Path("/run/secrets/cdn.key"))
        assert config.excluded_paths == [
            Path("dist/assets"),
            Path("/run/secrets/cdn.key"),
            Path("dist/manifest.json"),
            Path("dist/failures.json"),
        ]

    def test_log_level_uppercased(self):
        assert SealConfig(log_level="debug").log_level == "DEBUG"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("ASSETSEAL_KEY_PATH", "/run/secrets/cdn.key")
        monkeypatch.setenv("ASSETSEAL_WORKERS", "4")
        monkeypatch.setenv("ASSETSEAL_WRITE_EMPTY_MANIFEST", "true")
        config = SealConfig()
        assert config.key_path == Path("/run/secrets/cdn.key")
        assert config.workers == 4
        assert config.write_empty_manifest is True

    def test_explicit_arguments_beat_env(self, monkeypatch):
        monkeypatch.setenv("ASSETSEAL_WORKERS", "4")
        assert SealConfig(workers=2).workers == 2

    @pytest.mark.parametrize("level", [-1, 10])
    def test_compression_level_bounds(self, level: int):
        with pytest.raises(ValidationError):
            SealConfig(compression_level=level)

    def test_workers_must_be_positive(self):
        with pytest.raises(ValidationError):
            SealConfig(workers=0)
