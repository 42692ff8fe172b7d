"""Tests for the content hasher — digests, streams, obfuscated names."""

from __future__ import annotations

import hashlib
import io
from pathlib import Path

import pytest

from assetseal.core.hasher import (
    hash_file,
    hash_stream,
    obfuscated_name,
    sha256_hex,
)


class _BrokenStream(io.RawIOBase):
    """Yields one chunk, then fails."""

    def __init__(self) -> None:
        self._calls = 0

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        self._calls += 1
        if self._calls == 1:
            return b"partial"
        raise OSError("device went away")


class TestSha256:
    def test_known_digest(self):
        assert sha256_hex(b"abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_lowercase_hex(self):
        digest = sha256_hex(b"CDN")
        assert digest == digest.lower()
        assert len(digest) == 64

    def test_accepts_bytearray(self):
        assert sha256_hex(bytearray(b"abc")) == sha256_hex(b"abc")


class TestHashStream:
    def test_matches_one_shot_digest(self):
        data = b"x" * 200_000
        assert hash_stream(io.BytesIO(data), chunk_size=4096) == sha256_hex(data)

    def test_empty_stream(self):
        assert hash_stream(io.BytesIO(b"")) == hashlib.sha256(b"").hexdigest()

    def test_read_error_propagates(self):
        with pytest.raises(OSError, match="device went away"):
            hash_stream(_BrokenStream())

    def test_hash_file(self, tmp_path: Path):
        path = tmp_path / "f.bin"
        path.write_bytes(b"file body")
        assert hash_file(path) == sha256_hex(b"file body")


class TestObfuscatedName:
    def test_format(self):
        name = obfuscated_name(b"hello")
        assert name.endswith(".bin")
        assert name == sha256_hex(b"hello")[:16] + ".bin"
        assert len(name) == 20

    def test_deterministic(self):
        assert obfuscated_name(b"same bytes") == obfuscated_name(b"same bytes")

    def test_different_content_different_name(self):
        assert obfuscated_name(b"one") != obfuscated_name(b"two")

    def test_independent_of_file_name(self, tmp_path: Path):
        a = tmp_path / "report-q1.pdf"
        b = tmp_path / "nested" / "copy.txt"
        b.parent.mkdir()
        a.write_bytes(b"identical")
        b.write_bytes(b"identical")
        assert obfuscated_name(a.read_bytes()) == obfuscated_name(b.read_bytes())

    def test_name_leaks_nothing_of_original_name(self):
        assert "secret" not in obfuscated_name(b"secret-plan.docx")

