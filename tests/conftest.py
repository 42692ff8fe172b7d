"""Shared test fixtures for assetseal."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from assetseal.config import SealConfig
from assetseal.core.aead import KEY_SIZE, NonceRegistry
from assetseal.core.blob_store import BlobStore
from assetseal.core.key_guardian import SecretKey
from assetseal.core.transformer import AssetTransformer


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def key_bytes() -> bytes:
    """A fixed, recognizable 32-byte key."""
    return bytes(range(1, KEY_SIZE + 1))


@pytest.fixture
def key_file(tmp_dir: Path, key_bytes: bytes) -> Path:
    """A well-formed 32-byte key file."""
    path = tmp_dir / "keys" / "asset.key"
    path.parent.mkdir()
    path.write_bytes(key_bytes)
    return path


@pytest.fixture
def secret_key(key_bytes: bytes) -> SecretKey:
    """An in-memory key handle; erased at teardown."""
    key = SecretKey(bytearray(key_bytes), source="test")
    yield key
    key.erase()


@pytest.fixture
def blob_store(tmp_dir: Path) -> BlobStore:
    """Provide a fresh BlobStore in a temp directory."""
    return BlobStore(tmp_dir / "out" / "assets")


@pytest.fixture
def transformer(blob_store: BlobStore) -> AssetTransformer:
    """Provide an AssetTransformer writing to the test blob store."""
    return AssetTransformer(blob_store, nonces=NonceRegistry())


@pytest.fixture
def seal_config(tmp_dir: Path, key_file: Path) -> SealConfig:
    """Run settings pointing everything at the temp directory."""
    return SealConfig(
        key_path=key_file,
        output_dir=tmp_dir / "out" / "assets",
        manifest_path=tmp_dir / "out" / "manifest.json",
        failure_report_path=tmp_dir / "out" / "failures.json",
    )


# ---------------------------------------------------------------------------
# Asset factories — shared across test modules
# ---------------------------------------------------------------------------


@pytest.fixture
def make_asset(tmp_dir: Path) -> Callable[..., Path]:
    """Factory fixture: write a plaintext file under ``tmp_dir/src``."""

    def _factory(name: str = "doc.txt", content: bytes | None = None) -> Path:
        path = tmp_dir / "src" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if content is None:
            content = (f"confidential contents of {name}\n" * 50).encode("utf-8")
        path.write_bytes(content)
        return path

    return _factory


@pytest.fixture
def unreadable_asset(tmp_dir: Path) -> Path:
    """An input path that cannot be read as a file.

    A directory named like a document: opening it fails even as root,
    where chmod cannot make a regular file unreadable.
    """
    path = tmp_dir / "src" / "locked.pdf"
    path.mkdir(parents=True)
    return path
