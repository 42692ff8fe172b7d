"""Content hashing helpers for naming and integrity checksums.

SHA-256 is used twice per asset: once over the original plaintext to derive
the obfuscated CDN name, and once over the finished blob for the manifest
checksum.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import BinaryIO

HASH_CHUNK_SIZE = 64 * 1024
OBFUSCATED_NAME_HEX_CHARS = 16
BLOB_SUFFIX = ".bin"


def sha256_hex(data: bytes | bytearray | memoryview) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def hash_stream(stream: BinaryIO, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Hash a readable binary stream to the end and return the hex digest.

    Read errors propagate to the caller; a digest over a partially consumed
    stream is never returned.
    """
    digest = hashlib.sha256()
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        digest.update(chunk)
    return digest.hexdigest()


def hash_file(path: Path | str, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """SHA-256 hex digest of the file at *path*."""
    with Path(path).open("rb") as fh:
        return hash_stream(fh, chunk_size)


def name_from_digest(hex_digest: str) -> str:
    """Turn a SHA-256 hex digest into an obfuscated blob name."""
    return f"{hex_digest[:OBFUSCATED_NAME_HEX_CHARS]}{BLOB_SUFFIX}"


def obfuscated_name(plaintext: bytes | bytearray | memoryview) -> str:
    """Content-addressed blob name: first 16 hex chars of SHA-256 + ``.bin``.

    Depends only on the bytes, never on the source path or file name, so
    identical inputs always land on the same CDN object.
    """
    return name_from_digest(sha256_hex(plaintext))
