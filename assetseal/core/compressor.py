"""DEFLATE pre-encryption transform.

Compression always runs *before* encryption; ciphertext does not compress.
This module only reduces size and makes no confidentiality claims.
"""

from __future__ import annotations

import logging
import zlib
from collections.abc import Iterable
from typing import BinaryIO

from assetseal.errors import CompressionError

logger = logging.getLogger(__name__)

DEFAULT_LEVEL = zlib.Z_BEST_COMPRESSION
STREAM_CHUNK_SIZE = 64 * 1024


def _check_level(level: int) -> int:
    if not 0 <= level <= 9:
        raise CompressionError(f"Compression level must be 0..9, got {level}")
    return level


def compress(data: bytes | bytearray | memoryview, level: int = DEFAULT_LEVEL) -> bytes:
    """Compress *data* with zlib-wrapped DEFLATE at *level*."""
    _check_level(level)
    try:
        return zlib.compress(data, level)
    except zlib.error as exc:
        raise CompressionError(f"DEFLATE failed: {exc}") from exc


def _deflate_into(chunks: Iterable, dst: BinaryIO, level: int) -> int:
    compressor = zlib.compressobj(level)
    written = 0
    try:
        for chunk in chunks:
            out = compressor.compress(chunk)
            if out:
                dst.write(out)
                written += len(out)
        tail = compressor.flush()
        dst.write(tail)
        written += len(tail)
    except (zlib.error, OSError) as exc:
        raise CompressionError(f"DEFLATE stream failed: {exc}") from exc
    return written


def compress_stream(
    src: BinaryIO,
    dst: BinaryIO,
    level: int = DEFAULT_LEVEL,
    chunk_size: int = STREAM_CHUNK_SIZE,
) -> int:
    """Stream *src* through DEFLATE into *dst*.

    Returns the number of compressed bytes written.  On failure the caller
    owns *dst* and must discard whatever was written to it.
    """
    _check_level(level)
    written = _deflate_into(iter(lambda: src.read(chunk_size), b""), dst, level)
    logger.debug("compress_stream: wrote %d compressed bytes", written)
    return written


def compress_buffer(
    data: bytes | bytearray | memoryview,
    dst: BinaryIO,
    level: int = DEFAULT_LEVEL,
    chunk_size: int = STREAM_CHUNK_SIZE,
) -> int:
    """Like :func:`compress_stream`, but reads *data* in place.

    Chunks are slices of a ``memoryview`` over *data*, so a caller holding
    the plaintext in a ``bytearray`` can zero it afterwards with no
    immutable copies left behind.
    """
    _check_level(level)
    with memoryview(data) as view:
        chunks = (view[i : i + chunk_size] for i in range(0, len(view), chunk_size))
        written = _deflate_into(chunks, dst, level)
    logger.debug("compress_buffer: wrote %d compressed bytes", written)
    return written


def decompress(data: bytes | bytearray | memoryview) -> bytes:
    """Inverse of :func:`compress`."""
    try:
        return zlib.decompress(data)
    except zlib.error as exc:
        raise CompressionError(f"INFLATE failed: {exc}") from exc
