"""Key Guardian — load, validate, lend, and erase the 32-byte AES key.

The key lives in exactly one mutable ``bytearray`` owned by a ``SecretKey``.
Callers borrow a read-only ``memoryview`` of it for the duration of an
encryption call; nobody else holds a copy.  ``erase()`` overwrites every byte
with zero and is idempotent.

Usage::

    with guarded_key(config.key_path) as key:
        encrypt(key.material, data)
    # key is zeroed here, on success and on error alike

Python cannot promise that no other copy of the bytes ever existed (the OS
page cache, the AES context inside OpenSSL), so erasure covers every buffer
this process controls.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from assetseal.core.aead import KEY_SIZE
from assetseal.errors import KeyErasedError, KeyProvisioningError, KeySizeError

logger = logging.getLogger(__name__)


def _zero(buf: bytearray) -> None:
    for i in range(len(buf)):
        buf[i] = 0


class SecretKey:
    """Owning handle for symmetric key material.

    Parameters
    ----------
    buffer:
        A ``bytearray`` of exactly ``KEY_SIZE`` bytes.  Ownership transfers to
        the handle: the caller must not keep its own reference.
    source:
        Where the key came from, for log messages only.
    """

    __slots__ = ("_buf", "_erased", "source")

    def __init__(self, buffer: bytearray, *, source: str = "<memory>") -> None:
        if not isinstance(buffer, bytearray):
            raise TypeError("SecretKey requires a bytearray it can overwrite")
        if len(buffer) != KEY_SIZE:
            size = len(buffer)
            _zero(buffer)
            raise KeySizeError(f"Key must be {KEY_SIZE} bytes, got {size}")
        self._buf = buffer
        self._erased = False
        self.source = source

    @property
    def material(self) -> memoryview:
        """Read-only view over the key bytes.

        The view aliases the owned buffer, so it reads as zeros after
        ``erase()``.  Raises ``KeyErasedError`` once the key has been erased.
        """
        if self._erased:
            raise KeyErasedError(f"Key from {self.source} has been erased")
        return memoryview(self._buf).toreadonly()

    @property
    def is_erased(self) -> bool:
        return self._erased

    def erase(self) -> None:
        """Overwrite every byte of the key with zero."""
        _zero(self._buf)
        if not self._erased:
            logger.debug("Key from %s erased", self.source)
        self._erased = True

    def buffer_snapshot(self) -> bytes:
        """Copy of the underlying buffer — test inspection hook only."""
        return bytes(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def __enter__(self) -> SecretKey:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.erase()

    def __repr__(self) -> str:
        state = "erased" if self._erased else "loaded"
        return f"SecretKey(source={self.source!r}, {state})"

    __str__ = __repr__

    def __reduce__(self) -> tuple:  # pragma: no cover - pickling guard
        raise TypeError("SecretKey cannot be pickled")


def load(source: Path | str) -> SecretKey:
    """Read and validate the key file at *source*.

    Raises
    ------
    KeyProvisioningError
        If the file does not exist, is not a regular file, cannot be read,
        or is not exactly 32 bytes.  This is fatal: there is no default or
        partial-key fallback.
    """
    path = Path(source)
    if not path.is_file():
        logger.critical("Key file not found: %s", path)
        raise KeyProvisioningError(f"Key file not found: {path}")

    # Read one byte past the expected size so oversize files are detected
    # without trusting stat().
    buf = bytearray(KEY_SIZE + 1)
    try:
        with path.open("rb", buffering=0) as fh:
            n = fh.readinto(buf)
    except OSError as exc:
        _zero(buf)
        logger.critical("Key file unreadable: %s (%s)", path, exc.strerror)
        raise KeyProvisioningError(f"Key file unreadable: {path}") from exc

    if n != KEY_SIZE:
        _zero(buf)
        logger.critical(
            "Key file %s has wrong length: expected %d bytes", path, KEY_SIZE
        )
        raise KeySizeError(
            f"Key file {path} must be exactly {KEY_SIZE} bytes"
        )

    key_buf = bytearray(KEY_SIZE)
    with memoryview(buf) as view:
        key_buf[:] = view[:KEY_SIZE]
    _zero(buf)
    logger.info("Loaded %d-byte key from %s", KEY_SIZE, path)
    return SecretKey(key_buf, source=str(path))


def erase(key: SecretKey) -> None:
    """Zero the key.  Safe to call more than once."""
    key.erase()


@contextmanager
def guarded_key(source: Path | str) -> Iterator[SecretKey]:
    """Load a key and guarantee erasure on every exit path."""
    key = load(source)
    try:
        yield key
    finally:
        key.erase()


def generate(path: Path | str, *, overwrite: bool = False) -> Path:
    """Write a fresh random 32-byte key to *path* with mode 0600.

    Refuses to replace an existing file unless *overwrite* is set.
    """
    target = Path(path)
    if target.exists() and not overwrite:
        raise KeyProvisioningError(
            f"{target} already exists; pass overwrite=True to replace it"
        )
    target.parent.mkdir(parents=True, exist_ok=True)

    buf = bytearray(os.urandom(KEY_SIZE))
    flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
    try:
        fd = os.open(target, flags, 0o600)
        with os.fdopen(fd, "wb") as fh:
            fh.write(buf)
    finally:
        _zero(buf)
    os.chmod(target, 0o600)
    logger.info("Generated new %d-byte key at %s", KEY_SIZE, target)
    return target
