"""AES-256-GCM encryption and the on-disk blob layout.

Blob layout (byte offsets, no multi-byte integers)::

    0        12 bytes  nonce
    12       N bytes   ciphertext      (N = compressed plaintext length)
    12+N     16 bytes  GCM tag
    total    28 + N bytes

The decrypting application depends on this ordering.  Any future change has
to be signalled through the manifest ``version`` field, never by altering
this layout in place.

Nonces are 12 fresh bytes from ``os.urandom`` on every call.  They are never
derived from content, counters, or file names.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from assetseal.errors import (
    BlobFormatError,
    EncryptionError,
    KeySizeError,
    NonceReuseError,
)

logger = logging.getLogger(__name__)

KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16
BLOB_OVERHEAD = NONCE_SIZE + TAG_SIZE

KeyBytes = bytes | bytearray | memoryview


@dataclass(frozen=True)
class SealedPayload:
    """The three parts of one AEAD encryption."""

    nonce: bytes
    ciphertext: bytes
    tag: bytes

    def to_blob(self) -> bytes:
        """Serialize as ``nonce || ciphertext || tag``."""
        return self.nonce + self.ciphertext + self.tag

    @property
    def blob_size(self) -> int:
        return BLOB_OVERHEAD + len(self.ciphertext)


class NonceRegistry:
    """Records every nonce issued in this process and refuses repeats.

    A 96-bit random nonce colliding is astronomically unlikely, but reuse
    under a fixed GCM key is catastrophic, so the batch pipeline keeps one of
    these for the lifetime of a run.  Safe to share between worker threads.
    """

    def __init__(self) -> None:
        self._seen: set[bytes] = set()
        self._lock = threading.Lock()

    def register(self, nonce: bytes) -> None:
        with self._lock:
            if nonce in self._seen:
                raise NonceReuseError("Nonce issued twice under the same key")
            self._seen.add(nonce)

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)

    def __contains__(self, nonce: object) -> bool:
        with self._lock:
            return nonce in self._seen


def check_key_size(key: KeyBytes) -> None:
    """Reject any key that is not exactly ``KEY_SIZE`` bytes."""
    if len(key) != KEY_SIZE:
        raise KeySizeError(
            f"AES-256-GCM requires a {KEY_SIZE}-byte key, got {len(key)} bytes"
        )


def generate_nonce() -> bytes:
    """12 bytes from the OS CSPRNG."""
    return os.urandom(NONCE_SIZE)


def encrypt(
    key: KeyBytes,
    plaintext: bytes | bytearray | memoryview,
    *,
    nonces: NonceRegistry | None = None,
) -> SealedPayload:
    """Encrypt *plaintext* under *key* with a fresh random nonce.

    Parameters
    ----------
    key:
        Exactly 32 bytes.  Only borrowed for the duration of the call; no
        copy is kept on the returned payload.
    plaintext:
        Bytes to encrypt (in this pipeline: the compressed asset).
    nonces:
        Optional registry used to reject a repeated nonce.

    Raises
    ------
    KeySizeError
        Before any primitive is constructed, if the key is the wrong size.
    EncryptionError
        If the AEAD primitive rejects its inputs.
    """
    check_key_size(key)
    nonce = generate_nonce()
    if nonces is not None:
        nonces.register(nonce)

    try:
        sealed = AESGCM(key).encrypt(nonce, plaintext, None)
    except (TypeError, ValueError, OverflowError) as exc:
        raise EncryptionError(f"AES-256-GCM encryption failed: {exc}") from exc

    # cryptography appends the 16-byte tag to the ciphertext
    return SealedPayload(
        nonce=nonce,
        ciphertext=sealed[:-TAG_SIZE],
        tag=sealed[-TAG_SIZE:],
    )


def split_blob(blob: bytes | bytearray | memoryview) -> SealedPayload:
    """Parse ``nonce || ciphertext || tag`` without decrypting."""
    blob = bytes(blob)
    if len(blob) < BLOB_OVERHEAD:
        raise BlobFormatError(
            f"Blob is {len(blob)} bytes; minimum is {BLOB_OVERHEAD}"
        )
    return SealedPayload(
        nonce=blob[:NONCE_SIZE],
        ciphertext=blob[NONCE_SIZE:-TAG_SIZE],
        tag=blob[-TAG_SIZE:],
    )


def decrypt(key: KeyBytes, blob: bytes | bytearray | memoryview) -> bytes:
    """Authenticate and decrypt a blob produced by :func:`encrypt`.

    Raises ``EncryptionError`` if the tag does not verify.
    """
    check_key_size(key)
    payload = split_blob(blob)
    try:
        return AESGCM(key).decrypt(
            payload.nonce, payload.ciphertext + payload.tag, None
        )
    except InvalidTag as exc:
        raise EncryptionError("Blob failed authentication") from exc
