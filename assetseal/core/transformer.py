"""Asset Transformer — seals one plaintext file into one manifest record.

Stage order (enforced by ``FileStageMachine``)::

    READING -> COMPRESSING -> NAMING -> ENCRYPTING -> WRITING -> VERIFYING
        -> SUCCEEDED

Any exception moves the file to FAILED, removes whatever this call wrote,
scrubs the transient plaintext and compressed buffers, and surfaces as an
``AssetTransformError``.  One file's failure never affects another file.

When two inputs in the same run have identical content they share one blob:
the second skips from NAMING straight to VERIFYING the blob the first one
wrote, so the first record's checksum stays valid.
"""

from __future__ import annotations

import io
import logging
import os
import threading
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path

from assetseal.core import aead
from assetseal.core.blob_store import BlobStore
from assetseal.core.compressor import DEFAULT_LEVEL, compress_buffer
from assetseal.core.hasher import obfuscated_name, sha256_hex
from assetseal.core.key_guardian import SecretKey
from assetseal.core.stage_machine import FileStageMachine
from assetseal.errors import AssetTransformError, BlobVerificationError
from assetseal.models.manifest import CDN_PREFIX, FORMAT_VERSION, ManifestRecord
from assetseal.models.stages import TransformStage

logger = logging.getLogger(__name__)


def _scrub(buf: io.BytesIO) -> None:
    """Zero and close an in-memory buffer."""
    if buf.closed:
        return
    with buf.getbuffer() as view:
        view[:] = bytes(len(view))
    buf.close()


def _read_exact(path: Path) -> bytearray:
    """Read a whole file into a bytearray that can be zeroed afterwards."""
    with path.open("rb", buffering=0) as fh:
        size = os.fstat(fh.fileno()).st_size
        buf = bytearray(size)
        with memoryview(buf) as view:
            got = 0
            while got < size:
                n = fh.readinto(view[got:])
                if not n:
                    break
                got += n
        if got != size or fh.read(1):
            buf[:] = bytes(len(buf))
            raise OSError(f"{path} changed size while being read")
    return buf


class AssetTransformer:
    """Per-run transformer: compress, name, encrypt, write, verify.

    Parameters
    ----------
    store:
        Where blobs are written.
    compression_level:
        zlib level, 0..9.  Defaults to maximum compression.
    format_version:
        Blob format tag written into every record.
    cdn_prefix:
        Prefix for ``cdn_path``.
    nonces:
        Shared nonce registry; one per run.
    """

    def __init__(
        self,
        store: BlobStore,
        *,
        compression_level: int = DEFAULT_LEVEL,
        format_version: int = FORMAT_VERSION,
        cdn_prefix: str = CDN_PREFIX,
        nonces: aead.NonceRegistry | None = None,
    ) -> None:
        self.store = store
        self.compression_level = compression_level
        self.format_version = format_version
        self.cdn_prefix = cdn_prefix
        self.nonces = nonces if nonces is not None else aead.NonceRegistry()

        # obfuscated name -> (checksum, blob size) for blobs sealed this run
        self._sealed: dict[str, tuple[str, int]] = {}
        self._sealed_lock = threading.Lock()
        self._name_locks: defaultdict[str, threading.Lock] = defaultdict(threading.Lock)

    def _lock_for(self, name: str) -> threading.Lock:
        with self._sealed_lock:
            return self._name_locks[name]

    def transform(
        self,
        source: Path | str,
        key: SecretKey,
        *,
        machine: FileStageMachine | None = None,
    ) -> ManifestRecord:
        """Seal *source* and return its manifest record.

        Raises
        ------
        AssetTransformError
            For any failure; ``.stage`` says where it happened.
        KeyErasedError
            If *key* was erased before the call (not a per-file problem).
        """
        source = Path(source)
        machine = machine or FileStageMachine(str(source))
        key_view = key.material

        plaintext: bytearray | None = None
        sink = io.BytesIO()
        written: str | None = None

        try:
            # 1. Read
            machine.transition(TransformStage.READING)
            plaintext = _read_exact(source)
            original_size = len(plaintext)

            # 2. Compress
            machine.transition(TransformStage.COMPRESSING)
            compressed_size = compress_buffer(plaintext, sink, self.compression_level)

            # 3. Name from the *original* plaintext
            machine.transition(TransformStage.NAMING)
            name = obfuscated_name(plaintext)

            with self._lock_for(name):
                with self._sealed_lock:
                    already = self._sealed.get(name)

                if already is None:
                    # 4. Encrypt
                    machine.transition(TransformStage.ENCRYPTING)
                    with sink.getbuffer() as compressed:
                        payload = aead.encrypt(key_view, compressed, nonces=self.nonces)
                    blob = payload.to_blob()
                    expected_size = aead.BLOB_OVERHEAD + compressed_size
                    expected_checksum = sha256_hex(blob)

                    # 5. Write
                    machine.transition(TransformStage.WRITING)
                    self.store.write_atomic(name, blob)
                    written = name
                else:
                    logger.info(
                        "%s has the same content as an asset already sealed as %s",
                        source.name,
                        name,
                    )
                    expected_checksum, expected_size = already

                # 6. Verify what is on disk
                machine.transition(TransformStage.VERIFYING)
                size = self.store.size(name)
                if size != expected_size:
                    raise BlobVerificationError(
                        f"{name}: expected {expected_size} bytes on disk, found {size}"
                    )
                checksum = self.store.checksum(name)
                if checksum != expected_checksum:
                    raise BlobVerificationError(f"{name}: on-disk checksum mismatch")

                with self._sealed_lock:
                    self._sealed[name] = (checksum, size)

            record = ManifestRecord(
                original_name=source.name,
                cdn_path=f"{self.cdn_prefix}{name}",
                checksum=checksum,
                size_bytes=size,
                original_size_bytes=original_size,
                version=self.format_version,
                encrypted_at=datetime.now(timezone.utc),
            )
            machine.transition(TransformStage.SUCCEEDED)
            logger.info(
                "Sealed %s -> %s (%d -> %d bytes)",
                source.name,
                record.cdn_path,
                original_size,
                size,
            )
            return record

        except Exception as exc:
            failed_stage = machine.stage
            if not machine.is_terminal:
                machine.fail(f"{type(exc).__name__}: {exc}")
            if written is not None:
                try:
                    self.store.discard(written)
                except OSError as cleanup_exc:
                    logger.error(
                        "Could not remove unverified blob %s: %s", written, cleanup_exc
                    )
            logger.error(
                "Failed to seal %s during %s: %s", source, failed_stage.value, exc
            )
            raise AssetTransformError(source, failed_stage.value, exc) from exc

        finally:
            if plaintext is not None:
                plaintext[:] = bytes(len(plaintext))
            _scrub(sink)
            key_view.release()
