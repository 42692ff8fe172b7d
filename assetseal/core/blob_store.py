"""Output directory for sealed blobs, keyed by obfuscated name.

Storage layout: {base_path}/{sha256(plaintext)[0:16]}.bin

Blobs are written atomically: bytes go to a temporary file in the same
directory, are flushed to disk, and only then renamed to their final name.
A crash or error mid-write never leaves a truncated blob under a real name.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from assetseal.core.hasher import hash_file

logger = logging.getLogger(__name__)

TEMP_PREFIX = ".partial-"


class BlobStore:
    """Flat directory of content-addressed blobs.

    Writing a name that already exists replaces it: re-sealing the same
    plaintext yields the same name with a fresh nonce.

    Parameters
    ----------
    base_path:
        Directory the blobs are written to.
    create:
        Create *base_path* if missing.  Read-only callers pass False and get
        ``FileNotFoundError`` for a missing directory instead.
    """

    def __init__(self, base_path: Path | str, *, create: bool = True) -> None:
        self._base = Path(base_path)
        if create:
            self._base.mkdir(parents=True, exist_ok=True)
        elif not self._base.is_dir():
            raise FileNotFoundError(f"Blob directory not found: {self._base}")

    @property
    def base_path(self) -> Path:
        return self._base

    def path_for(self, name: str) -> Path:
        """Final on-disk path for a blob name.  Rejects path components."""
        if not name or Path(name).name != name or name.startswith("."):
            raise ValueError(f"Invalid blob name: {name!r}")
        return self._base / name

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def write_atomic(self, name: str, blob: bytes) -> Path:
        """Write *blob* under *name* via temp file + rename.

        On any error the temporary file is removed and the error re-raised.
        """
        target = self.path_for(name)
        fd, tmp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=self._base)
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(blob)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, target)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug("BlobStore: wrote %d bytes to %s", len(blob), target)
        return target

    def discard(self, name: str) -> bool:
        """Remove a blob if present.  Returns True if a file was deleted."""
        path = self.path_for(name)
        if path.exists():
            path.unlink()
            logger.info("BlobStore: discarded %s", path)
            return True
        return False

    def sweep_partials(self) -> int:
        """Remove temp files left behind by an interrupted write."""
        removed = 0
        for stray in self._base.glob(f"{TEMP_PREFIX}*"):
            stray.unlink(missing_ok=True)
            removed += 1
        if removed:
            logger.warning("BlobStore: removed %d stale partial blobs", removed)
        return removed

    # ------------------------------------------------------------------
    # Read and verify
    # ------------------------------------------------------------------

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def retrieve(self, name: str) -> bytes:
        path = self.path_for(name)
        if not path.exists():
            raise FileNotFoundError(f"Blob not found: {name}")
        return path.read_bytes()

    def checksum(self, name: str) -> str:
        """SHA-256 hex digest of the blob as stored on disk."""
        return hash_file(self.path_for(name))

    def size(self, name: str) -> int:
        return self.path_for(name).stat().st_size

    def verify(self, name: str, checksum: str, size: int | None = None) -> bool:
        """Re-hash a stored blob and compare against an expected checksum."""
        path = self.path_for(name)
        if not path.exists():
            return False
        if size is not None and path.stat().st_size != size:
            return False
        return hash_file(path) == checksum
