"""Exception hierarchy for assetseal.

Two severities matter to the batch pipeline:

* **Fatal** — ``KeyProvisioningError`` and friends.  Raised before any file is
  attempted; the process must exit non-zero.
* **Per-file** — ``AssetTransformError``.  Raised by the transformer for a
  single input; the pipeline records it and moves on to the next file.
"""

from __future__ import annotations


class AssetSealError(RuntimeError):
    """Base class for every error raised by assetseal."""


# ---------------------------------------------------------------------------
# Fatal (process-level)
# ---------------------------------------------------------------------------


class KeyProvisioningError(AssetSealError):
    """Raised when the key file is missing, unreadable, or the wrong size.

    This error must not be caught and ignored — no file may be processed
    without a validated key.
    """


class KeySizeError(KeyProvisioningError):
    """Raised when key material is not exactly 32 bytes."""


class KeyErasedError(AssetSealError):
    """Raised when a ``SecretKey`` is used after it has been erased."""


# ---------------------------------------------------------------------------
# Per-file (recoverable)
# ---------------------------------------------------------------------------


class CompressionError(AssetSealError):
    """Raised when the DEFLATE transform fails."""


class EncryptionError(AssetSealError):
    """Raised when the AEAD primitive rejects its inputs."""


class BlobVerificationError(AssetSealError):
    """Raised when a written blob does not match its expected size or digest."""


class AssetTransformError(AssetSealError):
    """A single file failed somewhere in its transform stages.

    Parameters
    ----------
    source:
        The input path that failed.
    stage:
        Value of the ``TransformStage`` the file was in when it failed.
    cause:
        The underlying exception.
    """

    def __init__(self, source: object, stage: str, cause: BaseException) -> None:
        self.source = source
        self.stage = stage
        self.cause = cause
        super().__init__(
            f"{source}: failed during {stage}: {type(cause).__name__}: {cause}"
        )


# ---------------------------------------------------------------------------
# Format and structural errors
# ---------------------------------------------------------------------------


class BlobFormatError(AssetSealError):
    """Raised when bytes cannot be parsed as ``nonce || ciphertext || tag``."""


class NonceReuseError(AssetSealError):
    """Raised when a nonce is issued twice under the same key."""


class ManifestSealedError(AssetSealError):
    """Raised when a record is added after the manifest has been built."""


class InvalidTransitionError(AssetSealError):
    """Raised when a transform stage transition is not allowed."""
