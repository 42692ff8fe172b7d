"""assetseal data models — all Pydantic v2, all frozen (immutable)."""

from assetseal.models.manifest import (
    CDN_PREFIX,
    FORMAT_VERSION,
    MANIFEST_VERSION,
    FailureRecord,
    FailureReport,
    Manifest,
    ManifestRecord,
)
from assetseal.models.reports import RunReport
from assetseal.models.stages import (
    TERMINAL_STAGES,
    VALID_TRANSITIONS,
    StageTransition,
    TransformStage,
)

__all__ = [
    # stages
    "TransformStage",
    "StageTransition",
    "VALID_TRANSITIONS",
    "TERMINAL_STAGES",
    # manifest
    "CDN_PREFIX",
    "FORMAT_VERSION",
    "MANIFEST_VERSION",
    "ManifestRecord",
    "Manifest",
    "FailureRecord",
    "FailureReport",
    # reports
    "RunReport",
]
