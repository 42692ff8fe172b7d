"""Per-file transform stages — the ordering contract made explicit.

Compress-then-encrypt and write-then-verify are not conventions the
transformer happens to follow: they are the only paths through this table.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class TransformStage(str, Enum):
    """State of one input file as it moves through the transformer."""

    PENDING = "pending"
    READING = "reading"
    COMPRESSING = "compressing"
    NAMING = "naming"
    ENCRYPTING = "encrypting"
    WRITING = "writing"
    VERIFYING = "verifying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STAGES: frozenset[TransformStage] = frozenset(
    {TransformStage.SUCCEEDED, TransformStage.FAILED}
)

# Valid transitions — enforced structurally by FileStageMachine.
# Every working stage may fall to FAILED; terminal stages have no exits.
VALID_TRANSITIONS: dict[TransformStage, set[TransformStage]] = {
    TransformStage.PENDING: {TransformStage.READING, TransformStage.FAILED},
    TransformStage.READING: {TransformStage.COMPRESSING, TransformStage.FAILED},
    TransformStage.COMPRESSING: {TransformStage.NAMING, TransformStage.FAILED},
    # NAMING -> VERIFYING only when identical content was already sealed this run
    TransformStage.NAMING: {
        TransformStage.ENCRYPTING,
        TransformStage.VERIFYING,
        TransformStage.FAILED,
    },
    TransformStage.ENCRYPTING: {TransformStage.WRITING, TransformStage.FAILED},
    TransformStage.WRITING: {TransformStage.VERIFYING, TransformStage.FAILED},
    TransformStage.VERIFYING: {TransformStage.SUCCEEDED, TransformStage.FAILED},
    TransformStage.SUCCEEDED: set(),  # terminal
    TransformStage.FAILED: set(),  # terminal
}


class StageTransition(BaseModel):
    """Records a single stage transition for one file."""

    model_config = ConfigDict(frozen=True)

    source: str
    from_stage: TransformStage
    to_stage: TransformStage
    error: str | None = None  # populated when entering FAILED
