"""Deterministic per-file stage machine.

Enforces:
- Valid stage transitions only (VALID_TRANSITIONS table)
- Terminal stages (SUCCEEDED, FAILED) are final
- Every transition recorded in the file's history
"""

from __future__ import annotations

import logging

from assetseal.errors import InvalidTransitionError
from assetseal.models.stages import (
    TERMINAL_STAGES,
    VALID_TRANSITIONS,
    StageTransition,
    TransformStage,
)

logger = logging.getLogger(__name__)


class FileStageMachine:
    """Tracks one input file through the transform stages.

    Parameters
    ----------
    source:
        Identifier of the file (its path), used in history and log lines.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self._stage = TransformStage.PENDING
        self._history: list[StageTransition] = []

    @property
    def stage(self) -> TransformStage:
        return self._stage

    @property
    def history(self) -> list[StageTransition]:
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._stage in TERMINAL_STAGES

    def transition(
        self, target: TransformStage, *, error: str | None = None
    ) -> StageTransition:
        """Move to *target*, or raise ``InvalidTransitionError``."""
        current = self._stage
        allowed = VALID_TRANSITIONS.get(current, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition {self.source} from {current.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )

        record = StageTransition(
            source=self.source,
            from_stage=current,
            to_stage=target,
            error=error,
        )
        self._history.append(record)
        self._stage = target
        logger.debug("%s: %s -> %s", self.source, current.value, target.value)
        return record

    def fail(self, error: str) -> StageTransition:
        """Move to FAILED from whatever working stage the file is in.

        Returns the stage the file failed in as ``from_stage``.
        """
        return self.transition(TransformStage.FAILED, error=error)

    def get_available_transitions(self) -> set[TransformStage]:
        """Return the set of valid target stages from the current one."""
        return set(VALID_TRANSITIONS.get(self._stage, set()))
