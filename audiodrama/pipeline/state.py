"""Mutable production state owned by the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import AudioDramaError
from ..models.datatypes import AudioArtifactRef, DramatizedScript, PipelineStatus


@dataclass(slots=True)
class ProductionState:
    """Current status with the data it was reached with.

    `failure` is only set while `status` is `FAILED`.
    """

    status: PipelineStatus = PipelineStatus.IDLE
    raw_text: str = ""
    script: DramatizedScript | None = None
    audio: AudioArtifactRef | None = None
    failure: AudioDramaError | None = None
    error_message: str | None = None

    def clear_outcome(self) -> None:
        """Drop audio and failure details from a previous run."""

        self.audio = None
        self.failure = None
        self.error_message = None
