"""Stage telemetry helpers for the production orchestrator.

Every stage run through `_run_stage` is logged. Progress callbacks fire only
for stages listed in the active stage plan, numbered within that plan, so a
command reports `1/2 stage=load` then `2/2 stage=produce` for exactly the
steps it runs.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from ..telemetry.logger import RunLogger

_StageResult = TypeVar("_StageResult")

DEFAULT_STAGE_PLAN: tuple[str, ...] = ("analyze", "produce")
KNOWN_STAGES = frozenset({"extract", "load", "analyze", "produce", "save"})


def validate_stage_plan(stage_plan: tuple[str, ...]) -> tuple[str, ...]:
    """Return `stage_plan` after checking names and uniqueness.

    Raises:
        ValueError: On unknown or repeated stage names.
    """

    unknown = sorted(set(stage_plan) - KNOWN_STAGES)
    if unknown:
        raise ValueError(f"Unknown pipeline stage(s): {', '.join(unknown)}.")
    if len(set(stage_plan)) != len(stage_plan):
        raise ValueError("Pipeline stages must not repeat within a plan.")
    return stage_plan


class PipelineTelemetryMixin:
    """Progress and run-log hooks shared by orchestrator stages."""

    _run_logger: RunLogger | None
    _stage_progress_callback: Callable[[str, int, int], None] | None
    _stage_plan: tuple[str, ...]

    def _report_progress(self, stage_name: str) -> None:
        if self._stage_progress_callback is None or stage_name not in self._stage_plan:
            return
        self._stage_progress_callback(
            stage_name,
            self._stage_plan.index(stage_name) + 1,
            len(self._stage_plan),
        )

    def _on_transition(self, previous: str, current: str) -> None:
        if self._run_logger is not None and previous != current:
            self._run_logger.log_transition(previous, current)

    def _run_stage(
        self,
        stage_name: str,
        action: Callable[[], _StageResult],
    ) -> _StageResult:
        """Run one named stage, reporting progress and start/complete/failure events."""

        self._report_progress(stage_name)
        if self._run_logger is not None:
            self._run_logger.log_stage_start(stage_name)
        try:
            result = action()
        except Exception as exc:
            if self._run_logger is not None:
                self._run_logger.log_stage_failure(stage_name, type(exc).__name__)
            raise
        if self._run_logger is not None:
            self._run_logger.log_stage_complete(stage_name)
        return result
