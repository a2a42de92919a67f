"""Structured run logging.

Responsibilities:
- Emit concise, deterministic stage and status-transition log lines.
- Route every line through `loguru` to one configurable sink.
"""

from __future__ import annotations

import sys
from typing import TextIO

from loguru import logger


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    if not context:
        return ""
    tokens = [f"{key}={_sanitize_context_value(context[key])}" for key in sorted(context)]
    return " " + " ".join(tokens)


class RunLogger:
    """Emit deterministic logs for CLI-observable production activity."""

    def __init__(self, sink: TextIO | None = None, level: str = "INFO") -> None:
        """Bind a dedicated `loguru` handler to `sink`."""

        self._sink = sink or sys.stderr
        logger.remove()
        self._handler_id = logger.add(
            self._sink,
            format="{message}",
            level=level,
            colorize=False,
            filter=lambda record: record["extra"].get("audiodrama") is True,
        )
        self._logger = logger.bind(audiodrama=True)

    def close(self) -> None:
        """Detach this logger's handler."""

        logger.remove(self._handler_id)

    def _emit(self, level: str, event: str, stage: str, **context: object) -> None:
        line = f"[phase] level={level} stage={stage} event={event}{_format_context(context)}"
        self._logger.log(level, line)

    def log_stage_start(self, stage: str) -> None:
        self._emit("INFO", "start", stage)

    def log_stage_complete(self, stage: str) -> None:
        self._emit("INFO", "complete", stage)

    def log_stage_failure(self, stage: str, error_type: str) -> None:
        """Emit a stage-failure event without payload details."""

        self._emit("ERROR", "failure", stage, error_type=error_type)

    def log_transition(self, previous: str, current: str) -> None:
        """Emit one pipeline status transition."""

        self._emit("INFO", "transition", "status", **{"from": previous, "to": current})
