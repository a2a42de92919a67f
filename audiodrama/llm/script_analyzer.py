"""Script analysis provider implementations.

Responsibilities:
- Turn free-form text into a validated `DramatizedScript`.
- Map provider failures and malformed output to `AnalysisError`.
"""

from __future__ import annotations

from typing import Protocol

from ..errors import AnalysisError
from ..models.datatypes import DramatizedScript
from ..models.script_codec import script_from_payload
from .gemini_client import GeminiProviderError, GeminiTextClient
from .prompts import SCRIPT_RESPONSE_SCHEMA, PromptLibrary


class ScriptAnalyzer(Protocol):
    """Protocol for script analysis providers."""

    def analyze(self, text: str) -> DramatizedScript:
        """Analyze non-empty text into a dramatized script."""


class GeminiScriptAnalyzer:
    """Gemini-backed analyzer using structured JSON output."""

    def __init__(
        self,
        model: str = "gemini-2.5-flash",
        provider_id: str = "gemini",
        api_key: str | None = None,
        timeout_seconds: float = 120.0,
    ) -> None:
        """Initialize Gemini-backed analysis settings."""

        self.model = model
        self.provider_id = provider_id
        self.client = GeminiTextClient(api_key=api_key, timeout_seconds=timeout_seconds)
        self.prompts = PromptLibrary()

    def analyze(self, text: str) -> DramatizedScript:
        """Analyze text and validate the provider's result shape.

        Raises:
            AnalysisError: On provider failure or when the result is malformed.
        """

        try:
            payload = self.client.generate_json(
                model=self.model,
                system_prompt=self.prompts.analysis_system_prompt(),
                user_prompt=self.prompts.analysis_prompt(text),
                response_schema=SCRIPT_RESPONSE_SCHEMA,
            )
        except GeminiProviderError as exc:
            raise AnalysisError(
                f"Failed to analyze the script: {exc}",
                hint=_hint_for_failure(exc.failure_kind),
            ) from exc
        return validate_analysis_result(payload)


def validate_analysis_result(payload: object) -> DramatizedScript:
    """Validate an analyzer payload into a script or raise `AnalysisError`."""

    try:
        return script_from_payload(payload)
    except ValueError as exc:
        raise AnalysisError(
            f"Script analysis returned a malformed result: {exc}",
            hint="Retry the analysis; the provider output did not match the script shape.",
        ) from exc


def _hint_for_failure(failure_kind: str) -> str:
    return {
        "invalid_api_key": "Check the Gemini API key and rerun.",
        "quota_exhausted": "Wait for quota to reset or use another API key.",
        "invalid_model": "Choose a supported model with `--model-analyze`.",
        "timeout": "Retry, or raise `request_timeout_seconds` in the config.",
        "blocked": "Revise the input text and retry.",
    }.get(failure_kind, "Retry the analysis; check network connectivity if it persists.")
