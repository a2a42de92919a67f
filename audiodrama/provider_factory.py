"""Provider factory helpers for analysis and audio assembly.

Responsibilities:
- Resolve provider identifiers to concrete analyzer and assembler implementations.
- Keep orchestration independent from concrete provider construction.
"""

from __future__ import annotations

from pathlib import Path

from .audio.assembler import AudioAssembler, GeminiAudioAssembler
from .llm.script_analyzer import GeminiScriptAnalyzer, ScriptAnalyzer


class ProviderFactory:
    """Factory for provider-backed clients used by the orchestrator."""

    @staticmethod
    def create_analyzer(
        provider_id: str,
        model: str,
        api_key: str | None = None,
        timeout_seconds: float = 120.0,
    ) -> ScriptAnalyzer:
        """Create a script analyzer for a configured provider identifier."""

        if provider_id == "gemini":
            return GeminiScriptAnalyzer(
                model=model,
                provider_id=provider_id,
                api_key=api_key,
                timeout_seconds=timeout_seconds,
            )
        raise ValueError(f"Unsupported analyzer provider `{provider_id}`.")

    @staticmethod
    def create_assembler(
        provider_id: str,
        output_root: Path,
        model: str,
        api_key: str | None = None,
        timeout_seconds: float = 120.0,
        line_pause_ms: int = 350,
    ) -> AudioAssembler:
        """Create an audio assembler for a configured provider identifier."""

        if provider_id == "gemini":
            return GeminiAudioAssembler(
                output_root=output_root,
                model=model,
                api_key=api_key,
                timeout_seconds=timeout_seconds,
                line_pause_ms=line_pause_ms,
            )
        raise ValueError(f"Unsupported assembler provider `{provider_id}`.")
