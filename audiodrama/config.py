"""Configuration model and loaders for audiodrama.

Responsibilities:
- Define runtime configuration as a typed dataclass.
- Provide deterministic precedence resolution for provider runtime settings.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `AudioDramaConfig`: normalized settings for one CLI session.
- `ProviderRuntimeConfig`: resolved provider/model runtime values.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `AudioDramaConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import normalize_optional_string, parse_positive_number


_DEFAULT_ANALYZE_MODEL = "gemini-2.5-flash"
_DEFAULT_TTS_MODEL = "gemini-2.5-flash-preview-tts"
_DEFAULT_WORKSPACE_DIR = Path(".audiodrama")
_DEFAULT_TIMEOUT_SECONDS = 120.0
_DEFAULT_LINE_PAUSE_MS = 350
_SUPPORTED_PROVIDER_IDS = frozenset({"gemini"})


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic runtime value precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProviderRuntimeConfig:
    """Resolved provider and model identifiers for one session.

    The API key is resolved here but never written to snapshots or logs.
    """

    analyzer_provider: str
    assembler_provider: str
    analyze_model: str
    tts_model: str
    api_key: str | None = None

    def as_display_metadata(self) -> dict[str, str]:
        """Return non-secret runtime values safe to print."""

        return {
            "provider_analyzer": self.analyzer_provider,
            "provider_assembler": self.assembler_provider,
            "model_analyze": self.analyze_model,
            "model_tts": self.tts_model,
        }


@dataclass(slots=True)
class AudioDramaConfig:
    """Runtime configuration.

    Attributes:
        workspace_dir: Directory for the saved snapshot, audio, and music cache.
        provider_analyzer: Script analysis provider identifier.
        provider_assembler: Audio assembly provider identifier.
        model_analyze: Model used for script analysis.
        model_tts: Model used for speech synthesis.
        api_key: Optional provider API key.
        request_timeout_seconds: HTTP timeout for one provider request.
        line_pause_ms: Silence inserted between performed lines.
        extra: Additional free-form metadata.
    """

    workspace_dir: Path = _DEFAULT_WORKSPACE_DIR
    provider_analyzer: str = "gemini"
    provider_assembler: str = "gemini"
    model_analyze: str = _DEFAULT_ANALYZE_MODEL
    model_tts: str = _DEFAULT_TTS_MODEL
    api_key: str | None = None
    request_timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS
    line_pause_ms: int = _DEFAULT_LINE_PAUSE_MS
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)
    extra: dict[str, str] = field(default_factory=dict)

    def validate(self) -> None:
        """Validate configuration values before use."""

        self._validate_provider_id(self.provider_analyzer, "provider_analyzer")
        self._validate_provider_id(self.provider_assembler, "provider_assembler")
        self._require_non_empty(self.model_analyze, "model_analyze")
        self._require_non_empty(self.model_tts, "model_tts")
        if self.request_timeout_seconds <= 0:
            raise ValueError("`request_timeout_seconds` must be greater than zero.")
        if self.line_pause_ms < 0:
            raise ValueError("`line_pause_ms` must not be negative.")

    def resolved_provider_runtime(
        self, sources: RuntimeConfigSources | None = None
    ) -> ProviderRuntimeConfig:
        """Resolve provider settings with deterministic source precedence.

        Precedence for each key is:
        `cli` > `secure` > `env` > config field default.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources

        resolved = ProviderRuntimeConfig(
            analyzer_provider=self._resolve_runtime_value(
                "provider_analyzer",
                "AUDIODRAMA_PROVIDER_ANALYZER",
                self.provider_analyzer,
                resolved_sources,
            ),
            assembler_provider=self._resolve_runtime_value(
                "provider_assembler",
                "AUDIODRAMA_PROVIDER_ASSEMBLER",
                self.provider_assembler,
                resolved_sources,
            ),
            analyze_model=self._resolve_runtime_value(
                "model_analyze",
                "AUDIODRAMA_MODEL_ANALYZE",
                self.model_analyze,
                resolved_sources,
            ),
            tts_model=self._resolve_runtime_value(
                "model_tts",
                "AUDIODRAMA_MODEL_TTS",
                self.model_tts,
                resolved_sources,
            ),
            api_key=self._resolve_optional_runtime_value(
                "api_key",
                "GEMINI_API_KEY",
                self.api_key,
                resolved_sources,
            ),
        )
        self._validate_provider_id(resolved.analyzer_provider, "provider_analyzer")
        self._validate_provider_id(resolved.assembler_provider, "provider_assembler")
        return resolved

    def _resolve_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str:
        value = self._resolve_optional_runtime_value(key, env_key, default_value, sources)
        if value is None:
            raise ValueError(
                f"`{key}` could not be resolved from CLI, secure storage, env, or defaults."
            )
        return value

    def _resolve_optional_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Resolve an optional runtime value from sources in precedence order."""

        for mapping, lookup_key in (
            (sources.cli, key),
            (sources.secure, key),
            (sources.env, env_key),
        ):
            value = self._normalized_lookup(mapping, lookup_key)
            if value is not None:
                return value
        return normalize_optional_string(default_value)

    @staticmethod
    def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
        if key not in mapping:
            return None
        return normalize_optional_string(mapping.get(key))

    @staticmethod
    def _validate_provider_id(provider_id: str, field_name: str) -> None:
        """Validate provider identifiers against currently supported providers."""

        if provider_id not in _SUPPORTED_PROVIDER_IDS:
            supported = ", ".join(sorted(_SUPPORTED_PROVIDER_IDS))
            raise ValueError(
                f"Unsupported `{field_name}` value `{provider_id}`; supported: {supported}."
            )

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `AudioDramaConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "workspace_dir",
            "provider_analyzer",
            "provider_assembler",
            "model_analyze",
            "model_tts",
            "api_key",
            "request_timeout_seconds",
            "line_pause_ms",
            "extra",
        }
    )
    _RUNTIME_ENV_KEYS = frozenset(
        {
            "AUDIODRAMA_PROVIDER_ANALYZER",
            "AUDIODRAMA_PROVIDER_ASSEMBLER",
            "AUDIODRAMA_MODEL_ANALYZE",
            "AUDIODRAMA_MODEL_TTS",
            "GEMINI_API_KEY",
        }
    )

    @staticmethod
    def from_yaml(path: Path) -> AudioDramaConfig:
        """Create a validated config from a YAML file.

        Raises:
            ValueError: On invalid YAML, unsupported keys, or invalid values.
        """

        try:
            payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` could not be parsed: {exc}") from exc
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> AudioDramaConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        def lookup(key: str) -> str | None:
            return normalize_optional_string(env_map.get(key))

        workspace_dir = lookup("AUDIODRAMA_WORKSPACE_DIR")
        timeout = lookup("AUDIODRAMA_REQUEST_TIMEOUT_SECONDS")
        line_pause = lookup("AUDIODRAMA_LINE_PAUSE_MS")

        config = AudioDramaConfig(
            workspace_dir=Path(workspace_dir) if workspace_dir else _DEFAULT_WORKSPACE_DIR,
            provider_analyzer=lookup("AUDIODRAMA_PROVIDER_ANALYZER") or "gemini",
            provider_assembler=lookup("AUDIODRAMA_PROVIDER_ASSEMBLER") or "gemini",
            model_analyze=lookup("AUDIODRAMA_MODEL_ANALYZE") or _DEFAULT_ANALYZE_MODEL,
            model_tts=lookup("AUDIODRAMA_MODEL_TTS") or _DEFAULT_TTS_MODEL,
            api_key=lookup("GEMINI_API_KEY"),
            request_timeout_seconds=(
                parse_positive_number(timeout, "AUDIODRAMA_REQUEST_TIMEOUT_SECONDS")
                if timeout
                else _DEFAULT_TIMEOUT_SECONDS
            ),
            line_pause_ms=(
                ConfigLoader._non_negative_int(line_pause, "AUDIODRAMA_LINE_PAUSE_MS")
                if line_pause
                else _DEFAULT_LINE_PAUSE_MS
            ),
            runtime_sources=RuntimeConfigSources(
                env={
                    key: value
                    for key, value in env_map.items()
                    if key in ConfigLoader._RUNTIME_ENV_KEYS
                    and normalize_optional_string(value) is not None
                }
            ),
        )
        config.validate()
        return config

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> AudioDramaConfig:
        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            raise ValueError(
                f"{source_label} includes unsupported key(s): {', '.join(unknown)}."
            )

        def optional_string(key: str) -> str | None:
            return normalize_optional_string(payload.get(key))

        workspace_dir = optional_string("workspace_dir")
        timeout = payload.get("request_timeout_seconds")
        line_pause = payload.get("line_pause_ms")

        config = AudioDramaConfig(
            workspace_dir=Path(workspace_dir) if workspace_dir else _DEFAULT_WORKSPACE_DIR,
            provider_analyzer=optional_string("provider_analyzer") or "gemini",
            provider_assembler=optional_string("provider_assembler") or "gemini",
            model_analyze=optional_string("model_analyze") or _DEFAULT_ANALYZE_MODEL,
            model_tts=optional_string("model_tts") or _DEFAULT_TTS_MODEL,
            api_key=optional_string("api_key"),
            request_timeout_seconds=(
                parse_positive_number(timeout, f"{source_label} field request_timeout_seconds")
                if timeout is not None
                else _DEFAULT_TIMEOUT_SECONDS
            ),
            line_pause_ms=(
                ConfigLoader._non_negative_int(line_pause, f"{source_label} field line_pause_ms")
                if line_pause is not None
                else _DEFAULT_LINE_PAUSE_MS
            ),
            extra=ConfigLoader._optional_string_map(payload, "extra", source_label),
        )
        config.validate()
        return config

    @staticmethod
    def _non_negative_int(value: object, field_name: str) -> int:
        if isinstance(value, bool):
            raise ValueError(f"`{field_name}` must be a non-negative integer.")
        try:
            parsed = int(str(value).strip())
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a non-negative integer.") from exc
        if parsed < 0:
            raise ValueError(f"`{field_name}` must be a non-negative integer.")
        return parsed

    @staticmethod
    def _optional_string_map(
        payload: Mapping[str, Any], key: str, source_label: str
    ) -> dict[str, str]:
        """Read an optional mapping with non-empty string keys and values."""

        raw = payload.get(key)
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise ValueError(f"{source_label} field `{key}` must be a mapping/object.")

        normalized: dict[str, str] = {}
        for raw_key, raw_value in raw.items():
            key_value = normalize_optional_string(raw_key)
            value_value = normalize_optional_string(raw_value)
            if key_value is None:
                raise ValueError(f"{source_label} field `{key}` contains a blank key.")
            if value_value is None:
                raise ValueError(
                    f"{source_label} field `{key}` contains blank value for `{key_value}`."
                )
            normalized[key_value] = value_value
        return normalized
