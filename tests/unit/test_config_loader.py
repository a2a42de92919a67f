"""Unit tests for YAML/environment configuration loader behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from audiodrama.config import AudioDramaConfig, ConfigLoader, RuntimeConfigSources


def test_config_loader_from_yaml_loads_valid_config_and_normalizes_values(
    tmp_path: Path,
) -> None:
    """YAML loader should parse valid payloads and normalize blank-padded values."""

    config_path = tmp_path / "audiodrama.yml"
    config_path.write_text(
        """
workspace_dir: " studio "
provider_analyzer: " gemini "
model_analyze: " gemini-2.5-pro "
model_tts: " gemini-2.5-pro-preview-tts "
api_key: " test-key "
request_timeout_seconds: " 45 "
line_pause_ms: 500
extra:
  profile: " nightly "
""".strip(),
        encoding="utf-8",
    )

    config = ConfigLoader.from_yaml(config_path)

    assert config.workspace_dir == Path("studio")
    assert config.provider_analyzer == "gemini"
    assert config.provider_assembler == "gemini"
    assert config.model_analyze == "gemini-2.5-pro"
    assert config.model_tts == "gemini-2.5-pro-preview-tts"
    assert config.api_key == "test-key"
    assert config.request_timeout_seconds == 45.0
    assert config.line_pause_ms == 500
    assert config.extra == {"profile": "nightly"}


def test_config_loader_from_yaml_accepts_empty_file(tmp_path: Path) -> None:
    config_path = tmp_path / "empty.yml"
    config_path.write_text("", encoding="utf-8")

    config = ConfigLoader.from_yaml(config_path)

    assert config.workspace_dir == Path(".audiodrama")
    assert config.model_analyze == "gemini-2.5-flash"
    assert config.line_pause_ms == 350


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("- just\n- a list\n", "top-level mapping"),
        ("input_pdf: book.pdf\n", r"unsupported key\(s\): input_pdf"),
        ("request_timeout_seconds: 0\n", "greater than zero"),
        ("line_pause_ms: -5\n", "non-negative integer"),
        ("provider_analyzer: openai\n", "Unsupported `provider_analyzer`"),
        ("extra: nope\n", "must be a mapping"),
        ("key: [unclosed\n", "could not be parsed"),
    ],
)
def test_config_loader_from_yaml_rejects_invalid_payloads(
    tmp_path: Path, content: str, message: str
) -> None:
    config_path = tmp_path / "bad.yml"
    config_path.write_text(content, encoding="utf-8")

    with pytest.raises(ValueError, match=message):
        ConfigLoader.from_yaml(config_path)


def test_config_loader_from_env_reads_values_and_runtime_sources() -> None:
    """Env loader should parse typed values and keep runtime keys as env sources."""

    env = {
        "AUDIODRAMA_WORKSPACE_DIR": "env-studio",
        "AUDIODRAMA_MODEL_TTS": "gemini-tts-env",
        "AUDIODRAMA_REQUEST_TIMEOUT_SECONDS": "30",
        "AUDIODRAMA_LINE_PAUSE_MS": "0",
        "GEMINI_API_KEY": " env-key ",
        "UNRELATED": "ignored",
    }

    config = ConfigLoader.from_env(env)

    assert config.workspace_dir == Path("env-studio")
    assert config.model_tts == "gemini-tts-env"
    assert config.api_key == "env-key"
    assert config.request_timeout_seconds == 30.0
    assert config.line_pause_ms == 0
    assert dict(config.runtime_sources.env) == {
        "AUDIODRAMA_MODEL_TTS": "gemini-tts-env",
        "GEMINI_API_KEY": " env-key ",
    }


def test_config_loader_from_env_rejects_invalid_timeout() -> None:
    with pytest.raises(ValueError, match="AUDIODRAMA_REQUEST_TIMEOUT_SECONDS"):
        ConfigLoader.from_env({"AUDIODRAMA_REQUEST_TIMEOUT_SECONDS": "soon"})


def test_runtime_resolution_precedence_is_cli_then_secure_then_env_then_default() -> None:
    """Runtime values should follow deterministic source precedence."""

    config = AudioDramaConfig(api_key="config-key")
    sources = RuntimeConfigSources(
        cli={"model_analyze": "cli-model"},
        secure={"api_key": "secure-key", "model_analyze": "secure-model"},
        env={
            "GEMINI_API_KEY": "env-key",
            "AUDIODRAMA_MODEL_TTS": "env-tts",
            "AUDIODRAMA_MODEL_ANALYZE": "env-model",
        },
    )

    resolved = config.resolved_provider_runtime(sources)

    assert resolved.analyze_model == "cli-model"
    assert resolved.api_key == "secure-key"
    assert resolved.tts_model == "env-tts"
    assert resolved.analyzer_provider == "gemini"
    assert "api_key" not in resolved.as_display_metadata()


def test_runtime_resolution_ignores_blank_source_values() -> None:
    config = AudioDramaConfig()
    sources = RuntimeConfigSources(cli={"api_key": "   "}, env={"GEMINI_API_KEY": "env-key"})

    assert config.resolved_provider_runtime(sources).api_key == "env-key"


def test_runtime_resolution_rejects_unsupported_provider() -> None:
    config = AudioDramaConfig()
    sources = RuntimeConfigSources(env={"AUDIODRAMA_PROVIDER_ASSEMBLER": "elevenlabs"})

    with pytest.raises(ValueError, match="provider_assembler"):
        config.resolved_provider_runtime(sources)
