"""Integration-test fixtures for deterministic provider behavior."""

from __future__ import annotations

import io
from typing import Any
import wave

import pytest

from audiodrama import cli as cli_module
from audiodrama.llm.gemini_client import GeminiSpeechClient, GeminiTextClient

SCRIPT_PAYLOAD: dict[str, Any] = {
    "characters": ["Alice", "Bob"],
    "scenes": [
        {
            "setting": "A lighthouse kitchen",
            "elements": [
                {"type": "narration", "content": "Rain hammers the windows."},
                {"type": "sound_cue", "description": "door creaking open"},
                {"type": "dialogue", "character": "Alice", "content": "You're late."},
                {"type": "dialogue", "character": "Bob", "content": "The lamp went out."},
            ],
        }
    ],
}


class InMemoryCredentialStore:
    """Credential store stub that never touches the OS keyring."""

    def __init__(self) -> None:
        self.api_key: str | None = None

    def get_api_key(self) -> str | None:
        return self.api_key

    def set_api_key(self, api_key: str) -> None:
        self.api_key = api_key.strip()

    def clear_api_key(self) -> bool:
        existed = self.api_key is not None
        self.api_key = None
        return existed


@pytest.fixture(autouse=True)
def credential_store(monkeypatch: pytest.MonkeyPatch) -> InMemoryCredentialStore:
    """Route CLI credential access to an in-memory store."""

    store = InMemoryCredentialStore()
    monkeypatch.setattr(cli_module, "create_credential_store", lambda: store)
    return store


@pytest.fixture(autouse=True)
def speech_calls(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, str]]:
    """Mock Gemini calls in integration tests to avoid network/key requirements.

    Returns the list of recorded speech requests.
    """

    calls: list[dict[str, str]] = []

    def _mock_generate_json(self: GeminiTextClient, **kwargs: object) -> Any:
        _ = self
        _ = kwargs
        return SCRIPT_PAYLOAD

    def _mock_synthesize_speech(self: GeminiSpeechClient, **kwargs: str) -> bytes:
        _ = self
        calls.append(dict(kwargs))
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav_file:
            wav_file.setnchannels(1)
            wav_file.setsampwidth(2)
            wav_file.setframerate(24000)
            wav_file.writeframes(b"\x00\x00" * 2400)
        return buffer.getvalue()

    monkeypatch.setattr(GeminiTextClient, "generate_json", _mock_generate_json)
    monkeypatch.setattr(GeminiSpeechClient, "synthesize_speech", _mock_synthesize_speech)
    for env_key in (
        "GEMINI_API_KEY",
        "AUDIODRAMA_PROVIDER_ANALYZER",
        "AUDIODRAMA_PROVIDER_ASSEMBLER",
        "AUDIODRAMA_MODEL_ANALYZE",
        "AUDIODRAMA_MODEL_TTS",
    ):
        monkeypatch.delenv(env_key, raising=False)
    return calls
