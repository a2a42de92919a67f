"""Unit tests for Gemini REST clients, script analysis, and line synthesis."""

from __future__ import annotations

import base64
import io
import json
from typing import Any
import wave

import pytest

from audiodrama.errors import AnalysisError
from audiodrama.llm import gemini_client as gemini_http
from audiodrama.llm.gemini_client import (
    GeminiProviderError,
    GeminiSpeechClient,
    GeminiTextClient,
)
from audiodrama.llm.script_analyzer import GeminiScriptAnalyzer, validate_analysis_result
from audiodrama.tts.synthesizer import GeminiLineSynthesizer, PerformanceLine


class _MockRequestsResponse:
    """Minimal requests response mock for HTTP transport patching."""

    def __init__(self, *, payload: bytes, status_code: int = 200) -> None:
        self.content = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise gemini_http.requests.HTTPError(
                f"HTTP {self.status_code} error",
                response=self,  # type: ignore[arg-type]
            )


def _candidate_body(*parts: dict[str, Any]) -> bytes:
    return json.dumps({"candidates": [{"content": {"parts": list(parts)}}]}).encode("utf-8")


def _script_json() -> str:
    return json.dumps(
        {
            "characters": ["Mara"],
            "scenes": [
                {
                    "setting": "Lighthouse",
                    "elements": [
                        {"type": "narration", "content": "Waves crash."},
                        {"type": "dialogue", "character": "Mara", "content": "Who's there?"},
                        {"type": "sound_cue", "description": "door creaks"},
                    ],
                }
            ],
        }
    )


def test_text_client_posts_structured_output_request(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def _mock_post(url: str, **kwargs: Any) -> _MockRequestsResponse:
        captured["url"] = url
        captured.update(kwargs)
        return _MockRequestsResponse(payload=_candidate_body({"text": '{"ok": true}'}))

    monkeypatch.setattr(gemini_http.requests, "post", _mock_post)
    client = GeminiTextClient(api_key=" test-key ", timeout_seconds=9.0)

    result = client.generate_json(
        model="gemini-2.5-flash",
        system_prompt="system",
        user_prompt="user",
        response_schema={"type": "OBJECT"},
    )

    assert result == {"ok": True}
    assert captured["url"] == (
        "https://generativelanguage.googleapis.com/v1beta/models/"
        "gemini-2.5-flash:generateContent"
    )
    assert captured["headers"]["x-goog-api-key"] == "test-key"
    assert captured["timeout"] == 9.0
    generation_config = captured["json"]["generationConfig"]
    assert generation_config["responseMimeType"] == "application/json"
    assert generation_config["responseSchema"] == {"type": "OBJECT"}


def test_missing_api_key_fails_before_any_request(monkeypatch: pytest.MonkeyPatch) -> None:
    def _unexpected_post(url: str, **kwargs: Any) -> _MockRequestsResponse:
        raise AssertionError("no request expected")

    monkeypatch.setattr(gemini_http.requests, "post", _unexpected_post)

    with pytest.raises(GeminiProviderError) as exc_info:
        GeminiTextClient(api_key=None).generate_json(
            model="m", system_prompt="s", user_prompt="u", response_schema={}
        )

    assert exc_info.value.failure_kind == "invalid_api_key"


@pytest.mark.parametrize(
    ("status_code", "body", "failure_kind"),
    [
        (400, {"error": {"status": "INVALID_ARGUMENT", "message": "API key not valid."}}, "invalid_api_key"),
        (429, {"error": {"status": "RESOURCE_EXHAUSTED", "message": "Quota exceeded."}}, "quota_exhausted"),
        (404, {"error": {"status": "NOT_FOUND", "message": "model foo is not found"}}, "invalid_model"),
        (500, {"error": {"status": "INTERNAL", "message": "boom"}}, "http_error"),
    ],
)
def test_http_failures_are_classified(
    monkeypatch: pytest.MonkeyPatch,
    status_code: int,
    body: dict[str, Any],
    failure_kind: str,
) -> None:
    monkeypatch.setattr(
        gemini_http.requests,
        "post",
        lambda url, **kwargs: _MockRequestsResponse(
            payload=json.dumps(body).encode("utf-8"), status_code=status_code
        ),
    )

    with pytest.raises(GeminiProviderError) as exc_info:
        GeminiTextClient(api_key="k").generate_json(
            model="m", system_prompt="s", user_prompt="u", response_schema={}
        )

    assert exc_info.value.failure_kind == failure_kind
    assert exc_info.value.status_code == status_code


def test_http_error_details_redact_api_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    leaked = "AIza" + "x" * 30
    body = {"error": {"status": "INTERNAL", "message": f"failed for key {leaked}"}}
    monkeypatch.setattr(
        gemini_http.requests,
        "post",
        lambda url, **kwargs: _MockRequestsResponse(
            payload=json.dumps(body).encode("utf-8"), status_code=500
        ),
    )

    with pytest.raises(GeminiProviderError) as exc_info:
        GeminiTextClient(api_key="k").generate_json(
            model="m", system_prompt="s", user_prompt="u", response_schema={}
        )

    assert leaked not in str(exc_info.value)
    assert "[redacted-key]" in str(exc_info.value)


def test_transport_timeout_is_classified(monkeypatch: pytest.MonkeyPatch) -> None:
    def _timeout(url: str, **kwargs: Any) -> _MockRequestsResponse:
        raise gemini_http.requests.Timeout("read timed out")

    monkeypatch.setattr(gemini_http.requests, "post", _timeout)

    with pytest.raises(GeminiProviderError) as exc_info:
        GeminiTextClient(api_key="k").generate_json(
            model="m", system_prompt="s", user_prompt="u", response_schema={}
        )

    assert exc_info.value.failure_kind == "timeout"


def test_blocked_prompt_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    body = json.dumps({"promptFeedback": {"blockReason": "SAFETY"}}).encode("utf-8")
    monkeypatch.setattr(
        gemini_http.requests, "post", lambda url, **kwargs: _MockRequestsResponse(payload=body)
    )

    with pytest.raises(GeminiProviderError) as exc_info:
        GeminiTextClient(api_key="k").generate_json(
            model="m", system_prompt="s", user_prompt="u", response_schema={}
        )

    assert exc_info.value.failure_kind == "blocked"


def test_speech_client_wraps_inline_pcm_into_wav(monkeypatch: pytest.MonkeyPatch) -> None:
    pcm = b"\x01\x00" * 480
    captured: dict[str, Any] = {}

    def _mock_post(url: str, **kwargs: Any) -> _MockRequestsResponse:
        captured.update(kwargs)
        inline = {"mimeType": "audio/L16;rate=24000", "data": base64.b64encode(pcm).decode()}
        return _MockRequestsResponse(payload=_candidate_body({"inlineData": inline}))

    monkeypatch.setattr(gemini_http.requests, "post", _mock_post)

    wav_payload = GeminiSpeechClient(api_key="k").synthesize_speech(
        model="gemini-2.5-flash-preview-tts", voice="Puck", text="Hello"
    )

    speech_config = captured["json"]["generationConfig"]["speechConfig"]
    assert speech_config["voiceConfig"]["prebuiltVoiceConfig"]["voiceName"] == "Puck"
    assert captured["json"]["generationConfig"]["responseModalities"] == ["AUDIO"]
    with wave.open(io.BytesIO(wav_payload), "rb") as wav_file:
        assert wav_file.getframerate() == 24000
        assert wav_file.getsampwidth() == 2
        assert wav_file.getnchannels() == 1
        assert wav_file.readframes(wav_file.getnframes()) == pcm


def test_speech_client_rejects_response_without_audio(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        gemini_http.requests,
        "post",
        lambda url, **kwargs: _MockRequestsResponse(payload=_candidate_body({"text": "no audio"})),
    )

    with pytest.raises(GeminiProviderError, match="no inline audio"):
        GeminiSpeechClient(api_key="k").synthesize_speech(model="m", voice="Kore", text="Hi")


def test_line_synthesizer_reports_duration(monkeypatch: pytest.MonkeyPatch) -> None:
    pcm = b"\x00\x00" * 12000
    inline = {"data": base64.b64encode(pcm).decode()}
    monkeypatch.setattr(
        gemini_http.requests,
        "post",
        lambda url, **kwargs: _MockRequestsResponse(payload=_candidate_body({"inlineData": inline})),
    )
    line = PerformanceLine(scene_index=1, role="Narrator", voice="Zephyr", text="Hi")

    spoken = GeminiLineSynthesizer(api_key="k").synthesize(line)

    assert spoken.line == line
    assert spoken.duration_seconds == pytest.approx(0.5)


def test_analyzer_returns_validated_script(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def _mock_post(url: str, **kwargs: Any) -> _MockRequestsResponse:
        captured["url"] = url
        captured.update(kwargs)
        return _MockRequestsResponse(payload=_candidate_body({"text": _script_json()}))

    monkeypatch.setattr(gemini_http.requests, "post", _mock_post)

    script = GeminiScriptAnalyzer(api_key="k").analyze("A dark and stormy night.")

    assert script.characters == ("Mara",)
    assert len(script.scenes[0].elements) == 3
    assert captured["url"].endswith("/models/gemini-2.5-flash:generateContent")
    user_text = captured["json"]["contents"][0]["parts"][0]["text"]
    assert user_text.endswith("A dark and stormy night.")


def test_analyzer_maps_provider_failures_to_analysis_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    body = {"error": {"status": "RESOURCE_EXHAUSTED", "message": "Quota exceeded."}}
    monkeypatch.setattr(
        gemini_http.requests,
        "post",
        lambda url, **kwargs: _MockRequestsResponse(
            payload=json.dumps(body).encode("utf-8"), status_code=429
        ),
    )

    with pytest.raises(AnalysisError) as exc_info:
        GeminiScriptAnalyzer(api_key="k").analyze("Story")

    assert exc_info.value.stage == "analyze"
    assert exc_info.value.hint == "Wait for quota to reset or use another API key."


def test_analyzer_rejects_malformed_structured_output(monkeypatch: pytest.MonkeyPatch) -> None:
    payload = json.dumps({"characters": ["Mara"], "scenes": [{"setting": "x", "elements": [{"type": "song"}]}]})
    monkeypatch.setattr(
        gemini_http.requests,
        "post",
        lambda url, **kwargs: _MockRequestsResponse(payload=_candidate_body({"text": payload})),
    )

    with pytest.raises(AnalysisError, match="malformed"):
        GeminiScriptAnalyzer(api_key="k").analyze("Story")


def test_validate_analysis_result_requires_characters_and_scenes() -> None:
    with pytest.raises(AnalysisError):
        validate_analysis_result({"scenes": []})
    with pytest.raises(AnalysisError):
        validate_analysis_result({"characters": []})
