"""Gemini HTTP client utilities for analysis and speech stages.

Responsibilities:
- Send minimal `generateContent` requests to the Gemini REST API.
- Extract structured JSON text and inline audio payloads from responses.
- Raise actionable provider exceptions for stage-level error mapping.
"""

from __future__ import annotations

import base64
import binascii
import io
import json
import re
import socket
import wave
from typing import Any

import requests

GEMINI_PCM_SAMPLE_RATE = 24000
GEMINI_PCM_SAMPLE_WIDTH = 2
GEMINI_PCM_CHANNELS = 1


class GeminiProviderError(RuntimeError):
    """Raised when a Gemini request fails or returns malformed output."""

    def __init__(
        self,
        message: str,
        *,
        failure_kind: str = "unknown",
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        """Initialize provider error metadata for stage-aware diagnostics."""

        super().__init__(message)
        self.failure_kind = failure_kind
        self.status_code = status_code
        self.provider_code = provider_code


class _GeminiBaseClient:
    """Shared Gemini HTTP settings and helpers used by stage-specific clients."""

    _MAX_PROVIDER_MESSAGE_CHARS = 180

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_seconds: float = 120.0,
    ) -> None:
        """Initialize Gemini HTTP client settings."""

        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def _require_api_key(self) -> None:
        if not self.api_key:
            raise GeminiProviderError(
                "Missing Gemini API key. Set `GEMINI_API_KEY`, use `--api-key`, or "
                "store one with `audiodrama credentials --set-api-key`.",
                failure_kind="invalid_api_key",
            )

    def _generate_content(self, *, model: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST a `generateContent` request and return the decoded JSON body."""

        self._require_api_key()
        endpoint = f"{self.base_url}/models/{model}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        try:
            response = requests.post(
                endpoint,
                headers=headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            raw_body = bytes(response.content)
        except requests.HTTPError as exc:
            raise self._http_error_to_provider_error(exc) from exc
        except requests.RequestException as exc:
            failure_kind = self._classify_transport_failure(exc)
            if failure_kind == "timeout":
                detail = "Gemini request timed out."
            else:
                detail = f"Gemini request transport error: {self._short_message(str(exc))}"
            raise GeminiProviderError(detail, failure_kind=failure_kind) from exc
        except TimeoutError as exc:
            raise GeminiProviderError("Gemini request timed out.", failure_kind="timeout") from exc

        try:
            body = json.loads(raw_body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise GeminiProviderError("Gemini returned invalid JSON payload.") from exc
        if not isinstance(body, dict):
            raise GeminiProviderError("Gemini response root must be a JSON object.")
        return body

    @staticmethod
    def _first_candidate_parts(body: dict[str, Any]) -> list[dict[str, Any]]:
        """Return content parts of the first candidate, rejecting blocked responses."""

        candidates = body.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            feedback = body.get("promptFeedback")
            reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            if isinstance(reason, str) and reason:
                raise GeminiProviderError(
                    f"Gemini blocked the request ({reason}).",
                    failure_kind="blocked",
                )
            raise GeminiProviderError("Gemini response missing non-empty `candidates` list.")

        first = candidates[0]
        content = first.get("content") if isinstance(first, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list) or not parts:
            raise GeminiProviderError("Gemini response missing `candidates[0].content.parts`.")
        return [part for part in parts if isinstance(part, dict)]

    @classmethod
    def _redact_sensitive_tokens(cls, text: str) -> str:
        """Redact API-key-like tokens from provider error content."""

        redacted = re.sub(r"\bAIza[0-9A-Za-z_-]{20,}\b", "[redacted-key]", text)
        redacted = re.sub(r"(?i)(key=)[^&\s]+", r"\1[redacted-key]", redacted)
        return redacted

    @classmethod
    def _short_message(cls, text: str) -> str:
        compact = " ".join(text.split())
        if len(compact) <= cls._MAX_PROVIDER_MESSAGE_CHARS:
            return compact
        return f"{compact[: cls._MAX_PROVIDER_MESSAGE_CHARS - 1]}..."

    @classmethod
    def _extract_provider_message(cls, body: str) -> tuple[str, str | None]:
        """Extract a concise provider message and optional provider status code."""

        if not body:
            return "", None
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return cls._short_message(cls._redact_sensitive_tokens(body)), None

        provider_code: str | None = None
        message: str | None = None
        error_payload = payload.get("error") if isinstance(payload, dict) else None
        if isinstance(error_payload, dict):
            status_value = error_payload.get("status")
            if isinstance(status_value, str) and status_value.strip():
                provider_code = status_value.strip()
            message_value = error_payload.get("message")
            if isinstance(message_value, str) and message_value.strip():
                message = message_value.strip()
        if message is None:
            message = body
        return cls._short_message(cls._redact_sensitive_tokens(message)), provider_code

    @staticmethod
    def _classify_http_failure(
        status_code: int,
        provider_message: str,
        provider_code: str | None,
    ) -> str:
        """Classify Gemini HTTP errors into deterministic diagnostic kinds."""

        message_lower = provider_message.lower()
        normalized_code = provider_code.upper() if provider_code is not None else ""

        if status_code in {401, 403} or "api key" in message_lower:
            return "invalid_api_key"
        if normalized_code == "RESOURCE_EXHAUSTED" or status_code == 429:
            return "quota_exhausted"
        if normalized_code == "NOT_FOUND" and "model" in message_lower:
            return "invalid_model"
        if status_code in {408, 504} or "deadline" in message_lower:
            return "timeout"
        return "http_error"

    @staticmethod
    def _classify_transport_failure(reason: object) -> str:
        if isinstance(reason, TimeoutError | socket.timeout | requests.Timeout):
            return "timeout"
        return "transport"

    @classmethod
    def _http_error_to_provider_error(cls, exc: requests.HTTPError) -> GeminiProviderError:
        """Convert HTTP errors into normalized provider exceptions with metadata."""

        response = exc.response
        status_code = response.status_code if response is not None else 0
        body = ""
        if response is not None:
            body = bytes(response.content).decode("utf-8", errors="replace").strip()
        provider_message, provider_code = cls._extract_provider_message(body)
        failure_kind = cls._classify_http_failure(status_code, provider_message, provider_code)

        headline = {
            "invalid_api_key": "Gemini authentication failed",
            "quota_exhausted": "Gemini quota is exhausted for this request",
            "invalid_model": "Gemini rejected the selected model",
            "timeout": "Gemini request timed out",
        }.get(failure_kind, "Gemini request failed")

        if provider_message:
            detail = f"{headline} (HTTP {status_code}): {provider_message}"
        else:
            detail = f"{headline} (HTTP {status_code})."
        return GeminiProviderError(
            detail,
            failure_kind=failure_kind,
            status_code=status_code,
            provider_code=provider_code,
        )


class GeminiTextClient(_GeminiBaseClient):
    """Structured-output text generation client."""

    def generate_json(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        response_schema: dict[str, Any],
        temperature: float = 0.7,
    ) -> Any:
        """Return the decoded JSON document produced under `response_schema`."""

        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            },
        }
        body = self._generate_content(model=model, payload=payload)
        text = "".join(
            part["text"]
            for part in self._first_candidate_parts(body)
            if isinstance(part.get("text"), str)
        ).strip()
        if not text:
            raise GeminiProviderError("Gemini response text is empty.")
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise GeminiProviderError(
                "Gemini structured output is not valid JSON."
            ) from exc


class GeminiSpeechClient(_GeminiBaseClient):
    """Prebuilt-voice speech synthesis client."""

    def synthesize_speech(self, *, model: str, voice: str, text: str) -> bytes:
        """Return synthesized speech as mono 16-bit 24 kHz WAV bytes."""

        payload = {
            "contents": [{"parts": [{"text": text}]}],
            "generationConfig": {
                "responseModalities": ["AUDIO"],
                "speechConfig": {
                    "voiceConfig": {"prebuiltVoiceConfig": {"voiceName": voice}},
                },
            },
        }
        body = self._generate_content(model=model, payload=payload)
        for part in self._first_candidate_parts(body):
            inline = part.get("inlineData")
            if isinstance(inline, dict) and isinstance(inline.get("data"), str):
                try:
                    pcm = base64.b64decode(inline["data"], validate=True)
                except (binascii.Error, ValueError) as exc:
                    raise GeminiProviderError(
                        "Gemini speech response has invalid base64 audio."
                    ) from exc
                if not pcm:
                    raise GeminiProviderError("Gemini speech response is empty.")
                return pcm_to_wav(pcm)
        raise GeminiProviderError("Gemini speech response has no inline audio data.")


def pcm_to_wav(
    pcm: bytes,
    *,
    sample_rate: int = GEMINI_PCM_SAMPLE_RATE,
    sample_width: int = GEMINI_PCM_SAMPLE_WIDTH,
    channels: int = GEMINI_PCM_CHANNELS,
) -> bytes:
    """Wrap raw little-endian PCM frames in a WAV container."""

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(channels)
        wav_file.setsampwidth(sample_width)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return buffer.getvalue()
