"""Line-level speech synthesis.

Responsibilities:
- Flatten a dramatized script into ordered performance lines with voices.
- Define the protocol for per-line speech synthesis and a Gemini implementation.
"""

from __future__ import annotations

import io
import wave
from dataclasses import dataclass
from typing import Mapping, Protocol, assert_never

from ..llm.gemini_client import GeminiProviderError, GeminiSpeechClient
from ..llm.prompts import PromptLibrary
from ..models.datatypes import NARRATOR, Dialogue, DramatizedScript, Narration, SoundCue
from .voices import voice_profile


@dataclass(frozen=True, slots=True)
class PerformanceLine:
    """One synthesizable line.

    Attributes:
        scene_index: 1-based scene index the line belongs to.
        role: Speaking role (`Narrator` or a character name).
        voice: Provider voice identifier.
        text: Text or performance prompt sent to the provider.
    """

    scene_index: int
    role: str
    voice: str
    text: str


@dataclass(frozen=True, slots=True)
class SpokenLine:
    """Synthesized WAV audio for one performance line."""

    line: PerformanceLine
    wav_bytes: bytes
    duration_seconds: float


def plan_performance(
    script: DramatizedScript,
    voices: Mapping[str, str],
    *,
    generate_sfx: bool,
    prompts: PromptLibrary | None = None,
) -> list[PerformanceLine]:
    """Return performance lines in script order.

    Sound cues are voiced by the narrator when `generate_sfx` is on and skipped
    otherwise. Blank lines are dropped.
    """

    library = prompts if prompts is not None else PromptLibrary()
    narrator_voice = voice_profile(voices[NARRATOR]).provider_voice_id
    lines: list[PerformanceLine] = []
    for scene_index, scene in enumerate(script.scenes, start=1):
        for element in scene.elements:
            if isinstance(element, Narration):
                role, voice, text = NARRATOR, narrator_voice, element.content
            elif isinstance(element, Dialogue):
                role = element.character
                voice = voice_profile(voices[role]).provider_voice_id
                text = element.content
            elif isinstance(element, SoundCue):
                if not generate_sfx:
                    continue
                role, voice = NARRATOR, narrator_voice
                text = library.sound_cue_prompt(element.description)
            else:
                assert_never(element)
            if text.strip():
                lines.append(
                    PerformanceLine(scene_index=scene_index, role=role, voice=voice, text=text)
                )
    return lines


class LineSynthesizer(Protocol):
    """Protocol for TTS provider implementations."""

    def synthesize(self, line: PerformanceLine) -> SpokenLine:
        """Synthesize one performance line into WAV audio."""


class GeminiLineSynthesizer:
    """Gemini prebuilt-voice synthesizer."""

    def __init__(
        self,
        model: str = "gemini-2.5-flash-preview-tts",
        api_key: str | None = None,
        timeout_seconds: float = 120.0,
    ) -> None:
        self.model = model
        self.client = GeminiSpeechClient(api_key=api_key, timeout_seconds=timeout_seconds)

    def synthesize(self, line: PerformanceLine) -> SpokenLine:
        wav_bytes = self.client.synthesize_speech(
            model=self.model,
            voice=line.voice,
            text=line.text,
        )
        return SpokenLine(
            line=line,
            wav_bytes=wav_bytes,
            duration_seconds=wav_duration_seconds(wav_bytes),
        )


def wav_duration_seconds(wav_bytes: bytes) -> float:
    """Compute WAV duration in seconds from in-memory bytes."""

    try:
        with wave.open(io.BytesIO(wav_bytes), "rb") as wav_file:
            frame_count = wav_file.getnframes()
            sample_rate = wav_file.getframerate()
    except (wave.Error, EOFError) as exc:
        raise GeminiProviderError("Speech response is not a readable WAV payload.") from exc
    if sample_rate <= 0:
        raise GeminiProviderError("Speech response has invalid WAV sample rate.")
    return frame_count / float(sample_rate)
