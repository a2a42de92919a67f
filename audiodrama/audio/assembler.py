"""Audio assembly provider implementations.

Responsibilities:
- Check production preconditions before any provider call.
- Synthesize, merge, and mix a dramatized script into one audio artifact.
- Map provider and tooling failures to `ProductionError`.
"""

from __future__ import annotations

from hashlib import sha256
import json
from pathlib import Path
from typing import Mapping, Protocol

from ..errors import IncompleteVoiceMapError, InvalidVoiceError, ProductionError
from ..llm.gemini_client import GeminiProviderError
from ..models.datatypes import AmbianceConfig, AudioArtifactRef, DramatizedScript
from ..models.script_codec import script_to_payload
from ..tts.synthesizer import GeminiLineSynthesizer, LineSynthesizer, plan_performance
from ..tts.voices import missing_roles
from .ambiance import MUSIC_TRACKS, NO_MUSIC_TRACK
from .merger import WavMerger
from .mixer import MusicMixer


class AudioAssembler(Protocol):
    """Protocol for audio assembly providers."""

    def produce(
        self,
        script: DramatizedScript,
        voices: Mapping[str, str],
        ambiance: AmbianceConfig,
    ) -> AudioArtifactRef:
        """Produce one audio artifact for a script."""


def require_complete_voice_map(script: DramatizedScript, voices: Mapping[str, str]) -> None:
    """Raise `IncompleteVoiceMapError` if any speaking role lacks a voice."""

    missing = missing_roles(script, voices)
    if missing:
        raise IncompleteVoiceMapError(missing)


class GeminiAudioAssembler:
    """Assemble a script line by line with Gemini prebuilt voices."""

    def __init__(
        self,
        output_root: Path,
        model: str = "gemini-2.5-flash-preview-tts",
        api_key: str | None = None,
        timeout_seconds: float = 120.0,
        line_pause_ms: int = 350,
        synthesizer: LineSynthesizer | None = None,
        mixer: MusicMixer | None = None,
    ) -> None:
        self.output_root = output_root
        self.synthesizer = (
            synthesizer
            if synthesizer is not None
            else GeminiLineSynthesizer(
                model=model,
                api_key=api_key,
                timeout_seconds=timeout_seconds,
            )
        )
        self.merger = WavMerger(pause_ms=line_pause_ms)
        self.mixer = mixer if mixer is not None else MusicMixer(output_root / "music")

    def produce(
        self,
        script: DramatizedScript,
        voices: Mapping[str, str],
        ambiance: AmbianceConfig,
    ) -> AudioArtifactRef:
        """Synthesize, merge, and optionally mix `script`.

        Raises:
            IncompleteVoiceMapError: Before any synthesis, when a role has no voice.
            ProductionError: On any synthesis, merge, or mixing failure.
        """

        require_complete_voice_map(script, voices)
        try:
            lines = plan_performance(script, voices, generate_sfx=ambiance.generate_sfx)
        except InvalidVoiceError as exc:
            raise ProductionError(exc.detail, hint=exc.hint) from exc
        if not lines:
            raise ProductionError(
                "The script has no lines to perform.",
                hint="Analyze a longer text or enable sound effects.",
            )

        spoken = []
        for line in lines:
            try:
                spoken.append(self.synthesizer.synthesize(line))
            except GeminiProviderError as exc:
                raise ProductionError(
                    f"Speech synthesis failed for {line.role} in scene "
                    f"{line.scene_index}: {exc}",
                    stage="synthesize",
                    hint="Retry production; check the API key and quota if it persists.",
                ) from exc

        production_id = self._production_id(script, voices, ambiance)
        speech_path = self.output_root / f"{production_id}-speech.wav"
        try:
            duration = self.merger.merge((item.wav_bytes for item in spoken), speech_path)
        except (ValueError, OSError) as exc:
            raise ProductionError(
                f"Failed to merge line audio: {exc}",
                stage="merge",
            ) from exc

        track = MUSIC_TRACKS.get(ambiance.music_track_key)
        if track is None or track.key == NO_MUSIC_TRACK or ambiance.music_volume <= 0.0:
            return AudioArtifactRef(path=speech_path, duration_seconds=duration)

        mixed_path = self.output_root / f"{production_id}.wav"
        self.mixer.mix(speech_path, track, ambiance.music_volume, mixed_path)
        return AudioArtifactRef(path=mixed_path, duration_seconds=duration)

    @staticmethod
    def _production_id(
        script: DramatizedScript,
        voices: Mapping[str, str],
        ambiance: AmbianceConfig,
    ) -> str:
        """Derive a deterministic artifact name from production inputs."""

        canonical = json.dumps(
            {
                "script": script_to_payload(script),
                "voices": dict(voices),
                "ambiance": [
                    ambiance.music_track_key,
                    ambiance.music_volume,
                    ambiance.generate_sfx,
                ],
            },
            sort_keys=True,
            separators=(",", ":"),
        )
        return f"production-{sha256(canonical.encode('utf-8')).hexdigest()[:12]}"
