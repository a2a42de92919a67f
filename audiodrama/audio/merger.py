"""WAV merge stage.

Responsibilities:
- Concatenate synthesized line audio in script order.
- Insert fixed silences between consecutive lines.
"""

from __future__ import annotations

import io
import wave
from pathlib import Path
from typing import Iterable

from ..llm.gemini_client import (
    GEMINI_PCM_CHANNELS,
    GEMINI_PCM_SAMPLE_RATE,
    GEMINI_PCM_SAMPLE_WIDTH,
)


class WavMerger:
    """Merge WAV payloads into one WAV output."""

    def __init__(self, pause_ms: int = 350) -> None:
        self.pause_ms = max(0, pause_ms)

    def merge(self, wav_payloads: Iterable[bytes], output_path: Path) -> float:
        """Merge ordered WAV payloads into `output_path` and return its duration.

        Raises:
            ValueError: If payloads disagree on channels, sample width, or rate.
        """

        output_path.parent.mkdir(parents=True, exist_ok=True)
        payloads = list(wav_payloads)

        channels = GEMINI_PCM_CHANNELS
        sample_width = GEMINI_PCM_SAMPLE_WIDTH
        framerate = GEMINI_PCM_SAMPLE_RATE
        if payloads:
            with wave.open(io.BytesIO(payloads[0]), "rb") as first:
                channels = first.getnchannels()
                sample_width = first.getsampwidth()
                framerate = first.getframerate()

        silence = b"\x00" * (
            int(framerate * self.pause_ms / 1000) * channels * sample_width
        )
        total_frames = 0
        with wave.open(str(output_path), "wb") as merged:
            merged.setnchannels(channels)
            merged.setsampwidth(sample_width)
            merged.setframerate(framerate)

            for position, payload in enumerate(payloads):
                with wave.open(io.BytesIO(payload), "rb") as part:
                    if (
                        part.getnchannels() != channels
                        or part.getsampwidth() != sample_width
                        or part.getframerate() != framerate
                    ):
                        raise ValueError(
                            f"Incompatible WAV parameters for line {position + 1}."
                        )
                    if position > 0 and silence:
                        merged.writeframes(silence)
                        total_frames += len(silence) // (channels * sample_width)
                    frame_count = part.getnframes()
                    merged.writeframes(part.readframes(frame_count))
                    total_frames += frame_count

        return total_frames / float(framerate)
