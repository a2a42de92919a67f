"""Background music mixing.

Responsibilities:
- Download and cache catalog music tracks.
- Mix a looped, attenuated music bed under the speech track with `ffmpeg`.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import requests

from ..errors import ProductionError
from ..parsing import normalize_optional_string
from .ambiance import MusicTrack


class MusicMixer:
    """Mix catalog music under a speech WAV using a fixed ffmpeg policy."""

    def __init__(self, cache_dir: Path, timeout_seconds: float = 60.0) -> None:
        self.cache_dir = cache_dir
        self.timeout_seconds = timeout_seconds

    def mix(
        self,
        speech_path: Path,
        track: MusicTrack,
        volume: float,
        output_path: Path,
    ) -> Path:
        """Write `speech_path` mixed with `track` at `volume` to `output_path`."""

        music_path = self.fetch_track(track)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        command = [
            "ffmpeg",
            "-y",
            "-hide_banner",
            "-loglevel",
            "error",
            "-i",
            str(speech_path),
            "-stream_loop",
            "-1",
            "-i",
            str(music_path),
            "-filter_complex",
            (
                f"[1:a]volume={volume:.3f}[bed];"
                "[0:a][bed]amix=inputs=2:duration=first:dropout_transition=0:normalize=0[out]"
            ),
            "-map",
            "[out]",
            "-c:a",
            "pcm_s16le",
            str(output_path),
        ]
        try:
            subprocess.run(command, check=True, capture_output=True, text=True)
        except FileNotFoundError as exc:
            raise ProductionError(
                "Mixing tool `ffmpeg` is not available on PATH.",
                stage="mix",
                hint="Install ffmpeg, or produce with `--music none`.",
            ) from exc
        except subprocess.CalledProcessError as exc:
            stderr = normalize_optional_string(exc.stderr) or "no stderr output"
            raise ProductionError(
                f"ffmpeg mixing failed for `{output_path.name}`: {stderr}",
                stage="mix",
                hint="Verify local ffmpeg has mp3 decoding support.",
            ) from exc
        return output_path

    def fetch_track(self, track: MusicTrack) -> Path:
        """Return a local copy of `track`, downloading it on first use."""

        cached = self.cache_dir / f"{track.key}.mp3"
        if cached.is_file():
            return cached
        try:
            response = requests.get(track.url, timeout=self.timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ProductionError(
                f"Failed to download music track `{track.name}`: {exc}",
                stage="mix",
                hint="Check network connectivity, or produce with `--music none`.",
            ) from exc
        if not response.content:
            raise ProductionError(
                f"Music track `{track.name}` downloaded empty.",
                stage="mix",
            )
        cached.parent.mkdir(parents=True, exist_ok=True)
        cached.write_bytes(response.content)
        return cached
