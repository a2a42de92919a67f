"""Background music catalog and ambiance settings.

Responsibilities:
- Declare the closed catalog of background music tracks.
- Hold user-editable ambiance settings and hand out frozen snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Mapping

from ..errors import UnknownTrackError
from ..models.datatypes import AmbianceConfig

NO_MUSIC_TRACK = "none"


@dataclass(frozen=True, slots=True)
class MusicTrack:
    """One catalog entry; an empty `url` means no music."""

    key: str
    name: str
    url: str


MUSIC_TRACKS: Mapping[str, MusicTrack] = MappingProxyType(
    {
        track.key: track
        for track in (
            MusicTrack(NO_MUSIC_TRACK, "None", ""),
            MusicTrack(
                "cinematic",
                "Cinematic Suspense",
                "https://cdn.pixabay.com/download/audio/2022/11/21/audio_a28b572342.mp3",
            ),
            MusicTrack(
                "mysterious",
                "Mysterious Ambient",
                "https://cdn.pixabay.com/download/audio/2022/08/03/audio_eb7219f5d3.mp3",
            ),
            MusicTrack(
                "fantasy",
                "Fantasy Adventure",
                "https://cdn.pixabay.com/download/audio/2024/05/10/audio_29759e51c3.mp3",
            ),
            MusicTrack(
                "lofi",
                "Lofi Relaxing",
                "https://cdn.pixabay.com/download/audio/2024/02/20/audio_55a2977f6b.mp3",
            ),
        )
    }
)


def clamp_volume(value: float) -> float:
    """Clamp a volume value into `[0.0, 1.0]`."""

    return min(1.0, max(0.0, float(value)))


class AmbianceSettings:
    """Mutable ambiance settings.

    Volume is stored even while no track is selected; silencing happens in the
    assembler.
    """

    def __init__(self, config: AmbianceConfig | None = None) -> None:
        self._config = config if config is not None else AmbianceConfig()

    def set_music_track(self, key: str) -> None:
        """Select a catalog track by key."""

        if key not in MUSIC_TRACKS:
            raise UnknownTrackError(
                f"Unknown music track `{key}`.",
                hint="Available tracks: " + ", ".join(MUSIC_TRACKS) + ".",
            )
        self._config = replace(self._config, music_track_key=key)

    def set_volume(self, value: float) -> None:
        """Set music volume, silently clamped into `[0, 1]`."""

        self._config = replace(self._config, music_volume=clamp_volume(value))

    def set_generate_sfx(self, enabled: bool) -> None:
        self._config = replace(self._config, generate_sfx=bool(enabled))

    def update(
        self,
        *,
        music_track_key: str | None = None,
        music_volume: float | None = None,
        generate_sfx: bool | None = None,
    ) -> AmbianceConfig:
        """Apply a partial update; all-or-nothing when the track key is invalid."""

        if music_track_key is not None:
            self.set_music_track(music_track_key)
        if music_volume is not None:
            self.set_volume(music_volume)
        if generate_sfx is not None:
            self.set_generate_sfx(generate_sfx)
        return self._config

    def snapshot(self) -> AmbianceConfig:
        """Return the current frozen settings."""

        return self._config
