"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
script previews, voice casting, and the voice/music catalog.
"""

from __future__ import annotations

from typing import Mapping, NoReturn, assert_never

import typer

from .audio.ambiance import MUSIC_TRACKS
from .errors import AudioDramaError
from .models.datatypes import (
    NARRATOR,
    AmbianceConfig,
    Dialogue,
    DramatizedScript,
    Narration,
    SoundCue,
)
from .tts.voices import AVAILABLE_VOICES


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, AudioDramaError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        if exc.hint:
            typer.secho(f"Hint: {exc.hint}", fg=typer.colors.YELLOW, err=True)
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1) from exc


def echo_script_preview(script: DramatizedScript) -> None:
    """Print scenes and their elements in script order."""

    characters = ", ".join(script.characters) if script.characters else "(none)"
    typer.echo(f"Characters: {characters}")
    for scene_index, scene in enumerate(script.scenes, start=1):
        typer.echo("")
        typer.echo(f"Scene {scene_index}: {scene.setting}")
        for element in scene.elements:
            if isinstance(element, Narration):
                typer.echo(f"  {NARRATOR}: {element.content}")
            elif isinstance(element, Dialogue):
                typer.echo(f"  {element.character}: {element.content}")
            elif isinstance(element, SoundCue):
                typer.echo(f"  [SFX] {element.description}")
            else:
                assert_never(element)


def echo_voice_cast(script: DramatizedScript, voices: Mapping[str, str]) -> None:
    """Print one `role -> voice` row per speaking role."""

    typer.echo("Voices:")
    for role in script.speaking_roles:
        typer.echo(f"  {role} -> {voices.get(role, '(unassigned)')}")


def echo_ambiance(ambiance: AmbianceConfig) -> None:
    track = MUSIC_TRACKS[ambiance.music_track_key]
    sfx = "on" if ambiance.generate_sfx else "off"
    typer.echo(
        f"Ambiance: music={track.name} volume={ambiance.music_volume:.2f} sfx={sfx}"
    )


def echo_catalog() -> None:
    """Print available voices and music tracks."""

    typer.echo("Voices:")
    for profile in AVAILABLE_VOICES:
        typer.echo(f"  {profile.name}: {profile.style}")
    typer.echo("Music tracks:")
    for key, track in MUSIC_TRACKS.items():
        typer.echo(f"  {key}: {track.name}")


def echo_runtime(metadata: Mapping[str, str], labels: Mapping[str, str]) -> None:
    """Print non-secret runtime settings and free-form config labels."""

    typer.echo("Runtime: " + " ".join(f"{key}={metadata[key]}" for key in sorted(metadata)))
    if labels:
        typer.echo("Labels: " + " ".join(f"{key}={labels[key]}" for key in sorted(labels)))
