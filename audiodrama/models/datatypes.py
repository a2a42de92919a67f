"""Core datatypes shared across audiodrama modules.

Responsibilities:
- Represent the dramatized script as immutable records.
- Enforce script invariants at construction time so every script in flight is valid.
- Define pipeline status and the persisted production snapshot.

Key types:
- `Narration`, `Dialogue`, `SoundCue` (the `SceneElement` sum type), `Scene`,
  `DramatizedScript`, `AmbianceConfig`, `ProductionSnapshot`, `AudioArtifactRef`,
  and `PipelineStatus`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TypeAlias

NARRATOR = "Narrator"


@dataclass(frozen=True, slots=True)
class Narration:
    """Narrator-voiced prose."""

    content: str


@dataclass(frozen=True, slots=True)
class Dialogue:
    """A spoken line attributed to one character."""

    character: str
    content: str


@dataclass(frozen=True, slots=True)
class SoundCue:
    """A described sound effect placed between spoken lines."""

    description: str


SceneElement: TypeAlias = Narration | Dialogue | SoundCue


@dataclass(frozen=True, slots=True)
class Scene:
    """One setting plus its ordered narrative elements.

    Attributes:
        setting: Short description of where/when the scene takes place.
        elements: Elements in playback order; may be empty.
    """

    setting: str
    elements: tuple[SceneElement, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class DramatizedScript:
    """Structured representation of a story as scenes.

    Attributes:
        characters: Unique speaking characters, excluding the implicit Narrator.
            Order is kept for display only.
        scenes: Scenes in reading order.

    Raises:
        ValueError: If characters are blank/duplicated, the Narrator is listed, or a
            dialogue line references an unlisted character.
    """

    characters: tuple[str, ...]
    scenes: tuple[Scene, ...]

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for character in self.characters:
            if not isinstance(character, str) or not character.strip():
                raise ValueError("Character names must be non-empty strings.")
            if character == NARRATOR:
                raise ValueError(f"`{NARRATOR}` is implicit and must not be listed.")
            if character in seen:
                raise ValueError(f"Character `{character}` is listed more than once.")
            seen.add(character)

        for scene_index, scene in enumerate(self.scenes, start=1):
            for element in scene.elements:
                if (
                    isinstance(element, Dialogue)
                    and element.character != NARRATOR
                    and element.character not in seen
                ):
                    raise ValueError(
                        f"Scene {scene_index} has dialogue for unlisted character "
                        f"`{element.character}`."
                    )

    @property
    def character_set(self) -> frozenset[str]:
        """Return listed characters as a set."""

        return frozenset(self.characters)

    @property
    def speaking_roles(self) -> tuple[str, ...]:
        """Return the Narrator followed by every listed character."""

        return (NARRATOR, *self.characters)


@dataclass(frozen=True, slots=True)
class AmbianceConfig:
    """Background music and sound-effect settings for final assembly."""

    music_track_key: str = "none"
    music_volume: float = 0.2
    generate_sfx: bool = True


@dataclass(frozen=True, slots=True)
class ProductionSnapshot:
    """The persisted `(raw_text, script)` pair used to resume work."""

    raw_text: str
    script: DramatizedScript | None = None


@dataclass(frozen=True, slots=True)
class AudioArtifactRef:
    """Opaque reference to a produced audio file."""

    path: Path
    duration_seconds: float
    mime_type: str = "audio/wav"


class PipelineStatus(str, Enum):
    """Pipeline status; exactly one holds at any time."""

    IDLE = "idle"
    ANALYZING = "analyzing"
    READY = "ready"
    PRODUCING = "producing"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_busy(self) -> bool:
        """Return whether an external call is in flight."""

        return self in (PipelineStatus.ANALYZING, PipelineStatus.PRODUCING)
