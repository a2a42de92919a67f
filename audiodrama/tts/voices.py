"""Voice catalog and character voice assignment.

Responsibilities:
- Declare the closed set of synthesized voices available to the pipeline.
- Map every speaking role of a script (Narrator included) to one voice.
- Validate assignments against the live character set and the voice catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from ..errors import InvalidVoiceError, UnknownCharacterError
from ..models.datatypes import NARRATOR, DramatizedScript


@dataclass(frozen=True, slots=True)
class VoiceProfile:
    """Declarative voice profile used by TTS providers.

    Attributes:
        name: Voice identifier exposed to users.
        provider_voice_id: Provider-native prebuilt voice name.
        style: Short description of the voice character.
    """

    name: str
    provider_voice_id: str
    style: str


AVAILABLE_VOICES: tuple[VoiceProfile, ...] = (
    VoiceProfile(name="Kore", provider_voice_id="Kore", style="firm"),
    VoiceProfile(name="Puck", provider_voice_id="Puck", style="upbeat"),
    VoiceProfile(name="Charon", provider_voice_id="Charon", style="informative"),
    VoiceProfile(name="Fenrir", provider_voice_id="Fenrir", style="excitable"),
    VoiceProfile(name="Zephyr", provider_voice_id="Zephyr", style="bright"),
)
AVAILABLE_VOICE_NAMES = frozenset(voice.name for voice in AVAILABLE_VOICES)

DEFAULT_NARRATOR_VOICE = "Zephyr"
DEFAULT_CHARACTER_VOICE = "Kore"


def voice_profile(name: str) -> VoiceProfile:
    """Return the catalog profile for a voice name."""

    for voice in AVAILABLE_VOICES:
        if voice.name == name:
            return voice
    raise InvalidVoiceError(
        f"Unknown voice `{name}`.",
        hint="Available voices: " + ", ".join(v.name for v in AVAILABLE_VOICES) + ".",
    )


def missing_roles(script: DramatizedScript, voices: Mapping[str, str]) -> tuple[str, ...]:
    """Return speaking roles of `script` that have no voice in `voices`."""

    return tuple(role for role in script.speaking_roles if role not in voices)


class CharacterVoiceRegistry:
    """Mutable voice map bound to the current script's character set."""

    def __init__(self) -> None:
        self._voices: dict[str, str] = {}
        self._characters: frozenset[str] = frozenset()

    def initialize_defaults(self, script: DramatizedScript) -> Mapping[str, str]:
        """Reset the map to default voices for every role of `script`."""

        voices = {character: DEFAULT_CHARACTER_VOICE for character in script.characters}
        voices[NARRATOR] = DEFAULT_NARRATOR_VOICE
        self._voices = voices
        self._characters = script.character_set
        return self.snapshot()

    def clear(self) -> None:
        """Drop all assignments and the bound character set."""

        self._voices = {}
        self._characters = frozenset()

    def set(self, character: str, voice: str) -> None:
        """Assign `voice` to `character`.

        Raises:
            UnknownCharacterError: If `character` is neither the Narrator nor listed
                in the current script.
            InvalidVoiceError: If `voice` is not an available voice.
        """

        if character != NARRATOR and character not in self._characters:
            raise UnknownCharacterError(
                f"Character `{character}` is not part of the current script.",
                hint="Use a character name exactly as listed in the script preview.",
            )
        if voice not in AVAILABLE_VOICE_NAMES:
            raise InvalidVoiceError(
                f"Voice `{voice}` is not available.",
                hint="Available voices: "
                + ", ".join(v.name for v in AVAILABLE_VOICES)
                + ".",
            )
        self._voices[character] = voice

    def is_complete(self, script: DramatizedScript) -> bool:
        """Return whether every role of `script` has a voice."""

        return not missing_roles(script, self._voices)

    def snapshot(self) -> Mapping[str, str]:
        """Return a read-only copy detached from later edits."""

        return MappingProxyType(dict(self._voices))
