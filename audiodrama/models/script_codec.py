"""JSON payload codec for dramatized scripts.

Responsibilities:
- Serialize `DramatizedScript` into deterministic JSON-compatible payloads.
- Validate untrusted payloads (analyzer output, stored snapshots) into typed scripts.

Element payloads are tagged with a `type` field: `narration`, `dialogue`, or
`sound_cue`. Validation failures raise `ValueError`; callers map them to their
stage-specific error.
"""

from __future__ import annotations

from typing import Any, Mapping, assert_never

from .datatypes import (
    NARRATOR,
    Dialogue,
    DramatizedScript,
    Narration,
    Scene,
    SceneElement,
    SoundCue,
)


def element_to_payload(element: SceneElement) -> dict[str, str]:
    """Serialize one scene element with its type tag."""

    if isinstance(element, Narration):
        return {"type": "narration", "content": element.content}
    if isinstance(element, Dialogue):
        return {
            "type": "dialogue",
            "character": element.character,
            "content": element.content,
        }
    if isinstance(element, SoundCue):
        return {"type": "sound_cue", "description": element.description}
    assert_never(element)


def script_to_payload(script: DramatizedScript) -> dict[str, object]:
    """Serialize a script into a JSON-compatible payload."""

    return {
        "characters": list(script.characters),
        "scenes": [
            {
                "setting": scene.setting,
                "elements": [element_to_payload(element) for element in scene.elements],
            }
            for scene in script.scenes
        ],
    }


def script_from_payload(payload: object) -> DramatizedScript:
    """Validate a raw payload and build a `DramatizedScript`.

    Duplicate character names are collapsed and a listed Narrator is dropped,
    since the Narrator always participates implicitly.

    Raises:
        ValueError: If required fields are missing, have the wrong type, or the
            resulting script violates its invariants.
    """

    if not isinstance(payload, Mapping):
        raise ValueError("Script payload must be a JSON object.")
    if "characters" not in payload:
        raise ValueError("Script payload is missing `characters`.")
    if "scenes" not in payload:
        raise ValueError("Script payload is missing `scenes`.")

    raw_characters = payload["characters"]
    if not isinstance(raw_characters, list):
        raise ValueError("Script `characters` must be a list.")
    characters: list[str] = []
    for raw_character in raw_characters:
        name = _require_string(raw_character, "characters[]").strip()
        if name and name != NARRATOR and name not in characters:
            characters.append(name)

    raw_scenes = payload["scenes"]
    if not isinstance(raw_scenes, list):
        raise ValueError("Script `scenes` must be a list.")
    scenes = tuple(
        _scene_from_payload(raw_scene, index)
        for index, raw_scene in enumerate(raw_scenes, start=1)
    )
    return DramatizedScript(characters=tuple(characters), scenes=scenes)


def _scene_from_payload(raw_scene: object, index: int) -> Scene:
    """Validate one scene payload."""

    if not isinstance(raw_scene, Mapping):
        raise ValueError(f"Scene {index} must be a JSON object.")
    setting = _require_string(raw_scene.get("setting"), f"scenes[{index}].setting")
    raw_elements = raw_scene.get("elements")
    if not isinstance(raw_elements, list):
        raise ValueError(f"Scene {index} `elements` must be a list.")
    return Scene(
        setting=setting,
        elements=tuple(
            _element_from_payload(raw_element, f"scenes[{index}].elements[{position}]")
            for position, raw_element in enumerate(raw_elements, start=1)
        ),
    )


def _element_from_payload(raw_element: object, label: str) -> SceneElement:
    """Validate one tagged element payload."""

    if not isinstance(raw_element, Mapping):
        raise ValueError(f"`{label}` must be a JSON object.")
    element_type = raw_element.get("type")
    if element_type == "narration":
        return Narration(content=_require_string(raw_element.get("content"), f"{label}.content"))
    if element_type == "dialogue":
        character = _require_string(raw_element.get("character"), f"{label}.character").strip()
        if not character:
            raise ValueError(f"`{label}.character` must not be blank.")
        return Dialogue(
            character=character,
            content=_require_string(raw_element.get("content"), f"{label}.content"),
        )
    if element_type == "sound_cue":
        return SoundCue(
            description=_require_string(raw_element.get("description"), f"{label}.description")
        )
    raise ValueError(f"`{label}` has unsupported element type `{element_type}`.")


def _require_string(value: Any, label: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"`{label}` must be a string.")
    return value
