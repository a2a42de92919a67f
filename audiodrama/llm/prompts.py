"""Prompt templates for LLM and speech stages.

Responsibilities:
- Centralize prompt construction for script analysis and line performance.
- Keep the structured-output schema next to the prompt that relies on it.
"""

from __future__ import annotations

from typing import Any

from ..models.datatypes import NARRATOR

SCRIPT_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "characters": {
            "type": "ARRAY",
            "description": f"Unique speaking character names, excluding the {NARRATOR}.",
            "items": {"type": "STRING"},
        },
        "scenes": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "setting": {"type": "STRING"},
                    "elements": {
                        "type": "ARRAY",
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "type": {
                                    "type": "STRING",
                                    "enum": ["narration", "dialogue", "sound_cue"],
                                },
                                "character": {"type": "STRING"},
                                "content": {"type": "STRING"},
                                "description": {"type": "STRING"},
                            },
                            "required": ["type"],
                        },
                    },
                },
                "required": ["setting", "elements"],
            },
        },
    },
    "required": ["characters", "scenes"],
}


class PromptLibrary:
    """Build prompt strings for supported generation tasks."""

    def analysis_system_prompt(self) -> str:
        return (
            "You are an expert audio drama script editor. You turn prose into a "
            "performable script made of narration, character dialogue, and sound cues. "
            "Return only JSON that matches the provided schema."
        )

    def analysis_prompt(self, text: str) -> str:
        """Return the dramatization prompt for one block of source text."""

        return (
            "Convert the following story into an audio drama script.\n"
            "Requirements:\n"
            "- Split the story into scenes, each with a short `setting` description.\n"
            "- Use `narration` elements (with `content`) for descriptive prose.\n"
            "- Use `dialogue` elements (with `character` and `content`) for spoken lines.\n"
            "- Add `sound_cue` elements (with `description`) where a sound effect "
            "would heighten the drama.\n"
            f"- List every speaking character exactly once in `characters`; never list "
            f"the {NARRATOR}.\n"
            "- Every dialogue `character` must appear in `characters`.\n"
            "- Preserve the story's facts, names, and chronology.\n\n"
            f"{text}"
        )

    def sound_cue_prompt(self, description: str) -> str:
        """Return a performance prompt for a vocalized sound effect."""

        return f"Perform this sound effect vocally, without words: {description}"
