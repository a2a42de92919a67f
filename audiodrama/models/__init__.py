"""Shared typed data models for audiodrama.

This package contains the script dataclasses and their JSON payload codec,
used across pipeline modules to avoid cross-module coupling.
"""

from .datatypes import (
    NARRATOR,
    AmbianceConfig,
    AudioArtifactRef,
    Dialogue,
    DramatizedScript,
    Narration,
    PipelineStatus,
    ProductionSnapshot,
    Scene,
    SceneElement,
    SoundCue,
)
from .script_codec import script_from_payload, script_to_payload

__all__ = [
    "NARRATOR",
    "AmbianceConfig",
    "AudioArtifactRef",
    "Dialogue",
    "DramatizedScript",
    "Narration",
    "PipelineStatus",
    "ProductionSnapshot",
    "Scene",
    "SceneElement",
    "SoundCue",
    "script_from_payload",
    "script_to_payload",
]
