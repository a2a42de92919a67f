"""Voice catalog, casting, and line-level speech synthesis."""

from .synthesizer import GeminiLineSynthesizer, LineSynthesizer, PerformanceLine
from .voices import AVAILABLE_VOICES, CharacterVoiceRegistry, VoiceProfile

__all__ = [
    "AVAILABLE_VOICES",
    "CharacterVoiceRegistry",
    "GeminiLineSynthesizer",
    "LineSynthesizer",
    "PerformanceLine",
    "VoiceProfile",
]
