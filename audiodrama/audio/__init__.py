"""Audio assembly components.

This package holds ambiance settings, the WAV merger, the music mixer, and
the audio assembler that drives them.
"""

from .ambiance import MUSIC_TRACKS, AmbianceSettings
from .assembler import AudioAssembler, GeminiAudioAssembler
from .merger import WavMerger
from .mixer import MusicMixer

__all__ = [
    "MUSIC_TRACKS",
    "AmbianceSettings",
    "AudioAssembler",
    "GeminiAudioAssembler",
    "WavMerger",
    "MusicMixer",
]
