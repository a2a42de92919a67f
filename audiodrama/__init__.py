"""Top-level package for audiodrama.

This package turns free-form stories into multi-voice audio dramas: a script
analyzer splits text into scenes, a voice registry casts every role, and an
audio assembler performs and mixes the result. The main orchestration entry
point is `ProductionOrchestrator`.
"""

from .pipeline import ProductionOrchestrator

__all__ = ["ProductionOrchestrator", "__version__"]

__version__ = "0.1.0"
