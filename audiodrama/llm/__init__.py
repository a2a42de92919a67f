"""LLM-facing script analysis.

This package defines the Gemini REST clients, prompt library, and the
script analyzer protocol with its Gemini implementation.
"""

from .prompts import PromptLibrary
from .script_analyzer import GeminiScriptAnalyzer, ScriptAnalyzer, validate_analysis_result

__all__ = [
    "PromptLibrary",
    "ScriptAnalyzer",
    "GeminiScriptAnalyzer",
    "validate_analysis_result",
]
