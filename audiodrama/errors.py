"""Domain exceptions for production pipeline and CLI diagnostics.

Every error carries the pipeline stage it belongs to, a user-facing detail
message, and an optional actionable hint rendered by the CLI.
"""

from __future__ import annotations


class AudioDramaError(RuntimeError):
    """Base error for all production pipeline failures."""

    default_stage = "pipeline"

    def __init__(
        self,
        detail: str,
        *,
        stage: str | None = None,
        hint: str | None = None,
    ) -> None:
        """Initialize a stage-scoped error."""

        super().__init__(detail)
        self.stage = stage or self.default_stage
        self.detail = detail
        self.hint = hint


class ValidationError(AudioDramaError):
    """Raised when user input is empty or otherwise unusable."""

    default_stage = "input"


class PreconditionError(AudioDramaError):
    """Raised when an action is not allowed in the current pipeline status."""

    default_stage = "precondition"


class ConfigurationError(AudioDramaError):
    """Raised when runtime configuration cannot be loaded or resolved."""

    default_stage = "config"


class AnalysisError(AudioDramaError):
    """Raised when script analysis fails or returns a malformed result."""

    default_stage = "analyze"


class ProductionError(AudioDramaError):
    """Raised when audio production fails."""

    default_stage = "produce"


class IncompleteVoiceMapError(ProductionError):
    """Raised before synthesis when a speaking role has no assigned voice."""

    def __init__(self, missing: tuple[str, ...]) -> None:
        """Initialize with the roles that lack a voice assignment."""

        super().__init__(
            "Voice map is incomplete; missing: " + ", ".join(missing) + ".",
            hint="Assign a voice to every character before producing audio.",
        )
        self.missing = missing


class ExtractionError(AudioDramaError):
    """Raised when a document cannot be opened or parsed."""

    default_stage = "extract"


class PageReadError(ExtractionError):
    """Raised when one page of a document fails mid-extraction."""

    def __init__(self, page_number: int, detail: str) -> None:
        """Initialize with the 1-based number of the failing page."""

        super().__init__(
            f"Failed to read page {page_number}: {detail}",
            hint="The document may be corrupted or use an unsupported encoding.",
        )
        self.page_number = page_number


class NothingToSaveError(AudioDramaError):
    """Raised when saving with neither text nor script present."""

    default_stage = "save"


class NoSavedDataError(AudioDramaError):
    """Raised when loading while no snapshot has been saved."""

    default_stage = "load"


class CorruptDataError(AudioDramaError):
    """Raised when a stored snapshot cannot be deserialized."""

    default_stage = "load"


class UnknownCharacterError(AudioDramaError):
    """Raised when a voice is assigned to a character not in the script."""

    default_stage = "voices"


class InvalidVoiceError(AudioDramaError):
    """Raised when a voice id is not one of the available voices."""

    default_stage = "voices"


class UnknownTrackError(AudioDramaError):
    """Raised when a music track key is not in the track catalog."""

    default_stage = "ambiance"
