"""Production orchestration for audiodrama.

Responsibilities:
- Own the production status machine and the data each status was reached with.
- Drive analysis and production through injected providers.
- Hand providers frozen copies of script, voices, and ambiance.
- Save and restore the `(text, script)` snapshot.

Key types:
- `ProductionOrchestrator`: orchestration facade.
- `ProductionState`: mutable state record owned by the orchestrator.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

from ..audio.ambiance import AmbianceSettings
from ..audio.assembler import AudioAssembler
from ..errors import (
    AnalysisError,
    AudioDramaError,
    PreconditionError,
    ProductionError,
    ValidationError,
)
from ..io.document_extractor import DocumentTextExtractor
from ..io.storage import InMemoryKeyValueStore, SnapshotStore
from ..llm.script_analyzer import ScriptAnalyzer
from ..models.datatypes import (
    AmbianceConfig,
    AudioArtifactRef,
    DramatizedScript,
    PipelineStatus,
    ProductionSnapshot,
)
from ..telemetry.logger import RunLogger
from ..tts.voices import CharacterVoiceRegistry
from .state import ProductionState
from .telemetry import DEFAULT_STAGE_PLAN, PipelineTelemetryMixin, validate_stage_plan


class ProductionOrchestrator(PipelineTelemetryMixin):
    """Coordinate analysis, voice casting, ambiance, and production."""

    def __init__(
        self,
        analyzer: ScriptAnalyzer,
        assembler: AudioAssembler,
        snapshot_store: SnapshotStore | None = None,
        document_extractor: DocumentTextExtractor | None = None,
        run_logger: RunLogger | None = None,
        stage_progress_callback: Callable[[str, int, int], None] | None = None,
        stage_plan: tuple[str, ...] = DEFAULT_STAGE_PLAN,
    ) -> None:
        """Initialize providers and optional logging and progress hooks.

        `stage_plan` lists the stages reported to `stage_progress_callback`,
        in the order the caller intends to run them.
        """

        self._analyzer = analyzer
        self._assembler = assembler
        self._snapshot_store = (
            snapshot_store
            if snapshot_store is not None
            else SnapshotStore(InMemoryKeyValueStore())
        )
        self._document_extractor = (
            document_extractor if document_extractor is not None else DocumentTextExtractor()
        )
        self._run_logger = run_logger
        self._stage_progress_callback = stage_progress_callback
        self._stage_plan = validate_stage_plan(tuple(stage_plan))
        self._state = ProductionState()
        self._voices = CharacterVoiceRegistry()
        self._ambiance = AmbianceSettings()

    @property
    def status(self) -> PipelineStatus:
        return self._state.status

    @property
    def raw_text(self) -> str:
        return self._state.raw_text

    @property
    def script(self) -> DramatizedScript | None:
        return self._state.script

    @property
    def voices(self) -> Mapping[str, str]:
        """Return a read-only copy of the current voice map."""

        return self._voices.snapshot()

    @property
    def ambiance(self) -> AmbianceConfig:
        return self._ambiance.snapshot()

    @property
    def audio(self) -> AudioArtifactRef | None:
        return self._state.audio

    @property
    def failure(self) -> AudioDramaError | None:
        """Return the `AnalysisError` or `ProductionError` behind `FAILED`."""

        return self._state.failure

    @property
    def error_message(self) -> str | None:
        return self._state.error_message

    def submit_text(self, text: str | None = None) -> PipelineStatus:
        """Analyze `text` (or the current raw text) into a dramatized script.

        Analysis failures end in `FAILED` with the reason recorded; they are
        not raised.

        Raises:
            ValidationError: If the text is empty or whitespace-only.
            PreconditionError: While analysis or production is in flight.
        """

        candidate = self._state.raw_text if text is None else text
        if not candidate.strip():
            raise ValidationError(
                "Text to analyze is empty.",
                hint="Type a story, or import a `.txt` or `.pdf` document.",
            )
        self._require_idle_pipeline("analyze the text")

        self._state.raw_text = candidate
        self._state.script = None
        self._state.clear_outcome()
        self._voices.clear()
        self._transition(PipelineStatus.ANALYZING)

        try:
            script = self._run_stage("analyze", lambda: self._analyzer.analyze(candidate))
        except AnalysisError as exc:
            return self._fail(exc)
        except Exception as exc:
            return self._fail(
                AnalysisError(f"Script analysis failed unexpectedly: {exc}")
            )

        self._state.script = script
        self._voices.initialize_defaults(script)
        self._transition(PipelineStatus.READY)
        return self._state.status

    def request_production(self) -> PipelineStatus:
        """Produce audio for the current script with the current settings.

        The assembler receives values captured at call time; later edits do
        not reach an in-flight production.

        Raises:
            PreconditionError: If there is no script or a call is in flight.
        """

        self._require_idle_pipeline("start production")
        script = self._state.script
        if script is None:
            raise PreconditionError(
                "There is no script to produce.",
                hint="Analyze a text first.",
            )

        voices = self._voices.snapshot()
        ambiance = self._ambiance.snapshot()
        self._state.clear_outcome()
        self._transition(PipelineStatus.PRODUCING)

        try:
            artifact = self._run_stage(
                "produce",
                lambda: self._assembler.produce(script, voices, ambiance),
            )
        except ProductionError as exc:
            return self._fail(exc)
        except Exception as exc:
            return self._fail(
                ProductionError(f"Audio production failed unexpectedly: {exc}")
            )

        self._state.audio = artifact
        self._transition(PipelineStatus.COMPLETE)
        return self._state.status

    def update_voice(self, character: str, voice: str) -> None:
        """Assign `voice` to `character` for future productions."""

        self._require_idle_pipeline("change voices")
        self._voices.set(character, voice)

    def update_ambiance(
        self,
        *,
        music_track_key: str | None = None,
        music_volume: float | None = None,
        generate_sfx: bool | None = None,
    ) -> AmbianceConfig:
        """Apply a partial ambiance update and return the new settings."""

        self._require_idle_pipeline("change ambiance")
        return self._ambiance.update(
            music_track_key=music_track_key,
            music_volume=music_volume,
            generate_sfx=generate_sfx,
        )

    def set_text(self, text: str) -> None:
        """Replace the editable raw text without analyzing it."""

        self._require_idle_pipeline("edit the text")
        self._state.raw_text = text

    def import_document(self, data: bytes) -> str:
        """Replace the raw text with text extracted from a PDF document.

        Raises:
            ExtractionError: If extraction fails; the raw text is kept.
        """

        self._require_idle_pipeline("import a document")
        text = self._run_stage("extract", lambda: self._document_extractor.extract(data))
        self._state.raw_text = text
        return text

    def import_file(self, path: Path) -> str:
        """Replace the raw text with text extracted from a PDF on disk."""

        self._require_idle_pipeline("import a document")
        text = self._run_stage("extract", lambda: self._document_extractor.extract_file(path))
        self._state.raw_text = text
        return text

    def save_snapshot(self) -> None:
        """Persist the current raw text and script.

        Raises:
            NothingToSaveError: If both the text and the script are empty.
        """

        snapshot = ProductionSnapshot(raw_text=self._state.raw_text, script=self._state.script)
        self._run_stage("save", lambda: self._snapshot_store.save(snapshot))

    def load_snapshot(self) -> ProductionSnapshot:
        """Restore the saved raw text and script, replacing current state.

        Voices are reset to defaults for the restored script; ambiance is kept.

        Raises:
            PreconditionError: While a call is in flight.
            NoSavedDataError: If nothing was saved.
            CorruptDataError: If the saved value is unreadable.
        """

        self._require_idle_pipeline("load the saved production")
        snapshot = self._run_stage("load", self._snapshot_store.load)

        self._state.raw_text = snapshot.raw_text
        self._state.script = snapshot.script
        self._state.clear_outcome()
        if snapshot.script is not None:
            self._voices.initialize_defaults(snapshot.script)
            self._transition(PipelineStatus.READY)
        else:
            self._voices.clear()
            self._transition(PipelineStatus.IDLE)
        return snapshot

    def has_saved_data(self) -> bool:
        return self._snapshot_store.has_saved_data()

    def _require_idle_pipeline(self, action: str) -> None:
        """Reject `action` while analysis or production is in flight."""

        if self._state.status.is_busy:
            raise PreconditionError(
                f"Cannot {action} while the pipeline is {self._state.status.value}.",
                hint="Wait for the current step to finish.",
            )

    def _transition(self, status: PipelineStatus) -> None:
        previous = self._state.status
        self._state.status = status
        self._on_transition(previous.value, status.value)

    def _fail(self, error: AnalysisError | ProductionError) -> PipelineStatus:
        """Record `error` as the failure reason and enter `FAILED`."""

        self._state.failure = error
        self._state.error_message = error.detail
        self._transition(PipelineStatus.FAILED)
        return self._state.status
