"""Command-line interface for audiodrama.

Responsibilities:
- Expose user-facing commands for analysis, production, and inspection.
- Convert CLI arguments into `AudioDramaConfig` and drive the orchestrator.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer

from .cli_rendering import (
    echo_ambiance,
    echo_catalog,
    echo_runtime,
    echo_script_preview,
    echo_voice_cast,
    exit_with_command_error,
)
from .cli_runtime import resolve_provider_runtime_sources
from .config import AudioDramaConfig, ConfigLoader, RuntimeConfigSources
from .credentials import create_credential_store
from .errors import ConfigurationError, ValidationError
from .io.document_extractor import DocumentTextExtractor
from .io.storage import FileKeyValueStore, SnapshotStore
from .models.datatypes import PipelineStatus
from .parsing import normalize_optional_string, parse_voice_assignment
from .pipeline import ProductionOrchestrator
from .provider_factory import ProviderFactory
from .telemetry.logger import RunLogger
from .tts.voices import CharacterVoiceRegistry

app = typer.Typer(
    name="audiodrama",
    no_args_is_help=True,
    help="Turn stories into multi-voice audio dramas.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to YAML config file with command defaults."),
]
WorkspaceOption = Annotated[
    Path | None,
    typer.Option("--workspace", help="Workspace directory (overrides config file value)."),
]
ApiKeyOption = Annotated[
    str | None,
    typer.Option(
        "--api-key",
        help="Gemini API key override. Prefer `--prompt-api-key` to avoid shell history.",
    ),
]
PromptApiKeyOption = Annotated[
    bool,
    typer.Option("--prompt-api-key", help="Prompt for API key with hidden input."),
]
StoreApiKeyOption = Annotated[
    bool,
    typer.Option(
        "--store-api-key/--no-store-api-key",
        help="Persist a CLI-entered API key to secure credential storage.",
    ),
]


class StageProgressIndicator:
    """Render deterministic per-stage progress lines."""

    def __init__(self, command_name: str) -> None:
        self._command_name = command_name

    def on_stage_start(self, stage_name: str, stage_index: int, stage_total: int) -> None:
        typer.echo(
            f"[progress] command={self._command_name} "
            f"{stage_index}/{stage_total} stage={stage_name}"
        )


def _load_yaml_config(config_path: Path | None) -> AudioDramaConfig | None:
    """Load a YAML config file when requested and map failures to config errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise ConfigurationError(
            f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except OSError as exc:
        raise ConfigurationError(
            f"Failed to read config file `{config_path}`: {exc}",
            hint="Verify file permissions.",
        ) from exc


def _resolve_config(
    config_file: Path | None,
    workspace: Path | None,
    runtime_cli_values: dict[str, str] | None = None,
    runtime_secure_values: dict[str, str] | None = None,
) -> AudioDramaConfig:
    """Merge YAML defaults, CLI overrides, and runtime sources into one config."""

    base_config = _load_yaml_config(config_file) or AudioDramaConfig()
    if workspace is not None:
        base_config = replace(base_config, workspace_dir=workspace)
    return replace(
        base_config,
        runtime_sources=RuntimeConfigSources(
            cli=runtime_cli_values or {},
            secure=runtime_secure_values or {},
            env=os.environ,
        ),
    )


def _snapshot_store(config: AudioDramaConfig) -> SnapshotStore:
    return SnapshotStore(FileKeyValueStore(config.workspace_dir))


def _create_orchestrator(
    config: AudioDramaConfig,
    command_name: str,
    stage_plan: tuple[str, ...],
) -> ProductionOrchestrator:
    """Build an orchestrator wired to the configured providers and workspace."""

    try:
        runtime = config.resolved_provider_runtime()
    except ValueError as exc:
        raise ConfigurationError(str(exc), hint="Check provider and model settings.") from exc
    echo_runtime(runtime.as_display_metadata(), config.extra)

    analyzer = ProviderFactory.create_analyzer(
        provider_id=runtime.analyzer_provider,
        model=runtime.analyze_model,
        api_key=runtime.api_key,
        timeout_seconds=config.request_timeout_seconds,
    )
    assembler = ProviderFactory.create_assembler(
        provider_id=runtime.assembler_provider,
        output_root=config.workspace_dir / "audio",
        model=runtime.tts_model,
        api_key=runtime.api_key,
        timeout_seconds=config.request_timeout_seconds,
        line_pause_ms=config.line_pause_ms,
    )
    progress = StageProgressIndicator(command_name=command_name)
    return ProductionOrchestrator(
        analyzer=analyzer,
        assembler=assembler,
        snapshot_store=_snapshot_store(config),
        run_logger=RunLogger(),
        stage_progress_callback=progress.on_stage_start,
        stage_plan=stage_plan,
    )


def _analyze_stage_plan(
    config: AudioDramaConfig, input_path: Path | None, text: str | None
) -> tuple[str, ...]:
    """Return the stages `analyze` runs for the given input source."""

    if input_path is not None:
        leading = ("extract",) if input_path.suffix.lower() == ".pdf" else ()
    elif text is None and _snapshot_store(config).has_saved_data():
        leading = ("load",)
    else:
        leading = ()
    return (*leading, "analyze", "save")


def _load_input_text(orchestrator: ProductionOrchestrator, input_path: Path) -> None:
    """Load `.pdf` input through the extractor and anything else as UTF-8 text."""

    if input_path.suffix.lower() == ".pdf":
        orchestrator.import_file(input_path)
        return
    try:
        orchestrator.set_text(input_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise ValidationError(
            f"Failed to read input file `{input_path}`: {exc}",
            hint="Provide a readable UTF-8 `.txt` file or a `.pdf` document.",
        ) from exc


@app.command("analyze")
def analyze_command(
    input_path: Annotated[
        Path | None,
        typer.Argument(help="Story as a `.txt` or `.pdf` file. Defaults to the saved text."),
    ] = None,
    text: Annotated[
        str | None,
        typer.Option("--text", help="Story text given inline."),
    ] = None,
    config_file: ConfigOption = None,
    workspace: WorkspaceOption = None,
    model_analyze: Annotated[
        str | None,
        typer.Option("--model-analyze", help="Analysis model id override."),
    ] = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
) -> None:
    """Analyze a story into a dramatized script and save it."""

    try:
        if input_path is not None and text is not None:
            raise ValidationError(
                "Pass either an input file or `--text`, not both.",
                hint="Run one analysis per command invocation.",
            )
        runtime_cli_values, runtime_secure_values = resolve_provider_runtime_sources(
            model_analyze=model_analyze,
            model_tts=None,
            api_key=api_key,
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
            credential_store_factory=create_credential_store,
        )
        config = _resolve_config(
            config_file, workspace, runtime_cli_values, runtime_secure_values
        )
        orchestrator = _create_orchestrator(
            config,
            command_name="analyze",
            stage_plan=_analyze_stage_plan(config, input_path, text),
        )
        if input_path is not None:
            _load_input_text(orchestrator, input_path)
        elif text is not None:
            orchestrator.set_text(text)
        elif orchestrator.has_saved_data():
            orchestrator.load_snapshot()

        status = orchestrator.submit_text()
        if status is PipelineStatus.FAILED and orchestrator.failure is not None:
            exit_with_command_error("analyze", orchestrator.failure)
        orchestrator.save_snapshot()
    except typer.Exit:
        raise
    except Exception as exc:
        exit_with_command_error("analyze", exc)

    script = orchestrator.script
    if script is not None:
        echo_script_preview(script)
        typer.echo("")
        echo_voice_cast(script, orchestrator.voices)
    typer.echo(f"Status: {status.value}")


@app.command("produce")
def produce_command(
    voice: Annotated[
        list[str] | None,
        typer.Option(
            "--voice",
            help="Voice assignment `CHARACTER=VOICE`; repeat for more characters.",
        ),
    ] = None,
    music: Annotated[
        str | None,
        typer.Option("--music", help="Background music track key (see `catalog`)."),
    ] = None,
    volume: Annotated[
        float | None,
        typer.Option("--volume", help="Music volume between 0 and 1."),
    ] = None,
    sfx: Annotated[
        bool | None,
        typer.Option("--sfx/--no-sfx", help="Perform sound cues as spoken effects."),
    ] = None,
    config_file: ConfigOption = None,
    workspace: WorkspaceOption = None,
    model_tts: Annotated[
        str | None,
        typer.Option("--model-tts", help="Speech model id override."),
    ] = None,
    api_key: ApiKeyOption = None,
    prompt_api_key: PromptApiKeyOption = False,
    store_api_key: StoreApiKeyOption = True,
) -> None:
    """Produce audio for the saved script."""

    try:
        runtime_cli_values, runtime_secure_values = resolve_provider_runtime_sources(
            model_analyze=None,
            model_tts=model_tts,
            api_key=api_key,
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
            credential_store_factory=create_credential_store,
        )
        config = _resolve_config(
            config_file, workspace, runtime_cli_values, runtime_secure_values
        )
        orchestrator = _create_orchestrator(
            config,
            command_name="produce",
            stage_plan=("load", "produce"),
        )
        orchestrator.load_snapshot()

        for assignment in voice or []:
            try:
                character, voice_name = parse_voice_assignment(assignment)
            except ValueError as exc:
                raise ValidationError(str(exc), stage="voices") from exc
            orchestrator.update_voice(character, voice_name)
        orchestrator.update_ambiance(
            music_track_key=normalize_optional_string(music),
            music_volume=volume,
            generate_sfx=sfx,
        )
        status = orchestrator.request_production()
    except Exception as exc:
        exit_with_command_error("produce", exc)

    if status is PipelineStatus.FAILED and orchestrator.failure is not None:
        exit_with_command_error("produce", orchestrator.failure)

    audio = orchestrator.audio
    echo_ambiance(orchestrator.ambiance)
    if audio is not None:
        typer.echo(f"Audio: {audio.path}")
        typer.echo(f"Duration (s): {audio.duration_seconds:.2f}")
    typer.echo(f"Status: {status.value}")


@app.command("extract")
def extract_command(
    input_pdf: Annotated[Path, typer.Argument(help="Path to source PDF.")],
) -> None:
    """Print the text extracted from a PDF."""

    try:
        text = DocumentTextExtractor().extract_file(input_pdf)
    except Exception as exc:
        exit_with_command_error("extract", exc)

    typer.echo(text)


@app.command("show")
def show_command(
    config_file: ConfigOption = None,
    workspace: WorkspaceOption = None,
) -> None:
    """Render the saved script with its default voice cast."""

    try:
        config = _resolve_config(config_file, workspace)
        snapshot = _snapshot_store(config).load()
    except Exception as exc:
        exit_with_command_error("show", exc)

    if snapshot.script is None:
        typer.echo(f"Saved text ({len(snapshot.raw_text)} chars), not analyzed yet.")
        return
    echo_script_preview(snapshot.script)
    typer.echo("")
    registry = CharacterVoiceRegistry()
    echo_voice_cast(snapshot.script, registry.initialize_defaults(snapshot.script))


@app.command("catalog")
def catalog_command() -> None:
    """List available voices and background music tracks."""

    echo_catalog()


@app.command("credentials")
def credentials_command(
    set_api_key: Annotated[
        bool,
        typer.Option(
            "--set-api-key",
            help="Prompt for API key with hidden input and store it securely.",
        ),
    ] = False,
    clear_api_key: Annotated[
        bool,
        typer.Option(
            "--clear-api-key",
            help="Clear stored API key from secure credential storage.",
        ),
    ] = False,
) -> None:
    """Manage securely stored CLI credentials."""

    if set_api_key and clear_api_key:
        exit_with_command_error(
            "credentials",
            ConfigurationError(
                "`--set-api-key` and `--clear-api-key` cannot be used together.",
                stage="credentials",
                hint="Run one credentials action per command invocation.",
            ),
        )

    credential_store = create_credential_store()
    if set_api_key:
        prompted_api_key = normalize_optional_string(
            typer.prompt(
                "Gemini API key (hidden input)",
                default="",
                hide_input=True,
                show_default=False,
            )
        )
        if prompted_api_key is None:
            exit_with_command_error(
                "credentials",
                ConfigurationError(
                    "No API key entered.",
                    stage="credentials",
                    hint="Provide a non-empty API key when using `--set-api-key`.",
                ),
            )
        try:
            credential_store.set_api_key(prompted_api_key)
        except Exception as exc:
            exit_with_command_error("credentials", exc)
        typer.echo("API key stored in secure credential storage.")
        return

    if clear_api_key:
        if credential_store.clear_api_key():
            typer.echo("Stored API key cleared from secure credential storage.")
        else:
            typer.echo("No stored API key found in secure credential storage.")
        return

    status = "present" if credential_store.get_api_key() is not None else "not set"
    typer.echo(f"Stored Gemini API key: {status}")


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
