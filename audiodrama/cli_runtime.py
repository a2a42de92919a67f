"""CLI provider runtime resolution helpers.

This module isolates runtime source assembly and secure API-key persistence
from the command wiring layer.
"""

from __future__ import annotations

from typing import Callable

import typer

from .credentials import CredentialStore, create_credential_store
from .errors import ConfigurationError
from .parsing import normalize_optional_string


def _set_runtime_cli_value(
    runtime_cli_values: dict[str, str],
    key: str,
    value: str | None,
) -> None:
    normalized = normalize_optional_string(value)
    if normalized is not None:
        runtime_cli_values[key] = normalized


def resolve_provider_runtime_sources(
    model_analyze: str | None,
    model_tts: str | None,
    api_key: str | None,
    prompt_api_key: bool,
    store_api_key: bool,
    credential_store_factory: Callable[[], CredentialStore] = create_credential_store,
) -> tuple[dict[str, str], dict[str, str]]:
    """Resolve CLI and secure runtime source mappings for provider configuration.

    Returns:
        `(cli_values, secure_values)` ready for `RuntimeConfigSources`.
    """

    runtime_cli_values: dict[str, str] = {}
    _set_runtime_cli_value(runtime_cli_values, "model_analyze", model_analyze)
    _set_runtime_cli_value(runtime_cli_values, "model_tts", model_tts)
    _set_runtime_cli_value(runtime_cli_values, "api_key", api_key)

    if prompt_api_key and "api_key" not in runtime_cli_values:
        _set_runtime_cli_value(
            runtime_cli_values,
            "api_key",
            typer.prompt(
                "Gemini API key (hidden; leave blank to skip)",
                default="",
                hide_input=True,
                show_default=False,
            ),
        )

    credential_store = credential_store_factory()
    runtime_secure_values: dict[str, str] = {}
    stored_api_key = credential_store.get_api_key()
    if stored_api_key is not None:
        runtime_secure_values["api_key"] = stored_api_key

    if store_api_key and "api_key" in runtime_cli_values:
        try:
            credential_store.set_api_key(runtime_cli_values["api_key"])
        except (ValueError, ConfigurationError) as exc:
            raise ConfigurationError(
                f"Failed to store API key securely: {exc}",
                stage="credentials",
                hint="Rerun with `--no-store-api-key` for one-off usage.",
            ) from exc
        typer.echo("Stored API key in secure credential storage.")

    return runtime_cli_values, runtime_secure_values
