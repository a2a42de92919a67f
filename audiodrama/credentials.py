"""Secure credential storage for the Gemini API key.

Responsibilities:
- Persist the API key in the OS-backed keyring.
- Never log or echo stored secret values.

Key types:
- `CredentialStore`: protocol for API key persistence.
- `KeyringCredentialStore`: keyring-backed implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from .errors import ConfigurationError


_DEFAULT_SERVICE_NAME = "audiodrama"
_DEFAULT_ACCOUNT_NAME = "gemini_api_key"


class CredentialStore(Protocol):
    """Protocol for secure API key operations."""

    def get_api_key(self) -> str | None:
        ...

    def set_api_key(self, api_key: str) -> None:
        ...

    def clear_api_key(self) -> bool:
        """Delete a stored API key and return whether one existed."""
        ...


@dataclass(slots=True)
class KeyringCredentialStore:
    """Credential store backed by the `keyring` package."""

    service_name: str = _DEFAULT_SERVICE_NAME
    account_name: str = _DEFAULT_ACCOUNT_NAME

    def get_api_key(self) -> str | None:
        """Return the stored API key, or `None` when missing or unreadable."""

        try:
            value = keyring.get_password(self.service_name, self.account_name)
        except KeyringError:
            return None
        if value is None:
            return None
        return value.strip() or None

    def set_api_key(self, api_key: str) -> None:
        """Persist a normalized API key.

        Raises:
            ValueError: If the key is blank.
            ConfigurationError: If the keyring backend rejects the write.
        """

        normalized = api_key.strip()
        if not normalized:
            raise ValueError("API key must be a non-empty string.")
        try:
            keyring.set_password(self.service_name, self.account_name, normalized)
        except KeyringError as exc:
            raise ConfigurationError(
                f"Secure credential storage is unavailable: {type(exc).__name__}.",
                hint="Set `GEMINI_API_KEY` or pass `--api-key` instead.",
            ) from exc

    def clear_api_key(self) -> bool:
        if self.get_api_key() is None:
            return False
        try:
            keyring.delete_password(self.service_name, self.account_name)
        except PasswordDeleteError:
            return False
        return True


def create_credential_store() -> CredentialStore:
    """Create the default secure credential store implementation."""

    return KeyringCredentialStore()
