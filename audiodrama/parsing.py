"""Shared parsing helpers for config, environment, and CLI values."""

from __future__ import annotations


_TRUE_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_TOKENS = frozenset({"0", "false", "no", "off"})


def normalize_optional_string(value: object) -> str | None:
    """Return `value` as a stripped string, or `None` when it is blank."""

    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a boolean token and return `None` for unrecognized values."""

    if isinstance(value, bool):
        return value
    normalized = normalize_optional_string(value)
    if normalized is None:
        return None
    token = normalized.lower()
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    return None


def parse_positive_number(value: object, field_name: str) -> float:
    """Parse a strictly positive number.

    Raises:
        ValueError: If the value is not numeric or not greater than zero.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a number.")
    try:
        number = float(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"`{field_name}` must be a number.") from exc
    if number <= 0:
        raise ValueError(f"`{field_name}` must be greater than zero.")
    return number


def parse_voice_assignment(value: str) -> tuple[str, str]:
    """Split a `CHARACTER=VOICE` token into its two stripped parts.

    Raises:
        ValueError: If either side is missing.
    """

    character, separator, voice = value.partition("=")
    character = character.strip()
    voice = voice.strip()
    if not separator or not character or not voice:
        raise ValueError(
            f"Voice assignment `{value}` must use the form `CHARACTER=VOICE`."
        )
    return character, voice
