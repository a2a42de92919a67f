"""Shared pytest fixtures for the full audiodrama test suite."""

from __future__ import annotations

import io
from typing import Callable
import wave

import pytest
from pypdf import PdfWriter
from pypdf.generic import DecodedStreamObject, DictionaryObject, NameObject

from audiodrama.models.datatypes import (
    Dialogue,
    DramatizedScript,
    Narration,
    Scene,
    SoundCue,
)

_PAGE_WIDTH = 595
_PAGE_HEIGHT = 842


def _escape_pdf_text(value: str) -> str:
    return value.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def _add_text_page(writer: PdfWriter, lines: list[str]) -> None:
    """Append one page with extractable Helvetica text lines."""

    page = writer.add_blank_page(width=_PAGE_WIDTH, height=_PAGE_HEIGHT)
    font_ref = writer._add_object(
        DictionaryObject(
            {
                NameObject("/Type"): NameObject("/Font"),
                NameObject("/Subtype"): NameObject("/Type1"),
                NameObject("/BaseFont"): NameObject("/Helvetica"),
            }
        )
    )
    page[NameObject("/Resources")] = DictionaryObject(
        {NameObject("/Font"): DictionaryObject({NameObject("/F1"): font_ref})}
    )

    content_lines = ["BT", "/F1 12 Tf", "72 780 Td", "16 TL"]
    for index, line in enumerate(lines):
        content_lines.append(f"({_escape_pdf_text(line)}) Tj")
        if index < len(lines) - 1:
            content_lines.append("T*")
    content_lines.append("ET")

    stream = DecodedStreamObject()
    stream.set_data("\n".join(content_lines).encode("latin-1"))
    page[NameObject("/Contents")] = writer._add_object(stream)


@pytest.fixture
def pdf_bytes() -> Callable[..., bytes]:
    """Build an in-memory PDF with one page per argument (each a list of lines)."""

    def _build(*pages: list[str]) -> bytes:
        writer = PdfWriter()
        for lines in pages:
            _add_text_page(writer, lines)
        buffer = io.BytesIO()
        writer.write(buffer)
        return buffer.getvalue()

    return _build


@pytest.fixture
def wav_bytes() -> Callable[..., bytes]:
    """Build deterministic mono 16-bit WAV bytes of silence."""

    def _build(frame_count: int = 2400, sample_rate: int = 24000, channels: int = 1) -> bytes:
        buffer = io.BytesIO()
        with wave.open(buffer, "wb") as wav_file:
            wav_file.setnchannels(channels)
            wav_file.setsampwidth(2)
            wav_file.setframerate(sample_rate)
            wav_file.writeframes(b"\x00\x00" * frame_count * channels)
        return buffer.getvalue()

    return _build


@pytest.fixture
def sample_script() -> DramatizedScript:
    """Two characters across two scenes, with every element variant."""

    return DramatizedScript(
        characters=("Alice", "Bob"),
        scenes=(
            Scene(
                setting="A quiet kitchen at dawn",
                elements=(
                    Narration(content="The kettle begins to whistle."),
                    SoundCue(description="kettle whistling"),
                    Dialogue(character="Alice", content="Morning, Bob."),
                    Dialogue(character="Bob", content="Is it morning already?"),
                ),
            ),
            Scene(
                setting="The garden",
                elements=(Narration(content="Later, they walk outside."),),
            ),
        ),
    )
