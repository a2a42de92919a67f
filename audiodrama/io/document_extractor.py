"""Document text extraction.

Responsibilities:
- Define the pluggable page-oriented document backend interface.
- Extract text from every page strictly in page order and join it into one string.
- Provide a `pypdf`-backed implementation for PDF uploads.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any, Protocol

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from ..errors import ExtractionError, PageReadError

PAGE_SEPARATOR = "\n\n"


class DocumentBackend(Protocol):
    """Protocol for paginated document parsers."""

    def open(self, data: bytes) -> Any:
        """Open raw document bytes and return a backend-specific handle."""

    def page_count(self, handle: Any) -> int:
        """Return the number of pages in an opened document."""

    def extract_page(self, handle: Any, page_number: int) -> str:
        """Return text of one 1-based page."""

    def close(self, handle: Any) -> None:
        """Release resources held by an opened document."""


class PypdfDocumentBackend:
    """PDF backend built on `pypdf.PdfReader`."""

    def open(self, data: bytes) -> PdfReader:
        try:
            return PdfReader(io.BytesIO(data))
        except (PyPdfError, ValueError, OSError) as exc:
            raise ExtractionError(
                f"Failed to parse the PDF file: {exc}",
                hint="The file might be corrupted or in an unsupported format.",
            ) from exc

    def page_count(self, handle: PdfReader) -> int:
        try:
            return len(handle.pages)
        except (PyPdfError, ValueError, OSError) as exc:
            raise ExtractionError(
                f"Failed to read the PDF page tree: {exc}",
                hint="The file might be corrupted or in an unsupported format.",
            ) from exc

    def extract_page(self, handle: PdfReader, page_number: int) -> str:
        try:
            text = handle.pages[page_number - 1].extract_text()
        except (PyPdfError, ValueError, KeyError, OSError) as exc:
            raise PageReadError(page_number, str(exc)) from exc
        return (text or "").replace("\f", "\n").strip()

    def close(self, handle: PdfReader) -> None:
        """Nothing to release; documents are read from in-memory buffers."""


class DocumentTextExtractor:
    """Sequential all-or-nothing text extraction over a `DocumentBackend`.

    One extractor holds at most one in-flight document.
    """

    def __init__(self, backend: DocumentBackend | None = None) -> None:
        self.backend = backend if backend is not None else PypdfDocumentBackend()
        self._in_flight = False

    def extract(self, data: bytes) -> str:
        """Extract and join text from every page of `data`.

        Pages are separated by one blank line and the joined text is trimmed.

        Raises:
            ExtractionError: If the document cannot be opened, or another
                extraction is already running on this extractor.
            PageReadError: If a page fails; text read so far is discarded.
        """

        if self._in_flight:
            raise ExtractionError(
                "Another document is already being extracted.",
                hint="Wait for the current extraction to finish.",
            )
        self._in_flight = True
        try:
            return self._extract_pages(data)
        finally:
            self._in_flight = False

    def extract_file(self, path: Path) -> str:
        """Read a document from disk and extract its text."""

        try:
            data = path.read_bytes()
        except OSError as exc:
            raise ExtractionError(
                f"Failed to read the document file `{path}`: {exc.strerror or exc}",
                hint="Verify the file exists and is readable.",
            ) from exc
        return self.extract(data)

    def _extract_pages(self, data: bytes) -> str:
        try:
            handle = self.backend.open(data)
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(
                f"Failed to open the document: {exc}",
                hint="The file might be corrupted or in an unsupported format.",
            ) from exc
        try:
            try:
                page_count = self.backend.page_count(handle)
            except ExtractionError:
                raise
            except Exception as exc:
                raise ExtractionError(
                    f"Failed to read the document page count: {exc}",
                    hint="The file might be corrupted or in an unsupported format.",
                ) from exc
            pages: list[str] = []
            for page_number in range(1, page_count + 1):
                try:
                    pages.append(self.backend.extract_page(handle, page_number))
                except PageReadError:
                    raise
                except Exception as exc:
                    raise PageReadError(page_number, str(exc)) from exc
            return PAGE_SEPARATOR.join(pages).strip()
        finally:
            self.backend.close(handle)
