"""Input/output components for audiodrama.

This package contains PDF text extraction and snapshot persistence.
"""

from .document_extractor import DocumentTextExtractor, PypdfDocumentBackend
from .storage import FileKeyValueStore, InMemoryKeyValueStore, SnapshotStore

__all__ = [
    "DocumentTextExtractor",
    "PypdfDocumentBackend",
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "SnapshotStore",
]
