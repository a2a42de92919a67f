"""Production snapshot persistence.

Responsibilities:
- Provide a minimal key/value storage abstraction with a filesystem backend.
- Save and restore the `(raw_text, script)` production snapshot under one fixed key.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Protocol

from ..errors import CorruptDataError, NoSavedDataError, NothingToSaveError
from ..models.datatypes import ProductionSnapshot
from ..models.script_codec import script_from_payload, script_to_payload

SNAPSHOT_KEY = "audiodrama-production"


class KeyValueStore(Protocol):
    """Protocol for durable string storage keyed by name."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or `None` when the key is absent."""

    def put(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any prior value."""

    def contains(self, key: str) -> bool:
        """Return whether a value exists under `key`."""


class FileKeyValueStore:
    """Filesystem-backed store writing one UTF-8 file per key."""

    def __init__(self, root: Path) -> None:
        """Initialize the store with a root directory."""

        self.root = root

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def put(self, key: str, value: str) -> None:
        """Write through a staging file replaced atomically."""

        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        staging = path.with_suffix(".json.tmp")
        staging.write_text(value, encoding="utf-8")
        os.replace(staging, path)

    def contains(self, key: str) -> bool:
        return self._path(key).is_file()


class InMemoryKeyValueStore:
    """Process-local store, useful for embedding and tests."""

    def __init__(self) -> None:
        self.entries: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.entries.get(key)

    def put(self, key: str, value: str) -> None:
        self.entries[key] = value

    def contains(self, key: str) -> bool:
        return key in self.entries


class SnapshotStore:
    """Save/restore one production snapshot under a fixed key."""

    def __init__(self, backend: KeyValueStore, key: str = SNAPSHOT_KEY) -> None:
        self.backend = backend
        self.key = key

    def save(self, snapshot: ProductionSnapshot) -> None:
        """Serialize and store `snapshot`, overwriting any previous one.

        Raises:
            NothingToSaveError: If both the raw text and the script are empty.
        """

        if not snapshot.raw_text and snapshot.script is None:
            raise NothingToSaveError(
                "Nothing to save.",
                hint="Enter some text or analyze a script first.",
            )
        payload = {
            "raw_text": snapshot.raw_text,
            "script": None if snapshot.script is None else script_to_payload(snapshot.script),
        }
        self.backend.put(
            self.key,
            json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True),
        )

    def load(self) -> ProductionSnapshot:
        """Load and validate the stored snapshot.

        Raises:
            NoSavedDataError: If nothing was saved under the key.
            CorruptDataError: If the stored value is not a valid snapshot.
        """

        try:
            raw = self.backend.get(self.key)
        except UnicodeDecodeError as exc:
            raise CorruptDataError(
                "Saved snapshot is not valid UTF-8 text.",
                hint="Re-run `audiodrama analyze` to overwrite the saved snapshot.",
            ) from exc
        except OSError as exc:
            raise CorruptDataError(
                f"Saved snapshot could not be read: {exc.strerror or exc}",
                hint="Check the workspace directory permissions.",
            ) from exc
        if raw is None:
            raise NoSavedDataError(
                "No saved data found.",
                hint="Save progress first with `audiodrama analyze`.",
            )
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptDataError(
                f"Saved snapshot is not valid JSON: {exc.msg}.",
                hint="Re-run `audiodrama analyze` to overwrite the saved snapshot.",
            ) from exc
        return self._snapshot_from_payload(payload)

    def has_saved_data(self) -> bool:
        """Return whether a snapshot exists; storage faults read as `False`."""

        try:
            return self.backend.contains(self.key)
        except OSError:
            return False

    @staticmethod
    def _snapshot_from_payload(payload: object) -> ProductionSnapshot:
        if not isinstance(payload, dict):
            raise CorruptDataError("Saved snapshot root must be a JSON object.")
        raw_text = payload.get("raw_text")
        if not isinstance(raw_text, str):
            raise CorruptDataError("Saved snapshot is missing string field `raw_text`.")
        if "script" not in payload:
            raise CorruptDataError("Saved snapshot is missing field `script`.")
        raw_script = payload["script"]
        if raw_script is None:
            return ProductionSnapshot(raw_text=raw_text, script=None)
        try:
            script = script_from_payload(raw_script)
        except ValueError as exc:
            raise CorruptDataError(f"Saved script is invalid: {exc}") from exc
        return ProductionSnapshot(raw_text=raw_text, script=script)
