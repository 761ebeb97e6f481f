# src/taxwatch/adapters/persistence/file_store.py
"""
File Store - Snapshot Persistence

This module persists the current tax snapshot as a single JSON file. Every
persist() replaces the previous document; no history is kept. Writes go to a
temporary file in the same directory followed by an atomic rename, so a
concurrent reader sees either the old document or the new one, never a
partial write.

Files that USE this module:
- taxwatch.application.refresh_service (persists each cycle's snapshot)
- taxwatch.adapters.http.server (loads the snapshot per request)

Files that this module USES:
- taxwatch.domain.models (Snapshot serialization)
- taxwatch.domain.errors (PersistError, SnapshotNotFoundError, SnapshotCorruptError)
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Union

from taxwatch.domain.errors import (
    InvalidRateError,
    PersistError,
    SnapshotCorruptError,
    SnapshotNotFoundError,
)
from taxwatch.domain.models import Snapshot

log = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    """NaN, Infinity and -Infinity are not valid JSON."""
    raise ValueError(f"non-standard JSON constant {name}")


class SnapshotStore:
    """Owns the persisted snapshot file at a well-known path."""

    def __init__(self, path: Union[str, Path]):
        """
        Initialize snapshot store.

        Args:
            path: Location of the snapshot JSON file
        """
        self.path = Path(path)

    def persist(self, snapshot: Snapshot) -> None:
        """
        Save snapshot to the JSON file using an atomic write.

        Args:
            snapshot: Snapshot to save

        Raises:
            PersistError: If the directory or file cannot be written. The
                previous file, if any, is left untouched.
        """
        p = self.path
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                prefix=f".{p.name}.",
                suffix=".tmp",
                dir=str(p.parent),
                text=True,
            )
        except OSError as e:
            raise PersistError(f"Failed to prepare snapshot file {p}: {e}") from e

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(snapshot.to_json(), f, ensure_ascii=False, indent=2, allow_nan=False)
                f.flush()
                os.fsync(f.fileno())  # Ensure data is on disk before the rename

            # Atomic rename (replaces target file atomically on Unix/Windows)
            os.replace(temp_path, str(p))
        except (OSError, TypeError, ValueError) as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise PersistError(f"Failed to save snapshot file {p}: {e}") from e

        log.info("Snapshot persisted to %s (lastUpdate=%s)", p, snapshot.last_update.isoformat())

    def _read(self) -> tuple[str, Snapshot]:
        """Read the file once and validate it; returns the text and the parsed snapshot."""
        p = self.path
        try:
            with p.open("r", encoding="utf-8") as f:
                text = f.read()
        except FileNotFoundError as e:
            raise SnapshotNotFoundError(f"No snapshot at {p}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise SnapshotCorruptError(f"Unreadable snapshot file {p}: {e}") from e

        try:
            data = json.loads(text, parse_constant=_reject_constant)
        except ValueError as e:
            log.error("Snapshot file %s is not valid JSON: %s", p, e)
            raise SnapshotCorruptError(f"Snapshot file {p} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise SnapshotCorruptError(f"Snapshot file {p} does not contain a JSON object")

        return text, self._parse(data)

    def load_text(self) -> str:
        """
        Read and validate the snapshot file, returning the document as stored.

        Unknown fields are kept and numbers are not re-serialized, so the
        HTTP server can hand the file out byte for byte.

        Raises:
            SnapshotNotFoundError: If no snapshot has been persisted yet
            SnapshotCorruptError: If the file is not valid JSON or does not
                match the snapshot shape
        """
        text, _ = self._read()
        return text

    def load(self) -> Snapshot:
        """
        Load the snapshot from the JSON file.

        Raises:
            SnapshotNotFoundError: If no snapshot has been persisted yet
            SnapshotCorruptError: If the file is not a valid snapshot
        """
        _, snapshot = self._read()
        return snapshot

    def _parse(self, data: dict[str, Any]) -> Snapshot:
        try:
            return Snapshot.from_json(data)
        except (KeyError, TypeError, ValueError, AttributeError, InvalidRateError) as e:
            log.error("Snapshot file %s has an invalid shape: %s", self.path, e)
            raise SnapshotCorruptError(f"Snapshot file {self.path} has an invalid shape: {e!r}") from e
