"""Durable per-viewer storage for the read state of synthesized events."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Iterable, Protocol
from urllib.parse import quote

logger = logging.getLogger(__name__)


class ReadStateStore(Protocol):
    """Key-value store mapping a viewer to the ids of events they have read."""

    def get(self, viewer_id: str) -> set[str]: ...

    def put(self, viewer_id: str, event_ids: Iterable[str]) -> None: ...


class InMemoryReadStateStore:
    """Process-local store, used when no durable directory is configured."""

    def __init__(self) -> None:
        self._entries: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def get(self, viewer_id: str) -> set[str]:
        with self._lock:
            return set(self._entries.get(viewer_id, set()))

    def put(self, viewer_id: str, event_ids: Iterable[str]) -> None:
        with self._lock:
            self._entries[viewer_id] = set(event_ids)


class JsonFileReadStateStore:
    """Store each viewer's read ids as a JSON list in ``<directory>/<viewer>.json``
    (the viewer id percent-encoded).

    Writes go to a temporary file that atomically replaces the previous one,
    so a crash never leaves a truncated file behind.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self._lock = threading.Lock()

    def get(self, viewer_id: str) -> set[str]:
        path = self._path_for(viewer_id)
        with self._lock:
            if not path.exists():
                return set()
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                logger.warning("Unreadable read-state file %s, starting empty: %s", path, exc)
                return set()
        if not isinstance(data, list):
            logger.warning("Read-state file %s does not hold a list, ignoring it", path)
            return set()
        return {str(item) for item in data}

    def put(self, viewer_id: str, event_ids: Iterable[str]) -> None:
        path = self._path_for(viewer_id)
        payload = json.dumps(sorted(set(event_ids)))
        with self._lock:
            self.directory.mkdir(parents=True, exist_ok=True)
            handle, temp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(handle, "w", encoding="utf-8") as stream:
                    stream.write(payload)
                os.replace(temp_path, path)
            except OSError:
                Path(temp_path).unlink(missing_ok=True)
                raise

    def _path_for(self, viewer_id: str) -> Path:
        if not viewer_id:
            raise ValueError("viewer_id is required")
        # distinct viewer ids map to distinct files
        safe_name = quote(viewer_id, safe="")
        return self.directory / f"{safe_name}.json"


__all__ = ["InMemoryReadStateStore", "JsonFileReadStateStore", "ReadStateStore"]
