"""Destination-path cache: write-once ``(parent_id, entity_id) -> path`` mappings.

Layout contract::

    ${TEMP_STORAGE_DIR}/destPath/{parent_id}.json   : {entity_id: canonical path}
    ${TEMP_STORAGE_DIR}/destPath/{parent_id}.lock   : advisory lock for that parent
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import threading
from collections import defaultdict
from pathlib import Path

import filelock

from inplace_store.config import DEFAULT_LOCK_TIMEOUT
from inplace_store.errors import DestinationConflictError, InvalidIdentifierError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def safe_key(value: str) -> str:
    """Turn an identifier into a string usable as a file name."""
    cleaned = _UNSAFE_CHARS.sub("_", str(value)).strip(".")
    if not cleaned:
        raise InvalidIdentifierError(value)
    return cleaned


class JsonDestinationCache:
    """Destination cache persisted as one JSON document per parent entity.

    Reads and writes are not locked on their own; callers wrap the
    read-then-write sequence in ``lock(parent_id)``, which is a
    cross-process ``filelock.FileLock``.
    """

    def __init__(self, directory: str | Path, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT):
        self.directory = Path(directory)
        self.lock_timeout = lock_timeout
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, parent_id: str) -> Path:
        return self.directory / f"{safe_key(parent_id)}.json"

    def lock(self, parent_id: str) -> filelock.FileLock:
        return filelock.FileLock(
            str(self.directory / f"{safe_key(parent_id)}.lock"),
            timeout=self.lock_timeout,
        )

    def entries(self, parent_id: str) -> dict[str, str]:
        path = self._path(parent_id)
        if not path.exists():
            return {}
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Destination cache {path} is not a JSON object")
        return {str(k): str(v) for k, v in data.items()}

    def parents(self) -> list[str]:
        return sorted(p.stem for p in self.directory.glob("*.json"))

    def read(self, parent_id: str, entity_id: str) -> str | None:
        return self.entries(parent_id).get(entity_id)

    def write(self, parent_id: str, entity_id: str, path: str) -> None:
        entries = self.entries(parent_id)
        existing = entries.get(entity_id)
        if existing is not None:
            if existing != path:
                raise DestinationConflictError(parent_id, entity_id, existing, path)
            return

        entries[entity_id] = path
        target = self._path(parent_id)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.directory, prefix=f".{target.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(entries, handle, indent=2, sort_keys=True)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Cached destination %s/%s -> %s", parent_id, entity_id, path)


class InMemoryDestinationCache:
    """Process-local destination cache with the same write-once contract."""

    def __init__(self) -> None:
        self._entries: dict[str, dict[str, str]] = defaultdict(dict)
        self._locks: dict[str, threading.RLock] = defaultdict(threading.RLock)
        self._guard = threading.Lock()

    def lock(self, parent_id: str) -> threading.RLock:
        with self._guard:
            return self._locks[parent_id]

    def entries(self, parent_id: str) -> dict[str, str]:
        return dict(self._entries.get(parent_id, {}))

    def parents(self) -> list[str]:
        return sorted(k for k, v in self._entries.items() if v)

    def read(self, parent_id: str, entity_id: str) -> str | None:
        return self._entries.get(parent_id, {}).get(entity_id)

    def write(self, parent_id: str, entity_id: str, path: str) -> None:
        existing = self.read(parent_id, entity_id)
        if existing is not None and existing != path:
            raise DestinationConflictError(parent_id, entity_id, existing, path)
        self._entries[parent_id][entity_id] = path
