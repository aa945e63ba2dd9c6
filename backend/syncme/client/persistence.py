"""
SyncMe - Client Persistence Port
================================

What:  Key/value storage the client store reads once at construction and
       writes after every change (the local-storage analogue).
How:   Values are JSON-compatible structures (lists of dicts). Backends:
       - MemoryPersistence:   process memory, for tests and embedding
       - JsonFilePersistence: one <key>.json file per key under a directory

A missing key loads as None. Malformed JSON propagates as
json.JSONDecodeError; the store does not overwrite data it could not read.
"""

import copy
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from syncme.config import settings

logger = logging.getLogger(__name__)


class PersistencePort(ABC):

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Return the stored value for key, or None if nothing was stored."""
        ...

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Replace the stored value for key."""
        ...


class MemoryPersistence(PersistencePort):
    """Dict-backed storage. Values are deep-copied in and out."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self.save_count = 0

    def load(self, key: str) -> Optional[Any]:
        value = self._data.get(key)
        return copy.deepcopy(value)

    def save(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)
        self.save_count += 1


class JsonFilePersistence(PersistencePort):
    """
    Stores each key as `<root>/<key>.json`.

    Writes go to a temporary file that is then renamed over the target, so a
    crash mid-write leaves the previous document intact.
    """

    def __init__(self, root: Optional[str] = None) -> None:
        self.root = Path(root or settings.local_storage_path)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def load(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def save(self, key: str, value: Any) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, path)
        logger.debug("Saved %s to %s", key, path)
