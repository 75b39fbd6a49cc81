"""Key-value stores for saved progress."""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger("wordswap.storage")


class KeyValueStore(ABC):
    """Minimal interface the progress layer needs from a storage medium."""

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...


class MemoryStore(KeyValueStore):
    """Store kept in a dict. Values are copied through JSON like a real medium."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def save(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """
    Store backed by a single JSON document on disk.

    The whole document is rewritten on every save or remove, through a
    temporary file in the same directory that replaces the document in one
    step. A missing file is an empty store. A file that does not hold a JSON
    object is moved aside to ``<name>.corrupt`` and the store starts empty,
    so the next write cannot destroy it.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    @property
    def corrupt_path(self) -> Path:
        return self.path.with_name(self.path.name + ".corrupt")

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            logger.warning("Could not read store %s: %s", self.path, e)
            return {}
        except json.JSONDecodeError as e:
            logger.error("Store %s is not valid JSON: %s", self.path, e)
            self._quarantine()
            return {}
        if not isinstance(data, dict):
            logger.error("Store %s does not hold a JSON object", self.path)
            self._quarantine()
            return {}
        return data

    def _quarantine(self) -> None:
        try:
            os.replace(self.path, self.corrupt_path)
        except OSError as e:
            logger.error("Could not move %s aside: %s", self.path, e)
        else:
            logger.warning("Moved unreadable store to %s", self.corrupt_path)

    def _write(self, data: Dict[str, Any]) -> None:
        folder = self.path.parent
        folder.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=self.path.name + ".", suffix=".tmp", dir=folder, text=True)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    def load(self, key: str) -> Optional[Any]:
        return self._read().get(key)

    def save(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
