"""Key/value storage backends for ledger state.

Every value is JSON-encodable. ``JsonFileStorage`` keeps all keys of one
ledger in a single JSON document on disk; ``MemoryStorage`` is a dict used by
tests and throwaway sessions.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import PersistenceError

logger = logging.getLogger(__name__)


class StorageBackend:
    """Interface shared by the storage backends."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set_many(self, values: Mapping[str, Any]) -> None:
        raise NotImplementedError

    def delete(self, *keys: str) -> None:
        raise NotImplementedError


class MemoryStorage(StorageBackend):
    """Stores JSON text per key so values round-trip like they do on disk."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, str] = {}
        if initial:
            self.set_many(initial)

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        try:
            return json.loads(self._data[key])
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupt value under '{key}': {exc}") from exc

    def set_many(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self._data[key] = json.dumps(value)

    def set_raw(self, key: str, text: str) -> None:
        """Store ``text`` verbatim, bypassing encoding."""
        self._data[key] = text

    def delete(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    def keys(self):
        return list(self._data)


class JsonFileStorage(StorageBackend):
    """All keys live in one JSON object at ``path``."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open('r', encoding='utf-8') as handle:
                data = json.load(handle)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Could not read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise PersistenceError(f"Unexpected JSON root in {self.path}")
        return data

    def _write(self, data: Mapping[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".caja_", suffix=".json", dir=self.path.parent)
        except OSError as exc:
            raise PersistenceError(f"Could not write {self.path}: {exc}") from exc
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as handle:
                json.dump(data, handle, indent=2, sort_keys=True, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Could not write {self.path}: {exc}") from exc
        finally:
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logger.exception("Failed to cleanup temporary file during save: %s", tmp_path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set_many(self, values: Mapping[str, Any]) -> None:
        try:
            data = self._read()
        except PersistenceError:
            logger.warning("Overwriting unreadable storage file %s", self.path)
            data = {}
        data.update(values)
        self._write(data)

    def delete(self, *keys: str) -> None:
        try:
            data = self._read()
        except PersistenceError:
            data = {}
        for key in keys:
            data.pop(key, None)
        if data:
            self._write(data)
            return
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Failed to delete {self.path}: {exc}") from exc
