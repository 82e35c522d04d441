"""
Key-Value Store Module

String-keyed, string-valued persistence used by the session layer.
Values are opaque strings (serialised JSON for profiles, a bare username
for the current-user pointer), the same contract as browser localStorage.

Example Usage:
    from personasync.utils.kv_store import JsonFileStore

    store = JsonFileStore("data/session_store.json")
    store.set_item("currentUser", "alice")
    store.get_item("currentUser")  # "alice"
    store.remove_item("currentUser")
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

import structlog

logger = structlog.get_logger(__name__)


class KeyValueStore(Protocol):
    """Minimal persistent key-value interface."""

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class InMemoryStore:
    """Process-local store. Used by tests and the "memory" backend."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore:
    """Store backed by a single JSON object file.

    Every write rewrites the whole document through a temporary file and
    ``os.replace``, so readers see either the old or the new document.
    Concurrent writers from different processes are last-writer-wins.
    """

    def __init__(self, path: str | Path):
        """
        Initialize JsonFileStore.

        Args:
            path: Path to the JSON document (parent directory is created)
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise IOError(f"Corrupted store file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise IOError(
                f"Corrupted store file {self.path}: expected a JSON object, "
                f"got {type(data).__name__}"
            )
        return data

    def _write(self, data: dict[str, str]) -> None:
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise IOError(f"Failed to write store file {self.path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as e:
            # the temp file only survives when os.replace did not run
            Path(tmp_name).unlink(missing_ok=True)
            raise IOError(f"Failed to write store file {self.path}: {e}") from e

        logger.debug("store_written", path=str(self.path), total_keys=len(data))

    def get_item(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        if value is not None and not isinstance(value, str):
            raise IOError(
                f"Corrupted store file {self.path}: value for {key!r} is not a string"
            )
        return value

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def keys(self) -> list[str]:
        return list(self._read())
