"""Key-value persistence backends used by the map repositories."""

from __future__ import annotations

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Protocol

from ..errors import StorageError
from ..utils.jsonio import read_json, write_json

LOGGER = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Minimal storage interface the repositories depend on."""

    def get(self, key: str, default: Any = None) -> Any:  # pragma: no cover - interface definition only
        ...

    def set(self, key: str, value: Any) -> None:  # pragma: no cover - interface definition only
        ...

    def remove(self, key: str) -> None:  # pragma: no cover - interface definition only
        ...

    def clear(self) -> None:  # pragma: no cover - interface definition only
        ...


class InMemoryKeyValueStore:
    """Dictionary backed store; values are copied on the way in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = deepcopy(initial) if initial else {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = deepcopy(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()


class JsonFileKeyValueStore:
    """Persist all keys in a single JSON document on disk.

    A missing or unreadable file behaves like an empty store so a corrupted
    document never prevents the map from opening; write failures raise
    :class:`~campaign_map.errors.StorageError` and leave the cached state
    untouched.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._data: dict[str, Any] | None = None

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    def get(self, key: str, default: Any = None) -> Any:
        data = self._load()
        if key not in data:
            return default
        return deepcopy(data[key])

    def set(self, key: str, value: Any) -> None:
        updated = dict(self._load())
        updated[key] = deepcopy(value)
        self._flush(updated)

    def remove(self, key: str) -> None:
        data = self._load()
        if key not in data:
            return
        updated = dict(data)
        del updated[key]
        self._flush(updated)

    def clear(self) -> None:
        self._flush({})

    # ------------------------------------------------------------------
    def _load(self) -> dict[str, Any]:
        if self._data is not None:
            return self._data
        data: dict[str, Any] = {}
        if self._path.exists():
            try:
                payload = read_json(self._path)
            except (OSError, ValueError) as exc:
                LOGGER.error("Failed to load %s: %s", self._path, exc)
            else:
                if isinstance(payload, dict):
                    data = payload
                else:
                    LOGGER.error("Ignoring %s: expected a JSON object", self._path)
        self._data = data
        return data

    def _flush(self, data: dict[str, Any]) -> None:
        try:
            write_json(self._path, data)
        except (OSError, TypeError, ValueError) as exc:
            raise StorageError(f"Failed to save {self._path}: {exc}") from exc
        self._data = data


__all__ = ["InMemoryKeyValueStore", "JsonFileKeyValueStore", "KeyValueStore"]
