"""Persisted user preferences for the campaign map."""

from __future__ import annotations

import os
import sys
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from jsonschema import ValidationError
from PySide6.QtCore import QObject, Signal

from ..config import DEFAULT_STORAGE_DIR, STORAGE_FILE_NAME
from ..errors import SettingsError, SettingsLoadError, SettingsValidationError
from ..map_view.waypoints import WaypointCategory, parse_category
from ..utils.jsonio import read_json, write_json
from .schema import DEFAULT_SETTINGS, merge_with_defaults

_MISSING = object()


def default_settings_path() -> Path:
    """Return the per-user ``settings.json`` path for this platform."""

    if os.name == "nt":
        root = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return Path(root) / "CampaignMap" / "settings.json"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "CampaignMap" / "settings.json"
    root = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(root) / "campaign-map" / "settings.json"


def _lookup(data: Any, parts: Sequence[str]) -> Any:
    for part in parts:
        if not isinstance(data, dict) or part not in data:
            return _MISSING
        data = data[part]
    return data


def _assign(data: dict[str, Any], parts: Sequence[str], value: Any) -> None:
    for part in parts[:-1]:
        child = data.get(part)
        if not isinstance(child, dict):
            child = data[part] = {}
        data = child
    data[parts[-1]] = value


@dataclass(frozen=True)
class MapPreferences:
    """Typed view of the ``map`` settings section."""

    default_category: WaypointCategory
    wheel_action: str
    show_labels: bool
    marker_radius: int


class SettingsManager(QObject):
    """Load, validate and persist ``settings.json``.

    Keys use dotted paths (``"map.show_labels"``).  Every successful
    :meth:`set` is written to disk immediately and announced through
    :attr:`settingsChanged` with the key and the new value.
    """

    settingsChanged = Signal(str, object)

    def __init__(self, path: Path | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._path = path
        self._data: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)

    @property
    def path(self) -> Path:
        if self._path is None:
            self._path = default_settings_path()
        return self._path

    def load(self, *, persist: bool = True) -> None:
        """Read the settings file and fill gaps with defaults.

        With *persist* the merged document is written back when it differs
        from what is on disk; read-only callers pass ``persist=False``.
        """

        payload = None
        if self.path.exists():
            try:
                payload = read_json(self.path)
            except (OSError, ValueError) as exc:
                raise SettingsLoadError(f"Cannot read {self.path}: {exc}") from exc
        self._data = self._validated(payload)
        if persist and payload != self._data:
            self._write(self._data)

    def get(self, key: str, default: Any | None = None) -> Any:
        value = _lookup(self._data, key.split("."))
        return default if value is _MISSING else value

    def set(self, key: str, value: Any) -> None:
        """Store *value* under *key*.

        Raises :class:`SettingsValidationError` for values the schema rejects
        and :class:`SettingsError` when the file cannot be written; the current
        settings stay untouched in both cases.
        """

        if isinstance(value, Path):
            value = str(value)
        candidate = deepcopy(self._data)
        _assign(candidate, key.split("."), value)
        validated = self._validated(candidate)
        self._write(validated)
        self._data = validated
        self.settingsChanged.emit(key, value)

    def map_preferences(self) -> MapPreferences:
        section = self._data["map"]
        return MapPreferences(
            default_category=parse_category(section["default_category"]),
            wheel_action=str(section["wheel_action"]),
            show_labels=bool(section["show_labels"]),
            marker_radius=int(section["marker_radius"]),
        )

    def storage_path(self) -> Path:
        """Return the JSON document that holds maps and waypoints."""

        configured = self.get("storage_path")
        return Path(configured) if configured else DEFAULT_STORAGE_DIR / STORAGE_FILE_NAME

    def _write(self, data: dict[str, Any]) -> None:
        try:
            write_json(self.path, data)
        except OSError as exc:
            raise SettingsError(f"Cannot write {self.path}: {exc}") from exc

    @staticmethod
    def _validated(payload: Any) -> dict[str, Any]:
        if payload is not None and not isinstance(payload, dict):
            raise SettingsValidationError("settings.json must contain a JSON object")
        try:
            return merge_with_defaults(payload)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc


__all__ = ["MapPreferences", "SettingsManager", "default_settings_path"]
