from __future__ import annotations

import json
from pathlib import Path

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for settings tests", exc_type=ImportError)
pytest.importorskip("PySide6.QtTest", reason="Qt test helpers not available", exc_type=ImportError)

from PySide6.QtTest import QSignalSpy

from campaign_map.config import DEFAULT_STORAGE_DIR, STORAGE_FILE_NAME
from campaign_map.errors import SettingsError, SettingsLoadError, SettingsValidationError
from campaign_map.settings.manager import SettingsManager


def test_settings_manager_roundtrip(tmp_path: Path, qapp) -> None:
    settings_path = tmp_path / "settings.json"
    manager = SettingsManager(path=settings_path)
    manager.load()
    assert settings_path.exists()
    assert manager.get("storage_path") is None
    spy = QSignalSpy(manager.settingsChanged)
    storage = tmp_path / "maps.json"
    manager.set("storage_path", storage)
    qapp.processEvents()
    assert spy.count() == 1
    assert manager.get("storage_path") == str(storage)
    assert manager.storage_path() == storage
    stored = json.loads(settings_path.read_text(encoding="utf-8"))
    assert stored["storage_path"] == str(storage)


def test_settings_manager_nested_updates_preserve_defaults(tmp_path: Path) -> None:
    manager = SettingsManager(path=tmp_path / "settings.json")
    manager.load()
    manager.set("map.marker_radius", 12)
    assert manager.get("map.marker_radius") == 12
    assert manager.get("map.wheel_action") == "zoom"
    assert manager.get("map.default_category") == "location"


def test_settings_manager_rejects_invalid_values(tmp_path: Path) -> None:
    manager = SettingsManager(path=tmp_path / "settings.json")
    manager.load()
    with pytest.raises(SettingsValidationError):
        manager.set("map.wheel_action", "spin")
    assert manager.get("map.wheel_action") == "zoom"


def test_settings_manager_merges_existing_file(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(json.dumps({"map": {"show_labels": False}}), encoding="utf-8")
    manager = SettingsManager(path=settings_path)
    manager.load()
    assert manager.get("map.show_labels") is False
    assert manager.get("map.marker_radius") == 9


def test_settings_manager_reports_corrupt_file(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("{oops", encoding="utf-8")
    with pytest.raises(SettingsLoadError):
        SettingsManager(path=settings_path).load()


def test_settings_manager_reports_invalid_file(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text(json.dumps({"map": {"marker_radius": 500}}), encoding="utf-8")
    with pytest.raises(SettingsValidationError):
        SettingsManager(path=settings_path).load()


def test_missing_key_returns_default(tmp_path: Path) -> None:
    manager = SettingsManager(path=tmp_path / "settings.json")
    assert manager.get("map.unknown", "fallback") == "fallback"
    assert manager.get("storage_path.nested", 1) == 1
    assert manager.storage_path() == DEFAULT_STORAGE_DIR / STORAGE_FILE_NAME


def test_map_preferences_reflect_updates(tmp_path: Path) -> None:
    manager = SettingsManager(path=tmp_path / "settings.json")
    manager.load()
    manager.set("map.default_category", "ruins")
    manager.set("map.wheel_action", "none")

    preferences = manager.map_preferences()

    assert preferences.default_category.value == "ruins"
    assert preferences.wheel_action == "none"
    assert preferences.show_labels is True
    assert preferences.marker_radius == 9


def test_non_object_settings_file_is_rejected(tmp_path: Path) -> None:
    settings_path = tmp_path / "settings.json"
    settings_path.write_text("[]", encoding="utf-8")
    with pytest.raises(SettingsValidationError):
        SettingsManager(path=settings_path).load()


def test_failed_write_keeps_previous_value(tmp_path: Path, monkeypatch, qapp) -> None:
    manager = SettingsManager(path=tmp_path / "settings.json")
    manager.load()
    spy = QSignalSpy(manager.settingsChanged)

    def _refuse(path, payload):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr("campaign_map.settings.manager.write_json", _refuse)
    with pytest.raises(SettingsError):
        manager.set("map.show_labels", False)

    assert manager.get("map.show_labels") is True
    assert spy.count() == 0


def test_load_without_persist_leaves_disk_alone(tmp_path: Path) -> None:
    missing = tmp_path / "missing" / "settings.json"
    SettingsManager(path=missing).load(persist=False)
    assert not missing.exists()

    settings_path = tmp_path / "settings.json"
    original = json.dumps({"map": {"show_labels": False}})
    settings_path.write_text(original, encoding="utf-8")
    manager = SettingsManager(path=settings_path)
    manager.load(persist=False)

    assert manager.get("map.show_labels") is False
    assert settings_path.read_text(encoding="utf-8") == original
