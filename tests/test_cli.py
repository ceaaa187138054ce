from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from campaign_map.cli import app

runner = CliRunner()


@pytest.fixture()
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "store.json"


def _invoke(store_path: Path, *args: str):
    return runner.invoke(app, ["--store", str(store_path), *args])


def _stored(store_path: Path) -> dict:
    return json.loads(store_path.read_text(encoding="utf-8"))


def test_fit_prints_viewport() -> None:
    result = runner.invoke(app, ["fit", "2000", "1000", "800", "400"])

    assert result.exit_code == 0
    assert "scale=0.4 offset_x=0 offset_y=0" in result.output


def test_locate_reports_percent_position() -> None:
    result = runner.invoke(
        app,
        ["locate", "--image", "2000", "1000", "--container", "800", "400", "100", "100"],
    )

    assert result.exit_code == 0
    assert "x=12.5% y=25%" in result.output


def test_locate_rejects_letterbox_click() -> None:
    result = runner.invoke(
        app,
        ["locate", "--image", "1000", "1000", "--container", "800", "400", "180", "200"],
    )

    assert result.exit_code == 1
    assert "outside the map image" in result.output


def test_map_catalogue_flow(store_path: Path) -> None:
    assert _invoke(store_path, "maps", "list").exit_code == 0

    result = _invoke(store_path, "maps", "add", "Realm", "realm.png")
    assert result.exit_code == 0
    assert "Added map" in result.output
    _invoke(store_path, "maps", "add", "Underdark", "under.png")
    first, second = _stored(store_path)["maps"]
    assert second["is_active"] and not first["is_active"]

    result = _invoke(store_path, "maps", "activate", first["id"])
    assert result.exit_code == 0
    assert [entry["is_active"] for entry in _stored(store_path)["maps"]] == [True, False]

    listing = _invoke(store_path, "maps", "list")
    assert "Realm" in listing.output
    assert "Underdark" in listing.output

    result = _invoke(store_path, "maps", "remove", second["id"])
    assert result.exit_code == 0
    assert [entry["id"] for entry in _stored(store_path)["maps"]] == [first["id"]]


def test_unknown_map_exits_with_error(store_path: Path) -> None:
    result = _invoke(store_path, "maps", "activate", "missing")

    assert result.exit_code == 1
    assert "Error:" in result.output


def test_waypoint_flow_uses_active_map(store_path: Path) -> None:
    _invoke(store_path, "maps", "add", "Realm", "realm.png")
    map_id = _stored(store_path)["maps"][0]["id"]

    result = _invoke(
        store_path, "waypoints", "add", "Harbor", "--x", "12.5", "--y", "25", "--category", "city"
    )
    assert result.exit_code == 0
    (record,) = _stored(store_path)["waypoints"]
    assert record["map_id"] == map_id
    assert record["category"] == "city"
    assert record["x_position"] == pytest.approx(12.5)

    listing = _invoke(store_path, "waypoints", "list")
    assert "Harbor" in listing.output

    result = _invoke(store_path, "waypoints", "remove", record["id"])
    assert result.exit_code == 0
    assert _stored(store_path)["waypoints"] == []

    again = _invoke(store_path, "waypoints", "remove", record["id"])
    assert again.exit_code == 1


def test_waypoint_add_validates_position(store_path: Path) -> None:
    result = _invoke(store_path, "waypoints", "add", "Edge", "--x", "150", "--y", "25")

    assert result.exit_code == 1
    assert not store_path.exists()


def test_waypoint_add_requires_title(store_path: Path) -> None:
    result = _invoke(store_path, "waypoints", "add", "  ", "--x", "10", "--y", "10")

    assert result.exit_code == 1


def test_removing_map_drops_waypoints(store_path: Path) -> None:
    _invoke(store_path, "maps", "add", "Realm", "realm.png")
    map_id = _stored(store_path)["maps"][0]["id"]
    _invoke(store_path, "waypoints", "add", "Harbor", "--x", "1", "--y", "2")

    _invoke(store_path, "maps", "remove", map_id)

    assert _stored(store_path)["waypoints"] == []


def test_default_store_does_not_rewrite_settings(tmp_path: Path, monkeypatch) -> None:
    settings_path = tmp_path / "settings.json"
    original = json.dumps({"storage_path": str(tmp_path / "maps.json")})
    settings_path.write_text(original, encoding="utf-8")
    monkeypatch.setattr("campaign_map.settings.manager.default_settings_path", lambda: settings_path)

    result = runner.invoke(app, ["maps", "list"])

    assert result.exit_code == 0
    assert "No maps registered" in result.output
    assert settings_path.read_text(encoding="utf-8") == original
