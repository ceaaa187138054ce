import logging
import math
from dataclasses import replace

import pytest

from campaign_map.errors import WaypointValidationError
from campaign_map.map_view.viewport import Point, Size, ViewportState, compute_fit_viewport
from campaign_map.map_view.waypoints import (
    CATEGORY_CATALOG,
    PENDING_ID_PREFIX,
    StagedWaypoint,
    Waypoint,
    WaypointCategory,
    WaypointDraft,
    WaypointPlacer,
    WaypointStore,
    category_info,
    parse_category,
)

IMAGE = Size(2000, 1000)
FIT = ViewportState(scale=0.4, offset_x=0.0, offset_y=0.0)


def _waypoint(waypoint_id, x=10.0, y=20.0, **kwargs):
    return Waypoint(id=waypoint_id, title=waypoint_id.title(), x_percent=x, y_percent=y, **kwargs)


# ----------------------------------------------------------------------
# Categories
# ----------------------------------------------------------------------
def test_catalog_covers_every_category():
    assert {info.category for info in CATEGORY_CATALOG} == set(WaypointCategory)


def test_parse_category_accepts_values_and_falls_back():
    assert parse_category("forest") is WaypointCategory.FOREST
    assert parse_category(" Dungeon ") is WaypointCategory.DUNGEON
    assert parse_category(WaypointCategory.CITY) is WaypointCategory.CITY
    assert parse_category("volcano") is WaypointCategory.LOCATION
    assert parse_category(None) is WaypointCategory.LOCATION


def test_category_info_lookup():
    assert category_info("capital").label == "Capital"
    assert category_info("unknown").category is WaypointCategory.LOCATION


# ----------------------------------------------------------------------
# Records
# ----------------------------------------------------------------------
def test_waypoint_rejects_out_of_range_position():
    with pytest.raises(ValueError):
        Waypoint(id="a", title="A", x_percent=-0.1, y_percent=50.0)
    with pytest.raises(ValueError):
        Waypoint(id="a", title="A", x_percent=50.0, y_percent=100.5)


def test_to_record_uses_wire_names():
    record = _waypoint("keep", category=WaypointCategory.KINGDOM, map_id="m1").to_record()

    assert record == {
        "id": "keep",
        "title": "Keep",
        "description": "",
        "category": "kingdom",
        "x_position": 10.0,
        "y_position": 20.0,
        "map_id": "m1",
    }
    assert "map_id" not in _waypoint("keep").to_record()


def test_from_record_clamps_and_defaults(caplog):
    record = {
        "id": "w1",
        "title": "Lost Tower",
        "category": "volcano",
        "x_position": 120.0,
        "y_position": -3.0,
    }

    with caplog.at_level(logging.WARNING):
        waypoint = Waypoint.from_record(record)

    assert waypoint.x_percent == 100.0
    assert waypoint.y_percent == 0.0
    assert waypoint.category is WaypointCategory.LOCATION
    assert waypoint.description == ""
    assert waypoint.map_id is None
    assert "Clamped waypoint w1" in caplog.text


def test_from_record_coerces_unusable_numbers():
    waypoint = Waypoint.from_record({"id": "w2", "title": "X", "x_position": math.nan, "y_position": "bad"})

    assert waypoint.position == Point(0.0, 0.0)


# ----------------------------------------------------------------------
# Placement
# ----------------------------------------------------------------------
def test_click_stages_candidate_in_percent_space():
    placer = WaypointPlacer(WaypointCategory.CITY)

    staged = placer.stage_click(Point(100.0, 100.0), IMAGE, FIT)

    assert staged is placer.staged
    assert staged.category is WaypointCategory.CITY
    assert staged.x_percent == pytest.approx(12.5)
    assert staged.y_percent == pytest.approx(25.0)


def test_click_in_letterbox_is_rejected():
    image = Size(1000, 1000)
    viewport = compute_fit_viewport(image, Size(800, 400))
    placer = WaypointPlacer()
    previous = placer.stage_click(Point(400.0, 200.0), image, viewport)

    # (180, 200) lands at (-5%, 50%).
    assert placer.stage_click(Point(180.0, 200.0), image, viewport) is None
    assert placer.staged == previous


def test_click_without_image_is_ignored():
    placer = WaypointPlacer()

    assert placer.stage_click(Point(10.0, 10.0), Size(0, 0), FIT) is None
    assert placer.staged is None


def test_set_category_updates_staged_candidate():
    placer = WaypointPlacer()
    placer.stage_click(Point(100.0, 100.0), IMAGE, FIT)

    placer.set_category("ruins")

    assert placer.category is WaypointCategory.RUINS
    assert placer.staged.category is WaypointCategory.RUINS
    assert placer.staged.x_percent == pytest.approx(12.5)


def test_confirm_requires_title_and_keeps_candidate():
    placer = WaypointPlacer()
    placer.stage_click(Point(100.0, 100.0), IMAGE, FIT)

    with pytest.raises(WaypointValidationError):
        placer.confirm("   ")

    assert placer.staged is not None


def test_confirm_produces_draft_and_clears_candidate():
    placer = WaypointPlacer(WaypointCategory.WATER)
    placer.stage_click(Point(100.0, 100.0), IMAGE, FIT)

    draft = placer.confirm("  Silver Lake ", " cold ", map_id="m1")

    assert draft.category is WaypointCategory.WATER
    assert (draft.x_percent, draft.y_percent) == pytest.approx((12.5, 25.0))
    assert (draft.title, draft.description, draft.map_id) == ("Silver Lake", "cold", "m1")
    assert placer.staged is None


def test_confirm_without_candidate_returns_none():
    assert WaypointPlacer().confirm("Nothing") is None


def test_cancel_returns_discarded_candidate():
    placer = WaypointPlacer()
    staged = placer.stage_click(Point(100.0, 100.0), IMAGE, FIT)

    assert placer.cancel() == staged
    assert placer.staged is None
    assert placer.cancel() is None


# ----------------------------------------------------------------------
# Store
# ----------------------------------------------------------------------
def _draft(title="Camp"):
    return WaypointDraft(WaypointCategory.LOCATION, 50.0, 50.0, title)


def test_add_optimistic_uses_pending_id():
    store = WaypointStore()

    waypoint = store.add_optimistic(_draft())

    assert waypoint.id.startswith(PENDING_ID_PREFIX)
    assert waypoint.is_pending
    assert waypoint.id in store
    assert len(store) == 1


def test_reconcile_replaces_placeholder_in_place():
    store = WaypointStore([_waypoint("a")])
    provisional = store.add_optimistic(_draft())
    store.add_optimistic(_draft("Later"))

    persisted = replace(provisional, id="real")
    result = store.reconcile(provisional.id, persisted)

    assert result == persisted
    assert [waypoint.id for waypoint in store][:2] == ["a", "real"]
    assert provisional.id not in store


def test_reconcile_with_failure_drops_placeholder():
    store = WaypointStore()
    provisional = store.add_optimistic(_draft())

    assert store.reconcile(provisional.id, None) is None
    assert len(store) == 0
    assert store.reconcile("missing", None) is None


def test_remove_and_restore():
    waypoint = _waypoint("a")
    store = WaypointStore([waypoint])

    assert store.remove("a") == waypoint
    assert store.remove("a") is None
    store.restore(waypoint)
    assert store.get("a") == waypoint


def test_for_map_filters():
    store = WaypointStore([_waypoint("a", map_id="m1"), _waypoint("b", map_id="m2"), _waypoint("c")])

    assert [waypoint.id for waypoint in store.for_map("m1")] == ["a"]
    assert [waypoint.id for waypoint in store.for_map(None)] == ["c"]


def test_project_follows_viewport():
    store = WaypointStore([_waypoint("a", x=12.5, y=25.0)])

    projected = store.project(IMAGE, FIT)
    assert projected[0].position.x == pytest.approx(100.0)
    assert projected[0].position.y == pytest.approx(100.0)

    zoomed = ViewportState(scale=0.8, offset_x=-50.0, offset_y=10.0)
    projected = store.project(IMAGE, zoomed)
    assert projected[0].position.x == pytest.approx(150.0)
    assert projected[0].position.y == pytest.approx(210.0)

    assert store.project(Size(0, 0), FIT) == []


def test_waypoint_at_prefers_topmost():
    store = WaypointStore([_waypoint("under", x=12.5, y=25.0), _waypoint("over", x=12.6, y=25.0)])

    hit = store.waypoint_at(Point(100.0, 100.0), IMAGE, FIT, radius=10.0)

    assert hit.id == "over"
    assert store.waypoint_at(Point(400.0, 300.0), IMAGE, FIT, radius=10.0) is None


def test_staged_waypoint_is_value_object():
    assert StagedWaypoint(WaypointCategory.CITY, 1.0, 2.0) == StagedWaypoint(WaypointCategory.CITY, 1.0, 2.0)
