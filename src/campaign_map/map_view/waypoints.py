"""Waypoint records, the category catalogue, placement and the in-memory store."""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Optional

from ..errors import WaypointValidationError
from .coordinates import (
    clamp_percent,
    container_to_percent,
    is_within_percent_bounds,
    percent_to_container,
)
from .viewport import ImageDimensions, Point, ViewportState

LOGGER = logging.getLogger(__name__)

PENDING_ID_PREFIX = "pending-"


class WaypointCategory(str, Enum):
    KINGDOM = "kingdom"
    FOREST = "forest"
    MOUNTAIN = "mountain"
    WATER = "water"
    CITY = "city"
    DUNGEON = "dungeon"
    CAPITAL = "capital"
    RUINS = "ruins"
    LANDMARK = "landmark"
    LOCATION = "location"


@dataclass(frozen=True)
class CategoryInfo:
    """Display metadata for a waypoint category."""

    category: WaypointCategory
    label: str
    icon: str
    color: str


CATEGORY_CATALOG: tuple[CategoryInfo, ...] = (
    CategoryInfo(WaypointCategory.KINGDOM, "Kingdom", "castle", "#60a5fa"),
    CategoryInfo(WaypointCategory.FOREST, "Forest", "trees", "#4ade80"),
    CategoryInfo(WaypointCategory.MOUNTAIN, "Mountain", "mountain", "#9ca3af"),
    CategoryInfo(WaypointCategory.WATER, "Water", "waves", "#22d3ee"),
    CategoryInfo(WaypointCategory.CITY, "City", "home", "#facc15"),
    CategoryInfo(WaypointCategory.DUNGEON, "Dungeon", "swords", "#f87171"),
    CategoryInfo(WaypointCategory.CAPITAL, "Capital", "crown", "#c084fc"),
    CategoryInfo(WaypointCategory.RUINS, "Ruins", "skull", "#fb923c"),
    CategoryInfo(WaypointCategory.LANDMARK, "Landmark", "landmark", "#f472b6"),
    CategoryInfo(WaypointCategory.LOCATION, "General Location", "map-pin", "#f59e0b"),
)

_CATALOG_BY_CATEGORY = {info.category: info for info in CATEGORY_CATALOG}


def parse_category(value: object) -> WaypointCategory:
    """Return the category named by *value*, falling back to ``LOCATION``."""

    if isinstance(value, WaypointCategory):
        return value
    if isinstance(value, str):
        try:
            return WaypointCategory(value.strip().lower())
        except ValueError:
            pass
    return WaypointCategory.LOCATION


def category_info(value: object) -> CategoryInfo:
    """Return catalogue metadata for *value*; unknown values map to ``LOCATION``."""

    return _CATALOG_BY_CATEGORY[parse_category(value)]


# ----------------------------------------------------------------------
# Records
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class Waypoint:
    """A placed marker.  Positions are stored in percent space."""

    id: str
    title: str
    x_percent: float
    y_percent: float
    category: WaypointCategory = WaypointCategory.LOCATION
    description: str = ""
    map_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not is_within_percent_bounds(Point(self.x_percent, self.y_percent)):
            raise ValueError(
                f"waypoint position ({self.x_percent}, {self.y_percent}) lies outside 0..100",
            )

    @property
    def position(self) -> Point:
        return Point(self.x_percent, self.y_percent)

    @property
    def is_pending(self) -> bool:
        """``True`` while the record only exists as an optimistic placeholder."""

        return self.id.startswith(PENDING_ID_PREFIX)

    def to_record(self) -> dict[str, Any]:
        """Serialise to the flat wire format used by the persistence layer."""

        record: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category.value,
            "x_position": float(self.x_percent),
            "y_position": float(self.y_percent),
        }
        if self.map_id is not None:
            record["map_id"] = self.map_id
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Waypoint:
        """Build a waypoint from a persisted record.

        Out-of-range or non-finite positions are clamped into ``0..100`` and an
        unknown category becomes ``LOCATION`` so one corrupted field does not
        discard the whole record.
        """

        x_raw = _coerce_float(record.get("x_position"))
        y_raw = _coerce_float(record.get("y_position"))
        x_percent = clamp_percent(x_raw)
        y_percent = clamp_percent(y_raw)
        if (x_percent, y_percent) != (x_raw, y_raw):
            LOGGER.warning(
                "Clamped waypoint %s position (%s, %s) into range",
                record.get("id"),
                record.get("x_position"),
                record.get("y_position"),
            )
        map_id = record.get("map_id")
        return cls(
            id=str(record["id"]),
            title=str(record.get("title") or ""),
            description=str(record.get("description") or ""),
            category=parse_category(record.get("category")),
            x_percent=x_percent,
            y_percent=y_percent,
            map_id=str(map_id) if map_id is not None else None,
        )


def _coerce_float(value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number):
        return 0.0
    return number


@dataclass(frozen=True)
class StagedWaypoint:
    """A placement candidate waiting for the user to confirm or cancel."""

    category: WaypointCategory
    x_percent: float
    y_percent: float


@dataclass(frozen=True)
class WaypointDraft:
    """Create intent emitted once the user confirms a staged waypoint."""

    category: WaypointCategory
    x_percent: float
    y_percent: float
    title: str
    description: str = ""
    map_id: Optional[str] = None

    def to_waypoint(self, waypoint_id: str) -> Waypoint:
        return Waypoint(
            id=waypoint_id,
            title=self.title,
            description=self.description,
            category=self.category,
            x_percent=self.x_percent,
            y_percent=self.y_percent,
            map_id=self.map_id,
        )


# ----------------------------------------------------------------------
# Placement
# ----------------------------------------------------------------------
class WaypointPlacer:
    """Two-phase placement: a click stages a candidate, a form confirms it."""

    def __init__(self, category: WaypointCategory = WaypointCategory.LOCATION) -> None:
        self._category = parse_category(category)
        self._staged: Optional[StagedWaypoint] = None

    @property
    def category(self) -> WaypointCategory:
        return self._category

    @property
    def staged(self) -> Optional[StagedWaypoint]:
        return self._staged

    def set_category(self, category: object) -> None:
        """Select the category for subsequent placements.

        A candidate that is already staged adopts the new category so the
        confirmation form can still change it.
        """

        self._category = parse_category(category)
        if self._staged is not None:
            self._staged = StagedWaypoint(self._category, self._staged.x_percent, self._staged.y_percent)

    def stage_click(
        self,
        click: Point,
        image: ImageDimensions,
        viewport: ViewportState,
    ) -> Optional[StagedWaypoint]:
        """Stage a waypoint for the container-space *click*.

        Returns ``None`` without touching the current candidate when no image
        is loaded or the click landed outside the rendered image.
        """

        if image.is_empty():
            return None
        percent = container_to_percent(click, image, viewport)
        if not is_within_percent_bounds(percent):
            LOGGER.debug("Ignoring click outside the map at %.2f%%, %.2f%%", percent.x, percent.y)
            return None
        self._staged = StagedWaypoint(self._category, percent.x, percent.y)
        return self._staged

    def confirm(
        self,
        title: str,
        description: str = "",
        map_id: Optional[str] = None,
    ) -> Optional[WaypointDraft]:
        """Turn the staged candidate into a create intent and clear it."""

        staged = self._staged
        if staged is None:
            return None
        title = (title or "").strip()
        if not title:
            raise WaypointValidationError("A waypoint needs a title")
        self._staged = None
        return WaypointDraft(
            category=staged.category,
            x_percent=staged.x_percent,
            y_percent=staged.y_percent,
            title=title,
            description=(description or "").strip(),
            map_id=map_id,
        )

    def cancel(self) -> Optional[StagedWaypoint]:
        """Discard the staged candidate and return it."""

        staged, self._staged = self._staged, None
        return staged


# ----------------------------------------------------------------------
# Store
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class ProjectedWaypoint:
    """A waypoint paired with its current container-space position."""

    waypoint: Waypoint
    position: Point


class WaypointStore:
    """Ordered in-memory collection of waypoints with optimistic updates."""

    def __init__(self, waypoints: Iterable[Waypoint] = ()) -> None:
        self._waypoints: dict[str, Waypoint] = {}
        self.replace_all(waypoints)

    def __len__(self) -> int:
        return len(self._waypoints)

    def __iter__(self) -> Iterator[Waypoint]:
        return iter(list(self._waypoints.values()))

    def __contains__(self, waypoint_id: object) -> bool:
        return waypoint_id in self._waypoints

    def get(self, waypoint_id: str) -> Optional[Waypoint]:
        return self._waypoints.get(waypoint_id)

    def replace_all(self, waypoints: Iterable[Waypoint]) -> None:
        self._waypoints = {waypoint.id: waypoint for waypoint in waypoints}

    def for_map(self, map_id: Optional[str]) -> list[Waypoint]:
        return [waypoint for waypoint in self._waypoints.values() if waypoint.map_id == map_id]

    # ------------------------------------------------------------------
    def add_optimistic(self, draft: WaypointDraft) -> Waypoint:
        """Insert *draft* under a provisional id until persistence answers."""

        waypoint = draft.to_waypoint(f"{PENDING_ID_PREFIX}{uuid.uuid4().hex}")
        self._waypoints[waypoint.id] = waypoint
        return waypoint

    def reconcile(self, provisional_id: str, persisted: Optional[Waypoint]) -> Optional[Waypoint]:
        """Swap the placeholder for *persisted*, or drop it when persistence failed.

        The persisted record keeps the placeholder's position in the ordering.
        """

        if provisional_id not in self._waypoints:
            return None
        if persisted is None:
            del self._waypoints[provisional_id]
            return None
        self._waypoints = {
            (persisted.id if key == provisional_id else key): (
                persisted if key == provisional_id else value
            )
            for key, value in self._waypoints.items()
        }
        return persisted

    def remove(self, waypoint_id: str) -> Optional[Waypoint]:
        return self._waypoints.pop(waypoint_id, None)

    def restore(self, waypoint: Waypoint) -> None:
        """Re-insert a waypoint whose deletion could not be persisted."""

        self._waypoints[waypoint.id] = waypoint

    # ------------------------------------------------------------------
    def project(self, image: ImageDimensions, viewport: ViewportState) -> list[ProjectedWaypoint]:
        """Return every waypoint with its position in container pixels."""

        if image.is_empty():
            return []
        return [
            ProjectedWaypoint(waypoint, percent_to_container(waypoint.position, image, viewport))
            for waypoint in self._waypoints.values()
        ]

    def waypoint_at(
        self,
        point: Point,
        image: ImageDimensions,
        viewport: ViewportState,
        radius: float,
    ) -> Optional[Waypoint]:
        """Return the foremost waypoint whose marker covers *point*."""

        for projected in reversed(self.project(image, viewport)):
            position = projected.position
            if math.hypot(position.x - point.x, position.y - point.y) <= radius:
                return projected.waypoint
        return None


__all__ = [
    "CATEGORY_CATALOG",
    "CategoryInfo",
    "PENDING_ID_PREFIX",
    "ProjectedWaypoint",
    "StagedWaypoint",
    "Waypoint",
    "WaypointCategory",
    "WaypointDraft",
    "WaypointPlacer",
    "WaypointStore",
    "category_info",
    "parse_category",
]
