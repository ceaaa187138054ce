"""Viewport engine, coordinate transforms and waypoint placement.

Only the toolkit-neutral modules are re-exported here; the Qt controller and
widget live in :mod:`.controller` and :mod:`.map_widget`.
"""

from .constraints import apply_constraints, clamp_axis_offset, clamp_scale, scale_bounds
from .coordinates import (
    clamp_percent,
    container_to_image,
    container_to_percent,
    image_to_container,
    image_to_percent,
    is_within_percent_bounds,
    percent_to_container,
    percent_to_image,
)
from .gestures import GestureController, MapViewState, transition
from .viewport import (
    EMPTY_SIZE,
    IDENTITY_VIEWPORT,
    ContainerDimensions,
    ImageDimensions,
    Point,
    Size,
    ViewportState,
    compute_fit_scale,
    compute_fit_viewport,
)
from .waypoints import (
    StagedWaypoint,
    Waypoint,
    WaypointCategory,
    WaypointDraft,
    WaypointPlacer,
    WaypointStore,
)

__all__ = [
    "EMPTY_SIZE",
    "IDENTITY_VIEWPORT",
    "ContainerDimensions",
    "GestureController",
    "ImageDimensions",
    "MapViewState",
    "Point",
    "Size",
    "StagedWaypoint",
    "ViewportState",
    "Waypoint",
    "WaypointCategory",
    "WaypointDraft",
    "WaypointPlacer",
    "WaypointStore",
    "apply_constraints",
    "clamp_axis_offset",
    "clamp_percent",
    "clamp_scale",
    "compute_fit_scale",
    "compute_fit_viewport",
    "container_to_image",
    "container_to_percent",
    "image_to_container",
    "image_to_percent",
    "is_within_percent_bounds",
    "percent_to_container",
    "percent_to_image",
    "scale_bounds",
    "transition",
]
