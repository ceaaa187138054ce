"""Default configuration values for the campaign map."""

from __future__ import annotations

from pathlib import Path
from typing import Final

# ---------------------------------------------------------------------------
# Viewport constraints
# ---------------------------------------------------------------------------

# Number of container pixels of the image that must stay on screen along each
# axis after any pan or zoom.  Images whose rendered size drops below twice this
# value are centred on that axis instead of clamped.
MIN_VISIBLE_MARGIN: Final[float] = 100.0

# Scale limits expressed as multiples of the fit-to-container scale.  The lower
# bound lets the user zoom out past "fit" for context, the upper bound allows
# inspecting a map many screens wide.
MIN_SCALE_FACTOR: Final[float] = 0.1
MAX_SCALE_FACTOR: Final[float] = 10.0

# Multiplicative steps used by the wheel and by the discrete zoom buttons.
ZOOM_IN_FACTOR: Final[float] = 1.1
ZOOM_OUT_FACTOR: Final[float] = 0.9

# ---------------------------------------------------------------------------
# UI interaction constants
# ---------------------------------------------------------------------------

# A press/release pair whose pointer never travels further than this distance
# is treated as a click that places a waypoint rather than a drag.
CLICK_DRAG_THRESHOLD: Final[float] = 5.0

MARKER_RADIUS: Final[int] = 9
MARKER_LABEL_OFFSET: Final[int] = 14
MARKER_HIT_SLOP: Final[float] = 4.0

MAP_WIDGET_MINIMUM_SIZE: Final[tuple[int, int]] = (640, 480)

# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

STORAGE_FILE_NAME: Final[str] = "campaign-map.json"
MAPS_KEY: Final[str] = "maps"
WAYPOINTS_KEY: Final[str] = "waypoints"

DEFAULT_STORAGE_DIR: Final[Path] = Path.home() / ".campaign-map"
