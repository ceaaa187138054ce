"""Interactive campaign map viewer with waypoint placement."""

__version__ = "0.1.0"
