"""JSON schema and defaults for ``settings.json``."""

from __future__ import annotations

import os
from copy import deepcopy
from typing import Any, Mapping

from jsonschema import Draft202012Validator

from ..config import MARKER_RADIUS
from ..map_view.waypoints import WaypointCategory

SETTINGS_VERSION = "campaign-map/settings@1"

WHEEL_ACTIONS = ("zoom", "none")

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "campaign-map/settings.schema.json",
    "type": "object",
    "required": ["schema", "map"],
    "properties": {
        "schema": {"const": SETTINGS_VERSION},
        "storage_path": {"type": ["string", "null"]},
        "last_map_id": {"type": ["string", "null"]},
        "map": {
            "type": "object",
            "properties": {
                "default_category": {"enum": [category.value for category in WaypointCategory]},
                "wheel_action": {"enum": list(WHEEL_ACTIONS)},
                "show_labels": {"type": "boolean"},
                "marker_radius": {"type": "integer", "minimum": 4, "maximum": 48},
            },
        },
    },
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": SETTINGS_VERSION,
    "storage_path": None,
    "last_map_id": None,
    "map": {
        "default_category": WaypointCategory.LOCATION.value,
        "wheel_action": "zoom",
        "show_labels": True,
        "marker_radius": MARKER_RADIUS,
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)


def _overlay(base: dict[str, Any], updates: Mapping[str, Any]) -> None:
    """Recursively copy *updates* onto *base*; nested objects merge key by key."""

    for key, value in updates.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _overlay(current, value)
        else:
            base[key] = deepcopy(value)


def merge_with_defaults(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return *data* layered over :data:`DEFAULT_SETTINGS`, validated.

    Raises :class:`jsonschema.ValidationError` when the merged document does
    not satisfy :data:`SETTINGS_SCHEMA`.
    """

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        _overlay(merged, data)
    storage_path = merged.get("storage_path")
    if storage_path in ("", None):
        merged["storage_path"] = None
    elif isinstance(storage_path, os.PathLike):
        merged["storage_path"] = os.fspath(storage_path)
    validate_settings(merged)
    return merged


def validate_settings(data: Mapping[str, Any]) -> None:
    _validator.validate(data)


__all__ = [
    "DEFAULT_SETTINGS",
    "SETTINGS_SCHEMA",
    "SETTINGS_VERSION",
    "WHEEL_ACTIONS",
    "merge_with_defaults",
    "validate_settings",
]
