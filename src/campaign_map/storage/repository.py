"""Map and waypoint repositories built on an injected key-value store."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from ..config import MAPS_KEY, WAYPOINTS_KEY
from ..errors import MapNotFoundError, WaypointNotFoundError, WaypointValidationError
from .kv_store import KeyValueStore

LOGGER = logging.getLogger(__name__)

_POSITION_SCHEMA: dict[str, Any] = {
    "anyOf": [
        {"type": ["number", "null"]},
        {"type": "string", "pattern": r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?\s*$"},
    ],
}

WAYPOINT_RECORD_SCHEMA: dict[str, Any] = {
    "$id": "campaign-map/waypoint.schema.json",
    "type": "object",
    "required": ["id", "title", "x_position", "y_position"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "title": {"type": "string"},
        "description": {"type": ["string", "null"]},
        "category": {"type": ["string", "null"]},
        # Positions are coerced and clamped into range when the record is
        # turned into a ``Waypoint``.
        "x_position": _POSITION_SCHEMA,
        "y_position": _POSITION_SCHEMA,
        "map_id": {"type": ["string", "null"]},
    },
    "additionalProperties": True,
}

MAP_RECORD_SCHEMA: dict[str, Any] = {
    "$id": "campaign-map/map.schema.json",
    "type": "object",
    "required": ["id", "title", "image_url"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "title": {"type": "string"},
        "description": {"type": ["string", "null"]},
        "image_url": {"type": "string"},
        "is_active": {"type": "boolean"},
    },
    "additionalProperties": True,
}

_waypoint_validator = Draft202012Validator(WAYPOINT_RECORD_SCHEMA)
_map_validator = Draft202012Validator(MAP_RECORD_SCHEMA)


def _stored_entries(payload: object, kind: str) -> list[Any]:
    """Return the raw stored list, or an empty list when *payload* is not one."""

    if isinstance(payload, list):
        return list(payload)
    if payload is not None:
        LOGGER.warning("Ignoring stored %s list of type %s", kind, type(payload).__name__)
    return []


def _entry_id(entry: object) -> object:
    return entry.get("id") if isinstance(entry, dict) else None


def _valid_records(
    payload: object,
    validator: Draft202012Validator,
    kind: str,
) -> list[dict[str, Any]]:
    """Return the entries of *payload* that satisfy *validator*."""

    records: list[dict[str, Any]] = []
    for entry in _stored_entries(payload, kind):
        error = best_match(validator.iter_errors(entry))
        if error is not None:
            LOGGER.warning("Skipping malformed %s record: %s", kind, error.message)
            continue
        records.append(entry)
    return records


def new_record_id() -> str:
    return str(uuid.uuid4())


# ----------------------------------------------------------------------
# Waypoints
# ----------------------------------------------------------------------
class WaypointPersistence(Protocol):
    """Collaborator responsible for durable waypoint storage."""

    def load_waypoints(self, map_id: Optional[str]) -> list[dict[str, Any]]:  # pragma: no cover - interface definition only
        ...

    def create_waypoint(self, record: Mapping[str, Any]) -> dict[str, Any]:  # pragma: no cover - interface definition only
        ...

    def delete_waypoint(self, waypoint_id: str) -> None:  # pragma: no cover - interface definition only
        ...


class KeyValueWaypointRepository:
    """Store waypoint records as a JSON list under a single key."""

    def __init__(self, store: KeyValueStore, *, key: str = WAYPOINTS_KEY) -> None:
        self._store = store
        self._key = key

    def all_waypoints(self) -> list[dict[str, Any]]:
        return _valid_records(self._store.get(self._key), _waypoint_validator, "waypoint")

    def load_waypoints(self, map_id: Optional[str]) -> list[dict[str, Any]]:
        """Return the records that belong to *map_id*."""

        return [record for record in self.all_waypoints() if record.get("map_id") == map_id]

    def create_waypoint(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Persist *record* under a fresh id and return the stored copy."""

        stored = dict(record)
        stored["id"] = new_record_id()
        error = best_match(_waypoint_validator.iter_errors(stored))
        if error is not None:
            raise WaypointValidationError(error.message)
        entries = self._entries()
        entries.append(stored)
        self._store.set(self._key, entries)
        LOGGER.info("Created waypoint %s (%s)", stored["id"], stored.get("title"))
        return stored

    def delete_waypoint(self, waypoint_id: str) -> None:
        entries = self._entries()
        remaining = [entry for entry in entries if _entry_id(entry) != waypoint_id]
        if len(remaining) == len(entries):
            raise WaypointNotFoundError(f"Waypoint {waypoint_id} does not exist")
        self._store.set(self._key, remaining)
        LOGGER.info("Deleted waypoint %s", waypoint_id)

    def delete_for_map(self, map_id: str) -> int:
        """Drop every waypoint attached to *map_id* and return how many went."""

        entries = self._entries()
        remaining = [
            entry
            for entry in entries
            if not (isinstance(entry, dict) and entry.get("map_id") == map_id)
        ]
        removed = len(entries) - len(remaining)
        if removed:
            self._store.set(self._key, remaining)
        return removed

    def _entries(self) -> list[Any]:
        # Unparseable entries are carried through writes untouched.
        return _stored_entries(self._store.get(self._key), "waypoint")


# ----------------------------------------------------------------------
# Maps
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class MapRecord:
    """A campaign map image; exactly one map is active at a time."""

    id: str
    title: str
    image_url: str
    description: str = ""
    is_active: bool = False

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "is_active": self.is_active,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> MapRecord:
        return cls(
            id=str(record["id"]),
            title=str(record["title"]),
            image_url=str(record["image_url"]),
            description=str(record.get("description") or ""),
            is_active=bool(record.get("is_active", False)),
        )


class MapRepository:
    """Catalogue of uploaded maps and the active selection."""

    def __init__(self, store: KeyValueStore, *, key: str = MAPS_KEY) -> None:
        self._store = store
        self._key = key

    def list_maps(self) -> list[MapRecord]:
        return [
            MapRecord.from_record(record)
            for record in _valid_records(self._store.get(self._key), _map_validator, "map")
        ]

    def get(self, map_id: str) -> MapRecord:
        for record in self.list_maps():
            if record.id == map_id:
                return record
        raise MapNotFoundError(f"Map {map_id} does not exist")

    def active_map(self) -> Optional[MapRecord]:
        for record in self.list_maps():
            if record.is_active:
                return record
        return None

    def add_map(
        self,
        title: str,
        image_url: str,
        description: str = "",
        *,
        activate: bool = True,
    ) -> MapRecord:
        """Register a new map image, making it the active map by default."""

        record = MapRecord(
            id=new_record_id(),
            title=title,
            image_url=image_url,
            description=description,
            is_active=activate,
        )
        entries = self._entries()
        if activate:
            entries = [_with_active(entry, False) for entry in entries]
        entries.append(record.to_record())
        self._store.set(self._key, entries)
        LOGGER.info("Added map %s (%s)", record.id, record.title)
        return record

    def set_active(self, map_id: str) -> MapRecord:
        selected = self.get(map_id)
        entries = [_with_active(entry, _entry_id(entry) == map_id) for entry in self._entries()]
        self._store.set(self._key, entries)
        return MapRecord(**{**selected.to_record(), "is_active": True})

    def remove_map(
        self,
        map_id: str,
        waypoints: Optional[KeyValueWaypointRepository] = None,
    ) -> MapRecord:
        """Delete *map_id* and, when given a waypoint repository, its waypoints."""

        removed = self.get(map_id)
        self._store.set(
            self._key,
            [entry for entry in self._entries() if _entry_id(entry) != map_id],
        )
        if waypoints is not None:
            count = waypoints.delete_for_map(map_id)
            LOGGER.info("Removed map %s and %d waypoint(s)", map_id, count)
        return removed

    def _entries(self) -> list[Any]:
        return _stored_entries(self._store.get(self._key), "map")


def _with_active(entry: Any, active: bool) -> Any:
    if not isinstance(entry, dict) or entry.get("is_active", False) == active:
        return entry
    return {**entry, "is_active": active}


__all__ = [
    "KeyValueWaypointRepository",
    "MAP_RECORD_SCHEMA",
    "MapRecord",
    "MapRepository",
    "WAYPOINT_RECORD_SCHEMA",
    "WaypointPersistence",
    "new_record_id",
]
