"""Persistence collaborators for maps and waypoints."""

from .kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from .repository import KeyValueWaypointRepository, MapRecord, MapRepository, WaypointPersistence

__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "KeyValueWaypointRepository",
    "MapRecord",
    "MapRepository",
    "WaypointPersistence",
]
