import json
import logging

import pytest

from campaign_map.errors import StorageError
from campaign_map.storage.kv_store import InMemoryKeyValueStore, JsonFileKeyValueStore


def test_in_memory_store_copies_values():
    payload = {"items": [1, 2]}
    store = InMemoryKeyValueStore({"seed": payload})
    payload["items"].append(3)

    value = store.get("seed")
    value["items"].append(4)

    assert store.get("seed") == {"items": [1, 2]}
    assert store.get("missing", "fallback") == "fallback"


def test_in_memory_remove_and_clear():
    store = InMemoryKeyValueStore()
    store.set("a", 1)
    store.set("b", 2)

    store.remove("a")
    store.remove("unknown")
    assert store.get("a") is None
    assert store.get("b") == 2

    store.clear()
    assert store.get("b") is None


def test_json_store_persists_across_instances(tmp_path):
    path = tmp_path / "nested" / "store.json"
    JsonFileKeyValueStore(path).set("maps", [{"id": "m1"}])

    reopened = JsonFileKeyValueStore(path)

    assert reopened.get("maps") == [{"id": "m1"}]
    assert json.loads(path.read_text(encoding="utf-8")) == {"maps": [{"id": "m1"}]}


def test_json_store_remove_and_clear(tmp_path):
    path = tmp_path / "store.json"
    store = JsonFileKeyValueStore(path)
    store.set("a", 1)
    store.set("b", 2)

    store.remove("a")
    assert JsonFileKeyValueStore(path).get("a") is None

    store.clear()
    assert json.loads(path.read_text(encoding="utf-8")) == {}


def test_corrupt_file_reads_as_empty(tmp_path, caplog):
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.ERROR):
        store = JsonFileKeyValueStore(path)
        assert store.get("maps", []) == []

    assert "Failed to load" in caplog.text


def test_non_object_document_reads_as_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert JsonFileKeyValueStore(path).get("maps") is None


def test_write_failure_raises_storage_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = JsonFileKeyValueStore(blocker / "store.json")

    with pytest.raises(StorageError):
        store.set("maps", [])

    assert store.get("maps") is None
