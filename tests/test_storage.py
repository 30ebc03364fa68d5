from __future__ import annotations

import json

from storage import JsonFileStorage, MemoryStorage, property_key


def test_property_key_format() -> None:
    assert property_key("virtual-things-2", "level") == "virtual-things-2-level"


def test_memory_storage_default() -> None:
    storage = MemoryStorage({"a": None})

    assert storage.get("a", 1) is None
    assert storage.get("b", 1) == 1
    assert "a" in storage


def test_json_storage_survives_reload(tmp_path) -> None:
    storage = JsonFileStorage(tmp_path)
    storage.start()
    storage.set("thing-on", True)
    storage.set("thing-level", 40)
    storage.set("thing-level", 41)
    storage.stop()

    reloaded = JsonFileStorage(tmp_path)

    assert reloaded.get("thing-on") is True
    assert reloaded.get("thing-level") == 41
    assert reloaded.get("missing", "fallback") == "fallback"
    assert storage.writes >= 1


def test_json_storage_writes_inline_when_not_started(tmp_path) -> None:
    storage = JsonFileStorage(tmp_path / "nested")

    storage.set("k", "v")

    assert json.loads((tmp_path / "nested" / "values.json").read_text()) == {"k": "v"}


def test_corrupt_file_starts_empty(tmp_path) -> None:
    (tmp_path / "values.json").write_text("{not json")

    storage = JsonFileStorage(tmp_path)

    assert storage.get("anything") is None


def test_unwritable_location_is_logged_not_raised(tmp_path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x")
    storage = JsonFileStorage(blocker / "sub")

    storage.set("k", 1)

    assert storage.get("k") == 1
    assert storage.writes == 0
