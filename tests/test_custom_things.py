from __future__ import annotations

import pytest

from custom_things import coerce_default, normalize_property, normalize_thing


@pytest.mark.parametrize(
    "value_type, raw, expected",
    [
        ("integer", "42", 42),
        ("integer", "4.7", 4),
        ("integer", "abc", None),
        ("integer", True, 1),
        ("number", "3.5", 3.5),
        ("number", "nan", None),
        ("number", None, None),
        ("boolean", "false", False),
        ("boolean", "TRUE", True),
        ("boolean", 0, False),
        ("boolean", None, False),
        ("string", None, ""),
        ("string", 12, "12"),
        ("string", True, "true"),
        ("null", "anything", None),
        (None, [1, 2], [1, 2]),
    ],
)
def test_coerce_default(value_type, raw, expected) -> None:
    assert coerce_default(value_type, raw) == expected


def test_non_numeric_properties_lose_numeric_fields() -> None:
    entry = normalize_property(
        {"name": "s", "type": "string", "unit": "m", "minimum": 0, "maximum": 1, "multipleOf": 1}, 0)

    assert entry["metadata"] == {"type": "string", "readOnly": False}
    assert entry["value"] == ""


def test_numeric_bounds_are_parsed_and_ordered() -> None:
    entry = normalize_property(
        {"name": "n", "type": "number", "unit": "percent", "minimum": "100", "maximum": 0, "default": "7"}, 0)

    md = entry["metadata"]
    assert md["unit"] == "percent"
    assert (md["minimum"], md["maximum"]) == (0, 100)
    assert entry["value"] == 7


def test_equal_bounds_are_dropped() -> None:
    md = normalize_property({"name": "n", "type": "integer", "minimum": 5, "maximum": 5}, 0)["metadata"]

    assert "minimum" not in md and "maximum" not in md


def test_enum_values_follow_type() -> None:
    entry = normalize_property({"name": "e", "type": "integer", "enum": ["1", "2"], "default": "2"}, 0)

    assert entry["metadata"]["enum"] == [1, 2]
    assert entry["value"] == 2


def test_normalize_thing_builds_template() -> None:
    raw = {
        "id": "x1",
        "name": "Fancy",
        "@type": "Light",
        "properties": [{"name": "on", "type": "boolean", "@type": "OnOffProperty", "value": True}],
        "actions": [{"name": "blink", "title": "Blink"}, "junk"],
        "events": [{"title": "Nameless"}],
    }

    device_id, template = normalize_thing(raw)

    assert device_id == "virtual-things-custom-x1"
    assert template["title"] == "Fancy"
    assert template["@type"] == ["Light"]
    assert template["properties"][0]["value"] is True
    assert template["properties"][0]["metadata"]["@type"] == "OnOffProperty"
    assert template["actions"] == [{"name": "blink", "metadata": {"title": "Blink"}}]
    assert template["events"] == [{"name": "event0", "metadata": {"title": "Nameless"}}]


def test_missing_id_is_written_back() -> None:
    raw = {"title": "No Id"}

    device_id, _ = normalize_thing(raw)

    assert raw["id"]
    assert device_id.endswith(raw["id"])
    assert normalize_thing(raw)[0] == device_id


@pytest.mark.parametrize("raw, expected", [("false", False), ("true", True), (0, False), (None, False)])
def test_read_only_strings_are_parsed(raw, expected) -> None:
    md = normalize_property({"name": "r", "type": "boolean", "readOnly": raw}, 0)["metadata"]

    assert md["readOnly"] is expected
