"""
Custom things described by the user in the adapter config.

Descriptors are typed by hand in a settings form, so nothing here raises:
every field is coerced into something usable and the rest is dropped.
"""

import numbers
import uuid

import config
from logs import get_logger

logger = get_logger(__name__)

NUMERIC_TYPES = ("number", "integer")
VALUE_TYPES = ("boolean", "number", "integer", "string", "null")
NUMERIC_FIELDS = ("unit", "minimum", "maximum", "multipleOf")
FALSE_STRINGS = ("", "false", "0", "no", "off")


def _is_number(v):
    return isinstance(v, numbers.Real) and not isinstance(v, bool)


def _parse_number(value, integer):
    if isinstance(value, bool):
        return int(value)
    if _is_number(value):
        return int(value) if integer else value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            f = float(text)
        except ValueError:
            return None
        if f != f or f in (float("inf"), float("-inf")):
            return None
        return int(f) if integer else f
    return None


def coerce_default(value_type, value):
    """Force a user supplied default into value_type."""
    if value_type == "integer":
        return _parse_number(value, integer=True)
    if value_type == "number":
        return _parse_number(value, integer=False)
    if value_type == "boolean":
        if isinstance(value, str):
            return value.strip().lower() not in FALSE_STRINGS
        return bool(value)
    if value_type == "string":
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)
    if value_type == "null":
        return None
    return value


def normalize_property(raw, index):
    """custom property dict -> template property entry"""
    if not isinstance(raw, dict):
        raw = {}
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        name = f"property{index}"

    value_type = raw.get("type")
    if value_type not in VALUE_TYPES:
        value_type = None

    md = {}
    for key in ("title", "description", "@type"):
        if isinstance(raw.get(key), str) and raw[key]:
            md[key] = raw[key]
    if value_type is not None:
        md["type"] = value_type
    md["readOnly"] = coerce_default("boolean", raw.get("readOnly", False))

    if value_type in NUMERIC_TYPES:
        if isinstance(raw.get("unit"), str) and raw["unit"]:
            md["unit"] = raw["unit"]
        for key in ("minimum", "maximum", "multipleOf"):
            v = _parse_number(raw.get(key), integer=False)
            if v is not None:
                md[key] = v
        if "minimum" in md and "maximum" in md:
            if md["minimum"] == md["maximum"]:
                del md["minimum"]
                del md["maximum"]
            elif md["minimum"] > md["maximum"]:
                md["minimum"], md["maximum"] = md["maximum"], md["minimum"]

    enum = raw.get("enum")
    if isinstance(enum, list) and enum:
        md["enum"] = [coerce_default(value_type, v) for v in enum]

    default = raw.get("default", raw.get("value"))
    return {
        "name": name,
        "value": coerce_default(value_type, default),
        "metadata": md,
    }


def _normalize_named(entries, kind):
    out = []
    if not isinstance(entries, list):
        return out
    for i, raw in enumerate(entries):
        if not isinstance(raw, dict):
            continue
        name = raw.get("name")
        if not isinstance(name, str) or not name:
            name = f"{kind}{i}"
        md = {k: v for k, v in raw.items() if k != "name"}
        out.append({"name": name, "metadata": md})
    return out


def normalize_thing(raw):
    """
    Returns (device_id, template). A missing id is generated and written
    back into raw so it survives the next config save.
    """
    thing_id = raw.get("id")
    if not thing_id:
        thing_id = str(uuid.uuid4())
        raw["id"] = thing_id
        logger.info("custom_thing_id_assigned", thing_id=thing_id)

    types = raw.get("@type", [])
    if isinstance(types, str):
        types = [types]
    elif not isinstance(types, list):
        types = []

    props = raw.get("properties")
    if not isinstance(props, list):
        props = []

    template = {
        "@context": config.THING_CONTEXT,
        "@type": [t for t in types if isinstance(t, str)],
        "title": str(raw.get("title") or raw.get("name") or f"Custom Thing {thing_id}"),
        "description": str(raw.get("description") or ""),
        "properties": [normalize_property(p, i) for i, p in enumerate(props)],
        "actions": _normalize_named(raw.get("actions"), "action"),
        "events": _normalize_named(raw.get("events"), "event"),
    }
    return config.CUSTOM_ID_PREFIX + str(thing_id), template
