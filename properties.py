"""properties: descriptors + the per-property value store"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple

from drift import DriftTimer
from errors import ReadOnlyViolation
from logs import get_logger
from rules import apply_rules
from storage import property_key

logger = get_logger(__name__)

BOOLEAN = "boolean"
NUMBER = "number"
INTEGER = "integer"
STRING = "string"
NULL = "null"

VALUE_TYPES = (BOOLEAN, NUMBER, INTEGER, STRING, NULL)
NUMERIC_TYPES = (NUMBER, INTEGER)

_MISSING = object()


@dataclass(frozen=True)
class PropertyDescriptor:
    name: str
    type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    semantic_type: Optional[str] = None
    unit: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    multiple_of: Optional[float] = None
    enum: Optional[Tuple[Any, ...]] = None
    read_only: bool = False
    links: Tuple[dict, ...] = field(default_factory=tuple)

    @classmethod
    def from_metadata(cls, name, metadata):
        """Build a descriptor from template style metadata (camelCase keys)."""
        md = metadata or {}
        enum = md.get("enum")
        return cls(
            name=name,
            type=md.get("type"),
            title=md.get("title", md.get("label")),
            description=md.get("description"),
            semantic_type=md.get("@type"),
            unit=md.get("unit"),
            minimum=md.get("minimum", md.get("min")),
            maximum=md.get("maximum", md.get("max")),
            multiple_of=md.get("multipleOf"),
            enum=tuple(enum) if enum else None,
            read_only=bool(md.get("readOnly", False)),
            links=tuple(dict(link) for link in md.get("links", ())),
        )

    @property
    def is_numeric(self):
        return self.type in NUMERIC_TYPES

    def as_dict(self):
        d = {"name": self.name}
        if self.title is not None:
            d["title"] = self.title
        if self.description is not None:
            d["description"] = self.description
        if self.type is not None:
            d["type"] = self.type
        if self.semantic_type is not None:
            d["@type"] = self.semantic_type
        if self.unit is not None:
            d["unit"] = self.unit
        if self.minimum is not None:
            d["minimum"] = self.minimum
        if self.maximum is not None:
            d["maximum"] = self.maximum
        if self.multiple_of is not None:
            d["multipleOf"] = self.multiple_of
        if self.enum is not None:
            d["enum"] = list(self.enum)
        if self.read_only:
            d["readOnly"] = True
        if self.links:
            d["links"] = [dict(link) for link in self.links]
        return d


def coerce_value(value_type, value):
    # only booleans are cast; everything else is stored as given
    if value_type == BOOLEAN:
        return bool(value)
    return value


class VirtualProperty:
    """
    Current value of one property of one device.

    write() is the gateway path: it honours readOnly and runs the derived
    property rules. set_value() is the simulation path used by rules,
    actions and drift.
    """

    def __init__(self, device, descriptor: PropertyDescriptor, value=None, storage=None, drift=False, rng=None):
        self.device = device
        self.descriptor = descriptor
        self.name = descriptor.name
        self._storage = storage
        self.key = property_key(device.id, self.name) if storage is not None else None
        self.value = coerce_value(descriptor.type, self._restore(value))
        self._drift: Optional[DriftTimer] = None
        if drift:
            self._drift = DriftTimer(self, rng=rng)
            self._drift.start()

    @property
    def read_only(self):
        return self.descriptor.read_only

    @property
    def drifting(self):
        return self._drift is not None and self._drift.running

    def _restore(self, default):
        if self._storage is None:
            return default
        try:
            stored = self._storage.get(self.key, _MISSING)
        except Exception as e:
            logger.error("property_restore_failed", key=self.key, error=str(e))
            return default
        if stored is _MISSING:
            return default
        return stored

    def _persist(self):
        if self._storage is None:
            return
        try:
            self._storage.set(self.key, self.value)
        except Exception as e:
            logger.error("property_persist_failed", key=self.key, error=str(e))

    def read(self):
        return self.value

    def write(self, value):
        if self.descriptor.read_only:
            raise ReadOnlyViolation(self.device.id, self.name)
        self.set_value(value)
        apply_rules(self)
        return self.value

    def set_value(self, value, notify=True):
        self.value = coerce_value(self.descriptor.type, value)
        self._persist()
        if notify:
            self.device.notify_property_changed(self)

    def close(self):
        if self._drift is not None:
            self._drift.cancel()
            self._drift = None

    def as_dict(self):
        return self.descriptor.as_dict()

    def __repr__(self):
        return f"<VirtualProperty {self.device.id}/{self.name}={self.value!r}>"
