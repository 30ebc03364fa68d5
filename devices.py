"""devices"""

import asyncio
from types import MappingProxyType

import config
from actions import ActionDescriptor, ActionExecutor, ActionInvocation, EventDescriptor
from errors import UnknownAction, UnknownProperty
from gateway import Gateway
from logs import get_logger
from properties import PropertyDescriptor, VirtualProperty

logger = get_logger(__name__)


class VirtualDevice:
    """
    One simulated thing built from a template dict.

    The property table is filled once here and never grows or shrinks
    afterwards. Anything running in the background for this device (drift
    timers, pending actions) is cancelled by close().
    """

    def __init__(self, device_id, template, gateway=None, storage=None, randomize=False,
                 executor=None, supervisor=None, rng=None):
        self.id = device_id
        self.gateway = gateway or Gateway()
        self.executor = executor or ActionExecutor(rng=rng)
        self.supervisor = supervisor
        self._tasks = set()
        self._closed = False

        self.title = template.get("title", template.get("name", device_id))
        self.description = template.get("description", "")
        self.context = template.get("@context", config.THING_CONTEXT)
        self.semantic_types = list(template.get("@type", []))

        pin = template.get("pin")
        if isinstance(pin, dict):
            self.pin_required = bool(pin.get("required", False))
            self.pin_pattern = pin.get("pattern")
        else:
            self.pin_required = False
            self.pin_pattern = None
        self.credentials_required = bool(template.get("credentialsRequired", False))

        props = {}
        for entry in template.get("properties", []):
            name = entry["name"]
            if name in props:
                logger.warning("duplicate_property", device_id=device_id, property=name)
                continue
            descriptor = PropertyDescriptor.from_metadata(name, entry.get("metadata"))
            props[name] = VirtualProperty(
                self, descriptor, entry.get("value"),
                storage=storage, drift=randomize, rng=rng,
            )
        self._properties = props
        self.properties = MappingProxyType(props)

        self.actions = {
            a["name"]: ActionDescriptor(a["name"], dict(a.get("metadata") or {}))
            for a in template.get("actions", [])
        }
        self.events = {
            e["name"]: EventDescriptor(e["name"], dict(e.get("metadata") or {}))
            for e in template.get("events", [])
        }

    @property
    def closed(self):
        return self._closed

    def get_property(self, name) -> VirtualProperty:
        try:
            return self._properties[name]
        except KeyError:
            raise UnknownProperty(name) from None

    def get_property_value(self, name):
        return self.get_property(name).read()

    def set_property(self, name, value):
        return self.get_property(name).write(value)

    def perform_action(self, name, input=None):
        """Start an action; returns the task running it."""
        if name not in self.actions:
            raise UnknownAction(name)
        action = ActionInvocation(self, name, input)
        task = asyncio.get_running_loop().create_task(self.executor.invoke(self, action))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def notify_property_changed(self, prop):
        if self._closed:
            return
        logger.debug("property_changed", device_id=self.id, property=prop.name, value=prop.value)
        self.gateway.property_changed(prop)

    def event_notify(self, event):
        if self._closed:
            return
        self.gateway.event_notify(event)

    def action_notify(self, action):
        if self._closed:
            return
        self.gateway.action_notify(action)

    def close(self):
        self._closed = True
        for prop in self._properties.values():
            prop.close()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    def as_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "@context": self.context,
            "@type": list(self.semantic_types),
            "properties": {name: p.as_dict() for name, p in self._properties.items()},
            "actions": {name: a.as_dict() for name, a in self.actions.items()},
            "events": {name: e.as_dict() for name, e in self.events.items()},
            "pin": {"required": self.pin_required, "pattern": self.pin_pattern},
            "credentialsRequired": self.credentials_required,
        }

    def __repr__(self):
        return f"<VirtualDevice {self.id} {self.title!r}>"
