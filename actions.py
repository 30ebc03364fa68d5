"""actions, events and the executor that runs them"""

import asyncio
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import config
from logs import get_logger

logger = get_logger(__name__)

LOCK_TARGETS = {
    "lock": "locked",
    "unlock": "unlocked",
}


def _now():
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass(frozen=True)
class ActionDescriptor:
    name: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def input(self):
        return self.metadata.get("input")

    def as_dict(self):
        return {"name": self.name, **self.metadata}


@dataclass(frozen=True)
class EventDescriptor:
    name: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self):
        return {"name": self.name, **self.metadata}


@dataclass
class Event:
    device: Any
    name: str
    data: Any = None
    timestamp: str = field(default_factory=_now)

    def as_dict(self):
        return {self.name: {"data": self.data, "timestamp": self.timestamp}}


class ActionInvocation:
    """One request to run an action; thrown away once it completes."""

    def __init__(self, device, name, input=None):
        self.id = uuid.uuid4().hex
        self.device = device
        self.name = name
        self.input = input
        self.status = "created"
        self.time_requested = _now()
        self.time_completed: Optional[str] = None

    @property
    def finished(self):
        return self.status == "completed"

    def start(self):
        self.status = "pending"
        self.device.action_notify(self)

    def finish(self):
        self.status = "completed"
        self.time_completed = _now()
        self.device.action_notify(self)

    def as_dict(self):
        d = {
            "href": f"/actions/{self.name}/{self.id}",
            "timeRequested": self.time_requested,
            "status": self.status,
        }
        if self.input is not None:
            d["input"] = self.input
        if self.time_completed is not None:
            d["timeCompleted"] = self.time_completed
        return {self.name: d}


class ActionExecutor:
    def __init__(self, lock_delay=None, rng=None):
        self.lock_delay = config.LOCK_DELAY if lock_delay is None else lock_delay
        self.rng = rng or random

    async def invoke(self, device, action: ActionInvocation):
        logger.info("performing_action", device_id=device.id, action=action.name, input=action.input)
        action.start()

        if action.name == "basic":
            device.event_notify(Event(device, "virtualEvent", self.rng.randrange(100)))
        elif action.name == "trigger":
            self._set(device, "alarm", True)
            device.event_notify(Event(device, "alarmEvent", "Alarm triggered"))
        elif action.name == "silence":
            self._set(device, "alarm", False)
            device.event_notify(Event(device, "alarmEvent", "Alarm silenced"))
        elif action.name in LOCK_TARGETS:
            await self._move_lock(device, LOCK_TARGETS[action.name])

        action.finish()
        return action

    def _set(self, device, name, value):
        prop = device.properties.get(name)
        if prop is not None:
            prop.set_value(value)

    async def _move_lock(self, device, target):
        """
        locked/unlocked -> unknown -> (delay) -> target, or jammed on an
        unlucky roll. Asking for the state the lock is already in is a no-op.
        """
        prop = device.properties.get("locked")
        if prop is None or prop.value == target:
            return

        prop.set_value("unknown")
        await asyncio.sleep(self.lock_delay)

        roll = self.rng.randint(0, config.LOCK_JAM_SIDES - 1)
        if roll == config.LOCK_JAM_SENTINEL:
            logger.info("lock_jammed", device_id=device.id, target=target)
            prop.set_value("jammed")
        else:
            prop.set_value(target)
