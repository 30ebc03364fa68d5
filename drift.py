"""randomized property drift"""

import asyncio
import math
import random
import string

import config
from logs import get_logger

logger = get_logger(__name__)

TOKEN_ALPHABET = string.ascii_letters + string.digits
TOKEN_LENGTH = 12


def random_value(descriptor, rng=random):
    """
    Draw a plausible value for a property, or return (False, None) when
    the property has nothing to draw from.
    """
    if descriptor.enum:
        return True, rng.choice(descriptor.enum)

    kind = descriptor.type
    if kind == "boolean":
        return True, rng.random() < 0.5

    if kind in ("number", "integer"):
        low = descriptor.minimum
        high = descriptor.maximum
        # a missing bound becomes a fixed-width window off the other one
        if low is None and high is None:
            low, high = 0, config.UNBOUNDED_DRIFT_SPAN
        elif low is None:
            low = high - config.UNBOUNDED_DRIFT_SPAN
        elif high is None:
            high = low + config.UNBOUNDED_DRIFT_SPAN
        if kind == "integer":
            lo, hi = math.ceil(low), math.floor(high)
            if lo > hi:
                return False, None
            return True, rng.randint(lo, hi)
        return True, rng.uniform(low, high)

    if kind == "string":
        if descriptor.semantic_type == "ColorProperty":
            return True, "#{:06x}".format(rng.randrange(0x1000000))
        return True, "".join(rng.choice(TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))

    return False, None


def drift_once(prop, rng=random):
    """Perturb prop once. Returns True when the value changed."""
    ok, value = random_value(prop.descriptor, rng)
    if not ok or value == prop.value:
        return False
    prop.set_value(value)
    return True


class DriftTimer:
    """Background task re-randomizing one property every interval seconds."""

    def __init__(self, prop, interval=None, rng=None):
        self.prop = prop
        self.interval = config.DRIFT_INTERVAL if interval is None else interval
        self.rng = rng or random
        self._task = None
        self._running = False

    @property
    def running(self):
        return self._running

    def start(self):
        if self._task is not None:
            return
        self._running = True
        self._task = asyncio.get_running_loop().create_task(self._loop())

    def cancel(self):
        self._running = False
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _loop(self):
        while self._running:
            await asyncio.sleep(self.interval)
            if not self._running:
                break
            try:
                drift_once(self.prop, self.rng)
            except Exception:
                logger.exception("drift_failed", device_id=self.prop.device.id, property=self.prop.name)
