from __future__ import annotations

import asyncio
import itertools
import sys
from pathlib import Path
from typing import Any, List, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import Settings  # noqa: E402
from gateway import Gateway  # noqa: E402


class RecordingGateway(Gateway):
    def __init__(self) -> None:
        self.added: List[str] = []
        self.changes: List[Tuple[str, str, Any]] = []
        self.events: List[Tuple[str, str, Any]] = []
        self.actions: List[Tuple[str, str, str]] = []

    def handle_device_added(self, device) -> None:
        self.added.append(device.id)

    def property_changed(self, prop) -> None:
        self.changes.append((prop.device.id, prop.name, prop.value))

    def event_notify(self, event) -> None:
        self.events.append((event.device.id, event.name, event.data))

    def action_notify(self, action) -> None:
        self.actions.append((action.device.id, action.name, action.status))

    def values_of(self, name: str) -> List[Any]:
        return [value for _, prop, value in self.changes if prop == name]


class FailingStorage:
    def get(self, key, default=None):
        return default

    def set(self, key, value):
        raise OSError("disk full")


class FakeSupervisor:
    version = None

    def __init__(self) -> None:
        self.starts = 0
        self.stops = 0
        self.shut_down = False

    def start(self) -> None:
        self.starts += 1

    def stop(self) -> None:
        self.stops += 1

    def shutdown(self) -> None:
        self.shut_down = True
        self.stop()


class FakeProcess:
    _pids = itertools.count(100)

    def __init__(self) -> None:
        self.pid = next(self._pids)
        self.returncode = None
        self.terminated = False
        self._exited = asyncio.Event()

    async def wait(self) -> int:
        await self._exited.wait()
        return self.returncode

    def exit(self, code: int = 0) -> None:
        self.returncode = code
        self._exited.set()

    def terminate(self) -> None:
        self.terminated = True
        self.exit(-15)


class FakeSpawner:
    def __init__(self) -> None:
        self.processes = []
        self.calls = []

    async def __call__(self, *args, **kwargs):
        self.calls.append(args)
        proc = FakeProcess()
        self.processes.append(proc)
        return proc


@pytest.fixture()
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(home=tmp_path)


@pytest.fixture()
def supervisor() -> FakeSupervisor:
    return FakeSupervisor()
