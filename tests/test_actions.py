from __future__ import annotations

import asyncio
import random

import pytest

import templates
from actions import ActionExecutor, ActionInvocation
from devices import VirtualDevice
from errors import UnknownAction


def make_lock(gateway, lock_delay=0, rng=None):
    executor = ActionExecutor(lock_delay=lock_delay, rng=rng or random.Random(42))
    return VirtualDevice("lock", templates.lock(), gateway=gateway, executor=executor)


@pytest.mark.asyncio
async def test_basic_action_fires_virtual_event(gateway) -> None:
    device = VirtualDevice("ae", templates.actions_events_thing(), gateway=gateway)

    await device.perform_action("basic")

    assert len(gateway.events) == 1
    _, name, data = gateway.events[0]
    assert name == "virtualEvent"
    assert 0 <= data < 100
    assert [status for _, _, status in gateway.actions] == ["pending", "completed"]


@pytest.mark.asyncio
async def test_input_actions_just_complete(gateway) -> None:
    device = VirtualDevice("ae", templates.actions_events_thing(), gateway=gateway)

    await device.perform_action("advanced", {"numberInput": 5})

    assert gateway.events == []
    assert gateway.actions[-1] == ("ae", "advanced", "completed")


@pytest.mark.asyncio
async def test_unknown_action_raises(gateway) -> None:
    device = VirtualDevice("ae", templates.actions_events_thing(), gateway=gateway)

    with pytest.raises(UnknownAction):
        device.perform_action("nope")


@pytest.mark.asyncio
async def test_trigger_and_silence_drive_alarm(gateway) -> None:
    device = VirtualDevice("alarm", templates.alarm(), gateway=gateway)

    await device.perform_action("trigger")
    assert device.get_property_value("alarm") is True

    await device.perform_action("silence")
    assert device.get_property_value("alarm") is False

    assert [name for _, name, _ in gateway.events] == ["alarmEvent", "alarmEvent"]


@pytest.mark.asyncio
async def test_lock_when_locked_is_a_no_op(gateway) -> None:
    device = make_lock(gateway, lock_delay=10)

    await asyncio.wait_for(device.perform_action("lock"), timeout=1)

    assert device.get_property_value("locked") == "locked"
    assert "unknown" not in gateway.values_of("locked")


@pytest.mark.asyncio
async def test_unlock_goes_through_unknown(gateway) -> None:
    device = make_lock(gateway, lock_delay=0.05, rng=random.Random(1))
    device.executor.rng.randint = lambda a, b: 7

    task = device.perform_action("unlock")
    await asyncio.sleep(0)

    assert device.get_property_value("locked") == "unknown"
    assert not task.done()

    action = await task
    assert action.finished
    assert device.get_property_value("locked") == "unlocked"
    assert gateway.values_of("locked") == ["unknown", "unlocked"]


@pytest.mark.asyncio
async def test_sentinel_roll_jams_and_jam_is_not_terminal(gateway) -> None:
    device = make_lock(gateway)
    rolls = iter([0, 5])
    device.executor.rng.randint = lambda a, b: next(rolls)

    await device.perform_action("unlock")
    assert device.get_property_value("locked") == "jammed"

    await device.perform_action("unlock")
    assert device.get_property_value("locked") == "unlocked"
    assert gateway.values_of("locked") == ["unknown", "jammed", "unknown", "unlocked"]


@pytest.mark.asyncio
async def test_jam_rate_is_about_five_percent(gateway) -> None:
    device = make_lock(gateway, rng=random.Random(2024))
    executor = device.executor
    prop = device.get_property("locked")
    trials = 1000
    jammed = 0

    for _ in range(trials):
        prop.set_value("locked")
        await executor.invoke(device, ActionInvocation(device, "unlock"))
        if prop.value == "jammed":
            jammed += 1
        else:
            assert prop.value == "unlocked"

    assert 0.02 <= jammed / trials <= 0.08


@pytest.mark.asyncio
async def test_close_cancels_pending_lock(gateway) -> None:
    device = make_lock(gateway, lock_delay=10)

    task = device.perform_action("unlock")
    await asyncio.sleep(0)
    device.close()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert device.get_property_value("locked") == "unknown"
