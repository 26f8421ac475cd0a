import asyncio
from datetime import timedelta

import pytest

from thermostat.domain.controller import Command
from thermostat.domain.errors import ConfigurationError
from thermostat.domain.models import ActuatorDirection, Mode
from thermostat.services.poller import PollState
from thermostat.services.thermostat import Thermostat

from conftest import ScriptedThermometer, make_config


class MemoryStore:
    def __init__(self):
        self.saved = []

    async def init(self):
        pass

    async def load_config(self):
        return self.saved[-1] if self.saved else None

    async def save_config(self, config):
        self.saved.append(config)


class ReadOnlyStore(MemoryStore):
    async def save_config(self, config):
        raise OSError(30, "Read-only file system")


@pytest.fixture
async def stat(actuator, events, clock):
    meter = ScriptedThermometer(default=72.5)
    t = Thermostat(make_config(), actuator, meter, events, store=MemoryStore(), clock=clock)
    yield t
    await t.shutdown()


async def test_rejects_invalid_initial_config(actuator, events):
    bad = make_config(default_mode="missing")
    with pytest.raises(ConfigurationError) as exc:
        Thermostat(bad, actuator, ScriptedThermometer(), events)
    assert "default mode" in exc.value.violations[0]


async def test_apply_config_restarts_loop(stat):
    await stat.start()
    await asyncio.sleep(0.05)
    old_poller = stat.poller

    new = make_config(modes={"default": Mode(low=74, high=80)})
    await stat.apply_config(new)

    assert stat.config is new
    assert stat.poller is not old_poller
    assert old_poller.state == PollState.CANCELLED
    assert stat.poller.state == PollState.POLLING
    assert stat.poller.config is new

    await asyncio.sleep(0.05)
    # 72.5 is below the new low of 74
    assert stat.actuator.direction == ActuatorDirection.HEATING
    assert stat._store.saved == [new]


async def test_invalid_config_leaves_running_loop_alone(stat):
    await stat.start()
    poller = stat.poller
    bad = make_config(modes={"default": Mode(low=80, high=70)})

    with pytest.raises(ConfigurationError):
        await stat.apply_config(bad)

    assert stat.poller is poller
    assert poller.state == PollState.POLLING
    assert stat._store.saved == []


async def test_manual_command(stat):
    state = await stat.manual(Command.COOL)
    assert state.direction == ActuatorDirection.COOLING
    state = await stat.manual(Command.OFF)
    assert state.direction == ActuatorDirection.OFF
    assert state.fan_cooldown_active


async def test_snapshot(stat):
    await stat.start()
    await asyncio.sleep(0.05)
    snap = stat.snapshot()
    assert snap.config is stat.config
    assert snap.active_mode == "default"
    assert snap.poll_state == PollState.POLLING
    assert snap.consecutive_errors == 0
    assert snap.last_event is not None
    assert snap.last_event.ambient_temperature == 72.5
    assert snap.actuator.direction == ActuatorDirection.OFF


async def test_shutdown_releases_everything(actuator, events, clock, outputs):
    meter = ScriptedThermometer()
    t = Thermostat(make_config(), actuator, meter, events, clock=clock)
    await t.start()
    await t.manual(Command.HEAT)
    await t.shutdown()

    assert actuator.is_shut_down
    assert outputs.closed
    assert meter.shut_down
    assert t.poller.state == PollState.CANCELLED


async def test_failed_save_keeps_new_config_live(actuator, events, clock, caplog):
    t = Thermostat(make_config(), actuator, ScriptedThermometer(), events, store=ReadOnlyStore(), clock=clock)
    await t.start()
    new = make_config(overshoot=1)

    assert await t.apply_config(new) is new
    assert t.config is new
    assert t.poller.state == PollState.POLLING
    assert "Failed to persist thermostat configuration" in caplog.text
    await t.shutdown()


async def test_manual_fan_runs_for_min_fan_runtime(actuator, events, clock):
    t = Thermostat(make_config(min_fan_runtime_s=600), actuator, ScriptedThermometer(), events, clock=clock)

    state = await t.manual(Command.FAN)
    assert state.direction == ActuatorDirection.FAN_ONLY
    assert actuator.last_fan_on_at == clock.now + timedelta(minutes=10)

    # 72.5 sits inside the comfort band, only the fan stop rule applies
    clock.advance(minutes=5)
    await t.poller.run_cycle()
    assert actuator.direction == ActuatorDirection.FAN_ONLY

    clock.advance(minutes=5)
    await t.poller.run_cycle()
    assert actuator.direction == ActuatorDirection.OFF
    await t.shutdown()
