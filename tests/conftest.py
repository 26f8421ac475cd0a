from datetime import datetime, timedelta, timezone

import pytest

from thermostat.domain.actuator import CentralHvacActuator
from thermostat.domain.errors import ThermometerError
from thermostat.domain.event_log import EventLog
from thermostat.domain.models import Mode, Temperature, TemperatureUnit, ThermostatConfig
from thermostat.drivers.outputs_sim import SimulatedOutputs
from thermostat.sensors.base import Thermometer


# Monday 2024-01-15 12:00 local
MONDAY_NOON = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start=MONDAY_NOON):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


class ScriptedThermometer(Thermometer):
    """Returns queued readings; None in the queue means a failed read."""

    def __init__(self, readings=None, unit=TemperatureUnit.FAHRENHEIT, default=72.5):
        self.readings = list(readings or [])
        self.unit = unit
        self.default = default
        self.calls = 0
        self.shut_down = False

    def read_temperature(self):
        self.calls += 1
        value = self.readings.pop(0) if self.readings else self.default
        if value is None:
            raise ThermometerError("Temperature not available.")
        return Temperature(value, self.unit)

    def shutdown(self):
        self.shut_down = True


def make_config(**overrides):
    base = dict(
        modes={"default": Mode(low=69, high=80)},
        default_mode="default",
        schedule=(),
        overshoot=3,
        poll_interval_s=60,
        min_fan_runtime_s=0,
        max_consecutive_errors=3,
        unit_preference=TemperatureUnit.FAHRENHEIT,
    )
    base.update(overrides)
    return ThermostatConfig(**base)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def outputs():
    return SimulatedOutputs()


@pytest.fixture
async def actuator(outputs, clock):
    act = CentralHvacActuator(outputs, fan_cooldown_s=0.05, clock=clock)
    yield act
    if not act.is_shut_down:
        await act.shutdown()


@pytest.fixture
def events():
    return EventLog(60)
