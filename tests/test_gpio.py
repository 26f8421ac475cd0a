import pytest
from gpiozero.pins.mock import MockFactory

from thermostat.domain.actuator import CentralHvacActuator
from thermostat.domain.errors import HardwareInitError
from thermostat.drivers.gpio_relays import GpioRelayOutputs, RelayPins


@pytest.fixture
def factory():
    f = MockFactory()
    yield f
    f.reset()


def level(factory, pin):
    return bool(factory.pin(pin).state)


def test_active_low_wiring(factory):
    pins = RelayPins(heat=16, cool=20, fan=21)
    outputs = GpioRelayOutputs(pins, pin_factory=factory)

    # OFF is a high signal on active-low relays
    assert level(factory, 16) and level(factory, 20) and level(factory, 21)

    outputs.write("heat", True)
    outputs.write("fan", True)
    assert not level(factory, 16)
    assert not level(factory, 21)
    assert level(factory, 20)

    outputs.write("heat", False)
    assert level(factory, 16)
    outputs.close()


async def test_actuator_drives_gpio(factory):
    outputs = GpioRelayOutputs(RelayPins(), pin_factory=factory)
    act = CentralHvacActuator(outputs, fan_cooldown_s=0.01)
    await act.cool()
    assert not level(factory, 20)
    assert not level(factory, 21)
    assert level(factory, 16)
    await act.shutdown()


def test_bad_pin_is_hardware_init_error(factory):
    with pytest.raises(HardwareInitError):
        GpioRelayOutputs(RelayPins(heat=999), pin_factory=factory)
