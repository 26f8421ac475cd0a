from __future__ import annotations

import logging
from dataclasses import dataclass

from gpiozero import DigitalOutputDevice
from gpiozero.exc import GPIOZeroError

from ..domain.errors import HardwareInitError
from ..domain.interfaces import Channel

logger = logging.getLogger(__name__)


@dataclass
class RelayPins:
    heat: int = 16
    cool: int = 20
    fan: int = 21
    active_high: bool = False   # reference wiring: relay energised on LOW


class GpioRelayOutputs:
    """
    Relay board on the Pi header, one DigitalOutputDevice per HVAC line.
    All lines start OFF.
    """

    def __init__(self, pins: RelayPins, pin_factory=None) -> None:
        self._pins = pins
        self._devices: dict[str, DigitalOutputDevice] = {}
        try:
            for channel in ("heat", "cool", "fan"):
                pin = getattr(pins, channel)
                logger.info("Using pin %d to control %s.", pin, channel.upper())
                self._devices[channel] = DigitalOutputDevice(
                    pin,
                    active_high=pins.active_high,
                    initial_value=False,
                    pin_factory=pin_factory,
                )
        except (GPIOZeroError, OSError, ImportError) as e:
            self.close()
            raise HardwareInitError(f"Unable to acquire GPIO outputs: {e}") from e

    def write(self, channel: Channel, on: bool) -> None:
        dev = self._devices[channel]
        if on:
            dev.on()
        else:
            dev.off()

    def close(self) -> None:
        for dev in self._devices.values():
            dev.close()
        self._devices.clear()
