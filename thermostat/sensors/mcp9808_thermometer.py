from __future__ import annotations

import logging

from smbus2 import SMBus

from .base import Thermometer
from ..domain.errors import HardwareInitError, ThermometerError
from ..domain.models import Temperature, TemperatureUnit

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = 0x18

REG_CONFIG = 0x01
REG_AMBIENT = 0x05
REG_MANUFACTURER = 0x06
REG_RESOLUTION = 0x08

MANUFACTURER_ID = 0x0054
RESOLUTION_SIXTEENTH_C = 0x03

# config register, upper byte: bits 2..1 hysteresis, bit 0 shutdown
_CFG_SHUTDOWN = 0x01
_CFG_HYSTERESIS = 0x06


class MCP9808Thermometer(Thermometer):
    """
    MCP9808 on the Pi's I2C header.

    On start the chip is woken, set to 1/16 °C resolution and zero hysteresis.
    shutdown() puts it back into low-power mode and releases the bus.
    """

    def __init__(
        self,
        bus_number: int = 1,
        address: int = DEFAULT_ADDRESS,
        bus=None,
        sensor_id: str = "thermo_mcp9808",
    ) -> None:
        self._address = address
        self._sensor_id = sensor_id
        try:
            self._bus = bus if bus is not None else SMBus(bus_number)
            manufacturer = self._read_word(REG_MANUFACTURER)
            if manufacturer != MANUFACTURER_ID:
                raise HardwareInitError(
                    f"device at 0x{address:02x} is not an MCP9808 (manufacturer id 0x{manufacturer:04x})"
                )
            msb, lsb = self._read_bytes(REG_CONFIG)
            self._write_bytes(REG_CONFIG, [msb & ~(_CFG_SHUTDOWN | _CFG_HYSTERESIS), lsb])
            self._bus.write_byte_data(self._address, REG_RESOLUTION, RESOLUTION_SIXTEENTH_C)
        except OSError as e:
            raise HardwareInitError(f"MCP9808 init failed on i2c bus {bus_number}: {e}") from e

        logger.info("MCP9808 ready at 0x%02x", address)

    @property
    def sensor_id(self) -> str:
        return self._sensor_id

    def _read_bytes(self, register: int) -> list[int]:
        return self._bus.read_i2c_block_data(self._address, register, 2)

    def _read_word(self, register: int) -> int:
        msb, lsb = self._read_bytes(register)
        return (msb << 8) | lsb

    def _write_bytes(self, register: int, data: list[int]) -> None:
        self._bus.write_i2c_block_data(self._address, register, data)

    def read_temperature(self) -> Temperature:
        try:
            msb, lsb = self._read_bytes(REG_AMBIENT)
        except OSError as e:
            raise ThermometerError(f"MCP9808 read failed: {e}") from e

        # top three bits are alert flags, bit 4 is the sign
        msb &= 0x1F
        degrees = (msb & 0x0F) * 16 + lsb / 16.0
        if msb & 0x10:
            degrees -= 256

        logger.debug("MCP9808 temperature: %.4f C", degrees)
        return Temperature(degrees, TemperatureUnit.CELSIUS)

    def shutdown(self) -> None:
        try:
            msb, lsb = self._read_bytes(REG_CONFIG)
            self._write_bytes(REG_CONFIG, [msb | _CFG_SHUTDOWN, lsb])
        except OSError as e:
            logger.warning("MCP9808 shutdown mode not set: %s", e)
        finally:
            self._bus.close()
