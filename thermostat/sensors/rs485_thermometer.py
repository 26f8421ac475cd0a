from __future__ import annotations

from dataclasses import dataclass
import logging

from .base import Thermometer
from ..domain.errors import ThermometerError
from ..domain.models import Temperature, TemperatureUnit
from ..drivers.rs485_modbus import RS485ModbusRTU

logger = logging.getLogger(__name__)


@dataclass
class TempRegisterSpec:
    functioncode: int = 4  # 3=holding, 4=input
    address: int = 1
    scale: float = 0.1     # raw is signed tenths of a degree
    units: TemperatureUnit = TemperatureUnit.CELSIUS


class RS485Thermometer(Thermometer):
    def __init__(
        self,
        driver: RS485ModbusRTU,
        spec: TempRegisterSpec = TempRegisterSpec(),
        sensor_id: str = "thermo_rs485",
    ):
        self._driver = driver
        self._spec = spec
        self._sensor_id = sensor_id

    @property
    def sensor_id(self) -> str:
        return self._sensor_id

    def read_temperature(self) -> Temperature:
        regs = self._driver.read_registers(self._spec.functioncode, self._spec.address, 1)
        if not regs:
            raise ThermometerError("No registers returned")

        raw = regs[0]
        if raw & 0x8000:
            # two's complement, probes report sub-zero readings
            raw -= 0x10000

        degrees = float(raw) * float(self._spec.scale)
        logger.debug("RS485 temperature: raw=%d scale=%s value=%.2f", raw, self._spec.scale, degrees)
        return Temperature(degrees, self._spec.units)

    def shutdown(self) -> None:
        self._driver.close()
