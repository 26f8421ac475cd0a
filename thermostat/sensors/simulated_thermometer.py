from __future__ import annotations

import math
import random
import time
from dataclasses import dataclass
from threading import Lock

from ..domain.errors import ThermometerError
from ..domain.models import Temperature, TemperatureUnit
from .base import Thermometer


@dataclass
class PatternConfig:
    type: str = "sine"     # sine|step|ramp|random
    baseline: float = 72.0
    amplitude: float = 6.0
    period_s: float = 3600
    noise: float = 0.2

    step_low: float = 66.0
    step_high: float = 82.0
    step_period_s: float = 1800

    ramp_min: float = 64.0
    ramp_max: float = 84.0
    ramp_period_s: float = 3600


class SimulatedThermometer(Thermometer):
    """Development stand-in for the probe. Disable it to simulate a dead sensor."""

    def __init__(
        self,
        sensor_id: str = "thermo_sim",
        unit: TemperatureUnit = TemperatureUnit.FAHRENHEIT,
        manual_value: float = 72.0,
    ):
        self._sensor_id = sensor_id
        self._unit = unit
        self._lock = Lock()
        self._enabled = True
        self._mode = "manual"   # manual|pattern
        self._manual_value = float(manual_value)
        self._pattern = PatternConfig()

    @property
    def sensor_id(self) -> str:
        return self._sensor_id

    def enable(self) -> None:
        with self._lock:
            self._enabled = True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False

    def set_manual(self, degrees: float) -> None:
        with self._lock:
            self._mode = "manual"
            self._manual_value = float(degrees)

    def set_pattern(self, cfg: PatternConfig) -> None:
        with self._lock:
            self._mode = "pattern"
            self._pattern = cfg

    def status(self) -> dict:
        with self._lock:
            return {
                "enabled": self._enabled,
                "mode": self._mode,
                "manual_value": self._manual_value,
                "units": self._unit.value,
                "pattern": self._pattern.__dict__,
            }

    def read_temperature(self) -> Temperature:
        with self._lock:
            if not self._enabled:
                raise ThermometerError("Simulated thermometer disabled")

            if self._mode == "manual":
                return Temperature(self._manual_value, self._unit)

            cfg = self._pattern

        t = time.time()

        if cfg.type == "sine":
            phase = (t % cfg.period_s) / cfg.period_s * 2.0 * math.pi
            v = cfg.baseline + cfg.amplitude * math.sin(phase)

        elif cfg.type == "step":
            half = cfg.step_period_s / 2.0
            v = cfg.step_high if (t % cfg.step_period_s) < half else cfg.step_low

        elif cfg.type == "ramp":
            frac = (t % cfg.ramp_period_s) / cfg.ramp_period_s
            v = cfg.ramp_min + (cfg.ramp_max - cfg.ramp_min) * frac

        elif cfg.type == "random":
            v = cfg.baseline + random.uniform(-cfg.amplitude, cfg.amplitude)

        else:
            v = cfg.baseline

        if cfg.noise > 0:
            v += random.uniform(-cfg.noise, cfg.noise)

        return Temperature(float(v), self._unit)
