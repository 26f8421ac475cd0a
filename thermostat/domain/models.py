from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from typing import Mapping, Optional


class TemperatureUnit(str, Enum):
    CELSIUS = "Celsius"
    FAHRENHEIT = "Fahrenheit"


class ActuatorDirection(str, Enum):
    """What is physically powered right now."""

    OFF = "off"
    HEATING = "heating"
    COOLING = "cooling"
    FAN_ONLY = "fan"


@dataclass(frozen=True)
class Temperature:
    degrees: float
    unit: TemperatureUnit


@dataclass(frozen=True)
class Mode:
    low: float
    high: float


@dataclass(frozen=True)
class ScheduleEntry:
    days: frozenset[int]  # datetime.weekday(), Monday == 0
    mode_name: str
    start: time
    end: time


@dataclass(frozen=True)
class ThermostatConfig:
    modes: Mapping[str, Mode]
    default_mode: str
    schedule: tuple[ScheduleEntry, ...] = ()
    overshoot: float = 0.0
    poll_interval_s: float = 60.0
    min_fan_runtime_s: float = 0.0
    max_consecutive_errors: int = 3
    unit_preference: TemperatureUnit = TemperatureUnit.FAHRENHEIT

    def validate(self) -> list[str]:
        """Return every problem with this configuration; empty means valid."""
        violations: list[str] = []

        if self.default_mode not in self.modes:
            violations.append(f"default mode {self.default_mode!r} is not defined")

        for name, mode in self.modes.items():
            if mode.low >= mode.high:
                violations.append(f"{name} mode is not valid: low {mode.low} must be below high {mode.high}")

        for i, entry in enumerate(self.schedule, start=1):
            if entry.start >= entry.end:
                violations.append(f"schedule entry #{i} not valid: start must be before end")
            if entry.mode_name not in self.modes:
                violations.append(f"schedule entry #{i} not valid: unknown mode {entry.mode_name!r}")
            if not entry.days:
                violations.append(f"schedule entry #{i} not valid: no days selected")

        if self.overshoot < 0:
            violations.append("overshoot must be >= 0")
        if self.poll_interval_s <= 0:
            violations.append("poll interval must be > 0")
        if self.min_fan_runtime_s < 0:
            violations.append("min fan runtime must be >= 0")
        if self.max_consecutive_errors < 0:
            violations.append("max consecutive errors must be >= 0")

        return violations


@dataclass(frozen=True)
class ActuatorState:
    direction: ActuatorDirection
    fan_cooldown_active: bool
    last_fan_on_at: datetime


@dataclass(frozen=True)
class EventRecord:
    ambient_temperature: Optional[float]  # None => the read failed
    units: TemperatureUnit
    direction: ActuatorDirection
    timestamp: datetime
    error: Optional[str] = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.ambient_temperature is not None
