from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from .models import ActuatorDirection, Mode, TemperatureUnit

logger = logging.getLogger(__name__)

FAN_CYCLE_PERIOD = timedelta(hours=1)


class Command(str, Enum):
    OFF = "OFF"
    HEAT = "HEAT"
    COOL = "COOL"
    FAN = "FAN"
    NOOP = "NOOP"


@dataclass(frozen=True)
class ControlDecision:
    command: Command
    reason: str
    temperature: float  # in the preferred unit
    last_fan_on_at: datetime


def c_to_f(temp_c: float) -> float:
    return temp_c * 9 / 5 + 32


def f_to_c(temp_f: float) -> float:
    return (temp_f - 32) * 5 / 9


def normalize(value: float, units: TemperatureUnit, preferred: TemperatureUnit) -> float:
    if units == preferred:
        return value
    if preferred == TemperatureUnit.FAHRENHEIT:
        return c_to_f(value)
    return f_to_c(value)


def decide(
    temperature: float,
    units: TemperatureUnit,
    window: Mode,
    overshoot: float,
    direction: ActuatorDirection,
    last_fan_on_at: datetime,
    min_fan_runtime: timedelta,
    now: datetime,
    unit_preference: TemperatureUnit = TemperatureUnit.FAHRENHEIT,
) -> ControlDecision:
    """
    Pick the next actuator command. First matching rule wins:
    stop, heat, cool, scheduled fan cycle, otherwise nothing.

    While the fan cycle runs, last_fan_on_at holds the time it is due to stop.
    """
    temp = normalize(temperature, units, unit_preference)
    fan_cycling = min_fan_runtime > timedelta(0)

    logger.info(
        "decide: temp=%.2f %s direction=%s low=%.1f high=%.1f overshoot=%.1f",
        temp, unit_preference.value, direction.value, window.low, window.high, overshoot,
    )

    if direction == ActuatorDirection.HEATING and temp > window.low + overshoot:
        reason = f"Heated past {window.low + overshoot:.1f}"
        return ControlDecision(Command.OFF, reason, temp, now)

    if direction == ActuatorDirection.COOLING and temp < window.high - overshoot:
        reason = f"Cooled below {window.high - overshoot:.1f}"
        return ControlDecision(Command.OFF, reason, temp, now)

    if fan_cycling and direction == ActuatorDirection.FAN_ONLY and now >= last_fan_on_at:
        return ControlDecision(Command.OFF, "Fan cycle finished", temp, now)

    if temp < window.low:
        return ControlDecision(Command.HEAT, f"Below low {window.low:.1f}", temp, now)

    if temp > window.high:
        return ControlDecision(Command.COOL, f"Above high {window.high:.1f}", temp, now)

    if fan_cycling and now - last_fan_on_at > FAN_CYCLE_PERIOD - min_fan_runtime:
        return ControlDecision(
            Command.FAN,
            f"Fan idle since {last_fan_on_at.isoformat()}",
            temp,
            now + min_fan_runtime,
        )

    return ControlDecision(Command.NOOP, "Within window", temp, last_fan_on_at)
