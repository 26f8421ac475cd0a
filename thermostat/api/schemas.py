from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Literal, List, Dict

from ..core.timeutil import format_clock, parse_clock, parse_weekday, weekday_name
from ..domain.models import Mode, ScheduleEntry, TemperatureUnit, ThermostatConfig


class ModeIn(BaseModel):
    low: float
    high: float


class ScheduleEntryIn(BaseModel):
    days: List[str]   # "monday", "tue", ...
    mode: str
    start_time: str   # "HH:MM"
    end_time: str     # "HH:MM"


class ThermostatConfigIn(BaseModel):
    modes: Dict[str, ModeIn]
    default_mode: str
    schedule: List[ScheduleEntryIn] = Field(default_factory=list)
    overshoot: float = 0.0
    poll_interval_s: float = 60.0
    min_fan_runtime_s: float = 0.0
    max_consecutive_errors: int = 3
    unit_preference: Literal["Celsius", "Fahrenheit"] = "Fahrenheit"

    def to_domain(self) -> ThermostatConfig:
        """Build the domain config. Raises ValueError on bad times or day names."""
        return ThermostatConfig(
            modes={name: Mode(low=m.low, high=m.high) for name, m in self.modes.items()},
            default_mode=self.default_mode,
            schedule=tuple(
                ScheduleEntry(
                    days=frozenset(parse_weekday(d) for d in e.days),
                    mode_name=e.mode,
                    start=parse_clock(e.start_time),
                    end=parse_clock(e.end_time),
                )
                for e in self.schedule
            ),
            overshoot=self.overshoot,
            poll_interval_s=self.poll_interval_s,
            min_fan_runtime_s=self.min_fan_runtime_s,
            max_consecutive_errors=self.max_consecutive_errors,
            unit_preference=TemperatureUnit(self.unit_preference),
        )

    @classmethod
    def from_domain(cls, cfg: ThermostatConfig) -> "ThermostatConfigIn":
        return cls(
            modes={name: ModeIn(low=m.low, high=m.high) for name, m in cfg.modes.items()},
            default_mode=cfg.default_mode,
            schedule=[
                ScheduleEntryIn(
                    days=[weekday_name(d) for d in sorted(e.days)],
                    mode=e.mode_name,
                    start_time=format_clock(e.start),
                    end_time=format_clock(e.end),
                )
                for e in cfg.schedule
            ],
            overshoot=cfg.overshoot,
            poll_interval_s=cfg.poll_interval_s,
            min_fan_runtime_s=cfg.min_fan_runtime_s,
            max_consecutive_errors=cfg.max_consecutive_errors,
            unit_preference=cfg.unit_preference.value,
        )


class SimManualRequest(BaseModel):
    degrees: float = Field(ge=-40, le=140)


class SimPatternRequest(BaseModel):
    type: Literal["sine", "step", "ramp", "random"]
    baseline: float = 72
    amplitude: float = 6
    period_s: float = Field(default=3600, gt=0)
    noise: float = 0.2
    step_low: float = 66
    step_high: float = 82
    step_period_s: float = Field(default=1800, gt=0)
    ramp_min: float = 64
    ramp_max: float = 84
    ramp_period_s: float = Field(default=3600, gt=0)
