from __future__ import annotations
from datetime import datetime
from typing import Optional

from .models import Mode, ScheduleEntry, ThermostatConfig


def entry_matches(entry: ScheduleEntry, now: datetime) -> bool:
    """Weekday membership plus a minute-resolution [start, end) check.

    The start hour/minute is accepted, the end hour/minute itself is not.
    """
    if now.weekday() not in entry.days:
        return False

    hour, minute = now.hour, now.minute
    if hour < entry.start.hour or hour > entry.end.hour:
        return False
    if hour == entry.start.hour and minute < entry.start.minute:
        return False
    if hour == entry.end.hour and minute >= entry.end.minute:
        return False
    return True


def matching_entry(now: datetime, config: ThermostatConfig) -> Optional[ScheduleEntry]:
    # Schedule order is a priority list: first match wins even if later ones overlap
    for entry in config.schedule:
        if entry.mode_name not in config.modes:
            continue
        if entry_matches(entry, now):
            return entry
    return None


def active_mode_name(now: datetime, config: ThermostatConfig) -> str:
    entry = matching_entry(now, config)
    return entry.mode_name if entry else config.default_mode


def resolve_window(now: datetime, config: ThermostatConfig) -> Mode:
    return config.modes[active_mode_name(now, config)]
