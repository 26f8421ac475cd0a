from datetime import datetime, time, timezone
from zoneinfo import ZoneInfo
from .config import settings


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_local() -> datetime:
    # Schedules are written in wall-clock time of the house, not UTC
    return now_utc().astimezone(ZoneInfo(settings.timezone))


def parse_clock(s: str) -> time:
    """Parse "HH:MM" (24h) into a time. Raises ValueError on bad input."""
    h, sep, m = s.strip().partition(":")
    if not sep or not h.isdigit() or not m.isdigit():
        raise ValueError(f"Invalid time format: {s!r}, expected HH:MM")
    return time(hour=int(h), minute=int(m))


def format_clock(t: time) -> str:
    return t.strftime("%H:%M")


def parse_weekday(name: str) -> int:
    """Map an English day name (or 3-letter prefix) to datetime.weekday()."""
    key = name.strip().lower()
    for i, day in enumerate(WEEKDAYS):
        if key == day or (len(key) >= 3 and day.startswith(key)):
            return i
    raise ValueError(f"Unknown weekday: {name!r}")


def weekday_name(day: int) -> str:
    return WEEKDAYS[day]
