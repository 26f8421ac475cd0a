from datetime import datetime, time

from thermostat.domain.models import Mode, ScheduleEntry
from thermostat.domain.schedule import active_mode_name, entry_matches, resolve_window

from conftest import make_config

WEEKDAYS = frozenset(range(5))
ALL_DAYS = frozenset(range(7))

MODES = {
    "default": Mode(low=69, high=80),
    "away": Mode(low=62, high=85),
    "sleep": Mode(low=66, high=76),
}


def at(day, hour, minute=0):
    # 2024-01-15 is a Monday
    return datetime(2024, 1, 15 + day, hour, minute)


def entry(mode, start, end, days=ALL_DAYS):
    return ScheduleEntry(days=days, mode_name=mode, start=start, end=end)


def test_falls_back_to_default_without_schedule():
    cfg = make_config(modes=MODES)
    assert resolve_window(at(0, 12), cfg) == MODES["default"]


def test_matches_entry_inside_window():
    cfg = make_config(modes=MODES, schedule=(entry("away", time(8), time(17), WEEKDAYS),))
    assert active_mode_name(at(0, 12), cfg) == "away"
    assert resolve_window(at(0, 12), cfg) == MODES["away"]


def test_weekday_must_match():
    cfg = make_config(modes=MODES, schedule=(entry("away", time(8), time(17), WEEKDAYS),))
    # Saturday
    assert active_mode_name(at(5, 12), cfg) == "default"


def test_first_matching_entry_wins():
    cfg = make_config(
        modes=MODES,
        schedule=(
            entry("sleep", time(10), time(14)),
            entry("away", time(8), time(17)),
        ),
    )
    assert active_mode_name(at(0, 12), cfg) == "sleep"
    assert active_mode_name(at(0, 9), cfg) == "away"


def test_start_minute_is_inclusive_end_minute_is_exclusive():
    e = entry("away", time(8, 30), time(17, 15))
    assert entry_matches(e, at(0, 8, 30))
    assert not entry_matches(e, at(0, 8, 29))
    assert entry_matches(e, at(0, 17, 14))
    assert not entry_matches(e, at(0, 17, 15))
    assert not entry_matches(e, at(0, 17, 16))


def test_hours_outside_window_rejected():
    e = entry("away", time(8), time(17))
    assert not entry_matches(e, at(0, 7, 59))
    assert not entry_matches(e, at(0, 18))
    assert entry_matches(e, at(0, 16, 59))


def test_same_hour_window():
    e = entry("away", time(9, 10), time(9, 40))
    assert entry_matches(e, at(0, 9, 10))
    assert entry_matches(e, at(0, 9, 39))
    assert not entry_matches(e, at(0, 9, 5))
    assert not entry_matches(e, at(0, 9, 40))


def test_entry_with_unknown_mode_is_skipped():
    cfg = make_config(
        modes=MODES,
        schedule=(
            entry("vacation", time(0), time(23, 59)),
            entry("sleep", time(0), time(23, 59)),
        ),
    )
    assert active_mode_name(at(0, 12), cfg) == "sleep"


def test_never_returns_missing_mode():
    cfg = make_config(modes=MODES, schedule=(entry("away", time(8), time(17), WEEKDAYS),))
    for day in range(7):
        for hour in range(24):
            assert resolve_window(at(day, hour, 30), cfg) in MODES.values()


def test_sunday_is_weekday_six():
    cfg = make_config(modes=MODES, schedule=(entry("sleep", time(0), time(23, 59), frozenset({6})),))
    assert active_mode_name(at(6, 12), cfg) == "sleep"
    assert active_mode_name(at(0, 12), cfg) == "default"
