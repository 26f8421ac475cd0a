from datetime import time

from thermostat.domain.models import Mode, ScheduleEntry, TemperatureUnit
from thermostat.storage.sqlite_repo import SQLiteConfigStore

from conftest import make_config


async def test_load_before_save_returns_none(tmp_path):
    store = SQLiteConfigStore(str(tmp_path / "t.db"))
    await store.init()
    assert await store.load_config() is None


async def test_save_and_restore(tmp_path):
    store = SQLiteConfigStore(str(tmp_path / "t.db"))
    await store.init()
    cfg = make_config(
        modes={"default": Mode(69, 80), "sleep": Mode(64, 76)},
        schedule=(ScheduleEntry(frozenset({0, 6}), "sleep", time(22, 0), time(23, 30)),),
        min_fan_runtime_s=600,
        unit_preference=TemperatureUnit.CELSIUS,
    )
    await store.save_config(cfg)
    assert await store.load_config() == cfg

    newer = make_config(overshoot=1.5)
    await store.save_config(newer)
    # reopened store sees the latest snapshot only
    again = SQLiteConfigStore(str(tmp_path / "t.db"))
    assert await again.load_config() == newer
