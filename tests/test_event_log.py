import pytest

from thermostat.domain.event_log import EventLog
from thermostat.domain.models import ActuatorDirection, EventRecord, TemperatureUnit

from conftest import MONDAY_NOON


def record(temp):
    return EventRecord(temp, TemperatureUnit.FAHRENHEIT, ActuatorDirection.OFF, MONDAY_NOON)


def test_empty_log():
    log = EventLog(3)
    assert len(log) == 0
    assert log.get_all() == []
    assert log.get_last() is None


def test_keeps_insertion_order_below_capacity():
    log = EventLog(3)
    log.add(record(70))
    log.add(record(71))
    assert [e.ambient_temperature for e in log.get_all()] == [70, 71]
    assert log.get_last().ambient_temperature == 71


def test_evicts_oldest_when_full():
    log = EventLog(3)
    for t in (70, 71, 72, 73):
        log.add(record(t))
    assert len(log) == 3
    assert [e.ambient_temperature for e in log.get_all()] == [71, 72, 73]
    assert log.get_last().ambient_temperature == 73


def test_capacity_never_exceeded():
    log = EventLog(5)
    for t in range(50):
        log.add(record(t))
        assert len(log) <= 5
    assert log.capacity == 5


def test_failed_read_record_is_not_ok():
    failed = EventRecord(None, TemperatureUnit.CELSIUS, ActuatorDirection.HEATING, MONDAY_NOON, error="timeout")
    assert not failed.ok
    assert record(70).ok


def test_rejects_zero_capacity():
    with pytest.raises(ValueError):
        EventLog(0)
