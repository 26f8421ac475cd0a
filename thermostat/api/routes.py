from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException

from ..core.config import settings
from ..core.timeutil import now_local
from ..domain.controller import Command
from ..domain.errors import ActuatorShutdownError, ConfigurationError
from ..domain.models import EventRecord
from ..sensors.simulated_thermometer import PatternConfig, SimulatedThermometer
from ..services.thermostat import Thermostat, ThermostatSnapshot
from .schemas import (
    SimManualRequest,
    SimPatternRequest,
    ThermostatConfigIn,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependency getters (imported from main via circular-safe approach) ---
# We define them here as callables that main.py will set via app.dependency_overrides.
def get_thermostat() -> Thermostat:  # overridden in main
    raise RuntimeError("Thermostat dependency not configured")

def get_sim_thermometer() -> SimulatedThermometer:  # overridden in main
    raise RuntimeError("Simulated thermometer dependency not configured")


_MANUAL_COMMANDS = {
    "heat": Command.HEAT,
    "cool": Command.COOL,
    "fan": Command.FAN,
    "off": Command.OFF,
}


def _event_out(e: EventRecord) -> dict:
    return {
        "ambient_temperature": e.ambient_temperature,
        "units": e.units.value,
        "direction": e.direction.value,
        "timestamp": e.timestamp.isoformat(),
        "ok": e.ok,
        "error": e.error,
    }


def _snapshot_out(snap: ThermostatSnapshot) -> dict:
    last = snap.last_event
    return {
        "app": settings.app_name,
        "now_local": now_local().isoformat(),
        "config": ThermostatConfigIn.from_domain(snap.config).model_dump(),
        "active_mode": snap.active_mode,
        "hvac": {
            "direction": snap.actuator.direction.value,
            "fan_cooldown_active": snap.actuator.fan_cooldown_active,
            "last_fan_on_at": snap.actuator.last_fan_on_at.isoformat(),
        },
        "poller": {
            "state": snap.poll_state.value,
            "consecutive_errors": snap.consecutive_errors,
        },
        "last_event": _event_out(last) if last else None,
        "events": [_event_out(e) for e in snap.events],
    }


@router.get("/thermostat")
async def get_thermostat_state(stat: Thermostat = Depends(get_thermostat)):
    return _snapshot_out(stat.snapshot())


@router.post("/thermostat")
async def replace_thermostat_config(
    req: ThermostatConfigIn,
    stat: Thermostat = Depends(get_thermostat),
):
    try:
        config = req.to_domain()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        await stat.apply_config(config)
    except ConfigurationError as e:
        raise HTTPException(
            status_code=422,
            detail={"message": "invalid thermostat configuration", "violations": e.violations},
        )
    return _snapshot_out(stat.snapshot())


@router.get("/events")
async def events(stat: Thermostat = Depends(get_thermostat)):
    log = stat.events
    return {
        "capacity": log.capacity,
        "rows": [_event_out(e) for e in log.get_all()],
    }


@router.post("/hvac/{element}")
async def hvac_command(
    element: Literal["heat", "cool", "fan", "off"],
    stat: Thermostat = Depends(get_thermostat),
):
    try:
        state = await stat.manual(_MANUAL_COMMANDS[element])
    except ActuatorShutdownError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {
        "ok": True,
        "direction": state.direction.value,
        "fan_cooldown_active": state.fan_cooldown_active,
    }


@router.get("/thermometer/discover")
async def discover_thermometer():
    from ..services.mdns_discovery import discover_thermometers
    devices = await discover_thermometers(settings.thermometer_service, timeout=settings.mdns_timeout_seconds)
    return {"devices": devices}


# --- Simulation endpoints ---
@router.get("/sim/status")
async def sim_status(sensor: SimulatedThermometer = Depends(get_sim_thermometer)):
    return sensor.status()


@router.post("/sim/enable")
async def sim_enable(sensor: SimulatedThermometer = Depends(get_sim_thermometer)):
    sensor.enable()
    return {"ok": True, "enabled": True}


@router.post("/sim/disable")
async def sim_disable(sensor: SimulatedThermometer = Depends(get_sim_thermometer)):
    sensor.disable()
    return {"ok": True, "enabled": False}


@router.post("/sim/temperature/manual")
async def sim_set_manual(req: SimManualRequest, sensor: SimulatedThermometer = Depends(get_sim_thermometer)):
    sensor.set_manual(req.degrees)
    return {"ok": True, "mode": "manual", "degrees": req.degrees}


@router.post("/sim/temperature/pattern")
async def sim_set_pattern(req: SimPatternRequest, sensor: SimulatedThermometer = Depends(get_sim_thermometer)):
    cfg = PatternConfig(**req.model_dump())
    sensor.set_pattern(cfg)
    return {"ok": True, "pattern": cfg.__dict__}
