from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from functools import partial
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.log import configure_logging

from .api.routes import router as api_router
from .api import routes as routes_module
from .api.schemas import ThermostatConfigIn

from .domain.actuator import CentralHvacActuator
from .domain.errors import ThermometerError
from .domain.event_log import EventLog
from .domain.interfaces import HvacOutputs
from .domain.models import Mode, TemperatureUnit, ThermostatConfig
from .drivers.outputs_sim import SimulatedOutputs
from .services.mdns_discovery import discover_thermometers
from .services.thermostat import Thermostat
from .storage.sqlite_repo import SQLiteConfigStore

from .sensors.base import Thermometer
from .sensors.simulated_thermometer import SimulatedThermometer


logger = logging.getLogger(__name__)


sim_thermometer: SimulatedThermometer | None = None
thermostat: Thermostat | None = None


def build_outputs() -> HvacOutputs:
    if settings.actuator_mode.lower() == "gpio":
        from .drivers.gpio_relays import GpioRelayOutputs, RelayPins
        return GpioRelayOutputs(
            RelayPins(
                heat=settings.gpio_heat_pin,
                cool=settings.gpio_cool_pin,
                fan=settings.gpio_fan_pin,
            )
        )
    return SimulatedOutputs()


async def build_thermometer() -> Thermometer:
    global sim_thermometer

    mode = settings.thermometer_mode.lower()
    loop = asyncio.get_running_loop()

    if mode == "web":
        from .sensors.web_thermometer import WebServiceThermometer

        endpoint = settings.thermometer_endpoint
        if not endpoint:
            found = await discover_thermometers(settings.thermometer_service, timeout=settings.mdns_timeout_seconds)
            if not found:
                raise ThermometerError(f"No thermometer service named {settings.thermometer_service!r} found over mDNS")
            endpoint = found[0]["endpoint"]
        # constructor does a blocking connectivity check
        return await loop.run_in_executor(
            None,
            partial(WebServiceThermometer, endpoint, timeout=settings.thermometer_timeout_seconds),
        )

    if mode == "rs485":
        from .drivers.rs485_modbus import RS485ModbusRTU, ModbusRtuConfig
        from .sensors.rs485_thermometer import RS485Thermometer, TempRegisterSpec

        driver = RS485ModbusRTU(
            ModbusRtuConfig(
                port=settings.rs485_port,
                baudrate=settings.rs485_baudrate,
                slave_id=settings.rs485_slave_id,
            )
        )
        spec = TempRegisterSpec(
            functioncode=settings.temp_functioncode,
            address=settings.temp_register_address,
            scale=settings.temp_scale,
            units=TemperatureUnit(settings.temp_units),
        )
        return RS485Thermometer(driver=driver, spec=spec)

    if mode == "i2c":
        from .sensors.mcp9808_thermometer import MCP9808Thermometer
        return MCP9808Thermometer(bus_number=settings.i2c_bus, address=settings.i2c_address)

    # default to sim
    sim_thermometer = SimulatedThermometer()
    return sim_thermometer


def _load_default_config() -> ThermostatConfig:
    defaults_path = Path(__file__).resolve().parent / "config" / "default_thermostat.json"
    try:
        return ThermostatConfigIn.model_validate_json(defaults_path.read_text()).to_domain()
    except Exception as e:
        logger.warning("Failed to load default_thermostat.json, using hardcoded defaults: %s", e)
        return ThermostatConfig(
            modes={"default": Mode(low=69, high=80)},
            default_mode="default",
            overshoot=2,
        )


store = SQLiteConfigStore(settings.sqlite_path)


def get_thermostat() -> Thermostat:
    assert thermostat is not None
    return thermostat


def get_sim_thermometer() -> SimulatedThermometer:
    if sim_thermometer is None:
        raise RuntimeError("Sim thermometer not available (thermometer_mode is not 'sim').")
    return sim_thermometer


@asynccontextmanager
async def lifespan(app: FastAPI):
    global thermostat

    configure_logging()
    logger.info(
        "Starting %s (actuator=%s thermometer=%s)",
        settings.app_name, settings.actuator_mode, settings.thermometer_mode,
    )

    await store.init()
    config = await store.load_config()
    if config is None:
        logger.info("No saved configuration, using defaults")
        config = _load_default_config()

    # Hardware errors are fatal: never run without the outputs
    actuator = CentralHvacActuator(build_outputs(), fan_cooldown_s=settings.fan_cooldown_seconds)
    try:
        meter = await build_thermometer()
        thermostat = Thermostat(
            config=config,
            actuator=actuator,
            thermometer=meter,
            events=EventLog(settings.event_log_capacity),
            store=store,
        )
    except Exception:
        await actuator.shutdown()
        raise

    await thermostat.start()

    try:
        yield
    finally:
        await thermostat.shutdown()
        logger.info("Shutdown complete")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

# Make the dependency functions in routes resolve to the real ones
app.dependency_overrides[routes_module.get_thermostat] = get_thermostat
app.dependency_overrides[routes_module.get_sim_thermometer] = get_sim_thermometer

app.include_router(api_router, prefix="/api")
