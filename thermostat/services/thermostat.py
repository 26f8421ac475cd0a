from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..core.timeutil import now_local
from ..domain.actuator import CentralHvacActuator
from ..domain.controller import Command
from ..domain.errors import ConfigurationError
from ..domain.event_log import EventLog
from ..domain.interfaces import ConfigStore
from ..domain.models import ActuatorState, EventRecord, ThermostatConfig
from ..domain.schedule import active_mode_name
from ..sensors.base import Thermometer
from .poller import PollState, PollSupervisor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThermostatSnapshot:
    config: ThermostatConfig
    active_mode: str
    actuator: ActuatorState
    poll_state: PollState
    consecutive_errors: int
    events: list[EventRecord]

    @property
    def last_event(self) -> Optional[EventRecord]:
        return self.events[-1] if self.events else None


class Thermostat:
    """
    Ties the poll loop to its collaborators and owns live reconfiguration.

    apply_config() is the only way to change the running configuration:
    validate, stop the loop, swap the config, start a fresh loop, persist.
    """

    def __init__(
        self,
        config: ThermostatConfig,
        actuator: CentralHvacActuator,
        thermometer: Thermometer,
        events: EventLog,
        store: Optional[ConfigStore] = None,
        clock: Callable[[], datetime] = now_local,
    ) -> None:
        violations = config.validate()
        if violations:
            raise ConfigurationError(violations)

        self._config = config
        self._actuator = actuator
        self._thermometer = thermometer
        self._events = events
        self._store = store
        self._clock = clock
        self._reconfigure_lock = asyncio.Lock()
        self._poller = self._new_poller(config)

    @property
    def config(self) -> ThermostatConfig:
        return self._config

    @property
    def actuator(self) -> CentralHvacActuator:
        return self._actuator

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def poller(self) -> PollSupervisor:
        return self._poller

    def _new_poller(self, config: ThermostatConfig) -> PollSupervisor:
        return PollSupervisor(
            config=config,
            thermometer=self._thermometer,
            actuator=self._actuator,
            events=self._events,
            clock=self._clock,
        )

    async def start(self) -> None:
        await self._poller.start()

    async def stop(self) -> None:
        await self._poller.stop()

    async def apply_config(self, config: ThermostatConfig) -> ThermostatConfig:
        violations = config.validate()
        if violations:
            logger.warning("Rejected thermostat configuration: %s", violations)
            raise ConfigurationError(violations)

        async with self._reconfigure_lock:
            await self._poller.stop()
            self._config = config
            self._poller = self._new_poller(config)
            await self._poller.start()
            logger.info(
                "Applied new thermostat configuration (default=%s modes=%d schedule=%d)",
                config.default_mode, len(config.modes), len(config.schedule),
            )

        if self._store is not None:
            try:
                await self._store.save_config(config)
            except Exception:
                # the new config is already live, a failed save only costs it after a restart
                logger.exception("Failed to persist thermostat configuration")
        return config

    async def manual(self, command: Command) -> ActuatorState:
        logger.info("Manual command: %s", command.value)
        await self._actuator.execute(command)
        if command == Command.FAN:
            # arm the fan-only stop time like a scheduled fan cycle would
            self._actuator.mark_fan(
                self._clock() + timedelta(seconds=self._config.min_fan_runtime_s)
            )
        return self._actuator.state()

    def snapshot(self) -> ThermostatSnapshot:
        return ThermostatSnapshot(
            config=self._config,
            active_mode=active_mode_name(self._clock(), self._config),
            actuator=self._actuator.state(),
            poll_state=self._poller.state,
            consecutive_errors=self._poller.consecutive_errors,
            events=self._events.get_all(),
        )

    async def shutdown(self) -> None:
        await self._poller.stop()
        await self._actuator.shutdown()
        self._thermometer.shutdown()
        logger.info("Thermostat shut down")
