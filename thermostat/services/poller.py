from __future__ import annotations
import asyncio
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from ..core.timeutil import now_local
from ..domain.actuator import CentralHvacActuator
from ..domain.controller import Command, decide
from ..domain.errors import ActuatorShutdownError
from ..domain.event_log import EventLog
from ..domain.models import EventRecord, ThermostatConfig
from ..domain.schedule import resolve_window
from ..sensors.base import Thermometer


logger = logging.getLogger(__name__)

# asyncio may fire a timer marginally early; don't treat that as a stray tick
_TIMER_SLACK_S = 0.01


class PollState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    CANCELLED = "cancelled"
    FATAL = "fatal"


class PollSupervisor:
    """
    Drives read -> decide -> act -> log on a timer.

    The config handed in is never changed while the loop runs; reconfiguring
    means stop(), build a new supervisor with the new config, start().
    """

    def __init__(
        self,
        config: ThermostatConfig,
        thermometer: Thermometer,
        actuator: CentralHvacActuator,
        events: EventLog,
        clock: Callable[[], datetime] = now_local,
    ) -> None:
        self._config = config
        self._thermometer = thermometer
        self._actuator = actuator
        self._events = events
        self._clock = clock

        self._task: Optional[asyncio.Task] = None
        self._stop = asyncio.Event()
        self._state = PollState.IDLE
        self._consecutive_errors = 0
        self._last_event_mono: Optional[float] = None

    @property
    def config(self) -> ThermostatConfig:
        return self._config

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def consecutive_errors(self) -> int:
        return self._consecutive_errors

    async def start(self) -> None:
        if self._task is not None:
            raise RuntimeError("poll supervisor already started")
        self._stop.clear()
        self._state = PollState.POLLING
        self._task = asyncio.create_task(self._run(), name="thermostat_poll")

    async def stop(self) -> None:
        """Cancel the loop. The actuator keeps its last commanded state."""
        self._stop.set()
        if self._task:
            await self._task
            self._task = None
        if self._state != PollState.FATAL:
            self._state = PollState.CANCELLED

    async def _run(self) -> None:
        interval = self._config.poll_interval_s
        logger.info("Poll loop started (poll_interval=%ss)", interval)

        try:
            # first reading right away, operators expect feedback on start
            await self._tick()

            while not self._stop.is_set():
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=interval)
                except asyncio.TimeoutError:
                    pass

                if self._stop.is_set():
                    break

                if self._too_soon():
                    logger.debug("Skipping tick, last event is younger than the poll interval")
                    continue

                await self._tick()

        except ActuatorShutdownError:
            self._state = PollState.FATAL
            logger.error("Actuator is shut down, poll loop cannot continue")

        logger.info("Poll loop stopped")

    async def _tick(self) -> None:
        try:
            await self.run_cycle()
        except ActuatorShutdownError:
            raise
        except Exception as e:
            logger.exception("Poll cycle error: %s", e)

    def _too_soon(self) -> bool:
        if self._last_event_mono is None:
            return False
        elapsed = asyncio.get_running_loop().time() - self._last_event_mono
        return elapsed < self._config.poll_interval_s - _TIMER_SLACK_S

    async def run_cycle(self) -> EventRecord:
        """One read -> decide -> act -> log pass. Returns the appended record."""
        cfg = self._config
        now = self._clock()
        loop = asyncio.get_running_loop()

        try:
            # Thermometers block (HTTP, serial), keep them off the event loop
            reading = await loop.run_in_executor(None, self._thermometer.read_temperature)
        except Exception as e:
            logger.warning("Error reading temperature from %s: %s", self._thermometer.sensor_id, e)
            await self._handle_error()
            return self._record(EventRecord(
                ambient_temperature=None,
                units=cfg.unit_preference,
                direction=self._actuator.direction,
                timestamp=now,
                error=str(e),
            ))

        self._consecutive_errors = 0

        decision = decide(
            temperature=reading.degrees,
            units=reading.unit,
            window=resolve_window(now, cfg),
            overshoot=cfg.overshoot,
            direction=self._actuator.direction,
            last_fan_on_at=self._actuator.last_fan_on_at,
            min_fan_runtime=timedelta(seconds=cfg.min_fan_runtime_s),
            now=now,
            unit_preference=cfg.unit_preference,
        )
        logger.info("decision: %s - %s", decision.command.value, decision.reason)

        if decision.command != Command.NOOP:
            await self._actuator.execute(decision.command)
            self._actuator.mark_fan(decision.last_fan_on_at)

        return self._record(EventRecord(
            ambient_temperature=decision.temperature,
            units=cfg.unit_preference,
            direction=self._actuator.direction,
            timestamp=now,
        ))

    def _record(self, record: EventRecord) -> EventRecord:
        self._events.add(record)
        self._last_event_mono = asyncio.get_running_loop().time()
        return record

    async def _handle_error(self) -> None:
        self._consecutive_errors += 1
        if self._consecutive_errors > self._config.max_consecutive_errors:
            logger.error(
                "%d consecutive read errors, turning HVAC OFF",
                self._consecutive_errors,
            )
            await self._actuator.off()
            self._consecutive_errors = 0
