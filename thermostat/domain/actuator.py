from __future__ import annotations
import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from ..core.timeutil import now_local
from .controller import Command
from .errors import ActuatorShutdownError
from .interfaces import CHANNELS, HvacOutputs
from .models import ActuatorDirection, ActuatorState

logger = logging.getLogger(__name__)


class CentralHvacActuator:
    """
    Single owner of the heat/cool/fan outputs and the fan cooldown timer.

    Every transition runs under one lock, so the poll loop, manual HTTP
    commands and the cooldown task never interleave their writes. Leaving
    heating or cooling keeps the fan running for fan_cooldown_s unless the
    next heat/cool/fan call takes the fan over first.
    """

    actuator_id = "central_hvac"

    def __init__(
        self,
        outputs: HvacOutputs,
        fan_cooldown_s: float = 60.0,
        clock: Callable[[], datetime] = now_local,
    ) -> None:
        self._outputs = outputs
        self._fan_cooldown_s = fan_cooldown_s
        self._lock = asyncio.Lock()

        self._direction = ActuatorDirection.OFF
        self._last_fan_on_at = clock()
        self._shut_down = False

        # one-shot cancel signal of the running cooldown, None when idle
        self._cooldown_cancel: Optional[asyncio.Event] = None
        self._cooldown_task: Optional[asyncio.Task] = None

        logger.info("Setting FAN cooldown time to %.1fs", fan_cooldown_s)
        for channel in CHANNELS:
            self._outputs.write(channel, False)

    @property
    def direction(self) -> ActuatorDirection:
        return self._direction

    @property
    def fan_cooldown_active(self) -> bool:
        return self._cooldown_cancel is not None

    @property
    def last_fan_on_at(self) -> datetime:
        return self._last_fan_on_at

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    def mark_fan(self, ts: datetime) -> None:
        self._last_fan_on_at = ts

    def state(self) -> ActuatorState:
        return ActuatorState(
            direction=self._direction,
            fan_cooldown_active=self.fan_cooldown_active,
            last_fan_on_at=self._last_fan_on_at,
        )

    async def heat(self) -> None:
        async with self._lock:
            self._ensure_running()
            self._cancel_cooldown()
            self._outputs.write("fan", True)
            self._outputs.write("cool", False)
            self._outputs.write("heat", True)
            self._set_direction(ActuatorDirection.HEATING)

    async def cool(self) -> None:
        async with self._lock:
            self._ensure_running()
            self._cancel_cooldown()
            self._outputs.write("fan", True)
            self._outputs.write("heat", False)
            self._outputs.write("cool", True)
            self._set_direction(ActuatorDirection.COOLING)

    async def fan(self) -> None:
        async with self._lock:
            self._ensure_running()
            self._cancel_cooldown()
            self._outputs.write("fan", True)
            self._outputs.write("heat", False)
            self._outputs.write("cool", False)
            self._set_direction(ActuatorDirection.FAN_ONLY)

    async def off(self) -> None:
        async with self._lock:
            self._ensure_running()
            previous = self._direction
            self._outputs.write("heat", False)
            self._outputs.write("cool", False)

            if previous in (ActuatorDirection.HEATING, ActuatorDirection.COOLING):
                self._start_cooldown()
            elif not self.fan_cooldown_active:
                self._outputs.write("fan", False)
            # an already running cooldown keeps the fan until it expires

            self._set_direction(ActuatorDirection.OFF)

    async def execute(self, command: Command) -> None:
        if command == Command.HEAT:
            await self.heat()
        elif command == Command.COOL:
            await self.cool()
        elif command == Command.FAN:
            await self.fan()
        elif command == Command.OFF:
            await self.off()

    async def shutdown(self) -> None:
        async with self._lock:
            if self._shut_down:
                return
            task = self._cooldown_task
            self._cancel_cooldown()
            self._outputs.write("cool", False)
            self._outputs.write("heat", False)
            self._outputs.write("fan", False)
            self._direction = ActuatorDirection.OFF
            self._shut_down = True
            self._outputs.close()
            logger.info("HVAC outputs shut down")

        if task is not None:
            await task

    def _ensure_running(self) -> None:
        if self._shut_down:
            raise ActuatorShutdownError("actuator has been shut down")

    def _set_direction(self, direction: ActuatorDirection) -> None:
        if direction != self._direction:
            logger.info("HVAC %s -> %s", self._direction.value, direction.value)
        self._direction = direction

    def _cancel_cooldown(self) -> None:
        # must hold the lock; the fan is left as is for the caller to drive
        if self._cooldown_cancel is not None:
            self._cooldown_cancel.set()
            logger.info("FAN cooldown cancelled")
        self._cooldown_cancel = None
        self._cooldown_task = None

    def _start_cooldown(self) -> None:
        # must hold the lock
        cancel = asyncio.Event()
        self._cooldown_cancel = cancel
        self._cooldown_task = asyncio.create_task(self._fan_cooldown(cancel), name="fan_cooldown")
        logger.info("FAN cooling down for %.1fs", self._fan_cooldown_s)

    async def _fan_cooldown(self, cancel: asyncio.Event) -> None:
        try:
            await asyncio.wait_for(cancel.wait(), timeout=self._fan_cooldown_s)
            return
        except asyncio.TimeoutError:
            pass

        async with self._lock:
            # a heat/cool/fan call may have won the race for the lock
            if cancel.is_set() or self._cooldown_cancel is not cancel:
                return
            self._outputs.write("fan", False)
            self._cooldown_cancel = None
            self._cooldown_task = None
            logger.info("FAN cooldown finished, fan OFF")
