from __future__ import annotations
import logging

from ..domain.interfaces import CHANNELS, Channel

logger = logging.getLogger(__name__)


class SimulatedOutputs:
    """In-memory relay bank. Keeps every write so tests can replay the wiring."""

    def __init__(self) -> None:
        self._state: dict[str, bool] = {c: False for c in CHANNELS}
        self.history: list[tuple[str, bool]] = []
        self.closed = False

    def write(self, channel: Channel, on: bool) -> None:
        if self.closed:
            raise RuntimeError("outputs already closed")
        self._state[channel] = bool(on)
        self.history.append((channel, bool(on)))
        logger.debug("OUTPUT %s=%s", channel, "ON" if on else "OFF")

    def is_on(self, channel: Channel) -> bool:
        return self._state[channel]

    def snapshot(self) -> dict[str, bool]:
        return dict(self._state)

    def close(self) -> None:
        self.closed = True
        logger.info("Simulated outputs closed")
