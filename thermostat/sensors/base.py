from __future__ import annotations

from abc import ABC, abstractmethod

from ..domain.models import Temperature


class Thermometer(ABC):
    """Where the thermostat gets its ambient temperature from."""

    @property
    def sensor_id(self) -> str:
        return type(self).__name__

    @abstractmethod
    def read_temperature(self) -> Temperature:
        """Return the current ambient temperature. Raise on failure.

        Called from an executor thread, so blocking I/O is fine here.
        """
        ...

    def shutdown(self) -> None:
        pass
