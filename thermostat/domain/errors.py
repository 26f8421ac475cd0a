"""
Thermostat exceptions.

Only configuration-time and startup-time errors are meant to reach callers;
per-tick failures are absorbed by the poll supervisor.
"""


class ThermostatError(Exception):
    """Base exception for the thermostat."""

    pass


class ConfigurationError(ThermostatError, ValueError):
    """A thermostat configuration failed validation."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = list(violations)
        super().__init__("invalid thermostat configuration: " + "; ".join(self.violations))


class HardwareInitError(ThermostatError):
    """The actuator outputs could not be acquired."""

    pass


class ActuatorShutdownError(ThermostatError, RuntimeError):
    """An actuator operation was requested after shutdown()."""

    pass


class ThermometerError(ThermostatError):
    """Temperature reading is unavailable or invalid."""

    pass
