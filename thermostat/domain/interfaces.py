from __future__ import annotations
from typing import Literal, Optional, Protocol, runtime_checkable
from .models import ThermostatConfig


Channel = Literal["heat", "cool", "fan"]
CHANNELS: tuple[Channel, ...] = ("heat", "cool", "fan")


@runtime_checkable
class HvacOutputs(Protocol):
    """Three logical relay outputs. on=True means the element is powered."""

    def write(self, channel: Channel, on: bool) -> None:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class ConfigStore(Protocol):
    async def init(self) -> None:
        ...

    async def load_config(self) -> Optional[ThermostatConfig]:
        ...

    async def save_config(self, config: ThermostatConfig) -> None:
        ...
