from __future__ import annotations

import logging

import httpx

from .base import Thermometer
from ..domain.errors import ThermometerError
from ..domain.models import Temperature, TemperatureUnit

logger = logging.getLogger(__name__)


class WebServiceThermometer(Thermometer):
    """
    Thermometer served over HTTP as JSON:
    {"Temperature": 21.5, "Units": "Celsius", "Error": ""}
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
        check: bool = True,
    ) -> None:
        self._endpoint = endpoint
        self._client = client or httpx.Client(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )
        if check:
            try:
                resp = self._client.get(self._endpoint)
                resp.raise_for_status()
            except httpx.HTTPError as e:
                self._client.close()
                raise ThermometerError(f"Could not connect to thermometer web service at {endpoint}: {e}") from e
        logger.info("Got thermometer at %s", endpoint)

    @property
    def sensor_id(self) -> str:
        return self._endpoint

    def read_temperature(self) -> Temperature:
        resp = self._client.get(self._endpoint)
        resp.raise_for_status()
        data = resp.json()

        error = data.get("Error") or ""
        if error and error != "<nil>":
            raise ThermometerError(f"Thermometer reported: {error}")

        try:
            degrees = float(data["Temperature"])
            unit = TemperatureUnit(data.get("Units") or TemperatureUnit.CELSIUS.value)
        except (KeyError, TypeError, ValueError) as e:
            raise ThermometerError(f"Malformed thermometer payload: {data!r}") from e
        return Temperature(degrees, unit)

    def shutdown(self) -> None:
        self._client.close()
