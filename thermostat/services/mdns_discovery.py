from __future__ import annotations

import asyncio
import logging
from typing import Any

from zeroconf import ServiceStateChange
from zeroconf.asyncio import AsyncServiceBrowser, AsyncZeroconf

logger = logging.getLogger(__name__)

HTTP_SERVICE_TYPE = "_http._tcp.local."
DEFAULT_TEMPERATURE_PATH = "/temperature"


async def discover_thermometers(service_name: str, timeout: float = 3.0) -> list[dict[str, Any]]:
    """Browse mDNS for HTTP services whose instance name starts with service_name.

    Returns a list of dicts: {name, ip, port, hostname, endpoint, txt}.
    """
    devices: list[dict[str, Any]] = []
    found_names: set[str] = set()
    prefix = service_name.lower()
    zc = AsyncZeroconf()

    def on_state_change(
        zeroconf: Any, service_type: str, name: str, state_change: ServiceStateChange
    ) -> None:
        if state_change is ServiceStateChange.Added and name.lower().startswith(prefix):
            found_names.add(name)

    browser = AsyncServiceBrowser(
        zc.zeroconf, HTTP_SERVICE_TYPE, handlers=[on_state_change]
    )

    try:
        await asyncio.sleep(timeout)

        for name in sorted(found_names):
            info = await zc.zeroconf.async_get_service_info(HTTP_SERVICE_TYPE, name)
            if info is None:
                continue
            addresses = info.parsed_addresses()
            if not addresses:
                continue
            txt: dict[str, str] = {}
            if info.properties:
                for k, v in info.properties.items():
                    key = k.decode() if isinstance(k, bytes) else str(k)
                    val = v.decode() if isinstance(v, bytes) else str(v)
                    txt[key] = val
            path = txt.get("path", DEFAULT_TEMPERATURE_PATH)
            devices.append({
                "name": name,
                "ip": addresses[0],
                "port": info.port,
                "hostname": info.server,
                "endpoint": f"http://{addresses[0]}:{info.port}{path}",
                "txt": txt,
            })
    finally:
        await browser.async_cancel()
        await zc.async_close()

    logger.info("mDNS discovery found %d thermometer service(s) named %r", len(devices), service_name)
    return devices
