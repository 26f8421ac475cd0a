from __future__ import annotations
import logging
import aiosqlite
from datetime import datetime, timezone
from typing import Optional

from ..api.schemas import ThermostatConfigIn
from ..domain.models import ThermostatConfig

logger = logging.getLogger(__name__)

CONFIG_KEY = "thermostat"


class SQLiteConfigStore:
    """Keeps the last applied thermostat configuration across restarts."""

    def __init__(self, path: str) -> None:
        self._path = path

    async def init(self) -> None:
        async with aiosqlite.connect(self._path) as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            await db.commit()

    async def save_config(self, config: ThermostatConfig) -> None:
        value = ThermostatConfigIn.from_domain(config).model_dump_json()
        now = datetime.now(timezone.utc).isoformat()
        async with aiosqlite.connect(self._path) as db:
            await db.execute(
                "INSERT INTO settings(key, value, updated_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
                (CONFIG_KEY, value, now),
            )
            await db.commit()
        logger.info("Saved thermostat configuration to %s", self._path)

    async def load_config(self) -> Optional[ThermostatConfig]:
        async with aiosqlite.connect(self._path) as db:
            cur = await db.execute("SELECT value FROM settings WHERE key = ?", (CONFIG_KEY,))
            row = await cur.fetchone()
        if row is None:
            return None
        return ThermostatConfigIn.model_validate_json(row[0]).to_domain()
