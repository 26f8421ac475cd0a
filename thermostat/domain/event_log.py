from __future__ import annotations
from collections import deque
from typing import Optional

from .models import EventRecord


class EventLog:
    """Fixed-capacity ring of decision outcomes, oldest evicted first."""

    def __init__(self, capacity: int = 60) -> None:
        if capacity < 1:
            raise ValueError("event log capacity must be >= 1")
        self._buf: deque[EventRecord] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._buf.maxlen or 0

    def __len__(self) -> int:
        return len(self._buf)

    def add(self, record: EventRecord) -> None:
        self._buf.append(record)

    def get_all(self) -> list[EventRecord]:
        return list(self._buf)

    def get_last(self) -> Optional[EventRecord]:
        if not self._buf:
            return None
        return self._buf[-1]
