from __future__ import annotations

import threading
from typing import Sequence

from .model import LocationLogEntry
from .repository import LocationLogRepository


class InMemoryLocationLogRepository(LocationLogRepository):
    def __init__(self):
        self._entries: list[LocationLogEntry] = []
        self._lock = threading.Lock()

    def append(self, entry: LocationLogEntry) -> int:
        with self._lock:
            self._entries.append(entry)
            return len(self._entries)

    def list_for_employee(self, employee_id: int, *, limit: int = 100) -> Sequence[LocationLogEntry]:
        with self._lock:
            items = [e for e in self._entries if e.employee_id == int(employee_id)]
        items.sort(key=lambda e: e.logged_at, reverse=True)
        return items[:limit]
