from __future__ import annotations

from collections import deque
from threading import Lock
from typing import Any, Deque, List, Optional

from models.records import Reading
from storage.backend import DEFAULT_LIMIT, normalize_limit

DEFAULT_CAPACITY = 100


class LocalBuffer:
    """Newest-first, capacity-capped in-memory store of readings."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("Local buffer capacity must be positive.")
        self.capacity = capacity
        self._readings: Deque[Reading] = deque(maxlen=capacity)
        self._lock = Lock()

    def insert(self, reading: Reading) -> None:
        # appendleft on a bounded deque drops the oldest entry from the right
        with self._lock:
            self._readings.appendleft(reading)

    def create(self, reading: Reading) -> Reading:
        self.insert(reading)
        return reading

    def list(self, limit: Any = DEFAULT_LIMIT) -> List[Reading]:
        count = normalize_limit(limit)
        with self._lock:
            return [reading for _, reading in zip(range(count), self._readings)]

    def latest(self) -> Optional[Reading]:
        with self._lock:
            if not self._readings:
                return None
            return self._readings[0]

    def clear(self) -> None:
        with self._lock:
            self._readings.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._readings)
