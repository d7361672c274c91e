"""Ingestion timestamps and provisional reading identifiers."""

from __future__ import annotations

import time
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable, Optional

IST = timezone(timedelta(hours=5, minutes=30), name="IST")
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(instant: Optional[datetime] = None) -> str:
    """Render ``instant`` (default: now) as IST wall-clock time.

    Naive datetimes are interpreted as UTC.
    """
    if instant is None:
        instant = utc_now()
    elif instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(IST).strftime(TIMESTAMP_FORMAT)


class Clock:
    """Timestamp source with an injectable notion of "now"."""

    def __init__(self, now: Callable[[], datetime] = utc_now) -> None:
        self._now = now

    def now(self) -> str:
        return format_timestamp(self._now())


class LocalIdGenerator:
    """Millisecond epoch ids that never repeat or go backwards in-process."""

    def __init__(self, millis: Callable[[], int] | None = None) -> None:
        self._millis = millis or (lambda: time.time_ns() // 1_000_000)
        self._last = 0
        self._lock = Lock()

    def next_id(self) -> str:
        with self._lock:
            candidate = self._millis()
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return str(candidate)
