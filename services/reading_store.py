"""Dual-backend reading storage with local fallback."""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import Any, List, Mapping, Optional

from datastore.sql_store import build_default_sql_store
from models.errors import StoreError, ValidationError
from models.records import REQUIRED_FIELDS, Backend, Reading, WriteResult
from services.clock import Clock, LocalIdGenerator
from settings import get_settings
from storage.backend import DEFAULT_LIMIT, DurableBackend, normalize_limit
from storage.local_buffer import LocalBuffer

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = (
    "Missing required fields: waterLevel, temperatureCelsius, or temperatureFahrenheit"
)


def _coerce_number(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"Field {name} must be numeric.")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Field {name} must be numeric.") from exc
    if not math.isfinite(number):
        raise ValidationError(f"Field {name} must be a finite number.")
    return number


class ReadingStore:
    """Routes each operation to the database when live, else to the local buffer.

    Durable-store failures never escape this class: a failed or skipped
    database call is retried against the local buffer within the same call.
    Errors raised by the local buffer itself are not caught.
    """

    def __init__(
        self,
        local: LocalBuffer,
        durable: Optional[DurableBackend] = None,
        clock: Optional[Clock] = None,
        ids: Optional[LocalIdGenerator] = None,
    ) -> None:
        self.local = local
        self.durable = durable
        self.clock = clock or Clock()
        self.ids = ids or LocalIdGenerator()

    @property
    def durable_live(self) -> bool:
        return self.durable is not None and self.durable.is_live()

    def create(self, fields: Mapping[str, Any]) -> WriteResult:
        missing = [name for name in REQUIRED_FIELDS if fields.get(name) is None]
        if missing:
            raise ValidationError(MISSING_FIELDS_MESSAGE, missing=missing)

        reading = Reading(
            water_level=_coerce_number("waterLevel", fields["waterLevel"]),
            temperature_celsius=_coerce_number("temperatureCelsius", fields["temperatureCelsius"]),
            temperature_fahrenheit=_coerce_number(
                "temperatureFahrenheit", fields["temperatureFahrenheit"]
            ),
            timestamp=self.clock.now(),
            id=self.ids.next_id(),
        )

        if self.durable_live:
            try:
                stored = self.durable.create(reading)
            except StoreError as exc:
                logger.error(
                    "Error saving to database, storing locally",
                    extra={"reading_id": reading.id, "error": exc},
                )
            else:
                logger.info(
                    "Stored reading", extra={"reading_id": stored.id, "backend": Backend.durable.value}
                )
                return WriteResult(reading=stored, backend=Backend.durable)
        else:
            logger.warning("Database not connected, falling back to local store")

        self.local.insert(reading)
        logger.info("Stored reading", extra={"reading_id": reading.id, "backend": Backend.local.value})
        return WriteResult(reading=reading, backend=Backend.local)

    def list(self, limit: Any = DEFAULT_LIMIT) -> List[Reading]:
        count = normalize_limit(limit)
        if self.durable_live:
            try:
                return self.durable.list(count)
            except StoreError as exc:
                logger.error(
                    "Error fetching data from database, using local store",
                    extra={"limit": count, "error": exc},
                )
        else:
            logger.warning("Database not connected, returning local store data")
        return self.local.list(count)

    def latest(self) -> Optional[Reading]:
        if self.durable_live:
            try:
                reading = self.durable.latest()
            except StoreError as exc:
                logger.error(
                    "Error fetching latest from database, using local store",
                    extra={"error": exc},
                )
            else:
                if reading is not None:
                    return reading
        else:
            logger.warning("Database not connected, returning latest from local store")
        return self.local.latest()


@lru_cache
def build_default_store() -> ReadingStore:
    """Factory that wires the configured database with a process-wide local buffer."""
    settings = get_settings()
    return ReadingStore(
        local=LocalBuffer(capacity=settings.buffer_capacity),
        durable=build_default_sql_store(),
    )
