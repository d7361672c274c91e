"""Error taxonomy for reading ingestion and storage."""

from __future__ import annotations

from typing import Sequence


class SensorDataError(Exception):
    """Base class for all errors raised by the reading pipeline."""


class ValidationError(SensorDataError):
    """A create request is missing a required field or carries a bad value."""

    def __init__(self, message: str, missing: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.missing = tuple(missing)


class StoreError(SensorDataError):
    """The durable store could not complete an operation."""


class StoreConnectionError(StoreError):
    """No usable connection to the durable store."""


class WriteError(StoreError):
    """The durable store rejected or failed a write."""


class ReadError(StoreError):
    """The durable store failed a query."""
