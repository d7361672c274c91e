"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


REQUIRED_FIELDS = ("waterLevel", "temperatureCelsius", "temperatureFahrenheit")


class Backend(str, Enum):
    """Where a reading was written or read from."""

    durable = "db"
    local = "local"


@dataclass(frozen=True, slots=True)
class Reading:
    """A single timestamped sample of water level and temperature."""

    water_level: float
    temperature_celsius: float
    temperature_fahrenheit: float
    timestamp: str
    id: str


@dataclass(frozen=True, slots=True)
class WriteResult:
    """A stored reading together with the backend that accepted it."""

    reading: Reading
    backend: Backend
