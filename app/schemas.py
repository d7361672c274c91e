"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.records import Reading


class SensorDataIn(BaseModel):
    """Body of a create-reading request.

    Fields are optional here so that absent and null values reach the
    reading store, which reports them as missing.
    """

    model_config = ConfigDict(extra="ignore")

    waterLevel: Optional[float] = Field(default=None, allow_inf_nan=False)
    temperatureCelsius: Optional[float] = Field(default=None, allow_inf_nan=False)
    temperatureFahrenheit: Optional[float] = Field(default=None, allow_inf_nan=False)


class ReadingOut(BaseModel):
    """A reading as exposed on the wire."""

    waterLevel: float
    temperatureCelsius: float
    temperatureFahrenheit: float
    timestamp: str = Field(..., description="IST wall-clock time, YYYY-MM-DD HH:MM:SS.")
    id: str

    @classmethod
    def from_reading(cls, reading: Reading) -> "ReadingOut":
        return cls(
            waterLevel=reading.water_level,
            temperatureCelsius=reading.temperature_celsius,
            temperatureFahrenheit=reading.temperature_fahrenheit,
            timestamp=reading.timestamp,
            id=reading.id,
        )


class CreateReadingResponse(BaseModel):
    success: bool = True
    message: str
    latestData: ReadingOut


class ReadingListResponse(BaseModel):
    success: bool = True
    data: List[ReadingOut] = Field(default_factory=list)


class LatestReadingResponse(BaseModel):
    success: bool = True
    data: ReadingOut


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class HealthResponse(BaseModel):
    status: str
    database: str
