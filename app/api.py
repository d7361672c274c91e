"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from typing import Optional, Union

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse, PlainTextResponse

from app.schemas import (
    CreateReadingResponse,
    ErrorResponse,
    HealthResponse,
    LatestReadingResponse,
    ReadingListResponse,
    ReadingOut,
    SensorDataIn,
)
from models.errors import ValidationError
from models.records import Backend
from services.reading_store import ReadingStore, build_default_store

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "Welcome to Water Level and Temperature Monitoring System API"

_STORED_MESSAGES = {
    Backend.durable: "Data stored successfully (db)",
    Backend.local: "Data stored locally (fallback)",
}

router = APIRouter()


def get_store() -> ReadingStore:
    return build_default_store()


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(),
    )


@router.post(
    "/api/sensor-data",
    response_model=CreateReadingResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Store a new sensor reading.",
)
def create_reading(
    payload: SensorDataIn = Body(...),
    store: ReadingStore = Depends(get_store),
) -> Union[CreateReadingResponse, JSONResponse]:
    logger.info("Received data: %s", payload.model_dump(exclude_none=True))
    try:
        result = store.create(payload.model_dump())
    except ValidationError as exc:
        logger.warning("Rejected reading", extra={"missing": ",".join(exc.missing) or None})
        return error_response(status.HTTP_400_BAD_REQUEST, exc.message)
    except Exception as exc:
        logger.exception("Error storing data")
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Error storing data"
        )
    return CreateReadingResponse(
        message=_STORED_MESSAGES[result.backend],
        latestData=ReadingOut.from_reading(result.reading),
    )


@router.get(
    "/api/sensor-data",
    response_model=ReadingListResponse,
    responses={500: {"model": ErrorResponse}},
    summary="List the most recent readings, newest first.",
)
def list_readings(
    limit: Optional[str] = Query(None, description="Maximum number of readings (default 10)."),
    store: ReadingStore = Depends(get_store),
) -> Union[ReadingListResponse, JSONResponse]:
    try:
        readings = store.list(limit)
    except Exception:
        logger.exception("Error retrieving data")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error retrieving data")
    return ReadingListResponse(data=[ReadingOut.from_reading(reading) for reading in readings])


@router.get(
    "/api/sensor-data/latest",
    response_model=LatestReadingResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Fetch the most recent reading.",
)
def get_latest_reading(
    store: ReadingStore = Depends(get_store),
) -> Union[LatestReadingResponse, JSONResponse]:
    try:
        reading = store.latest()
    except Exception:
        logger.exception("Error retrieving latest reading")
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error retrieving data")
    if reading is None:
        return error_response(status.HTTP_404_NOT_FOUND, "No data available")
    return LatestReadingResponse(data=ReadingOut.from_reading(reading))


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
def healthcheck(store: ReadingStore = Depends(get_store)) -> HealthResponse:
    database = "connected" if store.durable_live else "disconnected"
    return HealthResponse(status="ok", database=database)


@router.get(
    "/",
    response_class=PlainTextResponse,
    summary="Root greeting.",
    status_code=status.HTTP_200_OK,
)
def root() -> str:
    return WELCOME_MESSAGE
