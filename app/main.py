from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import error_response, router
from app.web import router as web_router
from datastore.sql_store import build_default_sql_store
from logging_config import configure_logging
from services.reading_store import MISSING_FIELDS_MESSAGE, build_default_store
from settings import get_settings


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    store = build_default_store()
    if store.durable is not None:
        store.durable.start()
    try:
        yield
    finally:
        if store.durable is not None:
            store.durable.stop()
        build_default_store.cache_clear()
        build_default_sql_store.cache_clear()


async def request_validation_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if any(error.get("type") == "missing" for error in errors):
        message = MISSING_FIELDS_MESSAGE
    else:
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = first.get("msg", "invalid value")
        message = f"Invalid request: {location} {detail}".replace("  ", " ")
    return error_response(status.HTTP_400_BAD_REQUEST, message)


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Sensor Reading Service",
        description="Water level and temperature ingestion with database-or-memory storage.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.include_router(router)
    app.include_router(web_router)
    return app

app = create_app()
