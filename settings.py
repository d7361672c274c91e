from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple


_DATABASE_URL_ENV = "DATABASE_URL"
_RECONNECT_INTERVAL_ENV = "DATABASE_RECONNECT_INTERVAL"
_BUFFER_CAPACITY_ENV = "LOCAL_BUFFER_CAPACITY"
_HOST_ENV = "HOST"
_PORT_ENV = "PORT"
_CORS_ORIGINS_ENV = "CORS_ALLOW_ORIGINS"
_LOG_LEVEL_ENV = "LOG_LEVEL"
_LOG_CONTEXT_KEYS_ENV = "LOG_CONTEXT_KEYS"
_LOG_QUIET_LOGGERS_ENV = "LOG_QUIET_LOGGERS"

_LOG_CONTEXT_KEYS = ("reading_id", "backend", "limit", "missing", "database_url", "error")
_LOG_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str]
    reconnect_interval: float
    buffer_capacity: int
    host: str
    port: int
    cors_allow_origins: Tuple[str, ...]
    log_level: str
    log_context_keys: Tuple[str, ...]
    log_quiet_loggers: Tuple[str, ...]


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_csv(name: str, default: Tuple[str, ...], allow_empty: bool = False) -> Tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    items = tuple(part.strip() for part in value.split(",") if part.strip())
    if items or allow_empty:
        return items
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        database_url=_read_optional_env(_DATABASE_URL_ENV, "sqlite:///./tmp/sensor_data.db"),
        reconnect_interval=_read_positive_float(_RECONNECT_INTERVAL_ENV, 5.0),
        buffer_capacity=_read_positive_int(_BUFFER_CAPACITY_ENV, 100),
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_positive_int(_PORT_ENV, 3000),
        cors_allow_origins=_read_csv(_CORS_ORIGINS_ENV, ("*",)),
        log_level=_read_log_level("INFO"),
        log_context_keys=_read_csv(_LOG_CONTEXT_KEYS_ENV, _LOG_CONTEXT_KEYS),
        log_quiet_loggers=_read_csv(_LOG_QUIET_LOGGERS_ENV, _LOG_QUIET_LOGGERS, allow_empty=True),
    )
