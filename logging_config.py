"""Logging setup for the sensor reading service.

Records carry request context through ``extra=`` (for example
``extra={"reading_id": ..., "backend": "db"}``). The formatter renders the
configured context keys after the message as ``key=value`` pairs, so a
buffered write reads as::

    2024-01-01T05:30:00 | INFO | services.reading_store | Stored reading | reading_id=1704067200000 backend=local
"""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from settings import Settings, get_settings

LINE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_configured = False


class ReadingContextFormatter(logging.Formatter):
    """Formatter that appends selected record attributes as ``key=value`` pairs."""

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        context_keys: Iterable[str] = (),
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.context_keys: Tuple[str, ...] = tuple(context_keys)

    def context_of(self, record: logging.LogRecord) -> str:
        pairs = (
            f"{key}={getattr(record, key)}"
            for key in self.context_keys
            if getattr(record, key, None) is not None
        )
        return " ".join(pairs)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = self.context_of(record)
        return f"{line} | {context}" if context else line


def build_logging_config(
    settings: Settings, level: Union[str, int, None] = None
) -> Dict[str, Any]:
    """Return the ``dictConfig`` mapping for ``settings``.

    ``level`` overrides ``settings.log_level``. Each logger named in
    ``settings.log_quiet_loggers`` is held at WARNING whatever the root level.
    """
    root_level = level if level is not None else settings.log_level
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "reading": {
                "()": ReadingContextFormatter,
                "fmt": LINE_FORMAT,
                "datefmt": DATE_FORMAT,
                "context_keys": list(settings.log_context_keys),
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "reading",
            }
        },
        "loggers": {name: {"level": "WARNING"} for name in settings.log_quiet_loggers},
        "root": {"handlers": ["console"], "level": root_level},
    }


def configure_logging(level: Union[str, int, None] = None) -> None:
    """Install the service's logging configuration once per process."""
    global _configured
    if _configured:
        return
    dictConfig(build_logging_config(get_settings(), level))
    _configured = True
