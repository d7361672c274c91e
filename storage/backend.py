"""Capability interface shared by the reading backends."""

from __future__ import annotations

import re
from typing import Any, List, Optional, Protocol

from models.records import Reading

DEFAULT_LIMIT = 10
MAX_LIMIT = 2**31 - 1

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class ReadingBackend(Protocol):

    def create(self, reading: Reading) -> Reading:
        ...

    def list(self, limit: Any = DEFAULT_LIMIT) -> List[Reading]:
        ...

    def latest(self) -> Optional[Reading]:
        ...


class DurableBackend(ReadingBackend, Protocol):

    def is_live(self) -> bool:
        ...

    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...


def normalize_limit(value: Any, default: int = DEFAULT_LIMIT) -> int:
    """Coerce a caller-supplied limit the way ``parseInt(value) || default`` would.

    Leading integer digits are honoured (``"5abc"`` gives 5); anything absent,
    unparsable or non-positive falls back to ``default``. Results are capped
    at ``MAX_LIMIT`` so they always fit a database integer parameter.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return default
        parsed = int(value)
    else:
        match = _LEADING_INT.match(str(value))
        if match is None:
            return default
        parsed = int(match.group(1))
    if parsed <= 0:
        return default
    return min(parsed, MAX_LIMIT)
