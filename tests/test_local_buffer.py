"""Unit tests for the bounded in-memory reading buffer."""

from __future__ import annotations

import threading

import pytest

from models.records import Reading
from storage.backend import normalize_limit
from storage.local_buffer import LocalBuffer


def _reading(index: int) -> Reading:
    return Reading(
        water_level=float(index),
        temperature_celsius=20.0 + index,
        temperature_fahrenheit=68.0 + index,
        timestamp="2024-01-01 05:30:00",
        id=str(index),
    )


def test_empty_buffer_lists_nothing_and_has_no_latest() -> None:
    buffer = LocalBuffer()

    assert buffer.list(5) == []
    assert buffer.latest() is None
    assert len(buffer) == 0


def test_insert_orders_newest_first() -> None:
    buffer = LocalBuffer()
    for index in range(3):
        buffer.insert(_reading(index))

    assert [reading.id for reading in buffer.list(10)] == ["2", "1", "0"]
    assert buffer.latest() == _reading(2)


def test_buffer_evicts_oldest_beyond_capacity() -> None:
    buffer = LocalBuffer()
    for index in range(101):
        buffer.insert(_reading(index))

    assert len(buffer) == 100
    stored = buffer.list(1000)
    assert len(stored) == 100
    assert stored[0].id == "100"
    assert stored[-1].id == "1"
    assert all(reading.id != "0" for reading in stored)


def test_custom_capacity_is_honoured() -> None:
    buffer = LocalBuffer(capacity=2)
    for index in range(5):
        buffer.create(_reading(index))

    assert [reading.id for reading in buffer.list(10)] == ["4", "3"]


def test_invalid_capacity_is_rejected() -> None:
    with pytest.raises(ValueError):
        LocalBuffer(capacity=0)


@pytest.mark.parametrize("limit", [None, 0, -3, "abc", ""])
def test_list_defaults_to_ten(limit) -> None:
    buffer = LocalBuffer()
    for index in range(15):
        buffer.insert(_reading(index))

    assert len(buffer.list(limit)) == 10


def test_create_returns_the_inserted_reading() -> None:
    buffer = LocalBuffer()
    reading = _reading(7)

    assert buffer.create(reading) is reading
    assert buffer.latest() is reading


def test_concurrent_inserts_are_not_lost() -> None:
    buffer = LocalBuffer(capacity=1000)

    def writer(offset: int) -> None:
        for index in range(100):
            buffer.insert(_reading(offset + index))

    threads = [threading.Thread(target=writer, args=(n * 100,)) for n in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(buffer) == 500
    assert len({reading.id for reading in buffer.list(1000)}) == 500


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, 10),
        (5, 5),
        ("2", 2),
        ("5abc", 5),
        (" 7", 7),
        ("-4", 10),
        ("0", 10),
        ("ten", 10),
        (3.9, 3),
        (True, 10),
        ("99999999999999999999", 2**31 - 1),
        (10**30, 2**31 - 1),
    ],
)
def test_normalize_limit(value, expected) -> None:
    assert normalize_limit(value) == expected
