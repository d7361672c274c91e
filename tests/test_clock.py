import re
from datetime import datetime, timedelta, timezone

from services.clock import Clock, LocalIdGenerator, format_timestamp


def test_format_timestamp_renders_ist_offset() -> None:
    instant = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)

    assert format_timestamp(instant) == "2024-01-01 05:30:00"


def test_format_timestamp_rolls_over_date_boundary() -> None:
    instant = datetime(2024, 12, 31, 20, 15, 9, tzinfo=timezone.utc)

    assert format_timestamp(instant) == "2025-01-01 01:45:09"


def test_format_timestamp_treats_naive_values_as_utc() -> None:
    assert format_timestamp(datetime(2024, 6, 1, 12, 0, 0)) == "2024-06-01 17:30:00"


def test_format_timestamp_converts_other_offsets() -> None:
    pacific = timezone(timedelta(hours=-8))
    instant = datetime(2024, 3, 10, 9, 5, 0, tzinfo=pacific)

    assert format_timestamp(instant) == "2024-03-10 22:35:00"


def test_format_timestamp_uses_24_hour_clock() -> None:
    instant = datetime(2024, 7, 4, 10, 0, 0, tzinfo=timezone.utc)

    assert format_timestamp(instant) == "2024-07-04 15:30:00"


def test_clock_now_uses_injected_instant() -> None:
    clock = Clock(now=lambda: datetime(2023, 5, 17, 18, 29, 59, tzinfo=timezone.utc))

    assert clock.now() == "2023-05-17 23:59:59"
    assert clock.now() == clock.now()


def test_default_clock_matches_format() -> None:
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", Clock().now())


def test_local_ids_increase_when_clock_stalls() -> None:
    generator = LocalIdGenerator(millis=lambda: 1_700_000_000_000)

    ids = [generator.next_id() for _ in range(3)]

    assert ids == ["1700000000000", "1700000000001", "1700000000002"]


def test_local_ids_never_go_backwards() -> None:
    ticks = iter([5_000, 4_000, 6_000])
    generator = LocalIdGenerator(millis=lambda: next(ticks))

    assert [generator.next_id() for _ in range(3)] == ["5000", "5001", "6000"]
