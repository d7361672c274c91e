from __future__ import annotations

from typing import Any, Dict, Iterable, Sequence

import typer

_COLUMNS = (
    ("timestamp", "timestamp"),
    ("waterLevel", "water_level"),
    ("temperatureCelsius", "celsius"),
    ("temperatureFahrenheit", "fahrenheit"),
    ("id", "id"),
)


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_reading(reading: Dict[str, Any], heading: str = "Reading") -> None:
    echo_heading(heading)
    echo_key_values((label, reading.get(key)) for key, label in _COLUMNS)


def render_readings(readings: Sequence[Dict[str, Any]]) -> None:
    echo_heading(f"Readings ({len(readings)})")
    if not readings:
        typer.echo("No data available.")
        return
    typer.echo("  ".join(label for _, label in _COLUMNS))
    for reading in readings:
        typer.echo("  ".join(str(reading.get(key)) for key, _ in _COLUMNS))
