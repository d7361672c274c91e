from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_reading, render_readings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the sensor reading service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def celsius_to_fahrenheit(celsius: float) -> float:
    return round(celsius * 9 / 5 + 32, 2)


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:3000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("send")
def send_command(
    ctx: typer.Context,
    water_level: float = typer.Option(..., "--water-level", "-w", help="Water level reading."),
    celsius: float = typer.Option(..., "--celsius", "-c", help="Temperature in Celsius."),
    fahrenheit: Optional[float] = typer.Option(
        None,
        "--fahrenheit",
        "-f",
        help="Temperature in Fahrenheit (computed from --celsius when omitted).",
    ),
) -> None:
    """Post a single reading to the service."""
    state = _get_state(ctx)
    if fahrenheit is None:
        fahrenheit = celsius_to_fahrenheit(celsius)
    payload = state.client.send_reading(water_level, celsius, fahrenheit)
    typer.secho(payload.get("message", "Stored."), fg=typer.colors.GREEN)
    latest = payload.get("latestData")
    if latest:
        render_reading(latest, heading="Stored reading")


@app.command("list")
def list_command(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Number of readings."),
) -> None:
    """Show the most recent readings, newest first."""
    state = _get_state(ctx)
    render_readings(state.client.list_readings(limit))


@app.command("latest")
def latest_command(ctx: typer.Context) -> None:
    """Show the most recent reading."""
    state = _get_state(ctx)
    reading = state.client.latest_reading()
    if reading is None:
        typer.secho("No data available.", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)
    render_reading(reading, heading="Latest reading")
