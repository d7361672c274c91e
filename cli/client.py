from __future__ import annotations

from typing import Any, Dict, List, NoReturn, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the sensor reading service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def send_reading(
        self,
        water_level: float,
        temperature_celsius: float,
        temperature_fahrenheit: float,
    ) -> Dict[str, Any]:
        payload = {
            "waterLevel": water_level,
            "temperatureCelsius": temperature_celsius,
            "temperatureFahrenheit": temperature_fahrenheit,
        }
        response = self._request("POST", "/api/sensor-data", json=payload)
        return response.json()

    def list_readings(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {"limit": limit} if limit is not None else None
        response = self._request("GET", "/api/sensor-data", params=params)
        data = response.json().get("data")
        if not isinstance(data, list):
            raise typer.BadParameter("Unexpected response payload when listing readings.")
        return data

    def latest_reading(self) -> Optional[Dict[str, Any]]:
        response = self._request("GET", "/api/sensor-data/latest", allow_not_found=True)
        if response.status_code == 404:
            return None
        return response.json().get("data")

    def _request(
        self, method: str, path: str, allow_not_found: bool = False, **kwargs: Any
    ) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
            if allow_not_found and response.status_code == 404:
                return response
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}", fg=typer.colors.RED, err=True
            )
            raise typer.Exit(code=1) from exc
        return response

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> NoReturn:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("message") or data.get("detail")
        except ValueError:
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
