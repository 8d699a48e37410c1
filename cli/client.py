from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the telemetry service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def health(self) -> Dict[str, Any]:
        return self._get("/api/health")

    def stats(self) -> Dict[str, Any]:
        return self._get("/api/stats")

    def latest_sensor(self) -> Dict[str, Any]:
        return self._get("/api/sensor")

    def accidents(self) -> List[Dict[str, Any]]:
        return self._get("/api/accidents")

    def accident(self, accident_id: str) -> Dict[str, Any]:
        response = self._client.get(f"/api/accident/{accident_id}")
        if response.status_code == 404:
            raise typer.BadParameter(f"Accident {accident_id} was not found.")
        return self._unwrap(response)

    def sensor_history(self, limit: int) -> List[Dict[str, Any]]:
        return self._get("/api/sensor/history", params={"limit": limit})

    def send(self, path: Path, endpoint: str) -> Any:
        if not path.is_file():
            raise typer.BadParameter(f"Path {path} is not a file.")
        try:
            payload = json.loads(path.read_text())
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"File {path} is not valid JSON: {exc}") from exc

        headers = {"X-API-Key": self._config.api_key} if self._config.api_key else {}
        response = self._client.post(endpoint, json=payload, headers=headers)
        body = self._unwrap(response)
        record_id = body.get("id") if isinstance(body, dict) else None
        if record_id is None:
            raise typer.BadParameter("Unexpected response payload when sending data.")
        return record_id

    def _get(self, path: str, **kwargs: Any) -> Any:
        return self._unwrap(self._client.get(path, **kwargs))

    def _unwrap(self, response: httpx.Response) -> Any:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
