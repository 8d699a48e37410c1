from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import echo_key_values, render_reading, render_stats, render_table


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the SafeDrive telemetry service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:3000).",
    ),
    api_key: Optional[str] = typer.Option(
        None,
        "--api-key",
        "-k",
        help="Shared secret for write commands (defaults to SAFEDRIVE_API_KEY env).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Request timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, api_key=api_key, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Check that the service is up."""
    payload = _get_state(ctx).client.health()
    echo_key_values([("status", payload.get("status")), ("time", payload.get("time"))])


@app.command("stats")
def stats_command(ctx: typer.Context) -> None:
    """Show accident and sensor statistics."""
    render_stats(_get_state(ctx).client.stats())


@app.command("latest")
def latest_command(ctx: typer.Context) -> None:
    """Show the most recent sensor reading."""
    render_reading(_get_state(ctx).client.latest_sensor())


@app.command("accidents")
def accidents_command(ctx: typer.Context) -> None:
    """List accident events, newest first."""
    render_table(_get_state(ctx).client.accidents(), heading="Accidents")


@app.command("accident")
def accident_command(
    ctx: typer.Context,
    accident_id: str = typer.Argument(..., help="Accident identifier."),
) -> None:
    """Show a single accident event."""
    render_reading(_get_state(ctx).client.accident(accident_id), heading="Accident")


@app.command("history")
def history_command(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-n", min=1, max=1000, help="Number of readings."),
) -> None:
    """List recent sensor readings, newest first."""
    render_table(_get_state(ctx).client.sensor_history(limit), heading="Sensor History")


@app.command("send-sensor")
def send_sensor_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON payload file."),
    http_only: bool = typer.Option(
        False,
        "--http-only",
        help="Use the plain-HTTP endpoint meant for constrained devices.",
    ),
) -> None:
    """Replay a sensor payload against the service."""
    state = _get_state(ctx)
    endpoint = "/api/sensor/http" if http_only else "/api/sensor"
    typer.echo(f"Sending {file} to {state.config.base_url}{endpoint} ...")
    record_id = state.client.send(file, endpoint)
    typer.secho(f"Reading stored. id={record_id}", fg=typer.colors.GREEN)


@app.command("send-accident")
def send_accident_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="JSON payload file."),
) -> None:
    """Replay an accident payload against the service."""
    state = _get_state(ctx)
    typer.echo(f"Sending {file} to {state.config.base_url}/api/accident ...")
    record_id = state.client.send(file, "/api/accident")
    typer.secho(f"Accident stored. id={record_id}", fg=typer.colors.GREEN)
