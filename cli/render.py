from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer

_READING_FIELDS = (
    "id",
    "timestamp",
    "alcohol",
    "vibration",
    "distance",
    "seatbelt",
    "impact",
    "lat",
    "lng",
    "lcd_display",
)


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_stats(payload: Dict[str, Any]) -> None:
    echo_heading("Statistics")
    echo_key_values(
        [
            ("total_accidents", payload.get("total_accidents")),
            ("max_alcohol", payload.get("max_alcohol")),
            ("avg_alcohol", payload.get("avg_alcohol")),
            ("max_impact", payload.get("max_impact")),
            ("seatbelt_violations", payload.get("seatbelt_violations")),
            ("total_sensor_points", payload.get("total_sensor_points")),
        ]
    )


def render_reading(payload: Dict[str, Any], heading: str = "Sensor Reading") -> None:
    echo_heading(heading)
    echo_key_values((field, payload.get(field)) for field in _READING_FIELDS)


def render_table(rows: List[Dict[str, Any]], heading: str) -> None:
    echo_heading(f"{heading} ({len(rows)})")
    if not rows:
        typer.echo("No records.")
        return
    for row in rows:
        seatbelt = "on" if row.get("seatbelt") else "OFF"
        typer.echo(
            f"  - {row.get('id')} @ {row.get('timestamp')}: "
            f"alcohol={row.get('alcohol')} impact={row.get('impact')} seatbelt={seatbelt}"
        )
