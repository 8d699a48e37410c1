"""Pydantic schemas for payloads, stored records and API responses."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_NUMERIC_FIELDS = ("alcohol", "vibration", "distance", "impact", "lat", "lng")
_OPTIONAL_FIELDS = ("lat", "lng", "lcd_display")


class TelemetryFields(BaseModel):
    """Sensor values shared by readings and accident events."""

    alcohol: float
    vibration: float
    distance: float
    seatbelt: bool
    impact: float
    lat: Optional[float] = None
    lng: Optional[float] = None
    lcd_display: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("lcd_display", "lcdDisplay"),
    )


class SensorPayload(TelemetryFields):
    """Device-submitted sensor sample. Strict: no type coercion."""

    model_config = ConfigDict(strict=True, extra="ignore", allow_inf_nan=False)

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _reject_booleans(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("Input should be a valid number")
        return value

    @field_validator(*_OPTIONAL_FIELDS, mode="before")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        # Only runs when the key is present; omitted fields keep their default.
        if value is None:
            raise ValueError("Field may be omitted but not null")
        return value


class AccidentPayload(SensorPayload):
    """Device-submitted accident event; same checks as a sensor sample for now."""


class SensorRecord(TelemetryFields):
    """A persisted sensor reading."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[int] = Field(default=None, description="Store-assigned, creation ordered.")
    timestamp: datetime


class AccidentRecord(TelemetryFields):
    """A persisted accident event."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Generated at ingestion time.")
    timestamp: datetime


class IngestResponse(BaseModel):
    status: str = "ok"
    id: int | str


class Stats(BaseModel):
    """Dashboard statistics over accident events and sensor readings."""

    total_accidents: int = Field(..., ge=0)
    max_alcohol: float
    avg_alcohol: float
    max_impact: float
    seatbelt_violations: int = Field(..., ge=0)
    total_sensor_points: int = Field(..., ge=0)


class MapPoint(BaseModel):
    id: str
    lat: float
    lng: float
    timestamp: datetime


class CarPosition(BaseModel):
    lat: float
    lng: float
    speed: float


class HealthResponse(BaseModel):
    status: str = "ok"
    time: datetime
