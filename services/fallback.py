"""Canned read responses served while the store is unavailable.

Every value is built fresh per call so relative timestamps track the clock.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from app.schemas import AccidentRecord, CarPosition, MapPoint, SensorRecord, Stats

_DAY = timedelta(days=1)
DEFAULT_LAT = 5.6545
DEFAULT_LNG = -0.1869
DEFAULT_SPEED = 42.0


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now(timezone.utc)


def latest_sensor(now: Optional[datetime] = None) -> SensorRecord:
    return SensorRecord(
        id=1,
        alcohol=0.05,
        vibration=0.2,
        distance=150,
        seatbelt=True,
        impact=0.1,
        lcd_display="SYSTEM OK",
        timestamp=_now(now),
    )


def stats() -> Stats:
    return Stats(
        total_accidents=5,
        max_alcohol=0.8,
        avg_alcohol=0.3,
        max_impact=0.9,
        seatbelt_violations=2,
        total_sensor_points=120,
    )


def map_points(now: Optional[datetime] = None) -> list[MapPoint]:
    current = _now(now)
    return [
        MapPoint(id="abc123", lat=5.6545, lng=-0.1869, timestamp=current - _DAY),
        MapPoint(id="def456", lat=5.6540, lng=-0.1875, timestamp=current - 2 * _DAY),
        MapPoint(id="ghi789", lat=5.6550, lng=-0.1880, timestamp=current - 3 * _DAY),
    ]


def accidents(now: Optional[datetime] = None) -> list[AccidentRecord]:
    current = _now(now)
    return [
        AccidentRecord(
            id="abc123",
            alcohol=0.02,
            vibration=0.8,
            distance=20,
            seatbelt=True,
            impact=0.9,
            lat=5.6545,
            lng=-0.1869,
            lcd_display="ACCIDENT DETECTED",
            timestamp=current - _DAY,
        ),
        AccidentRecord(
            id="def456",
            alcohol=0.04,
            vibration=0.7,
            distance=15,
            seatbelt=False,
            impact=0.8,
            lat=5.6540,
            lng=-0.1875,
            lcd_display="ACCIDENT DETECTED",
            timestamp=current - 2 * _DAY,
        ),
    ]


def car_position(speed: float = DEFAULT_SPEED) -> CarPosition:
    return CarPosition(lat=DEFAULT_LAT, lng=DEFAULT_LNG, speed=speed)
