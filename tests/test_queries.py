"""Read-path behaviour including recovery policies."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest

from app.schemas import AccidentRecord, SensorRecord
from datastore.record_store import RecordCollection, TelemetryStore
from models.records import RecoveryPolicy
from services.aggregator import StatsAggregator
from services.errors import NotFoundError, PersistenceError
from services.queries import RECOVERY_POLICIES, QueryService

T0 = datetime(2024, 2, 1, tzinfo=timezone.utc)


class FailingCollection(RecordCollection):
    def _ensure_available(self) -> None:
        raise PersistenceError("timeout")


def _reading(**overrides) -> SensorRecord:
    fields = dict(alcohol=0.1, vibration=0.1, distance=50.0, seatbelt=True, impact=0.1, timestamp=T0)
    fields.update(overrides)
    return SensorRecord(**fields)


@pytest.fixture()
def store() -> TelemetryStore:
    return TelemetryStore(
        sensors=RecordCollection("sensors", SensorRecord, auto_increment=True),
        accidents=RecordCollection("accidents", AccidentRecord),
    )


@pytest.fixture()
def failing_store() -> TelemetryStore:
    return TelemetryStore(
        sensors=FailingCollection("sensors", SensorRecord, auto_increment=True),
        accidents=FailingCollection("accidents", AccidentRecord),
    )


def _service(store: TelemetryStore, **kwargs) -> QueryService:
    return QueryService(store=store, aggregator=StatsAggregator(), **kwargs)


def test_every_operation_declares_a_policy() -> None:
    assert RECOVERY_POLICIES["sensor_history"] is RecoveryPolicy.propagate
    assert RECOVERY_POLICIES["accident_by_id"] is RecoveryPolicy.propagate
    assert RECOVERY_POLICIES["map_points"] is RecoveryPolicy.fallback


def test_latest_sensor_is_most_recently_created(store) -> None:
    store.sensors.insert(_reading(timestamp=T0 + timedelta(hours=1), lcd_display="older"))
    store.sensors.insert(_reading(timestamp=T0, lcd_display="newer"))

    assert _service(store).get_latest_sensor().lcd_display == "newer"


def test_empty_sensor_collection_serves_fallback(store) -> None:
    latest = _service(store).get_latest_sensor()

    assert latest.id == 1
    assert latest.lcd_display == "SYSTEM OK"


def test_stats_with_no_accidents_are_zero(store) -> None:
    store.sensors.insert(_reading())

    stats = _service(store).get_stats()

    assert stats.total_accidents == 0
    assert stats.avg_alcohol == 0
    assert stats.max_alcohol == 0
    assert stats.total_sensor_points == 1


def test_car_position_uses_configured_speed(store) -> None:
    store.sensors.insert(_reading(lat=1.5, lng=2.5))

    position = _service(store, placeholder_speed=30.0).get_car_position()

    assert (position.lat, position.lng, position.speed) == (1.5, 2.5, 30.0)


def test_car_position_without_coordinates_falls_back(store) -> None:
    store.sensors.insert(_reading())

    position = _service(store, placeholder_speed=55.0).get_car_position()

    assert (position.lat, position.lng, position.speed) == (5.6545, -0.1869, 55.0)


def test_history_is_capped_by_configured_limit(store) -> None:
    for minute in range(5):
        store.sensors.insert(_reading(timestamp=T0 + timedelta(minutes=minute)))

    history = _service(store, history_limit=3).get_sensor_history(limit=100)

    assert len(history) == 3
    assert history[0].timestamp == T0 + timedelta(minutes=4)


def test_accident_lookup_not_found(store) -> None:
    with pytest.raises(NotFoundError, match="missing"):
        _service(store).get_accident_by_id("missing")


def test_fallback_reads_are_logged(failing_store, caplog) -> None:
    service = _service(failing_store)

    with caplog.at_level(logging.WARNING):
        points = service.get_map_points()
        accidents = service.get_accidents()
        stats = service.get_stats()

    assert [point.id for point in points] == ["abc123", "def456", "ghi789"]
    assert [item.id for item in accidents] == ["abc123", "def456"]
    assert stats.total_accidents == 5
    operations = {
        record.operation for record in caplog.records if record.name == "services.queries"
    }
    assert operations == {"map_points", "accidents", "stats"}


def test_propagating_reads_raise(failing_store) -> None:
    service = _service(failing_store)

    with pytest.raises(PersistenceError, match="timeout"):
        service.get_sensor_history()
    with pytest.raises(PersistenceError):
        service.get_accident_by_id("abc123")


def test_unexpected_errors_are_treated_as_store_failures(store, monkeypatch) -> None:
    def explode(*_args, **_kwargs):
        raise ValueError("corrupt row")

    monkeypatch.setattr(store.accidents, "find_all", explode)

    points = _service(store).get_map_points()

    assert len(points) == 3
