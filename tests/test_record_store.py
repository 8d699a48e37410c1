"""Unit tests for the JSON-backed record collections."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from app.schemas import AccidentRecord, SensorRecord
from datastore.record_store import RecordCollection
from services.errors import PersistenceError


def _reading(day: int = 1, **overrides) -> SensorRecord:
    fields = {
        "alcohol": 0.1,
        "vibration": 0.2,
        "distance": 100.0,
        "seatbelt": True,
        "impact": 0.3,
        "timestamp": datetime(2024, 1, day, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return SensorRecord(**fields)


def _accident(accident_id: str) -> AccidentRecord:
    return AccidentRecord(
        id=accident_id,
        alcohol=0.4,
        vibration=0.9,
        distance=5.0,
        seatbelt=False,
        impact=0.95,
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def test_insert_assigns_increasing_ids() -> None:
    sensors = RecordCollection("sensors", SensorRecord, auto_increment=True)

    first = sensors.insert(_reading())
    second = sensors.insert(_reading())

    assert (first.id, second.id) == (1, 2)
    assert sensors.count() == 2


def test_find_one_returns_newest_deep_copy() -> None:
    sensors = RecordCollection("sensors", SensorRecord, auto_increment=True)
    sensors.insert(_reading(day=5))
    sensors.insert(_reading(day=2, lcd_display="LATEST"))

    latest = sensors.find_one()
    assert latest is not None
    assert latest.lcd_display == "LATEST"

    latest.lcd_display = "mutated"
    assert sensors.find_one().lcd_display == "LATEST"  # type: ignore[union-attr]


def test_find_one_with_predicate_and_empty_collection() -> None:
    sensors = RecordCollection("sensors", SensorRecord, auto_increment=True)
    assert sensors.find_one() is None

    sensors.insert(_reading(lat=1.0, lng=2.0))
    sensors.insert(_reading())

    located = sensors.find_one(where=lambda item: item.lat is not None)
    assert located is not None and located.id == 1


def test_find_all_orders_and_limits() -> None:
    sensors = RecordCollection("sensors", SensorRecord, auto_increment=True)
    for day in (2, 9, 4):
        sensors.insert(_reading(day=day))

    assert [item.id for item in sensors.find_all()] == [1, 2, 3]
    assert [item.id for item in sensors.find_all(descending=True)] == [3, 2, 1]
    by_time = sensors.find_all(order_by="timestamp", descending=True, limit=2)
    assert [item.timestamp.day for item in by_time] == [9, 4]


def test_duplicate_key_is_rejected() -> None:
    accidents = RecordCollection("accidents", AccidentRecord)
    accidents.insert(_accident("abc"))

    with pytest.raises(PersistenceError, match="Duplicate"):
        accidents.insert(_accident("abc"))
    assert accidents.count() == 1


def test_persists_to_disk_and_reloads(tmp_path) -> None:
    path = tmp_path / "sensor_readings.json"
    sensors = RecordCollection("sensors", SensorRecord, persistence_path=path, auto_increment=True)
    sensors.insert(_reading(day=1))
    sensors.insert(_reading(day=2))

    payload = json.loads(path.read_text())
    assert [entry["id"] for entry in payload] == [1, 2]

    reloaded = RecordCollection("sensors", SensorRecord, persistence_path=path, auto_increment=True)
    assert reloaded.count() == 2
    assert reloaded.insert(_reading()).id == 3


def test_unreadable_file_marks_collection_unavailable(tmp_path, caplog) -> None:
    path = tmp_path / "accident_events.json"
    path.write_text("{not json")

    accidents = RecordCollection("accidents", AccidentRecord, persistence_path=path)

    assert accidents.available is False
    assert any(
        record.name == "datastore.record_store" and record.levelname == "ERROR"
        for record in caplog.records
    )
    with pytest.raises(PersistenceError, match="unavailable"):
        accidents.find_all()
    with pytest.raises(PersistenceError):
        accidents.insert(_accident("x"))
    # Existing data is never overwritten.
    assert path.read_text() == "{not json"


def test_failed_write_is_rolled_back(tmp_path) -> None:
    path = tmp_path / "missing-dir" / "sensors.json"
    sensors = RecordCollection("sensors", SensorRecord, persistence_path=path, auto_increment=True)
    path.parent.rmdir()

    with pytest.raises(PersistenceError, match="Failed to write"):
        sensors.insert(_reading())
    assert sensors.count() == 0
