"""Read path serving the monitoring dashboard."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable, Dict, Optional, TypeVar, cast

from app.schemas import AccidentRecord, CarPosition, MapPoint, SensorRecord, Stats
from datastore.record_store import TelemetryStore, build_default_store
from models.records import RecoveryPolicy, StoreResult
from services import fallback
from services.aggregator import StatsAggregator
from services.errors import NotFoundError, PersistenceError
from settings import get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

RECOVERY_POLICIES: Dict[str, RecoveryPolicy] = {
    "latest_sensor": RecoveryPolicy.fallback,
    "stats": RecoveryPolicy.fallback,
    "map_points": RecoveryPolicy.fallback,
    "accidents": RecoveryPolicy.fallback,
    "car_position": RecoveryPolicy.fallback,
    # Detail and history views report failures instead of synthetic data.
    "sensor_history": RecoveryPolicy.propagate,
    "accident_by_id": RecoveryPolicy.propagate,
}


def _has_position(record: SensorRecord | AccidentRecord) -> bool:
    return record.lat is not None and record.lng is not None


class QueryService:
    """Read-only projections over the telemetry store."""

    def __init__(
        self,
        store: TelemetryStore,
        aggregator: StatsAggregator,
        placeholder_speed: float = fallback.DEFAULT_SPEED,
        history_limit: int = 1000,
    ) -> None:
        self.store = store
        self.aggregator = aggregator
        self.placeholder_speed = placeholder_speed
        self.history_limit = history_limit

    def get_latest_sensor(self) -> SensorRecord:
        def query() -> SensorRecord:
            latest = self.store.sensors.find_one()
            if latest is None:
                raise PersistenceError("No sensor data found")
            return latest

        return self._run("latest_sensor", query, fallback.latest_sensor)

    def get_stats(self) -> Stats:
        def query() -> Stats:
            summary = self.aggregator.aggregate(self.store.accidents.find_all())
            return Stats(
                total_accidents=summary.total_accidents,
                max_alcohol=summary.max_alcohol,
                avg_alcohol=summary.avg_alcohol,
                max_impact=summary.max_impact,
                seatbelt_violations=summary.seatbelt_violations,
                total_sensor_points=self.store.sensors.count(),
            )

        return self._run("stats", query, fallback.stats)

    def get_map_points(self) -> list[MapPoint]:
        def query() -> list[MapPoint]:
            return [
                MapPoint(id=item.id, lat=item.lat, lng=item.lng, timestamp=item.timestamp)
                for item in self.store.accidents.find_all(where=_has_position)
            ]

        return self._run("map_points", query, fallback.map_points)

    def get_accidents(self) -> list[AccidentRecord]:
        return self._run(
            "accidents",
            lambda: self.store.accidents.find_all(descending=True),
            fallback.accidents,
        )

    def get_accident_by_id(self, accident_id: str) -> AccidentRecord:
        found = self._run("accident_by_id", lambda: self.store.accidents.get(accident_id))
        if found is None:
            raise NotFoundError(f"Accident {accident_id} not found")
        return found

    def get_car_position(self) -> CarPosition:
        def query() -> CarPosition:
            latest = self.store.sensors.find_one(where=_has_position)
            if latest is None:
                raise PersistenceError("No position data found")
            return CarPosition(lat=latest.lat, lng=latest.lng, speed=self.placeholder_speed)

        return self._run(
            "car_position",
            query,
            lambda: fallback.car_position(self.placeholder_speed),
        )

    def get_sensor_history(self, limit: Optional[int] = None) -> list[SensorRecord]:
        """Readings ordered by event timestamp, newest first."""
        cap = self.history_limit if limit is None else min(limit, self.history_limit)
        return self._run(
            "sensor_history",
            lambda: self.store.sensors.find_all(
                order_by="timestamp", descending=True, limit=cap
            ),
        )

    @staticmethod
    def _attempt(query: Callable[[], T]) -> StoreResult[T]:
        try:
            return StoreResult(value=query())
        except PersistenceError as exc:
            return StoreResult(error=exc)
        except Exception as exc:  # noqa: BLE001 - malformed data counts as a store failure
            error = PersistenceError(str(exc))
            error.__cause__ = exc
            return StoreResult(error=error)

    def _run(
        self,
        operation: str,
        query: Callable[[], T],
        fallback_factory: Optional[Callable[[], T]] = None,
    ) -> T:
        result = self._attempt(query)
        error = result.error
        if error is None:
            return cast(T, result.value)

        policy = RECOVERY_POLICIES[operation]
        if policy is RecoveryPolicy.fallback and fallback_factory is not None:
            logger.warning(
                "Store read failed; serving fallback data",
                extra={"operation": operation, "reason": str(error)},
            )
            return fallback_factory()

        logger.error(
            "Store read failed",
            extra={"operation": operation, "reason": str(error)},
        )
        raise error


@lru_cache
def build_default_query() -> QueryService:
    """Factory that wires the query service with the default store."""
    settings = get_settings()
    return QueryService(
        store=build_default_store(),
        aggregator=StatsAggregator(),
        placeholder_speed=settings.placeholder_speed,
        history_limit=settings.history_limit,
    )
