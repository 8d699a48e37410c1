from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Callable, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from app.schemas import AccidentRecord, SensorRecord
from services.errors import PersistenceError
from settings import get_settings

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)
Predicate = Callable[[RecordT], bool]


class RecordCollection(Generic[RecordT]):
    """Ordered collection of pydantic records, optionally mirrored to a JSON file.

    Records keep their insertion order, which is the creation order used by
    "latest" style queries. When ``auto_increment`` is set the collection
    assigns integer ids to records inserted without one.
    """

    def __init__(
        self,
        name: str,
        model: Type[RecordT],
        persistence_path: Optional[Path] = None,
        key_field: str = "id",
        auto_increment: bool = False,
    ) -> None:
        self.name = name
        self.model = model
        self.persistence_path = persistence_path
        self.key_field = key_field
        self.auto_increment = auto_increment
        self._items: List[RecordT] = []
        self._next_id = 1
        self._failure: Optional[str] = None
        self._lock = Lock()
        if persistence_path:
            try:
                persistence_path.parent.mkdir(parents=True, exist_ok=True)
                self._load_from_disk()
            except (OSError, ValueError, PydanticValidationError) as exc:
                self._mark_unavailable(str(exc))

    @property
    def available(self) -> bool:
        return self._failure is None

    def insert(self, record: RecordT) -> RecordT:
        with self._lock:
            self._ensure_available()
            key = getattr(record, self.key_field)
            if key is None and self.auto_increment:
                record = record.model_copy(update={self.key_field: self._next_id})
                key = self._next_id
            if key is None:
                raise PersistenceError(
                    f"Record for collection {self.name!r} is missing {self.key_field!r}."
                )
            if any(getattr(item, self.key_field) == key for item in self._items):
                raise PersistenceError(
                    f"Duplicate {self.key_field} {key!r} in collection {self.name!r}."
                )

            self._items.append(record.model_copy(deep=True))
            try:
                self._persist()
            except OSError as exc:
                self._items.pop()
                raise PersistenceError(
                    f"Failed to write collection {self.name!r}: {exc}"
                ) from exc
            if self.auto_increment and isinstance(key, int):
                self._next_id = max(self._next_id, key + 1)
            return record.model_copy(deep=True)

    def find_one(
        self,
        where: Optional[Predicate] = None,
        newest_first: bool = True,
    ) -> Optional[RecordT]:
        """Return the first matching record in creation order (or reverse)."""

        with self._lock:
            self._ensure_available()
            items = reversed(self._items) if newest_first else iter(self._items)
            for item in items:
                if where is None or where(item):
                    return item.model_copy(deep=True)
        return None

    def find_all(
        self,
        where: Optional[Predicate] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[RecordT]:
        """Return deep copies of matching records.

        Without ``order_by`` records come back in creation order.
        """

        with self._lock:
            self._ensure_available()
            matches = [item for item in self._items if where is None or where(item)]

        if order_by is not None:
            matches.sort(key=lambda item: getattr(item, order_by), reverse=descending)
        elif descending:
            matches.reverse()
        if limit is not None:
            matches = matches[:limit]
        return [item.model_copy(deep=True) for item in matches]

    def get(self, key: object) -> Optional[RecordT]:
        return self.find_one(lambda item: getattr(item, self.key_field) == key)

    def count(self, where: Optional[Predicate] = None) -> int:
        with self._lock:
            self._ensure_available()
            return sum(1 for item in self._items if where is None or where(item))

    def _ensure_available(self) -> None:
        if self._failure is not None:
            raise PersistenceError(
                f"Collection {self.name!r} is unavailable: {self._failure}"
            )

    def _mark_unavailable(self, reason: str) -> None:
        self._failure = reason
        logger.error(
            "Collection could not be opened; operations will fail",
            extra={
                "collection": self.name,
                "path": str(self.persistence_path),
                "reason": reason,
            },
        )

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = [item.model_dump(mode="json") for item in self._items]
        self.persistence_path.write_text(json.dumps(payload, indent=2))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        raw = self.persistence_path.read_text() or "[]"
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON array in {self.persistence_path}")

        self._items = [self.model.model_validate(entry) for entry in data]
        if self.auto_increment:
            keys = [
                getattr(item, self.key_field)
                for item in self._items
                if isinstance(getattr(item, self.key_field), int)
            ]
            self._next_id = max(keys, default=0) + 1
        logger.info(
            "Loaded collection from disk",
            extra={"collection": self.name, "path": str(self.persistence_path)},
        )


@dataclass
class TelemetryStore:
    """The two record collections the service reads and writes."""

    sensors: RecordCollection[SensorRecord]
    accidents: RecordCollection[AccidentRecord]


def _collection_path(data_dir: Optional[str], name: str) -> Optional[Path]:
    if not data_dir:
        return None
    return Path(data_dir) / f"{name}.json"


@lru_cache
def build_default_store(data_dir: Optional[str] = None) -> TelemetryStore:
    settings = get_settings()
    root = settings.data_dir if data_dir is None else data_dir
    sensors = RecordCollection(
        name=settings.sensor_collection,
        model=SensorRecord,
        persistence_path=_collection_path(root, settings.sensor_collection),
        auto_increment=True,
    )
    accidents = RecordCollection(
        name=settings.accident_collection,
        model=AccidentRecord,
        persistence_path=_collection_path(root, settings.accident_collection),
    )
    return TelemetryStore(sensors=sensors, accidents=accidents)
