"""Write path for device telemetry and accident events."""

from __future__ import annotations

import logging
import secrets
import string
import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Callable, Optional, Union

from app.schemas import AccidentRecord, SensorRecord
from datastore.record_store import TelemetryStore, build_default_store
from models.records import AuthDecision, Invalid, RecordKind
from services import validation
from services.auth import ApiKeyGate
from services.errors import AuthError, PersistenceError, ValidationError
from settings import get_settings

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_accident_id() -> str:
    """Millisecond timestamp in base 36 followed by eight random characters."""
    prefix = _to_base36(time.time_ns() // 1_000_000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(8))
    return prefix + suffix


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IngestionService:
    """Authenticates, validates, stamps and persists device submissions."""

    def __init__(
        self,
        store: TelemetryStore,
        gate: ApiKeyGate,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = generate_accident_id,
    ) -> None:
        self.store = store
        self.gate = gate
        self.clock = clock
        self.id_factory = id_factory

    def ingest(
        self,
        payload: Any,
        kind: RecordKind,
        credential: Optional[str],
    ) -> Union[int, str]:
        """Persist one record and return its id.

        Raises ``AuthError`` or ``ValidationError`` before touching the store,
        and ``PersistenceError`` if the single insert fails.
        """
        if self.gate.authenticate(credential) is not AuthDecision.authorized:
            logger.warning(
                "Rejected write with invalid API key",
                extra={"record_kind": kind.value, "reason": "unauthorized"},
            )
            raise AuthError("Unauthorized: Invalid API Key")

        outcome = validation.validate(payload, kind)
        if isinstance(outcome, Invalid):
            logger.warning(
                "Rejected invalid payload",
                extra={"record_kind": kind.value, "reason": outcome.reason},
            )
            raise ValidationError(outcome.reason)

        fields = outcome.payload.model_dump()
        timestamp = self.clock()
        try:
            if kind is RecordKind.accident:
                record = AccidentRecord(**fields, id=self.id_factory(), timestamp=timestamp)
                stored = self.store.accidents.insert(record)
            else:
                stored = self.store.sensors.insert(SensorRecord(**fields, timestamp=timestamp))
        except PersistenceError as exc:
            logger.error(
                "Failed to persist record",
                extra={"record_kind": kind.value, "reason": str(exc)},
            )
            raise

        logger.info(
            "Stored record",
            extra={"record_kind": kind.value, "record_id": stored.id},
        )
        return stored.id


@lru_cache
def build_default_ingestion() -> IngestionService:
    """Factory that wires the ingestion service with the default store."""
    settings = get_settings()
    return IngestionService(store=build_default_store(), gate=ApiKeyGate(settings.api_key))
