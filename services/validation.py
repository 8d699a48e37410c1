"""Structural validation of device payloads."""

from __future__ import annotations

from typing import Any, Dict, Type

from pydantic import BaseModel, ValidationError as PydanticValidationError

from app.schemas import AccidentPayload, SensorPayload
from models.records import Invalid, RecordKind, Valid, ValidationOutcome

PAYLOAD_SCHEMAS: Dict[RecordKind, Type[BaseModel]] = {
    RecordKind.sensor: SensorPayload,
    RecordKind.accident: AccidentPayload,
}


def _describe(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "payload"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


def validate(payload: Any, kind: RecordKind) -> ValidationOutcome:
    """Check ``payload`` against the schema for ``kind``.

    Every field is checked; a single failure invalidates the payload.
    """
    if not isinstance(payload, dict):
        return Invalid(reason="payload must be a JSON object")

    schema = PAYLOAD_SCHEMAS[kind]
    try:
        model = schema.model_validate(payload)
    except PydanticValidationError as exc:
        return Invalid(reason=_describe(exc))
    return Valid(payload=model)
