"""Domain types shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

from pydantic import BaseModel

from services.errors import PersistenceError

T = TypeVar("T")


class RecordKind(str, Enum):
    """Kinds of records accepted on the write path."""

    sensor = "sensor"
    accident = "accident"


class AuthDecision(str, Enum):
    authorized = "authorized"
    unauthorized = "unauthorized"


class RecoveryPolicy(str, Enum):
    """What a read operation does when the store call fails."""

    fallback = "fallback"
    propagate = "propagate"


@dataclass(frozen=True)
class Valid:
    payload: BaseModel


@dataclass(frozen=True)
class Invalid:
    reason: str


ValidationOutcome = Union[Valid, Invalid]


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Outcome of a single store call: either a value or the error it raised."""

    value: Optional[T] = None
    error: Optional[PersistenceError] = None
