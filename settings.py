from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_API_KEY_ENV = "SAFEDRIVE_API_KEY"
_DATA_DIR_ENV = "SAFEDRIVE_DATA_DIR"
_SENSOR_COLLECTION_ENV = "SAFEDRIVE_SENSOR_COLLECTION"
_ACCIDENT_COLLECTION_ENV = "SAFEDRIVE_ACCIDENT_COLLECTION"
_HISTORY_LIMIT_ENV = "SAFEDRIVE_HISTORY_LIMIT"
_PLACEHOLDER_SPEED_ENV = "SAFEDRIVE_PLACEHOLDER_SPEED"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    api_key: str
    data_dir: Optional[str]
    sensor_collection: str
    accident_collection: str
    history_limit: int
    placeholder_speed: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        return float(candidate)
    except ValueError:
        return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        api_key=_read_str_env(_API_KEY_ENV, "safedrive_secret_key"),
        data_dir=_read_optional_env(_DATA_DIR_ENV, "./tmp/safedrive"),
        sensor_collection=_read_str_env(_SENSOR_COLLECTION_ENV, "sensor_readings"),
        accident_collection=_read_str_env(_ACCIDENT_COLLECTION_ENV, "accident_events"),
        history_limit=_read_positive_int(_HISTORY_LIMIT_ENV, 1000),
        placeholder_speed=_read_float(_PLACEHOLDER_SPEED_ENV, 42.0),
        log_level=_read_log_level("INFO"),
    )
