"""Exceptions raised by the ingestion and query services."""

from __future__ import annotations


class AuthError(Exception):
    """The presented API key is missing or does not match."""


class ValidationError(ValueError):
    """A payload failed the structural check for its record kind."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class NotFoundError(LookupError):
    """A lookup by id matched no record."""


class PersistenceError(RuntimeError):
    """The backing store failed to complete an operation."""
