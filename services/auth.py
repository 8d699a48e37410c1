from __future__ import annotations

import hmac
from typing import Optional

from models.records import AuthDecision


class ApiKeyGate:
    """Shared-secret check guarding device write endpoints."""

    def __init__(self, secret: str) -> None:
        self._secret = secret.encode("utf-8")

    def authenticate(self, credential: Optional[str]) -> AuthDecision:
        if not credential:
            return AuthDecision.unauthorized
        if hmac.compare_digest(credential.encode("utf-8"), self._secret):
            return AuthDecision.authorized
        return AuthDecision.unauthorized


def resolve_credential(header_value: Optional[str], query_value: Optional[str]) -> Optional[str]:
    """Pick the presented key; a non-empty header wins over the query string."""
    return header_value or query_value or None
