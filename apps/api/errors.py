"""Domain error taxonomy shared by the engines, services and routers."""

from __future__ import annotations

from typing import Any, Dict


class EcoCreditError(Exception):
    """Base error carrying a machine-checkable code and an HTTP status."""

    code = "error"
    status_code = 500

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.code)
        self.detail = detail or self.code

    def to_payload(self) -> Dict[str, Any]:
        return {"success": False, "error": self.code, "detail": self.detail}


class InvalidInputError(EcoCreditError):
    """Malformed or out-of-range submission field."""

    code = "invalid_input"
    status_code = 422


class UserNotFoundError(EcoCreditError):
    code = "user_not_found"
    status_code = 404


class UnauthorizedError(EcoCreditError):
    """Token missing, invalid, expired or revoked."""

    code = "unauthorized"
    status_code = 401


class ConflictError(EcoCreditError):
    code = "conflict"
    status_code = 409


class StorageError(EcoCreditError):
    """Persistence failure; the ledger guarantees nothing was partially applied."""

    code = "storage_error"
    status_code = 500


class RateLimitedError(EcoCreditError):
    """Client exceeded the request quota for an endpoint."""

    code = "rate_limited"
    status_code = 429
