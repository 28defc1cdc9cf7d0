"""
Standardized error handling for the bridge.
Exception taxonomy raised by the core plus error codes and response helpers
used by the handlers.
"""
from enum import Enum
from typing import Any

from lib.common import ng


class BridgeError(Exception):
    """Base class for errors surfaced to callers."""


class AuthenticationError(BridgeError):
    """No access token could be obtained."""


class NotFoundError(BridgeError):
    """The requested document could not be located."""


class TransportError(BridgeError):
    """A remote call failed (non-2xx status or no response at all)."""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        msg = super().__str__()
        if self.status_code is not None:
            return f"{msg} (status {self.status_code})"
        return msg


class ErrorCode(str, Enum):
    """Standardized error codes used across the server."""
    BAD_REQUEST = "BAD_REQUEST"
    NOT_FOUND = "NOT_FOUND"
    AUTH_ERROR = "AUTH_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def bad_request(op: str, message: str) -> dict[str, Any]:
    """Create a BAD_REQUEST error response."""
    return ng(op, ErrorCode.BAD_REQUEST, message)


def not_found(op: str, message: str) -> dict[str, Any]:
    """Create a NOT_FOUND error response."""
    return ng(op, ErrorCode.NOT_FOUND, message)


def internal_error(op: str, message: str) -> dict[str, Any]:
    """Create an INTERNAL_ERROR error response."""
    return ng(op, ErrorCode.INTERNAL_ERROR, message)


def error_response(op: str, exc: Exception) -> dict[str, Any]:
    """Translate an exception raised below the handlers into an error response."""
    if isinstance(exc, NotFoundError):
        return not_found(op, str(exc))
    if isinstance(exc, AuthenticationError):
        return ng(op, ErrorCode.AUTH_ERROR, str(exc))
    if isinstance(exc, TransportError):
        extra = {"status_code": exc.status_code} if exc.status_code is not None else None
        return ng(op, ErrorCode.TRANSPORT_ERROR, str(exc), extra)
    if isinstance(exc, (RuntimeError, ValueError)):
        return ng(op, ErrorCode.CONFIG_ERROR, str(exc))
    return internal_error(op, str(exc))


def http_status(response: dict[str, Any]) -> int:
    """HTTP status code for a response envelope."""
    if response.get("ok"):
        return 200
    code = response.get("error", {}).get("code")
    if code == ErrorCode.BAD_REQUEST:
        return 400
    if code == ErrorCode.NOT_FOUND:
        return 404
    return 500
