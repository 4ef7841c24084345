"""
Error taxonomy for the signing command protocol.

Two families live here:

    - ``ErrorKind`` — the closed set of request-level errors that travel
      back to the caller inside a callback URL (``error=<identifier>``).
      Signer-reported kinds are forwarded opaquely; the engine itself only
      ever produces INVALID_REQUEST.
    - ``SignlinkError`` and subclasses — operational exceptions raised by
      the ambient layers (launchers, config loading). These never escape
      ``SigningEngine.handle()``.

Wire identifiers:
    Symbolic (default): the enum value, e.g. ``invalidRequest``.
    Numeric: the stable integer code, e.g. ``3``.

    NONE is a "no error" sentinel and is never serialized.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Request-level error kinds (v0.1)."""

    NONE = "none"
    UNKNOWN = "unknown"
    CANCELLED = "cancelled"
    INVALID_REQUEST = "invalidRequest"
    WATCH_ONLY = "watchOnly"

    @property
    def code(self) -> int:
        """Stable numeric identifier for the numeric wire format."""
        return _NUMERIC_CODES[self]


class ErrorFormat(StrEnum):
    """How an ErrorKind is rendered into the ``error`` query parameter."""

    SYMBOLIC = "symbolic"
    NUMERIC = "numeric"


# Numbering is part of the wire contract; append only.
_NUMERIC_CODES: dict[ErrorKind, int] = {
    ErrorKind.NONE: 0,
    ErrorKind.UNKNOWN: 1,
    ErrorKind.CANCELLED: 2,
    ErrorKind.INVALID_REQUEST: 3,
    ErrorKind.WATCH_ONLY: 4,
}


def error_identifier(
    error: ErrorKind, error_format: ErrorFormat = ErrorFormat.SYMBOLIC
) -> str:
    """Render an ErrorKind as the value of the ``error`` query parameter.

    Args:
        error: The error to render. Must not be NONE.
        error_format: Symbolic (``invalidRequest``) or numeric (``3``).

    Returns:
        The wire identifier.

    Raises:
        ValueError: If error is ErrorKind.NONE.
    """
    if error == ErrorKind.NONE:
        raise ValueError("ErrorKind.NONE is a sentinel and cannot be serialized")
    if error_format == ErrorFormat.NUMERIC:
        return str(error.code)
    return error.value


def classify_signer_exception(exc: BaseException) -> ErrorKind:
    """Classify an exception raised by a signer instead of a failure outcome.

    Signers are expected to report failures as outcomes. An exception
    means the signer broke its contract, so the kind is always UNKNOWN.
    """
    return ErrorKind.UNKNOWN


class SignlinkError(Exception):
    """Base class for operational errors raised by signlink."""


class SignlinkOperationalError(SignlinkError):
    """An external collaborator (network, host) failed.

    Attributes:
        error_code: Machine-readable category (e.g. "TIMEOUT").
        details: Structured diagnostics. Never contains payload bytes.
    """

    def __init__(
        self,
        message: str,
        *,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class ConfigError(SignlinkError):
    """Configuration file could not be read or decoded."""
