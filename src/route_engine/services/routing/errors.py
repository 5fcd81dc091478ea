"""Errors raised by the route aggregation engine."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ConfigurationError(ValueError):
    """Invalid routing options. Aborts the whole operation."""


class StopValidationError(ValueError):
    """A stop carries coordinates that cannot be routed."""


class DecodeError(ValueError):
    """An encoded polyline ended mid-value or contained invalid characters."""


class RemoteErrorKind(str, Enum):
    TIMEOUT = "timeout"
    CONNECTION_FAILED = "connection_failed"
    MALFORMED_RESPONSE = "malformed_response"
    NON_SUCCESS_STATUS = "non_success_status"


class RemoteError(Exception):
    """A single routing request failed. Recoverable per chunk."""

    def __init__(self, kind: RemoteErrorKind, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is not None:
            return f"{self.kind.value} (HTTP {self.status_code}): {base}"
        return f"{self.kind.value}: {base}"
