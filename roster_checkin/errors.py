"""Typed failures surfaced to callers of the roster core."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional


class FailureKind(str, Enum):
    """Whether a failure needs an access fix or just a retry."""

    ACCESS = "access"
    NETWORK = "network"


class RosterError(RuntimeError):
    """Base class for roster check-in failures."""


class IngestionFailure(RosterError):
    """Raised when neither the export nor the values API produced a roster."""

    def __init__(
        self,
        message: str,
        kind: FailureKind,
        *,
        primary: Optional[BaseException] = None,
        secondary: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.primary = primary
        self.secondary = secondary


class WritePermissionDenied(RosterError):
    """Raised when the spreadsheet rejects an append, e.g. a read-only key."""


class InvalidMember(RosterError, ValueError):
    """Raised when a new member would be written as a row the roster cannot read back."""

    def __init__(self, name: str, reasons: List[str]) -> None:
        super().__init__(f"Member {name!r} has missing or too short fields: {', '.join(reasons)}")
        self.name = name
        self.reasons = reasons


class UnrecognizedToken(RosterError):
    """Raised when a scanned or typed token matches no roster member."""

    def __init__(self, token: str) -> None:
        super().__init__(f"No registered member matches {token!r}")
        self.token = token


class CameraUnavailable(RosterError):
    """Raised when the capture device is missing or permission was denied."""


__all__ = [
    "FailureKind",
    "RosterError",
    "IngestionFailure",
    "WritePermissionDenied",
    "InvalidMember",
    "UnrecognizedToken",
    "CameraUnavailable",
]
