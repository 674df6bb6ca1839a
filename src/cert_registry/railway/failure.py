"""
Failure description — structured error information for the failure track.

Every fallible call in cert_registry returns a Result; when it fails, the
Failure carries one of these descriptors. The ErrorCode tells the front-end
which kind of problem occurred (bad input, duplicate serial, storage), the
message is what the user sees.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, unique
from typing import Optional


@unique
class ErrorCode(Enum):
    """Structured error codes for the failure track."""

    ARGUMENT_ERROR = "ARGUMENT_ERROR"
    """Malformed or contradictory command-line / interactive input."""

    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
    """A uniqueness constraint rejected the write (duplicate serial number)."""

    STORAGE_ERROR = "STORAGE_ERROR"
    """Engine unreachable, disk or connection failure, malformed schema."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Invalid settings."""


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable failure descriptor carrying error code, message, optional exception, and timestamp.

    >>> desc = FailureDescription(ErrorCode.ARGUMENT_ERROR, "Serial number is required")
    >>> desc.code
    <ErrorCode.ARGUMENT_ERROR: 'ARGUMENT_ERROR'>
    >>> desc.message
    'Serial number is required'
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def describe(self) -> str:
        """Message plus the underlying exception text, for user-facing output."""
        if self.exception is None:
            return self.message
        return f"{self.message}: {self.exception}"
