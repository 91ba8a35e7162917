"""
Machine Status Codes

Architectural Intent:
- Classifies every driver failure into a small, fixed set of outcome codes
- The machine controller picks its retry cadence from the code alone
- Errors always carry a human-readable message embedding the underlying cause

Retry cadence (consumed by the calling controller):
- INVALID_ARGUMENT: not retried as-is, surfaced to the operator
- NOT_FOUND: target already absent, success-equivalent for deletion
- DEADLINE_EXCEEDED / UNKNOWN: short retry
- INTERNAL: long retry
"""

from __future__ import annotations
from enum import Enum
from typing import Optional


class Code(Enum):
    INVALID_ARGUMENT = "InvalidArgument"
    NOT_FOUND = "NotFound"
    DEADLINE_EXCEEDED = "DeadlineExceeded"
    UNKNOWN = "Unknown"
    INTERNAL = "Internal"
    UNIMPLEMENTED = "Unimplemented"


_SHORT_RETRY_CODES = frozenset({Code.UNKNOWN, Code.DEADLINE_EXCEEDED})


def is_retryable_soon(code: Code) -> bool:
    """True when the controller should retry after a short backoff."""
    return code in _SHORT_RETRY_CODES


class MachineError(Exception):
    """A failure tagged with the code the machine controller acts upon."""

    def __init__(self, code: Code, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"MachineError(code={self.code.name}, message={self.message!r})"

    @classmethod
    def wrap(
        cls, code: Code, cause: BaseException, prefix: Optional[str] = None
    ) -> "MachineError":
        """Build an error whose message embeds the cause, chaining it."""
        detail = str(cause) or cause.__class__.__name__
        message = f"{prefix}: {detail}" if prefix else detail
        error = cls(code, message)
        error.__cause__ = cause
        return error
