"""
Field Path and Field Errors

Architectural Intent:
- Structured location of a violation inside a provider spec or secret
- FieldError pairs a location with the kind of violation and a detail message
- Validation returns lists of FieldError; nothing here raises
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class FieldPath:
    """
    Immutable dotted path such as ``spec.dnsServers[0]``.

    A ``None`` root is accepted wherever a path is expected, so callers may
    start from ``FieldPath.of(None)`` to get an empty root.
    """

    __slots__ = ("_segments",)

    def __init__(self, segments: tuple[str, ...] = ()) -> None:
        self._segments = segments

    @classmethod
    def of(cls, path: Optional["FieldPath"]) -> "FieldPath":
        return path if path is not None else cls()

    def child(self, name: str, *more: str) -> "FieldPath":
        return FieldPath(self._segments + (name,) + more)

    def index(self, i: int) -> "FieldPath":
        if not self._segments:
            return FieldPath((f"[{i}]",))
        return FieldPath(self._segments[:-1] + (f"{self._segments[-1]}[{i}]",))

    def __str__(self) -> str:
        return ".".join(self._segments)

    def __repr__(self) -> str:
        return f"FieldPath({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FieldPath):
            return self._segments == other._segments
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._segments)


class FieldErrorType(Enum):
    REQUIRED = "FieldValueRequired"
    INVALID = "FieldValueInvalid"


@dataclass(frozen=True)
class FieldError:
    type: FieldErrorType
    field: str
    detail: str
    bad_value: Any = None

    @classmethod
    def required(cls, path: FieldPath, detail: str) -> "FieldError":
        return cls(FieldErrorType.REQUIRED, str(path), detail)

    @classmethod
    def invalid(cls, path: FieldPath, value: Any, detail: str) -> "FieldError":
        return cls(FieldErrorType.INVALID, str(path), detail, value)

    def __str__(self) -> str:
        if self.type is FieldErrorType.REQUIRED:
            return f"{self.field}: Required value: {self.detail}"
        return f"{self.field}: Invalid value: {self.bad_value!r}: {self.detail}"


def aggregate(errors: list[FieldError]) -> str:
    """Render a list of field errors as one message."""
    if len(errors) == 1:
        return str(errors[0])
    return "[" + ", ".join(str(e) for e in errors) + "]"
