"""
Object Key Value Object

Architectural Intent:
- Immutable (namespace, name) reference addressing one control-plane object
- The driver never owns backend objects, only the keys used to address them
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ObjectKey:
    namespace: str
    name: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Object name cannot be empty")

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"
