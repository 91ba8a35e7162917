"""
Backend Object Value Object

Architectural Intent:
- Provider-neutral view of one persisted control-plane object
- Carries only what the driver reads or writes: identity, labels, payload
- Reconciliation state belongs to the control plane; the driver observes it

Design Decisions:
- A single type covers both kinds the driver touches (Machine and Secret)
- `body` holds the kind-specific payload (machine spec or secret data)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping

from onmetal_driver.domain.value_objects.object_key import ObjectKey

MACHINE_KIND = "Machine"
SECRET_KIND = "Secret"


@dataclass(frozen=True)
class BackendObject:
    kind: str
    name: str
    namespace: str
    labels: Mapping[str, str] = field(default_factory=dict)
    body: Mapping[str, Any] = field(default_factory=dict)
    deletion_requested: bool = False

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(namespace=self.namespace, name=self.name)

    def matches_labels(self, selector: Mapping[str, str] | None) -> bool:
        """Exact-match AND over every selector pair; empty selects all."""
        if not selector:
            return True
        return all(self.labels.get(k) == v for k, v in selector.items())
