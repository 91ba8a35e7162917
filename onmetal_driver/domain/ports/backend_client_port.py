"""
Backend Client Port

Architectural Intent:
- Port interface for the declarative control plane storing machine objects
- Capability contract only: Get, List, Create, Delete on namespaced objects
- Implemented by the Kubernetes adapter and by the in-memory simulator

Design Decisions:
- Uses Protocol for structural typing (no inheritance needed)
- Not-found and already-exists are distinct exception types so that use cases
  can treat them as idempotent outcomes without inspecting messages
"""

from typing import Mapping, Optional, Protocol, runtime_checkable

from onmetal_driver.domain.value_objects.backend_object import BackendObject
from onmetal_driver.domain.value_objects.object_key import ObjectKey


class BackendError(Exception):
    """A control-plane call failed."""


class ObjectNotFoundError(BackendError):
    def __init__(self, kind: str, key: ObjectKey) -> None:
        super().__init__(f'{kind.lower()}s "{key.name}" not found')
        self.kind = kind
        self.key = key


class ObjectAlreadyExistsError(BackendError):
    def __init__(self, kind: str, key: ObjectKey) -> None:
        super().__init__(f'{kind.lower()}s "{key.name}" already exists')
        self.kind = kind
        self.key = key


@runtime_checkable
class BackendClientPort(Protocol):
    """Port for namespaced object access on the control plane."""

    async def get(self, kind: str, key: ObjectKey) -> BackendObject:
        """Fetch one object. Raises ObjectNotFoundError when absent."""
        ...

    async def list(
        self,
        kind: str,
        namespace: str,
        labels: Optional[Mapping[str, str]] = None,
    ) -> list[BackendObject]:
        """List objects in a namespace matching every given label exactly."""
        ...

    async def create(self, obj: BackendObject) -> BackendObject:
        """Create an object. Raises ObjectAlreadyExistsError on a name clash."""
        ...

    async def delete(self, kind: str, key: ObjectKey) -> None:
        """Request deletion. Raises ObjectNotFoundError when already absent."""
        ...
