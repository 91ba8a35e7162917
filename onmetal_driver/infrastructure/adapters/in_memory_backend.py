"""
In-Memory Control Plane Adapter

Architectural Intent:
- Implements BackendClientPort without a cluster, for tests and local runs
- Simulates asynchronous reconciliation: a deleted machine stays readable
  for a configurable number of reads before it disappears
- Records every call so callers can assert which requests reached the backend

Design Decisions:
- deletion_delay_reads=None models an object stuck behind a finalizer
- Failures are injected per (verb, kind) and raised on every matching call
- Only machines linger after deletion; secrets vanish immediately
"""

from __future__ import annotations
import dataclasses
import logging
from typing import Mapping, Optional

from onmetal_driver.domain.ports.backend_client_port import (
    ObjectAlreadyExistsError,
    ObjectNotFoundError,
)
from onmetal_driver.domain.value_objects.backend_object import MACHINE_KIND, BackendObject
from onmetal_driver.domain.value_objects.object_key import ObjectKey

logger = logging.getLogger(__name__)


class InMemoryBackend:
    """
    Dict-backed control plane.

    Configuration parameters
    ------------------------
    deletion_delay_reads : int | None
        Number of successful reads a machine survives after its deletion was
        requested.  0 removes it on the first read after the delete; None
        keeps it forever.
    """

    def __init__(self, deletion_delay_reads: Optional[int] = 0) -> None:
        self.deletion_delay_reads = deletion_delay_reads
        self.calls: list[tuple[str, str, str]] = []
        self._objects: dict[tuple[str, str, str], BackendObject] = {}
        # Remaining reads before a deletion-requested object disappears.
        self._pending: dict[tuple[str, str, str], Optional[int]] = {}
        self._failures: dict[tuple[str, str], Exception] = {}

    # ------------------------------------------------------------------
    # Test and simulation helpers
    # ------------------------------------------------------------------

    def seed(self, *objects: BackendObject) -> None:
        for obj in objects:
            self._objects[(obj.kind, obj.namespace, obj.name)] = obj

    def fail(self, verb: str, kind: str, error: Exception) -> None:
        """Make every future ``verb`` call on ``kind`` raise ``error``."""
        self._failures[(verb, kind)] = error

    def clear_failures(self) -> None:
        self._failures.clear()

    def calls_for(self, verb: str, kind: Optional[str] = None) -> list[tuple[str, str, str]]:
        return [c for c in self.calls if c[0] == verb and (kind is None or c[1] == kind)]

    def contains(self, kind: str, key: ObjectKey) -> bool:
        return (kind, key.namespace, key.name) in self._objects

    # ------------------------------------------------------------------
    # BackendClientPort implementation
    # ------------------------------------------------------------------

    async def get(self, kind: str, key: ObjectKey) -> BackendObject:
        self._record("get", kind, key.name)
        index = (kind, key.namespace, key.name)
        obj = self._objects.get(index)
        if obj is None:
            raise ObjectNotFoundError(kind, key)

        if index in self._pending:
            remaining = self._pending[index]
            if remaining is not None:
                if remaining <= 0:
                    self._remove(index)
                    logger.debug("%s %s finished deletion", kind, key)
                    raise ObjectNotFoundError(kind, key)
                self._pending[index] = remaining - 1
        return obj

    async def list(
        self,
        kind: str,
        namespace: str,
        labels: Optional[Mapping[str, str]] = None,
    ) -> list[BackendObject]:
        self._record("list", kind, namespace)
        return [
            obj
            for (k, ns, _), obj in sorted(self._objects.items())
            if k == kind and ns == namespace and obj.matches_labels(labels)
        ]

    async def create(self, obj: BackendObject) -> BackendObject:
        self._record("create", obj.kind, obj.name)
        index = (obj.kind, obj.namespace, obj.name)
        if index in self._objects:
            raise ObjectAlreadyExistsError(obj.kind, obj.key)
        self._objects[index] = obj
        return obj

    async def delete(self, kind: str, key: ObjectKey) -> None:
        self._record("delete", kind, key.name)
        index = (kind, key.namespace, key.name)
        obj = self._objects.get(index)
        if obj is None:
            raise ObjectNotFoundError(kind, key)
        if index in self._pending:
            return

        if kind != MACHINE_KIND:
            self._remove(index)
            return

        self._objects[index] = dataclasses.replace(obj, deletion_requested=True)
        self._pending[index] = self.deletion_delay_reads

    def _record(self, verb: str, kind: str, name: str) -> None:
        self.calls.append((verb, kind, name))
        failure = self._failures.get((verb, kind))
        if failure is not None:
            raise failure

    def _remove(self, index: tuple[str, str, str]) -> None:
        self._objects.pop(index, None)
        self._pending.pop(index, None)
