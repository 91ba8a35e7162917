"""
Machine Requests and Responses

Architectural Intent:
- Immutable request/response types of the provider-agnostic machine lifecycle
- Fields are Optional because the controller may send incomplete requests;
  use cases reject those before touching the backend

Design Decisions:
- MachineClass keeps the provider spec as the raw decoded JSON mapping;
  decoding into ProviderSpec happens per call, during validation
- Secret data is bytes, matching what a credential store hands over
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class MachineClass:
    name: str
    provider: str
    provider_spec: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Machine:
    name: str
    namespace: str = ""


@dataclass(frozen=True)
class Secret:
    data: Mapping[str, bytes] = field(default_factory=dict)

    def get(self, key: str) -> Optional[bytes]:
        return self.data.get(key)


@dataclass(frozen=True)
class CreateMachineRequest:
    machine: Optional[Machine]
    machine_class: Optional[MachineClass]
    secret: Optional[Secret]


@dataclass(frozen=True)
class CreateMachineResponse:
    provider_id: str
    node_name: str


@dataclass(frozen=True)
class DeleteMachineRequest:
    machine: Optional[Machine]
    machine_class: Optional[MachineClass]
    secret: Optional[Secret]


@dataclass(frozen=True)
class DeleteMachineResponse:
    pass


@dataclass(frozen=True)
class GetMachineStatusRequest:
    machine: Optional[Machine]
    machine_class: Optional[MachineClass]
    secret: Optional[Secret]


@dataclass(frozen=True)
class GetMachineStatusResponse:
    provider_id: str
    node_name: str


@dataclass(frozen=True)
class ListMachinesRequest:
    machine_class: Optional[MachineClass]
    secret: Optional[Secret]


@dataclass(frozen=True)
class ListMachinesResponse:
    machine_list: dict[str, str] = field(default_factory=dict)


def is_empty_machine_request(request: Any) -> bool:
    """True when any part a per-machine request needs is missing."""
    return (
        request is None
        or request.machine_class is None
        or request.machine is None
        or request.secret is None
    )
