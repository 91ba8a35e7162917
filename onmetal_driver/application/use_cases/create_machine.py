"""
Create Machine Use Case

Architectural Intent:
- Translates a validated provider spec into an ignition secret plus a
  Machine object on the control plane
- Idempotent: objects that already exist are left as they are, so a
  controller retry after a partial failure completes the creation

Design Decisions:
- The ignition secret is created first; the machine references it by name
- ignitionOverride replaces the user data with the provider spec's ignition,
  otherwise that ignition is appended to the user data
"""

from __future__ import annotations
import logging
from typing import Any

from onmetal_driver.application.use_cases.request_checks import (
    ensure_complete,
    ensure_provider,
    validated_provider_spec,
)
from onmetal_driver.domain.entities.machine_request import (
    CreateMachineRequest,
    CreateMachineResponse,
    Secret,
)
from onmetal_driver.domain.ports.backend_client_port import (
    BackendClientPort,
    ObjectAlreadyExistsError,
)
from onmetal_driver.domain.services.naming import (
    ignition_secret_name,
    provider_id_for_machine,
)
from onmetal_driver.domain.services.validation import USER_DATA_KEY
from onmetal_driver.domain.value_objects.backend_object import (
    MACHINE_KIND,
    SECRET_KIND,
    BackendObject,
)
from onmetal_driver.domain.value_objects.provider_spec import ProviderSpec
from onmetal_driver.domain.value_objects.status import Code, MachineError

logger = logging.getLogger(__name__)

DNS_SERVERS_KEY = "dnsServers"


def render_ignition(spec: ProviderSpec, secret: Secret) -> bytes:
    user_data = secret.get(USER_DATA_KEY) or b""
    if not spec.ignition:
        return user_data
    extra = spec.ignition.encode()
    if spec.ignition_override:
        return extra
    return user_data.rstrip(b"\n") + b"\n" + extra


def build_ignition_secret(
    name: str, namespace: str, spec: ProviderSpec, secret: Secret
) -> BackendObject:
    data = {spec.ignition_secret_key: render_ignition(spec, secret)}
    if spec.dns_servers:
        data[DNS_SERVERS_KEY] = "\n".join(spec.dns_servers).encode()
    return BackendObject(
        kind=SECRET_KIND,
        name=name,
        namespace=namespace,
        labels=dict(spec.labels),
        body={"data": data},
    )


def build_machine(
    name: str, namespace: str, spec: ProviderSpec, ignition_name: str
) -> BackendObject:
    machine_spec: dict[str, Any] = {
        "image": spec.image,
        "ignitionRef": {"name": ignition_name, "key": spec.ignition_secret_key},
        "networkInterfaces": [
            {
                "name": "primary",
                "networkName": spec.network_name,
                "prefixName": spec.prefix_name,
            }
        ],
        "volumes": [
            {
                "name": "root",
                "volumeClassName": spec.root_disk.volume_class_name,
                "size": spec.root_disk.size,
            }
        ],
    }
    if spec.machine_class_name:
        machine_spec["machineClassRef"] = {"name": spec.machine_class_name}
    if spec.machine_pool_name:
        machine_spec["machinePoolRef"] = {"name": spec.machine_pool_name}

    return BackendObject(
        kind=MACHINE_KIND,
        name=name,
        namespace=namespace,
        labels=dict(spec.labels),
        body={"spec": machine_spec},
    )


class CreateMachine:
    def __init__(self, backend: BackendClientPort, namespace: str, provider_name: str):
        self.backend = backend
        self.namespace = namespace
        self.provider_name = provider_name

    async def execute(self, request: CreateMachineRequest) -> CreateMachineResponse:
        ensure_complete(request)
        ensure_provider(request.machine_class, self.provider_name)
        spec = validated_provider_spec(request.machine_class, request.secret)

        machine_name = request.machine.name
        ignition_name = ignition_secret_name(machine_name)

        await self._create(
            build_ignition_secret(ignition_name, self.namespace, spec, request.secret),
            "error creating ignition secret",
        )
        machine = build_machine(machine_name, self.namespace, spec, ignition_name)
        await self._create(machine, "error creating machine")

        provider_id = provider_id_for_machine(machine, self.provider_name)
        logger.info("Machine %s created as %s", machine.key, provider_id)
        return CreateMachineResponse(provider_id=provider_id, node_name=machine_name)

    async def _create(self, obj: BackendObject, failure: str) -> None:
        try:
            await self.backend.create(obj)
        except ObjectAlreadyExistsError:
            logger.debug("%s %s already exists", obj.kind, obj.key)
        except Exception as e:
            raise MachineError.wrap(Code.INTERNAL, e, failure) from e
