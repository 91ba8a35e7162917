"""
Get Machine Status Use Case

Architectural Intent:
- Tells the controller whether a machine object exists and under which
  provider ID and node name it is registered
"""

from onmetal_driver.application.use_cases.request_checks import (
    ensure_complete,
    ensure_provider,
)
from onmetal_driver.domain.entities.machine_request import (
    GetMachineStatusRequest,
    GetMachineStatusResponse,
)
from onmetal_driver.domain.ports.backend_client_port import (
    BackendClientPort,
    ObjectNotFoundError,
)
from onmetal_driver.domain.services.naming import provider_id_for_machine
from onmetal_driver.domain.value_objects.backend_object import MACHINE_KIND
from onmetal_driver.domain.value_objects.object_key import ObjectKey
from onmetal_driver.domain.value_objects.status import Code, MachineError


class GetMachineStatus:
    def __init__(self, backend: BackendClientPort, namespace: str, provider_name: str):
        self.backend = backend
        self.namespace = namespace
        self.provider_name = provider_name

    async def execute(self, request: GetMachineStatusRequest) -> GetMachineStatusResponse:
        ensure_complete(request)
        ensure_provider(request.machine_class, self.provider_name)

        key = ObjectKey(self.namespace, request.machine.name)
        try:
            machine = await self.backend.get(MACHINE_KIND, key)
        except ObjectNotFoundError as e:
            raise MachineError.wrap(Code.NOT_FOUND, e) from e
        except Exception as e:
            raise MachineError.wrap(Code.UNKNOWN, e, "error getting machine") from e

        return GetMachineStatusResponse(
            provider_id=provider_id_for_machine(machine, self.provider_name),
            node_name=machine.name,
        )
