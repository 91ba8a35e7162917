"""
List Machines Use Case

Architectural Intent:
- Projects the machine objects of one machine class into the
  external-id -> name mapping the controller reconciles against
- Built fresh on every call; nothing is cached between calls
"""

import logging

from onmetal_driver.application.use_cases.request_checks import (
    ensure_provider,
    validated_provider_spec,
)
from onmetal_driver.domain.entities.machine_request import (
    ListMachinesRequest,
    ListMachinesResponse,
)
from onmetal_driver.domain.ports.backend_client_port import BackendClientPort
from onmetal_driver.domain.services.naming import provider_id_for_machine
from onmetal_driver.domain.value_objects.backend_object import MACHINE_KIND
from onmetal_driver.domain.value_objects.status import Code, MachineError

logger = logging.getLogger(__name__)


class ListMachines:
    def __init__(self, backend: BackendClientPort, namespace: str, provider_name: str):
        self.backend = backend
        self.namespace = namespace
        self.provider_name = provider_name

    async def execute(self, request: ListMachinesRequest) -> ListMachinesResponse:
        if request is None:
            raise MachineError(Code.INVALID_ARGUMENT, "received empty request")
        ensure_provider(request.machine_class, self.provider_name)
        spec = validated_provider_spec(request.machine_class, request.secret)

        try:
            objects = await self.backend.list(
                MACHINE_KIND, self.namespace, dict(spec.labels)
            )
        except Exception as e:
            raise MachineError.wrap(Code.INTERNAL, e) from e

        machine_list = {
            provider_id_for_machine(obj, self.provider_name): obj.name for obj in objects
        }
        logger.debug(
            "Listed %d machine(s) in namespace %s for labels %s",
            len(machine_list),
            self.namespace,
            dict(spec.labels),
        )
        return ListMachinesResponse(machine_list=machine_list)
