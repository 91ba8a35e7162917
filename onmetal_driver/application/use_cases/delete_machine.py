"""
Delete Machine Use Case

Architectural Intent:
- Removes a machine and its ignition secret from the control plane
- Confirms convergence by polling until the machine object is gone
- Idempotent: the controller may call delete repeatedly for one machine

Steps:
1. Delete the ignition secret (not-found is fine; anything else is Unknown)
2. Delete the machine object (not-found is NotFound; anything else is Unknown)
3. Poll until absent (failure is Unknown, deadline is DeadlineExceeded)
"""

import logging
from typing import Optional

from onmetal_driver.application.orchestration.confirmation import (
    ConfirmationFailed,
    ConfirmationTimeout,
    PollPolicy,
    wait_until_absent,
)
from onmetal_driver.application.use_cases.request_checks import (
    ensure_complete,
    ensure_provider,
)
from onmetal_driver.domain.entities.machine_request import (
    DeleteMachineRequest,
    DeleteMachineResponse,
)
from onmetal_driver.domain.ports.backend_client_port import (
    BackendClientPort,
    ObjectNotFoundError,
)
from onmetal_driver.domain.ports.clock_port import ClockPort
from onmetal_driver.domain.ports.telemetry_port import TelemetryPort
from onmetal_driver.domain.services.naming import ignition_secret_name
from onmetal_driver.domain.value_objects.backend_object import MACHINE_KIND, SECRET_KIND
from onmetal_driver.domain.value_objects.object_key import ObjectKey
from onmetal_driver.domain.value_objects.status import Code, MachineError

logger = logging.getLogger(__name__)


class DeleteMachine:
    def __init__(
        self,
        backend: BackendClientPort,
        clock: ClockPort,
        namespace: str,
        provider_name: str,
        poll_policy: PollPolicy,
        telemetry: Optional[TelemetryPort] = None,
    ):
        self.backend = backend
        self.clock = clock
        self.namespace = namespace
        self.provider_name = provider_name
        self.poll_policy = poll_policy
        self.telemetry = telemetry

    async def execute(self, request: DeleteMachineRequest) -> DeleteMachineResponse:
        ensure_complete(request)
        ensure_provider(request.machine_class, self.provider_name)

        machine_name = request.machine.name
        secret_key = ObjectKey(self.namespace, ignition_secret_name(machine_name))
        machine_key = ObjectKey(self.namespace, machine_name)

        try:
            await self.backend.delete(SECRET_KIND, secret_key)
        except ObjectNotFoundError:
            logger.debug("Ignition secret %s already absent", secret_key)
        except Exception as e:
            raise MachineError.wrap(Code.UNKNOWN, e, "error deleting ignition secret") from e

        try:
            await self.backend.delete(MACHINE_KIND, machine_key)
        except ObjectNotFoundError as e:
            raise MachineError.wrap(Code.NOT_FOUND, e) from e
        except Exception as e:
            raise MachineError.wrap(Code.UNKNOWN, e, "error deleting machine") from e

        logger.info("Deletion of machine %s requested, waiting until it is gone", machine_key)

        try:
            attempts = await wait_until_absent(
                lambda: self.backend.get(MACHINE_KIND, machine_key),
                self.poll_policy,
                self.clock,
            )
        except ConfirmationFailed as e:
            self._record_confirmation(e.attempts, "failed")
            raise MachineError.wrap(
                Code.UNKNOWN, e.cause, f"error waiting for machine {machine_key} to be deleted"
            ) from e
        except ConfirmationTimeout as e:
            self._record_confirmation(e.attempts, "timeout")
            raise MachineError.wrap(
                Code.DEADLINE_EXCEEDED, e, f"machine {machine_key} was not deleted in time"
            ) from e

        self._record_confirmation(attempts, "confirmed")
        logger.info("Machine %s deleted after %d check(s)", machine_key, attempts)
        return DeleteMachineResponse()

    def _record_confirmation(self, attempts: int, outcome: str) -> None:
        if self.telemetry is not None:
            self.telemetry.record_confirmation(attempts, outcome)
