"""
Machine Driver

Architectural Intent:
- Single entry point the RPC layer calls for every machine lifecycle request
- Delegates to one use case per RPC, all bound to the same namespace,
  provider name and backend client
- Guarantees every failure leaves as a MachineError carrying a status code

Design Decisions:
- Per-call deadlines are a `timeout` argument in seconds; expiry while a
  backend call or poll delay is pending becomes DEADLINE_EXCEEDED
- Task cancellation propagates as asyncio.CancelledError and never turns
  into a success response
- Errors that escaped classification are reported as INTERNAL
"""

from __future__ import annotations
import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar

from onmetal_driver.application.orchestration.confirmation import PollPolicy
from onmetal_driver.application.use_cases.create_machine import CreateMachine
from onmetal_driver.application.use_cases.delete_machine import DeleteMachine
from onmetal_driver.application.use_cases.get_machine_status import GetMachineStatus
from onmetal_driver.application.use_cases.list_machines import ListMachines
from onmetal_driver.domain.entities.machine_request import (
    CreateMachineRequest,
    CreateMachineResponse,
    DeleteMachineRequest,
    DeleteMachineResponse,
    GetMachineStatusRequest,
    GetMachineStatusResponse,
    ListMachinesRequest,
    ListMachinesResponse,
)
from onmetal_driver.domain.ports.backend_client_port import BackendClientPort
from onmetal_driver.domain.ports.clock_port import ClockPort
from onmetal_driver.domain.ports.telemetry_port import TelemetryPort
from onmetal_driver.domain.value_objects.status import Code, MachineError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MachineDriver:
    def __init__(
        self,
        backend: BackendClientPort,
        clock: ClockPort,
        namespace: str,
        provider_name: str,
        poll_policy: PollPolicy,
        telemetry: Optional[TelemetryPort] = None,
    ):
        self.namespace = namespace
        self.provider_name = provider_name
        self.telemetry = telemetry
        self._create = CreateMachine(backend, namespace, provider_name)
        self._delete = DeleteMachine(
            backend, clock, namespace, provider_name, poll_policy, telemetry
        )
        self._status = GetMachineStatus(backend, namespace, provider_name)
        self._list = ListMachines(backend, namespace, provider_name)

    async def create_machine(
        self, request: CreateMachineRequest, timeout: Optional[float] = None
    ) -> CreateMachineResponse:
        return await self._call("CreateMachine", request, self._create.execute, timeout)

    async def delete_machine(
        self, request: DeleteMachineRequest, timeout: Optional[float] = None
    ) -> DeleteMachineResponse:
        return await self._call("DeleteMachine", request, self._delete.execute, timeout)

    async def get_machine_status(
        self, request: GetMachineStatusRequest, timeout: Optional[float] = None
    ) -> GetMachineStatusResponse:
        return await self._call("GetMachineStatus", request, self._status.execute, timeout)

    async def list_machines(
        self, request: ListMachinesRequest, timeout: Optional[float] = None
    ) -> ListMachinesResponse:
        return await self._call("ListMachines", request, self._list.execute, timeout)

    async def get_volume_ids(self, request: Any) -> list[str]:
        raise MachineError(Code.UNIMPLEMENTED, "GetVolumeIDs is not supported by this driver")

    async def _call(
        self,
        operation: str,
        request: Any,
        handler: Callable[[Any], Awaitable[T]],
        timeout: Optional[float],
    ) -> T:
        context = _log_context(operation, request)
        logger.debug("%s request has been received", operation, extra=context)
        started = time.perf_counter()
        code = "OK"
        try:
            if timeout is None:
                return await handler(request)
            async with asyncio.timeout(timeout):
                return await handler(request)
        except MachineError as e:
            code = e.code.value
            logger.warning("%s failed: %s", operation, e, extra={**context, "code": code})
            raise
        except TimeoutError as e:
            code = Code.DEADLINE_EXCEEDED.value
            limit = f"within {timeout:g}s" if timeout is not None else "in time"
            raise MachineError(
                Code.DEADLINE_EXCEEDED, f"{operation} did not complete {limit}: deadline exceeded"
            ) from e
        except asyncio.CancelledError:
            code = "Cancelled"
            raise
        except Exception as e:
            code = Code.INTERNAL.value
            logger.exception("%s failed unexpectedly", operation, extra=context)
            raise MachineError.wrap(Code.INTERNAL, e, f"{operation} failed") from e
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            logger.debug(
                "%s request has been processed",
                operation,
                extra={**context, "code": code, "duration_ms": round(duration_ms, 3)},
            )
            if self.telemetry is not None:
                self.telemetry.record_operation(
                    operation, code, duration_ms, context.get("machine_class") or ""
                )


def _log_context(operation: str, request: Any) -> dict[str, Any]:
    machine = getattr(request, "machine", None)
    machine_class = getattr(request, "machine_class", None)
    return {
        "operation": operation,
        "machine": getattr(machine, "name", None),
        "machine_class": getattr(machine_class, "name", None),
    }
