"""
Composition Root

Architectural Intent:
- Dependency injection composition root for the machine driver
- Single place where the backend adapter, clock, telemetry and driver are
  wired together from one DriverConfig
- No adapter instantiation should occur outside this module (except tests)

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- A pre-built backend may be passed in; otherwise the config selects one
- create_container stays synchronous for tests; long-running entry points
  use start_container, which also initializes the OTLP exporter
"""

from dataclasses import dataclass
from typing import Optional

from onmetal_driver.application.driver import MachineDriver
from onmetal_driver.application.orchestration.confirmation import PollPolicy
from onmetal_driver.domain.ports.backend_client_port import BackendClientPort
from onmetal_driver.domain.ports.clock_port import ClockPort
from onmetal_driver.infrastructure.adapters.in_memory_backend import InMemoryBackend
from onmetal_driver.infrastructure.clock import SystemClock
from onmetal_driver.infrastructure.config import BackendSection, DriverConfig
from onmetal_driver.infrastructure.telemetry.otel_exporter import (
    DriverTelemetry,
    OTELConfig,
    create_telemetry,
)


@dataclass
class DriverContainer:
    """DI container holding all wired dependencies."""

    config: DriverConfig
    backend: BackendClientPort
    clock: ClockPort
    telemetry: DriverTelemetry
    driver: MachineDriver


def create_backend(section: BackendSection) -> BackendClientPort:
    if section.kind == "memory":
        return InMemoryBackend()
    from onmetal_driver.infrastructure.adapters.kubernetes_backend import KubernetesBackend

    return KubernetesBackend.from_kubeconfig(
        kubeconfig=section.kubeconfig,
        context=section.context,
        in_cluster=section.in_cluster,
    )


def create_container(
    config: Optional[DriverConfig] = None,
    backend: Optional[BackendClientPort] = None,
    clock: Optional[ClockPort] = None,
    telemetry: Optional[DriverTelemetry] = None,
) -> DriverContainer:
    """Create and wire all dependencies.

    Telemetry built here only buffers locally; see start_container.
    """
    config = config or DriverConfig()
    backend = backend or create_backend(config.backend)
    clock = clock or SystemClock()
    telemetry = telemetry or DriverTelemetry(
        OTELConfig(endpoint=config.telemetry.endpoint, insecure=config.telemetry.insecure)
    )

    driver = MachineDriver(
        backend=backend,
        clock=clock,
        namespace=config.driver.namespace,
        provider_name=config.driver.provider_name,
        poll_policy=PollPolicy(
            interval=config.driver.poll_interval_seconds,
            timeout=config.driver.poll_timeout_seconds,
        ),
        telemetry=telemetry,
    )

    return DriverContainer(
        config=config,
        backend=backend,
        clock=clock,
        telemetry=telemetry,
        driver=driver,
    )


async def start_container(
    config: Optional[DriverConfig] = None,
    backend: Optional[BackendClientPort] = None,
    clock: Optional[ClockPort] = None,
) -> DriverContainer:
    """Wire all dependencies with telemetry exporting to the configured endpoint."""
    config = config or DriverConfig()
    telemetry = await create_telemetry(
        endpoint=config.telemetry.endpoint,
        insecure=config.telemetry.insecure,
    )
    return create_container(config, backend=backend, clock=clock, telemetry=telemetry)
