"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the driver needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from onmetal_driver.domain.ports.backend_client_port import (
    BackendClientPort,
    BackendError,
    ObjectAlreadyExistsError,
    ObjectNotFoundError,
)
from onmetal_driver.domain.ports.clock_port import ClockPort
from onmetal_driver.domain.ports.telemetry_port import TelemetryPort

__all__ = [
    "BackendClientPort",
    "BackendError",
    "ObjectAlreadyExistsError",
    "ObjectNotFoundError",
    "ClockPort",
    "TelemetryPort",
]
