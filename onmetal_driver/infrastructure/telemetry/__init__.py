"""
Driver Telemetry Infrastructure

Architectural Intent:
- OpenTelemetry integration for per-RPC outcome metrics
"""

from onmetal_driver.infrastructure.telemetry.otel_exporter import (
    DriverTelemetry,
    OTELConfig,
    create_telemetry,
)

__all__ = [
    "DriverTelemetry",
    "OTELConfig",
    "create_telemetry",
]
