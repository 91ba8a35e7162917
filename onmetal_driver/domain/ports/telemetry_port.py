"""
Telemetry Port

Architectural Intent:
- Outcome metrics sink for driver RPCs
- Implemented by the OpenTelemetry-backed DriverTelemetry
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class TelemetryPort(Protocol):
    def record_operation(
        self,
        operation: str,
        code: str,
        duration_ms: float,
        machine_class: str = "",
    ) -> None:
        ...

    def record_confirmation(self, attempts: int, outcome: str) -> None:
        ...
