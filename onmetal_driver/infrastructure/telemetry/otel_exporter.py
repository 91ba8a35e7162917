"""
OpenTelemetry Exporter for the Machine Driver

Architectural Intent:
- Exports per-RPC outcome metrics to OTLP-compatible backends
- The machine controller's retry behaviour is driven by status codes, so
  codes are the primary metric attribute

Security:
- Endpoint defaults to empty string (must be explicitly configured)
- Non-localhost http:// endpoints rejected unless insecure=True
- Validation in __post_init__ prevents accidental plaintext export
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Optional, Any
from urllib.parse import urlparse
import logging
from datetime import datetime, UTC

logger = logging.getLogger(__name__)

# Oldest entries are dropped once the local buffer is full.
METRICS_BUFFER_LIMIT = 1000


@dataclass
class OTELConfig:
    endpoint: str = ""
    service_name: str = "onmetal-machine-driver"
    environment: str = "development"
    insecure: bool = False

    def __post_init__(self) -> None:
        if self.endpoint:
            parsed = urlparse(self.endpoint)
            is_localhost = parsed.hostname in ("localhost", "127.0.0.1", "::1")
            if parsed.scheme == "http" and not is_localhost and not self.insecure:
                raise ValueError(
                    f"Non-localhost HTTP endpoint '{self.endpoint}' requires "
                    "insecure=True or use https://. "
                    "Set insecure=True to explicitly allow plaintext export."
                )


class DriverTelemetry:
    """
    Records driver RPC outcomes.

    The most recent METRICS_BUFFER_LIMIT metrics are kept locally for drain();
    once initialize() has set up the OpenTelemetry SDK they are also exported
    as a counter of calls and a histogram of call durations.
    """

    def __init__(self, config: OTELConfig, buffer_limit: int = METRICS_BUFFER_LIMIT):
        self.config = config
        self._initialized = False
        self._metrics_buffer: deque[dict[str, Any]] = deque(maxlen=buffer_limit)
        self._calls: Any = None
        self._durations: Any = None
        self._confirmations: Any = None

    async def initialize(self) -> None:
        """Initialize OpenTelemetry SDK and the OTLP metric exporter."""
        if not self.config.endpoint:
            logger.info("OTEL endpoint not configured, telemetry disabled")
            return

        try:
            from opentelemetry import metrics
            from opentelemetry.sdk.metrics import MeterProvider
            from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
            from opentelemetry.sdk.resources import Resource, SERVICE_NAME
            from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import (
                OTLPMetricExporter,
            )
        except ImportError:
            logger.warning("OpenTelemetry SDK not installed, telemetry disabled")
            return

        resource = Resource(
            attributes={
                SERVICE_NAME: self.config.service_name,
                "environment": self.config.environment,
            }
        )
        reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=self.config.endpoint, insecure=self.config.insecure)
        )
        metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[reader]))
        meter = metrics.get_meter(__name__)

        self._calls = meter.create_counter("onmetal_driver.calls", unit="1")
        self._durations = meter.create_histogram("onmetal_driver.call.duration", unit="ms")
        self._confirmations = meter.create_histogram(
            "onmetal_driver.delete.confirmation_checks", unit="1"
        )
        self._initialized = True

    def record_operation(
        self,
        operation: str,
        code: str,
        duration_ms: float,
        machine_class: str = "",
    ) -> None:
        """Record one RPC with its outcome code ("OK" on success)."""
        attributes = {"operation": operation, "code": code, "machine_class": machine_class}
        self._metrics_buffer.append(
            {
                "name": "onmetal_driver.calls",
                "value": duration_ms,
                "attributes": attributes,
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )
        if self._initialized:
            self._calls.add(1, attributes=attributes)
            self._durations.record(duration_ms, attributes=attributes)

    def record_confirmation(self, attempts: int, outcome: str) -> None:
        """Record how many checks a delete confirmation needed."""
        attributes = {"outcome": outcome}
        self._metrics_buffer.append(
            {
                "name": "onmetal_driver.delete.confirmation_checks",
                "value": float(attempts),
                "attributes": attributes,
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )
        if self._initialized:
            self._confirmations.record(attempts, attributes=attributes)

    def drain(self) -> list[dict[str, Any]]:
        """Return and clear the locally buffered metrics."""
        drained = list(self._metrics_buffer)
        self._metrics_buffer.clear()
        return drained


async def create_telemetry(
    endpoint: Optional[str] = None,
    insecure: bool = False,
    service_name: str = "onmetal-machine-driver",
) -> DriverTelemetry:
    """Factory function to create an initialized DriverTelemetry."""
    config = OTELConfig(
        endpoint=endpoint or "",
        service_name=service_name,
        insecure=insecure,
    )
    telemetry = DriverTelemetry(config)
    await telemetry.initialize()
    return telemetry
