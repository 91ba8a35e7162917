"""Global test configuration.

Shared fixtures: a virtual clock for the delete confirmation poll, a valid
machine class / secret pair, and an in-memory control plane.
"""

import sys
from unittest.mock import MagicMock, patch

import pytest

from onmetal_driver.domain.entities.machine_request import MachineClass, Secret
from onmetal_driver.infrastructure.adapters.in_memory_backend import InMemoryBackend


class FakeClock:
    """Virtual time: sleep() advances the clock instantly."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


VALID_PROVIDER_SPEC = {
    "image": "ghcr.io/onmetal/gardenlinux:rootfs-dev",
    "rootDisk": {"volumeClassName": "fast", "size": "10Gi"},
    "networkName": "shoot-net",
    "prefixName": "shoot-prefix",
    "machineClassName": "x3-xlarge",
    "dnsServers": ["8.8.8.8", "2001:4860:4860::8888"],
    "labels": {"shoot": "test", "role": "worker"},
}


OTEL_MODULES = (
    "opentelemetry",
    "opentelemetry.metrics",
    "opentelemetry.sdk",
    "opentelemetry.sdk.metrics",
    "opentelemetry.sdk.metrics.export",
    "opentelemetry.sdk.resources",
    "opentelemetry.exporter",
    "opentelemetry.exporter.otlp",
    "opentelemetry.exporter.otlp.proto",
    "opentelemetry.exporter.otlp.proto.grpc",
    "opentelemetry.exporter.otlp.proto.grpc.metric_exporter",
)


@pytest.fixture
def otel_sdk():
    """Replace the OpenTelemetry SDK modules with mocks for the test."""
    modules = {name: MagicMock() for name in OTEL_MODULES}
    with patch.dict(sys.modules, modules):
        yield modules


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def machine_class():
    return MachineClass(name="worker-class", provider="onmetal", provider_spec=VALID_PROVIDER_SPEC)


@pytest.fixture
def secret():
    return Secret(data={"userData": b"#cloud-config\nhostname: m1\n"})


@pytest.fixture
def backend():
    return InMemoryBackend()
