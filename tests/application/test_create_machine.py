"""Tests for CreateMachine use case."""

import pytest

from onmetal_driver.application.use_cases.create_machine import (
    CreateMachine,
    render_ignition,
)
from onmetal_driver.domain.entities.machine_request import (
    CreateMachineRequest,
    Machine,
    MachineClass,
    Secret,
)
from onmetal_driver.domain.ports.backend_client_port import BackendError
from onmetal_driver.domain.value_objects.backend_object import (
    MACHINE_KIND,
    SECRET_KIND,
    BackendObject,
)
from onmetal_driver.domain.value_objects.object_key import ObjectKey
from onmetal_driver.domain.value_objects.provider_spec import ProviderSpec
from onmetal_driver.domain.value_objects.status import Code, MachineError

NAMESPACE = "shoot--test"


def _request(machine_class, secret, name="m1") -> CreateMachineRequest:
    return CreateMachineRequest(
        machine=Machine(name=name), machine_class=machine_class, secret=secret
    )


class TestCreateMachine:
    @pytest.mark.asyncio
    async def test_creates_secret_then_machine(self, backend, machine_class, secret):
        use_case = CreateMachine(backend, NAMESPACE, "onmetal")
        response = await use_case.execute(_request(machine_class, secret))

        assert response.provider_id == f"onmetal://{NAMESPACE}/m1"
        assert response.node_name == "m1"
        assert backend.calls == [
            ("create", SECRET_KIND, "ignition-m1"),
            ("create", MACHINE_KIND, "m1"),
        ]

    @pytest.mark.asyncio
    async def test_machine_body(self, backend, machine_class, secret):
        await CreateMachine(backend, NAMESPACE, "onmetal").execute(_request(machine_class, secret))
        machine = await backend.get(MACHINE_KIND, ObjectKey(NAMESPACE, "m1"))
        spec = machine.body["spec"]

        assert machine.labels == {"shoot": "test", "role": "worker"}
        assert spec["image"] == "ghcr.io/onmetal/gardenlinux:rootfs-dev"
        assert spec["ignitionRef"] == {"name": "ignition-m1", "key": "ignition"}
        assert spec["machineClassRef"] == {"name": "x3-xlarge"}
        assert spec["networkInterfaces"][0]["networkName"] == "shoot-net"
        assert spec["networkInterfaces"][0]["prefixName"] == "shoot-prefix"
        assert spec["volumes"][0]["volumeClassName"] == "fast"
        assert "machinePoolRef" not in spec

    @pytest.mark.asyncio
    async def test_ignition_secret_body(self, backend, machine_class, secret):
        await CreateMachine(backend, NAMESPACE, "onmetal").execute(_request(machine_class, secret))
        ignition = await backend.get(SECRET_KIND, ObjectKey(NAMESPACE, "ignition-m1"))
        data = ignition.body["data"]
        assert data["ignition"] == secret.data["userData"]
        assert data["dnsServers"] == b"8.8.8.8\n2001:4860:4860::8888"

    @pytest.mark.asyncio
    async def test_existing_objects_are_kept(self, backend, machine_class, secret):
        existing = BackendObject(kind=MACHINE_KIND, name="m1", namespace=NAMESPACE)
        backend.seed(existing)
        response = await CreateMachine(backend, NAMESPACE, "onmetal").execute(
            _request(machine_class, secret)
        )
        assert response.node_name == "m1"
        assert await backend.get(MACHINE_KIND, existing.key) is existing

    @pytest.mark.asyncio
    async def test_backend_failure_is_internal(self, backend, machine_class, secret):
        backend.fail("create", MACHINE_KIND, BackendError("quota exceeded"))
        with pytest.raises(MachineError) as exc_info:
            await CreateMachine(backend, NAMESPACE, "onmetal").execute(
                _request(machine_class, secret)
            )
        assert exc_info.value.code is Code.INTERNAL
        assert "quota exceeded" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_invalid_spec_never_reaches_backend(self, backend, secret):
        machine_class = MachineClass(name="c", provider="onmetal", provider_spec={})
        with pytest.raises(MachineError) as exc_info:
            await CreateMachine(backend, NAMESPACE, "onmetal").execute(
                _request(machine_class, secret)
            )
        assert exc_info.value.code is Code.INVALID_ARGUMENT
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_provider_mismatch(self, backend, secret):
        machine_class = MachineClass(name="c", provider="azure")
        with pytest.raises(MachineError) as exc_info:
            await CreateMachine(backend, NAMESPACE, "onmetal").execute(
                _request(machine_class, secret)
            )
        assert exc_info.value.code is Code.INVALID_ARGUMENT
        assert backend.calls == []


class TestRenderIgnition:
    def test_user_data_only(self):
        secret = Secret(data={"userData": b"base"})
        assert render_ignition(ProviderSpec(), secret) == b"base"

    def test_appends_extra_ignition(self):
        secret = Secret(data={"userData": b"base\n"})
        assert render_ignition(ProviderSpec(ignition="extra"), secret) == b"base\nextra"

    def test_override_replaces_user_data(self):
        secret = Secret(data={"userData": b"base"})
        spec = ProviderSpec(ignition="only", ignition_override=True)
        assert render_ignition(spec, secret) == b"only"
