"""Tests for ListMachines use case."""

import pytest

from onmetal_driver.application.use_cases.list_machines import ListMachines
from onmetal_driver.domain.entities.machine_request import (
    ListMachinesRequest,
    MachineClass,
    Secret,
)
from onmetal_driver.domain.ports.backend_client_port import BackendError
from onmetal_driver.domain.value_objects.backend_object import MACHINE_KIND, BackendObject
from onmetal_driver.domain.value_objects.status import Code, MachineError

NAMESPACE = "shoot--test"


def _machine(name, labels=None, namespace=NAMESPACE) -> BackendObject:
    return BackendObject(
        kind=MACHINE_KIND, name=name, namespace=namespace, labels=labels or {}
    )


def _class_with_labels(machine_class, labels) -> MachineClass:
    spec = dict(machine_class.provider_spec, labels=labels)
    return MachineClass(name=machine_class.name, provider="onmetal", provider_spec=spec)


@pytest.fixture
def populated(backend):
    backend.seed(
        _machine("m1", {"shoot": "test", "role": "worker"}),
        _machine("m2", {"shoot": "test", "role": "worker", "zone": "a"}),
        _machine("m3", {"shoot": "test", "role": "control"}),
        _machine("m4", {"shoot": "other"}),
        _machine("m5", {"shoot": "test", "role": "worker"}, namespace="elsewhere"),
    )
    return backend


class TestListMachines:
    @pytest.mark.asyncio
    async def test_label_subset(self, populated, machine_class, secret):
        use_case = ListMachines(populated, NAMESPACE, "onmetal")
        response = await use_case.execute(ListMachinesRequest(machine_class, secret))
        assert response.machine_list == {
            f"onmetal://{NAMESPACE}/m1": "m1",
            f"onmetal://{NAMESPACE}/m2": "m2",
        }

    @pytest.mark.asyncio
    async def test_empty_labels_select_whole_namespace(self, populated, machine_class, secret):
        use_case = ListMachines(populated, NAMESPACE, "onmetal")
        request = ListMachinesRequest(_class_with_labels(machine_class, {}), secret)
        response = await use_case.execute(request)
        assert sorted(response.machine_list.values()) == ["m1", "m2", "m3", "m4"]

    @pytest.mark.asyncio
    async def test_no_matches(self, populated, machine_class, secret):
        use_case = ListMachines(populated, NAMESPACE, "onmetal")
        request = ListMachinesRequest(_class_with_labels(machine_class, {"shoot": "none"}), secret)
        response = await use_case.execute(request)
        assert response.machine_list == {}

    @pytest.mark.asyncio
    async def test_ids_unique_per_object(self, populated, machine_class, secret):
        use_case = ListMachines(populated, NAMESPACE, "onmetal")
        request = ListMachinesRequest(_class_with_labels(machine_class, {}), secret)
        response = await use_case.execute(request)
        assert len(set(response.machine_list)) == len(response.machine_list) == 4

    @pytest.mark.asyncio
    async def test_single_list_call(self, populated, machine_class, secret):
        use_case = ListMachines(populated, NAMESPACE, "onmetal")
        await use_case.execute(ListMachinesRequest(machine_class, secret))
        assert populated.calls == [("list", MACHINE_KIND, NAMESPACE)]

    @pytest.mark.asyncio
    async def test_backend_failure_is_internal(self, backend, machine_class, secret):
        backend.fail("list", MACHINE_KIND, BackendError("too many requests"))
        use_case = ListMachines(backend, NAMESPACE, "onmetal")
        with pytest.raises(MachineError) as exc_info:
            await use_case.execute(ListMachinesRequest(machine_class, secret))
        assert exc_info.value.code is Code.INTERNAL
        assert "too many requests" in exc_info.value.message


class TestListValidation:
    @pytest.mark.asyncio
    async def test_provider_mismatch(self, backend, secret):
        use_case = ListMachines(backend, NAMESPACE, "onmetal")
        request = ListMachinesRequest(MachineClass(name="c", provider="gcp"), secret)
        with pytest.raises(MachineError) as exc_info:
            await use_case.execute(request)
        assert exc_info.value.code is Code.INVALID_ARGUMENT
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_missing_class(self, backend, secret):
        use_case = ListMachines(backend, NAMESPACE, "onmetal")
        with pytest.raises(MachineError) as exc_info:
            await use_case.execute(ListMachinesRequest(None, secret))
        assert exc_info.value.code is Code.INVALID_ARGUMENT
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_all_violations_reported(self, backend):
        use_case = ListMachines(backend, NAMESPACE, "onmetal")
        machine_class = MachineClass(
            name="c", provider="onmetal", provider_spec={"dnsServers": ["0.0.0.0"]}
        )
        with pytest.raises(MachineError) as exc_info:
            await use_case.execute(ListMachinesRequest(machine_class, Secret(data={})))

        message = exc_info.value.message
        assert exc_info.value.code is Code.INVALID_ARGUMENT
        for field in ("userData", "spec.image", "spec.rootDisk.volumeClassName",
                      "spec.networkName", "spec.prefixName", "spec.dnsServers[0]"):
            assert field in message
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_missing_secret(self, backend, machine_class):
        use_case = ListMachines(backend, NAMESPACE, "onmetal")
        with pytest.raises(MachineError) as exc_info:
            await use_case.execute(ListMachinesRequest(machine_class, None))
        assert exc_info.value.code is Code.INVALID_ARGUMENT
        assert "spec.secretRef" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_malformed_provider_spec(self, backend, secret):
        use_case = ListMachines(backend, NAMESPACE, "onmetal")
        machine_class = MachineClass(name="c", provider="onmetal", provider_spec={"image": 7})
        with pytest.raises(MachineError) as exc_info:
            await use_case.execute(ListMachinesRequest(machine_class, secret))
        assert exc_info.value.code is Code.INVALID_ARGUMENT
        assert "image must be a string" in exc_info.value.message
