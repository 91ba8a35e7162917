"""Tests for decoding the provider spec wire format."""

import pytest

from onmetal_driver.domain.value_objects.provider_spec import (
    DEFAULT_IGNITION_SECRET_KEY,
    ProviderSpec,
    ProviderSpecError,
    RootDisk,
)


class TestFromDict:
    def test_full_spec(self):
        spec = ProviderSpec.from_dict({
            "image": "gardenlinux",
            "rootDisk": {"volumeClassName": "fast", "size": "10Gi"},
            "networkName": "net",
            "prefixName": "prefix",
            "dnsServers": ["1.1.1.1", "::1"],
            "labels": {"shoot": "a"},
            "machineClassName": "x3",
            "machinePoolName": "pool-a",
            "ignition": "extra",
            "ignitionOverride": True,
            "ignitionSecretKey": "config",
        })
        assert spec.image == "gardenlinux"
        assert spec.root_disk == RootDisk(volume_class_name="fast", size="10Gi")
        assert spec.network_name == "net"
        assert spec.prefix_name == "prefix"
        assert spec.dns_servers == ("1.1.1.1", "::1")
        assert spec.labels == {"shoot": "a"}
        assert spec.machine_class_name == "x3"
        assert spec.machine_pool_name == "pool-a"
        assert spec.ignition == "extra"
        assert spec.ignition_override is True
        assert spec.ignition_secret_key == "config"

    def test_empty_mapping_gives_defaults(self):
        spec = ProviderSpec.from_dict({})
        assert spec.image == ""
        assert spec.root_disk is None
        assert spec.dns_servers == ()
        assert spec.labels == {}
        assert spec.ignition_secret_key == DEFAULT_IGNITION_SECRET_KEY

    def test_unknown_keys_ignored(self):
        spec = ProviderSpec.from_dict({"image": "x", "futureField": 1})
        assert spec.image == "x"

    def test_null_dns_entry_becomes_empty_string(self):
        spec = ProviderSpec.from_dict({"dnsServers": [None]})
        assert spec.dns_servers == ("",)

    def test_numeric_size_is_stringified(self):
        spec = ProviderSpec.from_dict({"rootDisk": {"volumeClassName": "fast", "size": 10}})
        assert spec.root_disk.size == "10"

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            [],
            "image",
            {"image": 42},
            {"rootDisk": "fast"},
            {"dnsServers": "1.1.1.1"},
            {"labels": ["a"]},
            {"ignitionOverride": "false"},
            {"ignitionOverride": 1},
        ],
    )
    def test_malformed(self, raw):
        with pytest.raises(ProviderSpecError):
            ProviderSpec.from_dict(raw)

    def test_ignition_override_string_rejected(self):
        with pytest.raises(ProviderSpecError, match="ignitionOverride must be a boolean"):
            ProviderSpec.from_dict({"ignitionOverride": "false"})

    @pytest.mark.parametrize("value, expected", [(False, False), (True, True), (None, False)])
    def test_ignition_override_flag(self, value, expected):
        assert ProviderSpec.from_dict({"ignitionOverride": value}).ignition_override is expected
