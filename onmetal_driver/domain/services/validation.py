"""
Provider Spec Validation Service

Architectural Intent:
- Gate in front of every backend call: a request whose provider spec or
  secret violates a rule never reaches the control plane
- Pure and synchronous; returns every violation instead of stopping at the
  first, so an operator can fix a machine class in one pass

Rules:
- missing secret reference: one Required error at spec.secretRef, secret
  content checks skipped
- secret.userData, spec.image, spec.rootDisk.volumeClassName,
  spec.networkName, spec.prefixName: Required when empty
- spec.dnsServers[i]: Invalid unless it parses to a specified IP address
"""

from __future__ import annotations
import ipaddress
from typing import Optional

from onmetal_driver.domain.entities.machine_request import Secret
from onmetal_driver.domain.value_objects.field_path import FieldError, FieldPath
from onmetal_driver.domain.value_objects.provider_spec import ProviderSpec

USER_DATA_KEY = "userData"


def validate_provider_spec_and_secret(
    spec: ProviderSpec,
    secret: Optional[Secret],
    path: Optional[FieldPath] = None,
) -> list[FieldError]:
    root = FieldPath.of(path)
    errors: list[FieldError] = []

    if secret is None:
        errors.append(
            FieldError.required(root.child("spec", "secretRef"), "secretRef is required")
        )
    else:
        errors.extend(_validate_secret(secret, root))

    errors.extend(_validate_spec(spec, root.child("spec")))
    return errors


def _validate_secret(secret: Secret, root: FieldPath) -> list[FieldError]:
    if not secret.get(USER_DATA_KEY):
        return [FieldError.required(root.child(USER_DATA_KEY), "userData is required")]
    return []


def _validate_spec(spec: ProviderSpec, path: FieldPath) -> list[FieldError]:
    errors: list[FieldError] = []

    if not spec.image:
        errors.append(FieldError.required(path.child("image"), "image is required"))

    if spec.root_disk is None or not spec.root_disk.volume_class_name:
        errors.append(
            FieldError.required(
                path.child("rootDisk", "volumeClassName"), "volumeClassName is required"
            )
        )

    if not spec.network_name:
        errors.append(
            FieldError.required(path.child("networkName"), "networkName is required")
        )

    if not spec.prefix_name:
        errors.append(
            FieldError.required(path.child("prefixName"), "prefixName is required")
        )

    for i, server in enumerate(spec.dns_servers):
        if not is_valid_ip(server):
            errors.append(
                FieldError.invalid(path.child("dnsServers").index(i), server, "ip is invalid")
            )

    return errors


def is_valid_ip(value: str) -> bool:
    """A parseable IPv4/IPv6 address other than the unspecified address."""
    try:
        addr = ipaddress.ip_address(value)
    except ValueError:
        return False
    return not addr.is_unspecified
