"""
Request Checks

Architectural Intent:
- Fast, synchronous gates shared by every use case
- Each raises MachineError(INVALID_ARGUMENT) before any backend call
"""

from typing import Any, Optional

from onmetal_driver.domain.entities.machine_request import (
    MachineClass,
    Secret,
    is_empty_machine_request,
)
from onmetal_driver.domain.services.validation import validate_provider_spec_and_secret
from onmetal_driver.domain.value_objects.field_path import aggregate
from onmetal_driver.domain.value_objects.provider_spec import (
    ProviderSpec,
    ProviderSpecError,
)
from onmetal_driver.domain.value_objects.status import Code, MachineError


def ensure_complete(request: Any) -> None:
    if is_empty_machine_request(request):
        raise MachineError(Code.INVALID_ARGUMENT, "received empty request")
    if not request.machine.name:
        raise MachineError(Code.INVALID_ARGUMENT, "machine name is required")


def ensure_provider(machine_class: Optional[MachineClass], provider_name: str) -> None:
    if machine_class is None:
        raise MachineError(Code.INVALID_ARGUMENT, "received empty request")
    if machine_class.provider != provider_name:
        raise MachineError(
            Code.INVALID_ARGUMENT,
            f"requested provider '{machine_class.provider}' is not supported "
            f"by the driver '{provider_name}'",
        )


def validated_provider_spec(
    machine_class: MachineClass, secret: Optional[Secret]
) -> ProviderSpec:
    """Decode and validate the class's provider spec against the secret."""
    try:
        spec = ProviderSpec.from_dict(machine_class.provider_spec)
    except ProviderSpecError as e:
        raise MachineError.wrap(
            Code.INVALID_ARGUMENT,
            e,
            f"provider spec for requested provider '{machine_class.provider}' is invalid",
        ) from e

    errors = validate_provider_spec_and_secret(spec, secret)
    if errors:
        raise MachineError(
            Code.INVALID_ARGUMENT,
            f"provider spec for requested provider '{machine_class.provider}' "
            f"is invalid: {aggregate(errors)}",
        )
    return spec
