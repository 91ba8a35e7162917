"""
Identity and Naming

Architectural Intent:
- Deterministic mapping from backend objects to the external machine ID
- Deterministic name of the ignition secret belonging to a machine, so the
  delete path can address it without a lookup table
"""

from onmetal_driver.domain.value_objects.backend_object import BackendObject

PROVIDER_NAME = "onmetal"
IGNITION_PREFIX = "ignition"


def provider_id_for_machine(obj: BackendObject, provider_name: str = PROVIDER_NAME) -> str:
    """External machine ID: ``<provider>://<namespace>/<name>``."""
    return f"{provider_name}://{obj.namespace}/{obj.name}"


def ignition_secret_name(machine_name: str) -> str:
    return f"{IGNITION_PREFIX}-{machine_name}"
