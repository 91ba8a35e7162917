"""
Domain Services Package

Architectural Intent:
- Pure request validation and naming rules shared by all use cases
"""

from onmetal_driver.domain.services.naming import (
    PROVIDER_NAME,
    ignition_secret_name,
    provider_id_for_machine,
)
from onmetal_driver.domain.services.validation import (
    USER_DATA_KEY,
    validate_provider_spec_and_secret,
)

__all__ = [
    "PROVIDER_NAME",
    "ignition_secret_name",
    "provider_id_for_machine",
    "USER_DATA_KEY",
    "validate_provider_spec_and_secret",
]
