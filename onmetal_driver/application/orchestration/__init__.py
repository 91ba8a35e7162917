"""
Application Orchestration Package

Architectural Intent:
- Contains the bounded polling used to confirm machine deletion
"""

from onmetal_driver.application.orchestration.confirmation import (
    ConfirmationFailed,
    ConfirmationTimeout,
    PollPolicy,
    wait_until_absent,
)

__all__ = [
    "ConfirmationFailed",
    "ConfirmationTimeout",
    "PollPolicy",
    "wait_until_absent",
]
