"""
Deletion Confirmation

Architectural Intent:
- Actively waits until a deleted object is gone from the control plane
- The machine controller treats a successful delete as final, so returning
  before the object disappears lets a stale node registration come back

Polling Strategy:
- First fetch happens immediately, then one fetch per interval
- Terminal outcomes: fetch reports not-found (confirmed), any other fetch
  error (failed), or the deadline passes (timed out)
- Time comes from an injected ClockPort so tests can run on virtual time
- A fetch or delay that is cancelled propagates the cancellation untouched
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from onmetal_driver.domain.ports.backend_client_port import ObjectNotFoundError
from onmetal_driver.domain.ports.clock_port import ClockPort

logger = logging.getLogger(__name__)


class ConfirmationTimeout(Exception):
    """The object was still present when the poll deadline passed."""

    def __init__(self, attempts: int, timeout: float) -> None:
        super().__init__(
            f"object still present after {attempts} checks in {timeout:g}s"
        )
        self.attempts = attempts
        self.timeout = timeout


class ConfirmationFailed(Exception):
    """A fetch failed for a reason other than the object being absent."""

    def __init__(self, attempts: int, cause: Exception) -> None:
        super().__init__(str(cause))
        self.attempts = attempts
        self.cause = cause


@dataclass(frozen=True)
class PollPolicy:
    interval: float
    timeout: float

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {self.interval}")
        if self.timeout < self.interval:
            raise ValueError(
                f"Poll timeout {self.timeout} must not be shorter than interval {self.interval}"
            )


async def wait_until_absent(
    fetch: Callable[[], Awaitable[object]],
    policy: PollPolicy,
    clock: ClockPort,
) -> int:
    """
    Poll ``fetch`` until it raises ObjectNotFoundError.

    Returns the number of fetches performed. Raises ConfirmationFailed on any
    other fetch error and ConfirmationTimeout once the deadline has passed.
    """
    deadline = clock.monotonic() + policy.timeout
    attempts = 0

    while True:
        attempts += 1
        try:
            await fetch()
        except ObjectNotFoundError:
            logger.debug("Object absent after %d check(s)", attempts)
            return attempts
        except Exception as e:
            raise ConfirmationFailed(attempts, e) from e

        if clock.monotonic() >= deadline:
            raise ConfirmationTimeout(attempts, policy.timeout)

        logger.debug("Object still present (check %d), retrying in %gs", attempts, policy.interval)
        await clock.sleep(policy.interval)
