"""
Clock Port

Architectural Intent:
- Time source for the delete confirmation poll
- Lets tests advance virtual time instead of sleeping
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ClockPort(Protocol):
    def monotonic(self) -> float:
        """Seconds on a monotonic clock."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend the caller for the given number of seconds."""
        ...
