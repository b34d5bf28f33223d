"""Bounded-concurrency admission gates.

A gate runs zero-argument coroutine functions, never more than its
capacity at once. Waiters are admitted in arrival order. Errors raised by
the work propagate unchanged and always release the slot.

Gates compose by nesting: a publish is admitted by the request gate
first and the publish gate second.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from pkgpublish.config.defaults import (
    DEFAULT_INFO_CONCURRENCY,
    DEFAULT_PUBLISH_CONCURRENCY,
    OTP_PROMPT_CONCURRENCY,
)

T = TypeVar("T")


class Gate:
    """Admission-controlled queue with a fixed capacity."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"Gate capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._semaphore = asyncio.Semaphore(capacity)
        self.active = 0
        self.pending = 0

    async def run(self, work: Callable[[], Awaitable[T]]) -> T:
        """Wait for a free slot, then run work and return its result."""
        self.pending += 1
        try:
            await self._semaphore.acquire()
        finally:
            self.pending -= 1
        self.active += 1
        try:
            return await work()
        finally:
            self.active -= 1
            self._semaphore.release()

    async def __call__(self, work: Callable[[], Awaitable[T]]) -> T:
        return await self.run(work)

    def __repr__(self) -> str:
        return f"Gate(capacity={self.capacity}, active={self.active}, pending={self.pending})"


@dataclass
class Gates:
    """The three gates every registry operation is admitted through."""

    request: Gate = field(default_factory=lambda: Gate(DEFAULT_INFO_CONCURRENCY))
    publish: Gate = field(default_factory=lambda: Gate(DEFAULT_PUBLISH_CONCURRENCY))
    otp: Gate = field(default_factory=lambda: Gate(OTP_PROMPT_CONCURRENCY))

    @classmethod
    def with_limits(cls, info: int, publish: int) -> "Gates":
        """Create gates with custom registry limits.

        The OTP gate stays the process-wide one so prompts never overlap.
        """
        return cls(request=Gate(info), publish=Gate(publish), otp=default_gates.otp)


# Process-wide gates shared by every caller that does not bring its own
default_gates = Gates()
