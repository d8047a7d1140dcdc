"""Retry back-off policy for storage uploads.

The policy is a value object (attempt -> delay, max attempts) and the sleeper
is injected, so retry timing can be asserted in tests without real timers.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable


Sleeper = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class BackoffPolicy:
    """Linear back-off: retry n waits n * base_delay_ms.

    Attributes:
        max_attempts: Total attempts including the first one
        base_delay_ms: Delay unit in milliseconds

    Example:
        >>> policy = BackoffPolicy(max_attempts=3, base_delay_ms=1000)
        >>> [policy.delay_ms(n) for n in (1, 2)]
        [1000, 2000]
    """
    max_attempts: int = 3
    base_delay_ms: int = 1000

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms must not be negative")

    def delay_ms(self, attempt_index: int) -> int:
        """Delay before retry number `attempt_index` (1-based)."""
        return attempt_index * self.base_delay_ms

    def delay_seconds(self, attempt_index: int) -> float:
        return self.delay_ms(attempt_index) / 1000.0


DEFAULT_BACKOFF = BackoffPolicy()


async def default_sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)
