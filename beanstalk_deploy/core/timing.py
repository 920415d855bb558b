"""Clock used by the reconciliation loop.

The loop never calls ``asyncio.sleep`` or reads the time directly, so tests can
drive poll ticks and deadlines without waiting.
"""

import asyncio
from abc import ABC, abstractmethod


class Clock(ABC):
    """Monotonic time source with an awaitable sleep."""

    @abstractmethod
    def now(self) -> float:
        """Current monotonic time in seconds."""
        pass

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the caller for ``seconds``."""
        pass

    async def sleep_until(self, when: float) -> None:
        """Suspend until ``when``; returns immediately if it already passed."""
        delay = when - self.now()
        if delay > 0:
            await self.sleep(delay)


class LoopClock(Clock):
    """Clock backed by the running asyncio event loop."""

    def now(self) -> float:
        return asyncio.get_running_loop().time()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
