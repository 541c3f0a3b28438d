import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable


class BaseThrottle(ABC):
    """Pause between consecutive requests to the registry."""

    @abstractmethod
    async def wait(self) -> None:
        """Suspend until the next request may be sent."""


class FixedDelayThrottle(BaseThrottle):
    """Waits the same delay after every item.

    ``sleep`` is injectable so tests can record delays instead of waiting.
    """

    def __init__(
        self,
        delay_seconds: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")
        self._delay_seconds = delay_seconds
        self._sleep = sleep

    @property
    def delay_seconds(self) -> float:
        return self._delay_seconds

    async def wait(self) -> None:
        await self._sleep(self._delay_seconds)


class NoThrottle(BaseThrottle):
    async def wait(self) -> None:
        return None
