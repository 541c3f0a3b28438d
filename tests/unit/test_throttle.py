import asyncio
from unittest.mock import AsyncMock

import pytest

from efrsb.search.throttle import FixedDelayThrottle, NoThrottle


class TestFixedDelayThrottle:
    def test_sleeps_configured_delay(self) -> None:
        sleep = AsyncMock()
        throttle = FixedDelayThrottle(1.0, sleep=sleep)

        asyncio.run(throttle.wait())

        sleep.assert_awaited_once_with(1.0)

    def test_sleeps_on_every_wait(self) -> None:
        sleep = AsyncMock()
        throttle = FixedDelayThrottle(0.5, sleep=sleep)

        async def scenario() -> None:
            for _ in range(3):
                await throttle.wait()

        asyncio.run(scenario())
        assert sleep.await_count == 3

    def test_rejects_negative_delay(self) -> None:
        with pytest.raises(ValueError, match="negative"):
            FixedDelayThrottle(-1)


class TestNoThrottle:
    def test_returns_immediately(self) -> None:
        assert asyncio.run(NoThrottle().wait()) is None
