from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager

from efrsb.fetcher.base import BaseRecordFetcher
from efrsb.fetcher.exceptions import FetchSessionError, SessionBusyError
from efrsb.logging.logger import Log


class FetchSessionManager:
    """Owns the single browser session a batch runs against.

    At most one session is held at a time. A second ``acquire`` while one is
    held is rejected with SessionBusyError instead of sharing the session.
    """

    def __init__(self, factory: Callable[[], BaseRecordFetcher]) -> None:
        self._factory = factory
        self._handle: BaseRecordFetcher | None = None
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    async def acquire(self) -> BaseRecordFetcher:
        """Create and open a fetcher.

        Raises:
            SessionBusyError: if another caller holds the session.
            FetchSessionError: if the fetcher cannot be created or opened.
        """
        if self._busy:
            raise SessionBusyError("Поиск уже выполняется, дождитесь завершения")
        # Claimed before the first await so concurrent callers see it.
        self._busy = True
        try:
            fetcher = self._factory()
        except Exception as exc:
            self._busy = False
            raise FetchSessionError(f"Не удалось создать сессию: {exc}") from exc
        except BaseException:
            self._busy = False
            raise

        try:
            await fetcher.open()
        except BaseException as exc:
            # Includes cancellation mid-open: the half-open browser is closed
            # and the slot freed before the error propagates.
            Log.error(f"Failed to open fetch session: {exc!r}")
            try:
                await self._close_quietly(fetcher)
            finally:
                self._busy = False
            if isinstance(exc, Exception) and not isinstance(exc, FetchSessionError):
                raise FetchSessionError(f"Не удалось открыть сессию: {exc}") from exc
            raise

        self._handle = fetcher
        Log.info("Fetch session acquired")
        return fetcher

    async def release(self, handle: BaseRecordFetcher) -> None:
        """Close the handle. A handle that is not the current one is ignored."""
        if handle is not self._handle:
            Log.warning("Release called for a session that is not held, ignoring")
            return
        self._handle = None
        try:
            await self._close_quietly(handle)
        finally:
            self._busy = False
        Log.info("Fetch session released")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[BaseRecordFetcher, None]:
        """Yield an open fetcher and release it however the block exits."""
        handle = await self.acquire()
        try:
            yield handle
        finally:
            await self.release(handle)

    @staticmethod
    async def _close_quietly(fetcher: BaseRecordFetcher) -> None:
        try:
            await fetcher.close()
        except Exception as exc:
            Log.warning(f"Error while closing fetch session: {exc}")
