import asyncio
import inspect
from collections.abc import Awaitable, Callable

from efrsb.logging.logger import Log
from efrsb.search.models import ProgressEvent

ProgressHandler = Callable[[ProgressEvent], None] | Callable[[ProgressEvent], Awaitable[None]]


class ProgressChannel:
    """Publish/subscribe fan-out for batch progress events.

    Events go only to handlers registered at publish time; nothing is
    buffered for late subscribers. Handler failures are logged and dropped
    so a broken observer can never stop a batch.

    Coroutine handlers run as tasks chained per handler: each delivery
    starts only after that handler's previous delivery has finished, so a
    single subscriber always sees events in publish order.
    """

    def __init__(self) -> None:
        self._handlers: list[ProgressHandler] = []
        self._pending: set[asyncio.Task[None]] = set()
        self._tails: dict[ProgressHandler, asyncio.Task[None]] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: ProgressHandler) -> Callable[[], None]:
        """Register a handler and return a callable that removes it."""
        self._handlers.append(handler)
        return lambda: self.unsubscribe(handler)

    def unsubscribe(self, handler: ProgressHandler) -> None:
        try:
            self._handlers.remove(handler)
        except ValueError:
            pass
        self._tails.pop(handler, None)

    def publish(self, event: ProgressEvent) -> None:
        Log.debug(
            f"Progress {event.position}/{event.total} ({event.percentage}%): "
            f"{event.current_identifier}"
        )
        for handler in list(self._handlers):
            try:
                result = handler(event)
            except Exception as exc:
                Log.warning(f"Progress subscriber failed: {exc}")
                continue
            if inspect.isawaitable(result):
                self._schedule(handler, result)

    def _schedule(self, handler: ProgressHandler, awaitable: Awaitable[None]) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            Log.warning("Progress subscriber skipped: coroutine handler needs a running loop")
            return

        previous = self._tails.get(handler)
        task = asyncio.ensure_future(self._deliver_after(previous, awaitable))
        self._tails[handler] = task
        self._pending.add(task)
        task.add_done_callback(lambda done: self._on_done(handler, done))

    @staticmethod
    async def _deliver_after(
        previous: "asyncio.Task[None] | None", awaitable: Awaitable[None]
    ) -> None:
        if previous is not None and not previous.done():
            # Failures of the previous delivery are reported by its own callback.
            try:
                await asyncio.wait([previous])
            except asyncio.CancelledError:
                if inspect.iscoroutine(awaitable):
                    awaitable.close()
                raise
        await awaitable

    def _on_done(self, handler: ProgressHandler, task: "asyncio.Task[None]") -> None:
        self._pending.discard(task)
        if self._tails.get(handler) is task:
            del self._tails[handler]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            Log.warning(f"Progress subscriber failed: {exc}")


class ProgressSnapshot:
    """Last published progress event, for clients that poll.

    Process-wide and last-write-wins: it is not scoped to a batch, and
    assumes at most one batch is in flight.
    """

    def __init__(self) -> None:
        self._current = ProgressEvent.placeholder()

    def current(self) -> ProgressEvent:
        return self._current

    def update(self, event: ProgressEvent) -> None:
        self._current = event

    def attach(self, channel: ProgressChannel) -> Callable[[], None]:
        return channel.subscribe(self.update)


class QueueSubscriber:
    """Feeds channel events into a bounded asyncio.Queue.

    When the consumer falls behind, the oldest queued event is dropped so
    ``publish`` never waits on it.
    """

    def __init__(self, channel: ProgressChannel, maxsize: int = 100) -> None:
        self.queue: asyncio.Queue[ProgressEvent] = asyncio.Queue(maxsize=maxsize)
        self._unsubscribe = channel.subscribe(self._offer)

    def _offer(self, event: ProgressEvent) -> None:
        if self.queue.full():
            self.queue.get_nowait()
        self.queue.put_nowait(event)

    async def get(self) -> ProgressEvent:
        return await self.queue.get()

    def close(self) -> None:
        self._unsubscribe()

    def __enter__(self) -> "QueueSubscriber":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
