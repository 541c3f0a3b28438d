import asyncio
from collections.abc import Sequence

from efrsb.fetcher.base import BaseRecordFetcher
from efrsb.fetcher.exceptions import SessionBusyError
from efrsb.fetcher.session import FetchSessionManager
from efrsb.logging.logger import Log
from efrsb.search.models import (
    DEFAULT_REGION,
    BatchResult,
    ErrorKind,
    ItemOutcome,
    ProgressEvent,
    SearchKind,
    SearchQuery,
)
from efrsb.search.progress import ProgressChannel
from efrsb.search.throttle import BaseThrottle
from efrsb.validation.inn import validate_inn

CANCELLED_MESSAGE = "Массовый поиск отменён"


class BatchOrchestrator:
    """Checks a list of INNs one by one against a single registry session.

    Per item: validate -> fetch (valid only) -> record outcome -> publish
    progress -> throttle. A bad INN or a failed query is recorded on its own
    outcome; only a session failure or cancellation stops the loop.
    """

    def __init__(
        self,
        session_manager: FetchSessionManager,
        channel: ProgressChannel,
        throttle: BaseThrottle,
        default_region: str = DEFAULT_REGION,
    ) -> None:
        self._session_manager = session_manager
        self._channel = channel
        self._throttle = throttle
        self._default_region = default_region

    async def run_batch(
        self,
        identifiers: Sequence[str],
        cancel_event: asyncio.Event | None = None,
    ) -> BatchResult:
        """Process every identifier in order and return the batch result.

        Raises:
            SessionBusyError: if another batch currently holds the session.
        """
        result = BatchResult()
        total = len(identifiers)
        Log.info(f"Starting batch of {total} identifiers")

        try:
            fetcher = await self._session_manager.acquire()
        except SessionBusyError:
            raise
        except Exception as exc:
            Log.error(f"Batch aborted, fetch session unavailable: {exc}")
            return result.abort(str(exc) or type(exc).__name__)

        try:
            await self._run_items(fetcher, identifiers, result, cancel_event)
        except Exception as exc:
            Log.exception(
                f"Batch aborted after {result.total_processed}/{total} items: {exc}"
            )
            result.abort(str(exc) or type(exc).__name__)
        finally:
            await self._session_manager.release(fetcher)

        Log.info(
            f"Batch finished: processed={result.total_processed}/{total} "
            f"success={result.succeeded_overall}"
        )
        return result

    async def _run_items(
        self,
        fetcher: BaseRecordFetcher,
        identifiers: Sequence[str],
        result: BatchResult,
        cancel_event: asyncio.Event | None,
    ) -> None:
        total = len(identifiers)
        for position, raw in enumerate(identifiers, start=1):
            if cancel_event is not None and cancel_event.is_set():
                Log.warning(f"Batch cancelled before item {position}/{total}")
                result.abort(CANCELLED_MESSAGE, ErrorKind.CANCELLED)
                return

            identifier = raw.strip()
            outcome = await self._process_item(fetcher, identifier)
            result.record(outcome)
            self._channel.publish(ProgressEvent.at(position, total, identifier))
            await self._throttle.wait()

        result.finish()

    async def _process_item(self, fetcher: BaseRecordFetcher, identifier: str) -> ItemOutcome:
        validation = validate_inn(identifier)
        if not validation.is_valid:
            Log.info(f"Skipping {identifier!r}: {validation.message}")
            return ItemOutcome.invalid(identifier, validation.message)

        query = SearchQuery(kind=SearchKind.INN, text=identifier, region=self._default_region)
        fetched = await fetcher.fetch_one(query)
        outcome = ItemOutcome.from_fetch(identifier, fetched)
        if outcome.error_kind is ErrorKind.FETCH:
            Log.warning(f"Fetch failed for {identifier}: {outcome.error}")
        else:
            Log.info(f"{identifier}: {outcome.status.value} ({len(outcome.records)} cases)")
        return outcome
