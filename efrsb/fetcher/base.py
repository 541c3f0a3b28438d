from abc import ABC, abstractmethod

from efrsb.search.models import FetchResult, SearchQuery


class BaseRecordFetcher(ABC):
    """Contract for all registry fetching adapters.

    One instance is one stateful session: ``open`` once, run any number of
    sequential ``fetch_one`` calls, then ``close``.
    """

    @abstractmethod
    async def open(self) -> None:
        """Start the session.

        Raises:
            FetchSessionError: if the session cannot be established.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release everything the session holds. Safe to call twice."""

    @abstractmethod
    async def fetch_one(self, query: SearchQuery) -> FetchResult:
        """Run a single registry query.

        Per-query problems (blocked access, missing form elements, timeouts,
        unresolved challenges, unexpected markup) are reported as
        ``FetchResult(success=False, error=...)``.

        Raises:
            FetchSessionError: only when the session is no longer usable.
        """
