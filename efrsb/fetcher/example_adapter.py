"""Example registry fetcher adapter.

Use this module as a reference when implementing new fetcher adapters.
Implement BaseRecordFetcher and register the engine in FetcherFactory.
"""

from efrsb.fetcher.base import BaseRecordFetcher
from efrsb.fetcher.exceptions import FetchSessionError
from efrsb.search.models import CaseRecord, FetchResult, SearchQuery


class ExampleRecordFetcher(BaseRecordFetcher):
    """Offline adapter with a fixed in-memory registry.

    No browser and no network calls. Queries matching a known INN, debtor
    name fragment or case number return that case; everything else returns
    zero records.
    """

    CASES: tuple[CaseRecord, ...] = (
        CaseRecord(
            case_number="А53-12345/2023",
            debtor_name='ООО "Пример"',
            inn="7707083893",
            ogrn="1027700132195",
            status="Конкурсное производство",
            court="Арбитражный суд",
            manager="Иванов Иван Иванович",
            region="Донецкая Народная Республика",
        ),
    )

    def __init__(self) -> None:
        self._opened = False

    async def open(self) -> None:
        self._opened = True

    async def close(self) -> None:
        self._opened = False

    async def fetch_one(self, query: SearchQuery) -> FetchResult:
        if not self._opened:
            raise FetchSessionError("Сессия не открыта")
        needle = query.text.strip().lower()
        matches = tuple(
            case
            for case in self.CASES
            if needle
            and (
                needle == (case.inn or "")
                or needle == case.case_number.lower()
                or needle in case.debtor_name.lower()
            )
        )
        return FetchResult(success=True, records=matches)
