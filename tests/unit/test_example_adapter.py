import asyncio

import pytest

from efrsb.fetcher.example_adapter import ExampleRecordFetcher
from efrsb.fetcher.exceptions import FetchSessionError
from efrsb.search.models import SearchKind, SearchQuery


def _fetch(query: SearchQuery) -> tuple:
    async def scenario() -> tuple:
        fetcher = ExampleRecordFetcher()
        await fetcher.open()
        try:
            return (await fetcher.fetch_one(query)).records
        finally:
            await fetcher.close()

    return asyncio.run(scenario())


class TestExampleRecordFetcher:
    def test_finds_known_inn(self) -> None:
        records = _fetch(SearchQuery(kind=SearchKind.INN, text="7707083893"))
        assert [r.case_number for r in records] == ["А53-12345/2023"]

    def test_finds_by_debtor_name_fragment(self) -> None:
        assert len(_fetch(SearchQuery(kind=SearchKind.DEBTOR, text="пример"))) == 1

    def test_finds_by_case_number(self) -> None:
        assert len(_fetch(SearchQuery(kind=SearchKind.CASE_NUMBER, text="А53-12345/2023"))) == 1

    def test_unknown_inn_is_clean(self) -> None:
        assert _fetch(SearchQuery(kind=SearchKind.INN, text="500100732259")) == ()

    def test_requires_open_session(self) -> None:
        with pytest.raises(FetchSessionError):
            asyncio.run(
                ExampleRecordFetcher().fetch_one(SearchQuery(kind=SearchKind.INN, text="1"))
            )
