import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from efrsb.fetcher.base import BaseRecordFetcher
from efrsb.fetcher.session import FetchSessionManager
from efrsb.search.models import CaseRecord, FetchResult, SearchKind, SearchQuery
from efrsb.search.searcher import SearchService, validate_query


def _make_service(result: FetchResult | None = None) -> tuple[SearchService, MagicMock]:
    fetcher = MagicMock(spec=BaseRecordFetcher)
    fetcher.open = AsyncMock()
    fetcher.close = AsyncMock()
    fetcher.fetch_one = AsyncMock(return_value=result or FetchResult(success=True))
    return SearchService(FetchSessionManager(lambda: fetcher)), fetcher


class TestValidateQuery:
    @pytest.mark.parametrize(
        ("query", "fragment"),
        [
            (SearchQuery(kind=SearchKind.DEBTOR, text="  "), "пустым"),
            (SearchQuery(kind=SearchKind.DEBTOR, text="ab"), "минимум 3"),
            (SearchQuery(kind=SearchKind.INN, text="1234567890"), "контрольная сумма"),
        ],
    )
    def test_rejects(self, query: SearchQuery, fragment: str) -> None:
        message = validate_query(query)
        assert message is not None and fragment in message

    def test_accepts_valid_queries(self) -> None:
        assert validate_query(SearchQuery(kind=SearchKind.DEBTOR, text="Ромашка")) is None
        assert validate_query(SearchQuery(kind=SearchKind.INN, text="7707083893")) is None


class TestSearchService:
    def test_invalid_query_does_not_open_session(self) -> None:
        service, fetcher = _make_service()

        result = asyncio.run(service.search(SearchQuery(kind=SearchKind.INN, text="bad")))

        assert result.success is False
        fetcher.open.assert_not_awaited()

    def test_runs_query_in_scoped_session(self) -> None:
        case = CaseRecord(case_number="А1-1/2024", debtor_name="X", status="s", court="c")
        service, fetcher = _make_service(FetchResult(success=True, records=(case,)))

        result = asyncio.run(
            service.search(SearchQuery(kind=SearchKind.DEBTOR, text="  Ромашка ", region="r"))
        )

        assert result.records == (case,)
        fetcher.fetch_one.assert_awaited_once_with(
            SearchQuery(kind=SearchKind.DEBTOR, text="Ромашка", region="r")
        )
        fetcher.open.assert_awaited_once()
        fetcher.close.assert_awaited_once()

    def test_session_failure_becomes_failed_result(self) -> None:
        service, fetcher = _make_service()
        fetcher.open.side_effect = RuntimeError("no browser")

        result = asyncio.run(service.search(SearchQuery(kind=SearchKind.DEBTOR, text="Ромашка")))

        assert result.success is False
        assert "no browser" in (result.error or "")
