import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from efrsb.config.settings import Settings
from efrsb.fetcher.captcha import NoopCaptchaSolver
from efrsb.fetcher.exceptions import FetchSessionError
from efrsb.fetcher.playwright_adapter import (
    LOAD_MORE,
    REGION_INPUT,
    REGION_INPUT_FALLBACK,
    SEARCH_INPUT,
    PlaywrightRecordFetcher,
)
from efrsb.search.models import SearchKind, SearchQuery

QUERY = SearchQuery(kind=SearchKind.INN, text="7707083893", region="Ростовская область")


def _make_page(cards: list[dict[str, str]] | None = None) -> MagicMock:
    page = MagicMock()
    for name in (
        "goto",
        "inner_text",
        "query_selector",
        "wait_for_selector",
        "fill",
        "click",
        "wait_for_timeout",
        "evaluate",
    ):
        setattr(page, name, AsyncMock())
    page.keyboard.press = AsyncMock()
    page.query_selector.return_value = None
    page.inner_text.return_value = "Поиск должников"
    page.is_visible = AsyncMock(return_value=False)
    page.eval_on_selector_all = AsyncMock(return_value=cards or [])
    page.is_closed = MagicMock(return_value=False)
    return page


def _make_fetcher(page: MagicMock) -> tuple[PlaywrightRecordFetcher, MagicMock]:
    settings = Settings(selector_timeout_ms=1000, results_wait_ms=0)
    fetcher = PlaywrightRecordFetcher(settings=settings, captcha_solver=NoopCaptchaSolver())
    browser = MagicMock()
    browser.is_connected = MagicMock(return_value=True)
    browser.close = AsyncMock()
    fetcher._browser = browser
    fetcher._page = page
    return fetcher, browser


def _card(**fields: str) -> dict[str, str]:
    card = {
        "text": "",
        "name": "",
        "address": "",
        "ogrn": "",
        "status": "",
        "status_date": "",
        "manager": "",
    }
    card.update(fields)
    return card


class TestFetchOne:
    def test_scrapes_result_cards(self) -> None:
        page = _make_page(
            [_card(text="Дело А53-1/2024 ИНН 7707083893", name="ООО Пример", status_date="01.01.2024")]
        )
        fetcher, _browser = _make_fetcher(page)

        result = asyncio.run(fetcher.fetch_one(QUERY))

        assert result.success is True
        assert result.total_found == 1
        record = result.records[0]
        assert record.case_number == "А53-1/2024"
        assert record.debtor_name == "ООО Пример"
        assert record.region == "Ростовская область"
        page.fill.assert_any_await(SEARCH_INPUT, "7707083893")
        page.fill.assert_any_await(REGION_INPUT, "Ростовская область")
        page.keyboard.press.assert_awaited_once_with("Enter")

    def test_no_cards_is_success_with_zero_records(self) -> None:
        fetcher, _browser = _make_fetcher(_make_page())

        result = asyncio.run(fetcher.fetch_one(QUERY))

        assert result.success is True
        assert result.records == ()

    def test_clicks_load_more_until_hidden(self) -> None:
        page = _make_page()
        page.is_visible.side_effect = [True, True, False]
        fetcher, _browser = _make_fetcher(page)

        asyncio.run(fetcher.fetch_one(QUERY))

        load_more_clicks = [c for c in page.click.await_args_list if c.args == (LOAD_MORE,)]
        assert len(load_more_clicks) == 2

    def test_missing_search_input_is_item_error(self) -> None:
        page = _make_page()

        async def wait_for_selector(selector: str, **_kwargs: object) -> None:
            if selector == SEARCH_INPUT:
                raise PlaywrightTimeoutError("Timeout 1000ms exceeded")

        page.wait_for_selector.side_effect = wait_for_selector
        fetcher, _browser = _make_fetcher(page)

        result = asyncio.run(fetcher.fetch_one(QUERY))

        assert result.success is False
        assert result.error == "Поле поиска не найдено на странице"

    def test_region_falls_back_to_second_selector(self) -> None:
        page = _make_page()

        async def wait_for_selector(selector: str, **_kwargs: object) -> None:
            if selector == REGION_INPUT:
                raise PlaywrightTimeoutError("Timeout 1000ms exceeded")

        page.wait_for_selector.side_effect = wait_for_selector
        fetcher, _browser = _make_fetcher(page)

        result = asyncio.run(fetcher.fetch_one(QUERY))

        assert result.success is True
        page.fill.assert_any_await(REGION_INPUT_FALLBACK, "Ростовская область")

    def test_unsolved_captcha_is_item_error(self) -> None:
        page = _make_page()
        captcha = MagicMock()
        captcha.get_attribute = AsyncMock(return_value="site-key")
        page.query_selector.return_value = captcha
        fetcher, _browser = _make_fetcher(page)

        result = asyncio.run(fetcher.fetch_one(QUERY))

        assert result.success is False
        assert "CAPTCHA" in (result.error or "")

    def test_playwright_error_with_live_browser_is_item_error(self) -> None:
        page = _make_page()
        page.eval_on_selector_all.side_effect = PlaywrightError("Execution context was destroyed")
        fetcher, _browser = _make_fetcher(page)

        result = asyncio.run(fetcher.fetch_one(QUERY))

        assert result.success is False
        assert "Execution context" in (result.error or "")

    def test_disconnected_browser_is_fatal(self) -> None:
        page = _make_page()
        page.fill.side_effect = PlaywrightError("Target page, context or browser has been closed")
        fetcher, browser = _make_fetcher(page)
        browser.is_connected.side_effect = [True, False]

        with pytest.raises(FetchSessionError, match="потеряна"):
            asyncio.run(fetcher.fetch_one(QUERY))

    def test_unopened_session_is_fatal(self) -> None:
        fetcher = PlaywrightRecordFetcher(settings=Settings(), captcha_solver=NoopCaptchaSolver())

        with pytest.raises(FetchSessionError):
            asyncio.run(fetcher.fetch_one(QUERY))


class TestOpenClose:
    def _patch_playwright(self, page: MagicMock) -> tuple[MagicMock, MagicMock, MagicMock]:
        browser = MagicMock()
        browser.new_page = AsyncMock(return_value=page)
        browser.close = AsyncMock()
        playwright = MagicMock()
        playwright.chromium.launch = AsyncMock(return_value=browser)
        playwright.stop = AsyncMock()
        starter = MagicMock()
        starter.start = AsyncMock(return_value=playwright)
        return starter, playwright, browser

    def test_open_loads_registry_page(self) -> None:
        page = _make_page()
        starter, playwright, browser = self._patch_playwright(page)
        fetcher = PlaywrightRecordFetcher(settings=Settings(), captcha_solver=NoopCaptchaSolver())

        async def scenario() -> None:
            await fetcher.open()
            await fetcher.close()

        with patch("efrsb.fetcher.playwright_adapter.async_playwright", return_value=starter):
            asyncio.run(scenario())

        page.goto.assert_awaited_once()
        assert page.goto.await_args.args[0] == "https://bankrot.fedresurs.ru/bankrupts"
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()

    def test_blocked_access_fails_open(self) -> None:
        page = _make_page()
        page.inner_text.return_value = "Доступ запрещён"
        starter, _playwright, _browser = self._patch_playwright(page)
        fetcher = PlaywrightRecordFetcher(settings=Settings(), captcha_solver=NoopCaptchaSolver())

        with (
            patch("efrsb.fetcher.playwright_adapter.async_playwright", return_value=starter),
            pytest.raises(FetchSessionError, match="заблокировал"),
        ):
            asyncio.run(fetcher.open())

    def test_close_without_open_is_noop(self) -> None:
        fetcher = PlaywrightRecordFetcher(settings=Settings(), captcha_solver=NoopCaptchaSolver())
        asyncio.run(fetcher.close())
