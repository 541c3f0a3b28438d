from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from efrsb.config.settings import Settings
from efrsb.fetcher.base import BaseRecordFetcher
from efrsb.fetcher.captcha import BaseCaptchaSolver
from efrsb.fetcher.cards import RawCard, parse_cards
from efrsb.fetcher.exceptions import (
    AccessBlockedError,
    CaptchaError,
    FetchError,
    FetchSessionError,
    PageStructureError,
)
from efrsb.logging.logger import Log
from efrsb.search.models import FetchResult, SearchQuery

BLOCKED_PHRASES = ("Доступ запрещён", "Доступ ограничен")

SEARCH_INPUT = '[formcontrolname="searchString"]'
REGION_INPUT = 'input[role="combobox"]:not([readonly])'
REGION_INPUT_FALLBACK = 'input[role="combobox"][aria-expanded]'
SEARCH_BUTTONS = (".u-svg-lupa", ".itm-lupa", ".itm-lupa__img")
RECAPTCHA = ".g-recaptcha"
CAPTCHA_SUBMIT = 'input[type="submit"], button[type="submit"]'
RESULT_CARD = ".u-card-result__wrapper"
LOAD_MORE = ".btn_load_more"

_SCRAPE_CARDS_JS = """
cards => cards.map(card => {
  const pick = sel => {
    const node = card.querySelector(sel);
    return node ? node.textContent : '';
  };
  return {
    text: card.textContent || '',
    name: pick('.u-card-result__name span'),
    address: pick('.u-card-result__value_adr'),
    ogrn: pick('.u-card-result__item-id:nth-child(2) .u-card-result__value_fw'),
    status: pick('.u-card-result__value_item-property'),
    status_date: pick('.status-date'),
    manager: pick('.u-card-result__manager .u-card-result__value_w230'),
  };
})
"""

_FILL_CAPTCHA_JS = """
code => {
  const textarea = document.getElementById('g-recaptcha-response');
  if (textarea) textarea.value = code;
}
"""


class PlaywrightRecordFetcher(BaseRecordFetcher):
    """Drives the bankrot.fedresurs.ru search form in a headless Chromium."""

    def __init__(self, settings: Settings, captcha_solver: BaseCaptchaSolver) -> None:
        self._settings = settings
        self._captcha_solver = captcha_solver
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._page: Page | None = None

    async def open(self) -> None:
        Log.info("Launching browser")
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._settings.browser_headless,
                slow_mo=self._settings.browser_slow_mo_ms,
            )
            self._page = await self._browser.new_page(
                user_agent=self._settings.browser_user_agent
            )
            Log.info(f"Opening {self._settings.efrsb_base_url}")
            await self._page.goto(
                self._settings.efrsb_base_url,
                wait_until="networkidle",
                timeout=self._settings.navigation_timeout_ms,
            )
            await self._ensure_not_blocked(self._page)
            await self._resolve_captcha(self._page)
        except FetchError as exc:
            raise FetchSessionError(str(exc)) from exc
        except PlaywrightError as exc:
            raise FetchSessionError(f"Не удалось открыть страницу реестра: {exc}") from exc
        Log.info("Registry page loaded")

    async def close(self) -> None:
        browser, playwright = self._browser, self._playwright
        self._browser = None
        self._page = None
        self._playwright = None
        try:
            if browser is not None:
                Log.info("Closing browser")
                await browser.close()
        finally:
            if playwright is not None:
                await playwright.stop()

    async def fetch_one(self, query: SearchQuery) -> FetchResult:
        page = self._require_page()
        Log.info(f"Searching registry: kind={query.kind.value} query={query.text!r}")
        try:
            await self._fill_search(page, query)
            await self._select_region(page, query.region)
            await self._resolve_captcha(page)
            await self._submit(page)
            await page.wait_for_timeout(self._settings.results_wait_ms)
            await self._load_all_pages(page)
            raw_cards = await page.eval_on_selector_all(RESULT_CARD, _SCRAPE_CARDS_JS)
        except FetchError as exc:
            Log.warning(f"Search for {query.text!r} failed: {exc}")
            return FetchResult.failed(str(exc))
        except PlaywrightTimeoutError as exc:
            Log.warning(f"Search for {query.text!r} timed out: {exc}")
            return FetchResult.failed(f"Элемент страницы не найден: {exc}")
        except PlaywrightError as exc:
            if self._browser is None or not self._browser.is_connected() or page.is_closed():
                raise FetchSessionError(f"Сессия браузера потеряна: {exc}") from exc
            Log.warning(f"Search for {query.text!r} failed: {exc}")
            return FetchResult.failed(str(exc))

        records = parse_cards(
            [RawCard(**card) for card in raw_cards],
            query=query.text,
            region=query.region,
        )
        Log.info(f"Found {len(records)} records for {query.text!r}")
        return FetchResult(success=True, records=tuple(records))

    def _require_page(self) -> Page:
        if self._page is None or self._page.is_closed():
            raise FetchSessionError("Страница браузера не инициализирована")
        if self._browser is None or not self._browser.is_connected():
            raise FetchSessionError("Браузер недоступен")
        return self._page

    async def _ensure_not_blocked(self, page: Page) -> None:
        body = await page.inner_text("body")
        if any(phrase in body for phrase in BLOCKED_PHRASES):
            raise AccessBlockedError(
                "Сайт заблокировал доступ. Возможно, требуется CAPTCHA или обход блокировки."
            )

    async def _resolve_captcha(self, page: Page) -> None:
        captcha = await page.query_selector(RECAPTCHA)
        if captcha is None:
            return
        Log.info("CAPTCHA detected, solving")
        site_key = await captcha.get_attribute("data-sitekey")
        if not site_key:
            raise CaptchaError("Не удалось найти ключ reCAPTCHA (data-sitekey)")
        token = await self._captcha_solver.solve_recaptcha(site_key, self._settings.efrsb_base_url)
        await page.evaluate(_FILL_CAPTCHA_JS, token)
        submit = await page.query_selector(CAPTCHA_SUBMIT)
        if submit is not None:
            await submit.click()
            await page.wait_for_timeout(2000)
        else:
            Log.debug("CAPTCHA submit button not found, continuing")

    async def _fill_search(self, page: Page, query: SearchQuery) -> None:
        try:
            await page.wait_for_selector(
                SEARCH_INPUT, state="visible", timeout=self._settings.selector_timeout_ms
            )
        except PlaywrightTimeoutError as exc:
            raise PageStructureError("Поле поиска не найдено на странице") from exc
        await page.fill(SEARCH_INPUT, "")
        await page.fill(SEARCH_INPUT, query.text)

    async def _select_region(self, page: Page, region: str) -> None:
        for selector, timeout in (
            (REGION_INPUT, self._settings.selector_timeout_ms),
            (REGION_INPUT_FALLBACK, self._settings.selector_timeout_ms // 2),
        ):
            try:
                await page.wait_for_selector(selector, state="visible", timeout=timeout)
            except PlaywrightTimeoutError:
                Log.debug(f"Region selector {selector} not visible, trying next")
                continue
            await page.click(selector)
            await page.fill(selector, region)
            await page.keyboard.press("Enter")
            return
        raise PageStructureError("Поле выбора региона не найдено на странице")

    async def _submit(self, page: Page) -> None:
        timeout = self._settings.selector_timeout_ms
        for selector in SEARCH_BUTTONS:
            try:
                await page.wait_for_selector(selector, state="visible", timeout=timeout)
            except PlaywrightTimeoutError:
                Log.debug(f"Search button {selector} not visible, trying next")
                timeout = self._settings.selector_timeout_ms // 2
                continue
            await page.click(selector)
            return
        raise PageStructureError("Кнопка поиска не найдена на странице")

    async def _load_all_pages(self, page: Page) -> None:
        for _ in range(self._settings.max_load_more_pages):
            if not await page.is_visible(LOAD_MORE):
                return
            Log.debug("Loading more results")
            await page.click(LOAD_MORE)
            await page.wait_for_timeout(self._settings.results_wait_ms)
        Log.warning("Stopped paginating after max_load_more_pages")
