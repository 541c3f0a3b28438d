import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

import httpx

from efrsb.fetcher.exceptions import CaptchaError
from efrsb.logging.logger import Log


class BaseCaptchaSolver(ABC):
    """Contract for reCAPTCHA solving services."""

    @abstractmethod
    async def solve_recaptcha(self, site_key: str, page_url: str) -> str:
        """Return the g-recaptcha-response token.

        Raises:
            CaptchaError: if no token could be obtained.
        """


class NoopCaptchaSolver(BaseCaptchaSolver):
    """Solver used when no provider is configured. Always gives up."""

    async def solve_recaptcha(self, site_key: str, page_url: str) -> str:
        raise CaptchaError("Обнаружена CAPTCHA, но сервис распознавания не настроен")


class TwoCaptchaSolver(BaseCaptchaSolver):
    """reCAPTCHA v2 solver built on the 2captcha in.php/res.php API."""

    BASE_URL = "https://2captcha.com"

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int = 120,
        poll_interval_seconds: int = 5,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if not api_key:
            raise ValueError("twocaptcha_api_key is required for captcha_provider=2captcha")
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._poll_interval_seconds = poll_interval_seconds
        self._client = client
        self._sleep = sleep

    async def solve_recaptcha(self, site_key: str, page_url: str) -> str:
        if self._client is not None:
            return await self._solve(self._client, site_key, page_url)
        async with httpx.AsyncClient(base_url=self.BASE_URL, timeout=30) as client:
            return await self._solve(client, site_key, page_url)

    async def _solve(self, client: httpx.AsyncClient, site_key: str, page_url: str) -> str:
        task_id = await self._submit(client, site_key, page_url)
        Log.info(f"CAPTCHA submitted to 2captcha, task {task_id}")
        attempts = max(1, self._timeout_seconds // max(1, self._poll_interval_seconds))
        for _ in range(attempts):
            await self._sleep(self._poll_interval_seconds)
            payload = await self._request(
                client,
                "/res.php",
                {"key": self._api_key, "action": "get", "id": task_id, "json": 1},
            )
            if payload.get("status") == 1:
                return str(payload["request"])
            if payload.get("request") != "CAPCHA_NOT_READY":
                raise CaptchaError(f"Не удалось решить CAPTCHA: {payload.get('request')}")
        raise CaptchaError("Не удалось решить CAPTCHA: истекло время ожидания")

    async def _submit(self, client: httpx.AsyncClient, site_key: str, page_url: str) -> str:
        payload = await self._request(
            client,
            "/in.php",
            {
                "key": self._api_key,
                "method": "userrecaptcha",
                "googlekey": site_key,
                "pageurl": page_url,
                "json": 1,
            },
        )
        if payload.get("status") != 1:
            raise CaptchaError(f"Не удалось решить CAPTCHA: {payload.get('request')}")
        return str(payload["request"])

    async def _request(
        self, client: httpx.AsyncClient, path: str, params: dict[str, object]
    ) -> dict[str, object]:
        try:
            response = await client.get(path, params=params)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CaptchaError(f"Сервис распознавания CAPTCHA недоступен: {exc}") from exc
