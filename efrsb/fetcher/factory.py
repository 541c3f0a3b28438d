from efrsb.config.settings import Settings
from efrsb.fetcher.base import BaseRecordFetcher
from efrsb.fetcher.captcha import BaseCaptchaSolver, NoopCaptchaSolver, TwoCaptchaSolver
from efrsb.fetcher.example_adapter import ExampleRecordFetcher
from efrsb.fetcher.playwright_adapter import PlaywrightRecordFetcher


class CaptchaSolverFactory:
    """Creates the configured captcha solver."""

    PROVIDERS = ("none", "2captcha")

    @classmethod
    def create(cls, settings: Settings) -> BaseCaptchaSolver:
        provider = settings.captcha_provider.lower()
        if provider == "none":
            return NoopCaptchaSolver()
        if provider == "2captcha":
            return TwoCaptchaSolver(
                api_key=settings.twocaptcha_api_key,
                timeout_seconds=settings.captcha_timeout_seconds,
                poll_interval_seconds=settings.captcha_poll_interval_seconds,
            )
        raise ValueError(
            f"Unknown captcha provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )


class FetcherFactory:
    """Creates a fresh registry fetcher based on settings."""

    ENGINES = ("playwright", "example")

    @classmethod
    def create(cls, settings: Settings) -> BaseRecordFetcher:
        engine = settings.fetcher_engine.lower()
        if engine == "example":
            return ExampleRecordFetcher()
        if engine == "playwright":
            return PlaywrightRecordFetcher(
                settings=settings,
                captcha_solver=CaptchaSolverFactory.create(settings),
            )
        raise ValueError(
            f"Unknown fetcher engine '{engine}'. Choose from: {list(cls.ENGINES)}"
        )
