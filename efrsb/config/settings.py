from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 3001
    api_cors_origins: str = ""

    fetcher_engine: str = "playwright"
    efrsb_base_url: str = "https://bankrot.fedresurs.ru/bankrupts"
    default_region: str = "Донецкая Народная Республика"

    browser_headless: bool = True
    browser_slow_mo_ms: int = 100
    browser_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    navigation_timeout_ms: int = 30000
    selector_timeout_ms: int = 30000
    results_wait_ms: int = 5000
    max_load_more_pages: int = 50

    inter_item_delay_seconds: float = 1.0

    captcha_provider: str = "none"
    twocaptcha_api_key: str = ""
    captcha_timeout_seconds: int = 120
    captcha_poll_interval_seconds: int = 5

    def cors_origins(self) -> list[str]:
        origins = [o.strip() for o in self.api_cors_origins.split(",") if o.strip()]
        return origins or ["http://localhost:5173", "http://127.0.0.1:5173"]
