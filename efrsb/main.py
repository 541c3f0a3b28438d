import uvicorn

from efrsb.api.app import create_app
from efrsb.config.settings import Settings
from efrsb.logging.logger import Log


def main() -> None:
    """Entry point: load settings -> configure logging -> serve the API."""
    settings = Settings()
    Log.configure(settings.log_level)
    app = create_app(settings)
    Log.info(
        f"Serving on {settings.api_host}:{settings.api_port} "
        f"(fetcher={settings.fetcher_engine}, env={settings.app_env})"
    )
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
