import os

import pytest

from efrsb.config.settings import Settings


@pytest.fixture(scope="session")
def live_settings() -> Settings:
    if os.environ.get("EFRSB_LIVE") != "1":
        pytest.skip("Set EFRSB_LIVE=1 to run tests against the live registry")
    return Settings(fetcher_engine="playwright")
