import pytest

from efrsb.validation.inn import inn_check_digits


@pytest.fixture()
def legal_entity_inn() -> str:
    """A 10-digit INN with a correct check digit."""
    return "7707083893"


@pytest.fixture()
def individual_inn() -> str:
    """A 12-digit INN with correct check digits."""
    return "500100732259"


@pytest.fixture()
def make_inn():
    """Build a valid INN from a 9- or 10-digit prefix."""

    def _make(prefix: str) -> str:
        return prefix + inn_check_digits(prefix)

    return _make
